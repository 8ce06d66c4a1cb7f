"""
Render Info Sidecar

Writes the container/image names and both commands to `<stem>.docker.yml`
next to the input document, so the image can be purged or the render
replayed later.

Two renders of the same input at the same time race on this file; the last
writer wins.
"""

from pathlib import Path
from typing import Dict, Mapping

from omegaconf import OmegaConf

from liftr.utils.paths import PathLike, file_dir, file_stem

SIDECAR_SUFFIX = ".docker.yml"
SIDECAR_FIELDS = ("container_name", "image_name", "docker_build_cmd", "docker_run_cmd")


def sidecar_path_for(input_path: PathLike) -> Path:
    """Sidecar location for an input document, e.g. docs/report.Rmd -> docs/report.docker.yml"""
    return file_dir(input_path) / f"{file_stem(input_path)}{SIDECAR_SUFFIX}"


def write_render_info(render_info: Mapping[str, str], sidecar_path: Path) -> Path:
    """
    Write render info to the sidecar, replacing any existing file.

    Args:
        render_info: Mapping with exactly the SIDECAR_FIELDS keys
        sidecar_path: Destination file

    Returns:
        Path to the written sidecar
    """
    missing = [name for name in SIDECAR_FIELDS if name not in render_info]
    if missing:
        raise ValueError(f"Render info missing fields: {', '.join(missing)}")

    conf = OmegaConf.create({name: str(render_info[name]) for name in SIDECAR_FIELDS})
    OmegaConf.save(conf, sidecar_path)
    return Path(sidecar_path)


def read_render_info(sidecar_path: PathLike) -> Dict[str, str]:
    """
    Read render info back from a sidecar.

    Raises:
        FileNotFoundError: If the sidecar does not exist
        ValueError: If any field is missing
    """
    sidecar_path = Path(sidecar_path)
    if not sidecar_path.exists():
        raise FileNotFoundError(f"Sidecar not found: {sidecar_path}")

    # resolve=False: commands may contain "${...}" that must not be interpolated
    data = OmegaConf.to_container(OmegaConf.load(sidecar_path), resolve=False)
    if not isinstance(data, dict):
        raise ValueError(f"Sidecar is not a key-value document: {sidecar_path}")

    missing = [name for name in SIDECAR_FIELDS if name not in data]
    if missing:
        raise ValueError(f"Sidecar {sidecar_path} missing fields: {', '.join(missing)}")

    return {name: str(data[name]) for name in SIDECAR_FIELDS}
