"""
Runtime configuration for containerized rendering.

Values come from environment variables (optionally loaded from a .env file):

    LIFTR_CONTAINER_ENGINE   Container engine executable (default: docker)
    LIFTR_CONTAINER_ROOT     Mount point of the input directory inside the container
    LIFTR_CONTAINER_PREFIX   Prefix for generated container names
    LIFTR_RESERVED_OPTIONS   Comma-separated render options that may not be passed through
    LIFTR_RENDER_LIBRARIES   Comma-separated R packages loaded before rendering
    LIFTR_LOGS_PATH          Root directory for CLI session logs
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ENGINE = "docker"
DEFAULT_CONTAINER_ROOT = "/liftrroot/"
DEFAULT_CONTAINER_PREFIX = "liftr_container_"
DEFAULT_RESERVED_OPTIONS = ("output_file", "output_dir", "intermediates_dir")
DEFAULT_RENDER_LIBRARIES = ("knitr", "rmarkdown", "shiny")
DEFAULT_LOGS_PATH = "outs/logs"

# In-container calling convention of the renderer
CONTAINER_SHELL = "Rscript -e"
RENDER_FUNCTION = "render"


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class RenderSettings:
    """
    Configuration shared by every render call.

    Attributes:
        engine: Container engine executable name or path
        container_root: Fixed in-container path the input directory is mounted at
        container_prefix: Prefix of generated container names
        reserved_options: Render options rejected as unsupported
        render_libraries: R packages loaded in the container before rendering
        logs_path: Root directory for CLI session logs
    """

    engine: str = DEFAULT_ENGINE
    container_root: str = DEFAULT_CONTAINER_ROOT
    container_prefix: str = DEFAULT_CONTAINER_PREFIX
    reserved_options: Tuple[str, ...] = DEFAULT_RESERVED_OPTIONS
    render_libraries: Tuple[str, ...] = DEFAULT_RENDER_LIBRARIES
    logs_path: Path = Path(DEFAULT_LOGS_PATH)


def load_settings() -> RenderSettings:
    """Build RenderSettings from the current environment."""
    reserved = os.getenv("LIFTR_RESERVED_OPTIONS")
    libraries = os.getenv("LIFTR_RENDER_LIBRARIES")

    return RenderSettings(
        engine=os.getenv("LIFTR_CONTAINER_ENGINE") or DEFAULT_ENGINE,
        container_root=os.getenv("LIFTR_CONTAINER_ROOT") or DEFAULT_CONTAINER_ROOT,
        container_prefix=os.getenv("LIFTR_CONTAINER_PREFIX") or DEFAULT_CONTAINER_PREFIX,
        reserved_options=(
            _split_list(reserved) if reserved is not None else DEFAULT_RESERVED_OPTIONS
        ),
        render_libraries=_split_list(libraries) if libraries else DEFAULT_RENDER_LIBRARIES,
        logs_path=Path(os.getenv("LIFTR_LOGS_PATH") or DEFAULT_LOGS_PATH),
    )
