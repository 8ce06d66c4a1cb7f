"""
Containerized R Markdown Rendering

Builds the document's Docker image from the Dockerfile next to it, then renders
the document inside a throwaway container with the input directory mounted.
Rendered output lands in the input directory, owned by the calling user.
"""

import shutil
import subprocess
import time
import warnings
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from liftr.contexts.rendering.commands import (
    build_build_command,
    build_run_command,
    resolve_container_name,
    resolve_image_name,
)
from liftr.contexts.rendering.exceptions import (
    BuildFailedError,
    EngineNotFoundError,
    InputMissingError,
    InputNotFoundError,
    MissingBuildDescriptorError,
    RunFailedError,
)
from liftr.contexts.rendering.logger import (
    _log_debug,
    _log_info,
    _log_warning,
    log_command_result,
    log_commands,
)
from liftr.contexts.rendering.render_args import build_render_call
from liftr.contexts.rendering.settings import RenderSettings, load_settings
from liftr.contexts.rendering.sidecar import (
    read_render_info,
    sidecar_path_for,
    write_render_info,
)
from liftr.utils.paths import PathLike, file_dir, file_name

BUILD_DESCRIPTOR_NAME = "Dockerfile"


@dataclass(frozen=True)
class RenderRequest:
    """
    Everything needed to render one document in a container.

    Attributes:
        input_path: R Markdown document to render
        image_tag: Image name (default: input file name without extension)
        build_args: Extra `docker build` arguments, inserted verbatim
        container_name: Container name (default: randomly generated)
        cache_enabled: Reuse cached image layers
        persist_metadata: Write the `.docker.yml` sidecar
        extra_render_options: Pass-through arguments for rmarkdown::render()
    """

    input_path: Optional[PathLike]
    image_tag: Optional[str] = None
    build_args: Optional[str] = None
    container_name: Optional[str] = None
    cache_enabled: bool = True
    persist_metadata: bool = True
    extra_render_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InvocationResult:
    """Resolved names and the commands built for one render."""

    image_name: str
    container_name: str
    build_command: str
    run_command: str
    sidecar_path: Optional[Path] = None

    def to_render_info(self) -> Dict[str, str]:
        """Sidecar representation (field names as stored in `.docker.yml`)."""
        return {
            "container_name": self.container_name,
            "image_name": self.image_name,
            "docker_build_cmd": self.build_command,
            "docker_run_cmd": self.run_command,
        }


def check_preconditions(input_path: Optional[PathLike], engine: str) -> Path:
    """
    Verify a render can be attempted, before any command is built.

    Args:
        input_path: Input document
        engine: Container engine executable

    Returns:
        Resolved input path

    Raises:
        InputMissingError: No input given
        InputNotFoundError: Input does not exist
        MissingBuildDescriptorError: No Dockerfile beside the input
        EngineNotFoundError: Engine not on PATH
    """
    if input_path is None or str(input_path) == "":
        raise InputMissingError()

    resolved = Path(input_path).resolve()
    if not resolved.exists():
        raise InputNotFoundError(resolved)

    descriptor = file_dir(resolved) / BUILD_DESCRIPTOR_NAME
    if not descriptor.exists():
        raise MissingBuildDescriptorError(descriptor)

    if shutil.which(engine) is None:
        raise EngineNotFoundError(engine)

    return resolved


def prepare_render(
    request: RenderRequest, settings: Optional[RenderSettings] = None
) -> InvocationResult:
    """
    Validate a request and build its commands without running them.

    Writes the sidecar when request.persist_metadata is set, so the commands
    are on disk before either one runs.

    Args:
        request: What to render
        settings: Runtime configuration (default: from environment)

    Returns:
        InvocationResult with resolved names and both commands
    """
    if settings is None:
        settings = load_settings()

    input_path = check_preconditions(request.input_path, settings.engine)

    image_name = resolve_image_name(input_path, request.image_tag)
    container_name = resolve_container_name(request.container_name, settings.container_prefix)

    render_call = build_render_call(
        file_name(input_path), request.extra_render_options, settings.reserved_options
    )
    _log_debug(f"Render call: {render_call}")

    host_dir = file_dir(input_path)
    build_cmd = build_build_command(
        engine=settings.engine,
        image_name=image_name,
        context_dir=host_dir,
        cache_enabled=request.cache_enabled,
        build_args=request.build_args,
    )
    run_cmd = build_run_command(
        engine=settings.engine,
        image_name=image_name,
        container_name=container_name,
        host_dir=host_dir,
        render_call=render_call,
        settings=settings,
    )
    log_commands(image_name, container_name, build_cmd, run_cmd)

    result = InvocationResult(
        image_name=image_name,
        container_name=container_name,
        build_command=build_cmd,
        run_command=run_cmd,
    )

    if request.persist_metadata:
        sidecar = write_render_info(result.to_render_info(), sidecar_path_for(input_path))
        _log_info(f"Render info saved to: {sidecar}")
        result = replace(result, sidecar_path=sidecar)

    return result


def execute_commands(
    result: InvocationResult,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> None:
    """
    Run the build command, then the run command, through the shell.

    Output streams are inherited from the caller. The run command is only
    attempted after a successful build.

    Raises:
        BuildFailedError: Build exited nonzero
        RunFailedError: Run exited nonzero
    """
    for stage, command, error_class in (
        ("Build", result.build_command, BuildFailedError),
        ("Render", result.run_command, RunFailedError),
    ):
        _log_info(f"{stage} started")
        start_time = time.time()
        completed = runner(command, shell=True)
        log_command_result(stage, completed.returncode, time.time() - start_time)
        if completed.returncode < 0:
            _log_warning(f"{stage} terminated by signal {-completed.returncode}")

        if completed.returncode != 0:
            raise error_class(command, completed.returncode)


def render_docker(
    input_path: Optional[PathLike] = None,
    tag: Optional[str] = None,
    build_args: Optional[str] = None,
    container_name: Optional[str] = None,
    cache_enabled: bool = True,
    persist_metadata: bool = True,
    **render_options: Any,
) -> InvocationResult:
    """
    Render a dockerized R Markdown document.

    The Dockerfile must already exist in the same directory as the input.
    After a successful render the image can be purged using the sidecar
    `<input-stem>.docker.yml` written next to the input.

    Args:
        input_path: Input file to render in the container
        tag: Image name, sent as `-t` (default: input file name without extension)
        build_args: Additional `docker build` arguments, e.g.
            '--pull=true -m="1024m" --memory-swap="-1"'
        container_name: Container name (default: random)
        cache_enabled: Reuse cached image layers. Speeds up repeated renders
            substantially since only the changed layers are rebuilt.
        persist_metadata: Write the `.docker.yml` sidecar for later purging
        **render_options: Passed through to rmarkdown::render()

    Returns:
        InvocationResult with image name, container name and both commands

    Examples:
        >>> render_docker("docs/report.Rmd")
        >>> render_docker("docs/report.Rmd", tag="report:v2", output_format="pdf_document")
    """
    request = RenderRequest(
        input_path=input_path,
        image_tag=tag,
        build_args=build_args,
        container_name=container_name,
        cache_enabled=cache_enabled,
        persist_metadata=persist_metadata,
        extra_render_options=render_options,
    )
    result = prepare_render(request)
    execute_commands(result)
    return result


def drender(*args: Any, **kwargs: Any) -> InvocationResult:
    """Deprecated alias of render_docker()."""
    warnings.warn(
        "drender() is deprecated, use render_docker() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return render_docker(*args, **kwargs)


def load_render_info(sidecar_path: PathLike) -> InvocationResult:
    """Rebuild an InvocationResult from a `.docker.yml` sidecar."""
    info = read_render_info(sidecar_path)
    return InvocationResult(
        image_name=info["image_name"],
        container_name=info["container_name"],
        build_command=info["docker_build_cmd"],
        run_command=info["docker_run_cmd"],
        sidecar_path=Path(sidecar_path),
    )
