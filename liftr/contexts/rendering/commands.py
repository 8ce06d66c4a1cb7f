"""
Container Command Construction

Resolves image and container names, then assembles the two shell commands that
build the image and render the document inside it.

Command shapes:
    docker build --no-cache=false --rm=true <build_args> -t="<image>" "<context_dir>"
    docker run --rm --name "<container>" -u <uid> -v "<dir>:<root>" <image> Rscript -e "<script>"

Caller-supplied build_args, image and container names are inserted verbatim.
"""

import os
import uuid
from pathlib import Path
from typing import Optional

from liftr.contexts.rendering.render_args import escape_r_string, escape_shell_double_quoted
from liftr.contexts.rendering.settings import (
    CONTAINER_SHELL,
    DEFAULT_CONTAINER_PREFIX,
    RenderSettings,
)
from liftr.utils.paths import PathLike, file_stem


def resolve_image_name(input_path: PathLike, tag: Optional[str] = None) -> str:
    """Use the tag if given, otherwise the input file name without extension."""
    return tag if tag is not None else file_stem(input_path)


def generate_container_name(prefix: str) -> str:
    """Random container name; uuid4 keeps parallel renders on one daemon apart."""
    return f"{prefix}{uuid.uuid4().hex}"


def resolve_container_name(
    container_name: Optional[str] = None, prefix: str = DEFAULT_CONTAINER_PREFIX
) -> str:
    return container_name if container_name is not None else generate_container_name(prefix)


def build_build_command(
    engine: str,
    image_name: str,
    context_dir: Path,
    cache_enabled: bool = True,
    build_args: Optional[str] = None,
) -> str:
    """
    Assemble the image build command.

    Args:
        engine: Container engine executable
        image_name: Tag for the built image
        context_dir: Directory holding the Dockerfile
        cache_enabled: Reuse cached layers (maps to --no-cache=false)
        build_args: Extra build arguments, appended untouched

    Returns:
        Shell command string
    """
    no_cache = "false" if cache_enabled else "true"

    parts = [engine, "build", f"--no-cache={no_cache}", "--rm=true"]
    if build_args:
        parts.append(build_args)
    parts.append(f'-t="{image_name}"')
    parts.append(f'"{escape_shell_double_quoted(str(context_dir))}"')

    return " ".join(parts)


def build_render_script(render_call: str, settings: RenderSettings) -> str:
    """R script run in the container: load the toolchain, enter the mount, render."""
    statements = [f"library({escape_r_string(lib)})" for lib in settings.render_libraries]
    statements.append(f"setwd({escape_r_string(settings.container_root)})")
    statements.append(render_call)
    return ";".join(statements)


def build_run_command(
    engine: str,
    image_name: str,
    container_name: str,
    host_dir: Path,
    render_call: str,
    settings: RenderSettings,
    uid: Optional[int] = None,
) -> str:
    """
    Assemble the render run command.

    The container runs as the host user so rendered files are not owned by root.

    Args:
        engine: Container engine executable
        image_name: Image to run
        container_name: Name for the throwaway container
        host_dir: Host directory mounted at settings.container_root
        render_call: R expression from build_render_call()
        settings: Provides the mount point and toolchain libraries
        uid: Numeric user id (default: current user)

    Returns:
        Shell command string
    """
    if uid is None:
        uid = os.getuid()

    mount = escape_shell_double_quoted(f"{host_dir}:{settings.container_root}")
    script = escape_shell_double_quoted(build_render_script(render_call, settings))

    return (
        f'{engine} run --rm --name "{container_name}" -u {uid} -v "{mount}" '
        f'{image_name} {CONTAINER_SHELL} "{script}"'
    )
