#!/usr/bin/env python3
"""
Containerized Rendering CLI

Renders dockerized R Markdown documents and inspects saved render info.

Commands:
    render - Build the document's image and render it in a container
    show   - Print the render info stored in a .docker.yml sidecar

Examples:\n

    render_docker.py render docs/report.Rmd                            # Build and render

    render_docker.py render docs/report.Rmd --no-cache                 # Rebuild all layers

    render_docker.py render docs/report.Rmd -o output_format=pdf_document -o quiet=true

    render_docker.py render docs/report.Rmd --dry-run                  # Print commands only

    render_docker.py show docs/report.docker.yml                       # Show saved info
"""

from pathlib import Path
from typing import List, Optional

import typer
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException
from typing_extensions import Annotated

from liftr.contexts.rendering import (
    RenderRequest,
    execute_commands,
    load_render_info,
    prepare_render,
)
from liftr.contexts.rendering.exceptions import InvocationError, LiftrError
from liftr.contexts.rendering.logger import setup_rendering_logger
from liftr.contexts.rendering.settings import load_settings
from liftr.utils.timestamp import now

app = typer.Typer(
    help="Render R Markdown documents inside Docker containers",
    add_completion=False,
    invoke_without_command=True,
)


def parse_render_options(options: List[str]) -> dict:
    """
    Parse key=value pairs into render options.

    Values are read as YAML scalars (true, 3, 1.5, [a, b]) and dotted keys
    build nested mappings: `params.year=2024` -> {"params": {"year": 2024}}.
    """
    for option in options:
        if "=" not in option:
            raise typer.BadParameter(f"Expected key=value, got: {option}", param_hint="--option")

    try:
        # values are literal text for R; ${...} must not be interpolated
        return OmegaConf.to_container(OmegaConf.from_dotlist(options), resolve=False)
    except OmegaConfBaseException as e:
        raise typer.BadParameter(str(e), param_hint="--option")


def shell_exit_code(exit_code: int) -> int:
    """Map a subprocess return code to a process exit code (signals become 128+N)."""
    return exit_code if exit_code > 0 else 128 - exit_code


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("render")
def render_command(
    input_path: Annotated[
        Path,
        typer.Argument(help="R Markdown document (Dockerfile must be in the same directory)"),
    ],
    tag: Annotated[
        Optional[str],
        typer.Option("--tag", "-t", help="Image name (default: input file name)"),
    ] = None,
    build_args: Annotated[
        Optional[str],
        typer.Option("--build-args", help='Extra docker build arguments, e.g. "--pull=true"'),
    ] = None,
    container_name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Container name (default: random)"),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Rebuild every image layer"),
    ] = False,
    no_purge_info: Annotated[
        bool,
        typer.Option("--no-purge-info", help="Do not write the .docker.yml sidecar"),
    ] = False,
    options: Annotated[
        Optional[List[str]],
        typer.Option("--option", "-o", help="Render option as key=value (repeatable)"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Build and print the commands without running them"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output"),
    ] = False,
):
    """
    Build the document's image and render it in a container.

    Examples:\n

        $ render_docker.py render docs/report.Rmd

        $ render_docker.py render docs/report.Rmd -t report:v2 --build-args "--pull=true"

        $ render_docker.py render docs/report.Rmd -o params.year=2024 --dry-run
    """
    render_options = parse_render_options(options or [])

    settings = load_settings()
    log_dir = settings.logs_path / f"render_{now()}"
    setup_rendering_logger(log_dir, verbose=verbose)

    typer.secho(f"\nRendering: {input_path}", fg=typer.colors.BLUE, bold=True)
    typer.echo("")

    request = RenderRequest(
        input_path=input_path,
        image_tag=tag,
        build_args=build_args,
        container_name=container_name,
        cache_enabled=not no_cache,
        persist_metadata=not (no_purge_info or dry_run),
        extra_render_options=render_options,
    )

    try:
        result = prepare_render(request, settings)
    except LiftrError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if dry_run:
        typer.echo(result.build_command)
        typer.echo(result.run_command)
        raise typer.Exit(code=0)

    try:
        execute_commands(result)
    except InvocationError as e:
        typer.secho(f"\n✗ {e}\n", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=shell_exit_code(e.exit_code))

    typer.echo("")
    typer.secho("✓ Rendering succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Image: {result.image_name}")
    if result.sidecar_path:
        typer.echo(f"  Render info: {result.sidecar_path}")
    typer.echo(f"  Log: {log_dir / 'render.log'}")
    typer.echo("")


@app.command("show")
def show_command(
    sidecar_path: Annotated[
        Path,
        typer.Argument(help="Render info sidecar (<name>.docker.yml)"),
    ],
):
    """Print the render info stored in a .docker.yml sidecar."""
    try:
        result = load_render_info(sidecar_path)
    except (FileNotFoundError, ValueError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"container_name:   {result.container_name}")
    typer.echo(f"image_name:       {result.image_name}")
    typer.echo(f"docker_build_cmd: {result.build_command}")
    typer.echo(f"docker_run_cmd:   {result.run_command}")


if __name__ == "__main__":
    app()
