"""
Rendering Context

Responsibilities:
- Validates that a document can be rendered in a container
- Builds the `docker build` and `docker run` commands
- Serializes pass-through render options into the in-container R call
- Records image/container info in a `.docker.yml` sidecar
- Runs both commands and reports their exit status

Owns: container commands, render info sidecar
Never: Generates the Dockerfile or purges images
"""

from liftr.contexts.rendering.docker_render import (
    InvocationResult,
    RenderRequest,
    drender,
    execute_commands,
    load_render_info,
    prepare_render,
    render_docker,
)

__all__ = [
    "InvocationResult",
    "RenderRequest",
    "drender",
    "execute_commands",
    "load_render_info",
    "prepare_render",
    "render_docker",
]
