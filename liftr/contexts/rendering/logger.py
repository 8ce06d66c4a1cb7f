"""
Rendering context logger.

Provides logging interface for rendering context with automatic [docker] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from liftr.contexts.rendering.settings import load_settings
from liftr.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[docker]"


def setup_rendering_logger(log_dir: Path, verbose: bool = False) -> Path:
    """
    Setup logger for rendering context.

    Args:
        log_dir: Directory for this rendering session
        verbose: Echo debug messages to the console too

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Container engine": load_settings().engine},
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [docker] prefix


def _log_info(message: str) -> None:
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_commands(image_name: str, container_name: str, build_cmd: str, run_cmd: str) -> None:
    """Log resolved names and both commands before anything runs."""
    _log_info(f"Image: {image_name}")
    _log_info(f"Container: {container_name}")
    _log_info(f"Build command: {build_cmd}")
    _log_info(f"Run command: {run_cmd}")


def log_command_result(stage: str, exit_code: int, elapsed_time: float) -> None:
    """Log the outcome of a build or run command."""
    if exit_code == 0:
        _log_success(f"{stage} succeeded ({elapsed_time:.2f}s)")
    else:
        _log_error(f"{stage} failed with exit code {exit_code} ({elapsed_time:.2f}s)")
