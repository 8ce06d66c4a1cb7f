"""
Session logger setup.

One render session logs everything to `<log_dir>/<context>.log` and echoes
INFO and above to the console. Context-specific wrappers live in
contexts/{context}/logger.py.
"""

import platform
import sys
from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

import liftr

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"
)


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Mapping[str, object]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Route loguru output to a session log file and the console.

    Replaces any previously configured sinks, so call it once per session.

    Args:
        context_name: Context identifier, used as the log file name
        log_dir: Directory for this session (created if missing)
        extra_provenance: Additional key-value pairs for the provenance header
        console_level: Minimum level echoed to the console

    Returns:
        Path to log file
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def log_provenance(extra_context: Optional[Mapping[str, object]] = None) -> None:
    """Log what ran, where, and with which versions, framed by rule lines."""
    provenance = {
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "liftr": liftr.__version__,
        "Python": sys.version.split()[0],
        "Platform": platform.platform(),
        **(extra_context or {}),
    }

    logger.info("=" * 80)
    for key, value in provenance.items():
        logger.info(f"{key}: {value}")
    logger.info("=" * 80)
