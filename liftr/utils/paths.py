"""Path helpers for documents rendered in place."""

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def file_dir(path: PathLike) -> Path:
    """Absolute directory containing path."""
    return Path(path).resolve().parent


def file_name(path: PathLike) -> str:
    """File name with extension, e.g. report.Rmd"""
    return Path(path).name


def file_stem(path: PathLike) -> str:
    """File name without its final extension, e.g. report"""
    return Path(path).stem
