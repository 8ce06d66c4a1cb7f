"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """Current local time for directory names, e.g. 20261019_153012"""
    return datetime.now().strftime("%Y%m%d_%H%M%S")
