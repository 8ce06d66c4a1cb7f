"""
Shared utilities for liftr.

- Path helpers
- Logging setup
- Timestamps
"""

from liftr.utils.timestamp import now

__all__ = ["now"]
