"""
Shared formatting utilities for quickbuild CLI output.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_duration(seconds: float | None) -> str:
    """Format a duration for reports.

    Examples:
        >>> format_duration(45.5)
        '45.5s'
        >>> format_duration(125)
        '2m 5s'
        >>> format_duration(3725)
        '1h 2m'
    """
    if seconds is None:
        return "?"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(round(seconds)), 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def format_size(size_bytes: int | None) -> str:
    """Format an artifact or source size, e.g. ``2048`` -> ``2.0KB``."""
    if size_bytes is None:
        return "?"
    if size_bytes < 1024:
        return f"{size_bytes}B"
    size = float(size_bytes)
    for unit in SIZE_UNITS[1:]:
        size /= 1024
        if size < 1024 or unit == SIZE_UNITS[-1]:
            break
    return f"{size:.1f}{unit}"


def label(value: Any) -> str:
    """Display form of a stored enum value, e.g. ``timeout_reached`` -> ``timeout reached``."""
    if isinstance(value, Enum):
        value = value.value
    return str(value).replace("_", " ").replace("-", " ")


def format_exit_code(exit_code: int | None) -> str:
    """Format an exit code for display.

    Examples:
        >>> format_exit_code(0)
        '0 (success)'
        >>> format_exit_code(-9)
        '-9 (killed by signal 9)'
    """
    if exit_code is None:
        return "?"
    if exit_code == 0:
        return "0 (success)"
    if exit_code < 0:
        return f"{exit_code} (killed by signal {-exit_code})"
    return f"{exit_code} (failure)"


def truncate_string(s: str, max_len: int = 100, suffix: str = "...") -> str:
    if len(s) <= max_len:
        return s
    return s[: max_len - len(suffix)] + suffix
