"""Shared utilities."""

from __future__ import annotations

_UNITS = ("Bytes", "KB", "MB", "GB")


def format_size(b: int) -> str:
    """Format byte count to human-readable string (1024-based, 2 decimals)."""
    if b < 0:
        raise ValueError(f"byte count must be non-negative, got {b}")
    if b == 0:
        return "0 Bytes"
    # Largest unit whose scaled value is >= 1
    i = 0
    while i < len(_UNITS) - 1 and b >= 1024 ** (i + 1):
        i += 1
    value = f"{b / 1024**i:.2f}".rstrip("0").rstrip(".")
    return f"{value} {_UNITS[i]}"
