"""Shared utilities for packsmith."""

from packsmith.core.utils.formatting import display_path, format_kb

__all__ = [
    "display_path",
    "format_kb",
]
