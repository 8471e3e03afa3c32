"""Minifier backends."""

from packsmith.core.minify.backends.js import JSMinifier, source_map_path
from packsmith.core.minify.backends.null import NullMinifier

__all__ = ["JSMinifier", "NullMinifier", "source_map_path"]
