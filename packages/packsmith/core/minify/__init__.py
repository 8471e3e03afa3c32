"""Minification for packsmith artifacts.

The build engine only depends on the ``Minifier`` protocol:
``minify(code, settings, output_path) -> MinifyResult``.

Backends:
- JSMinifier: rjsmin-backed JavaScript minifier (default)
- NullMinifier: returns code unchanged (testing/debugging)
"""

from packsmith.core.minify.backends.js import JSMinifier, source_map_path
from packsmith.core.minify.backends.null import NullMinifier
from packsmith.core.minify.models import MinifyResult
from packsmith.core.minify.protocols import Minifier

__all__ = [
    # Core
    "Minifier",
    "MinifyResult",
    # Backends
    "JSMinifier",
    "NullMinifier",
    # Utils
    "source_map_path",
]
