"""JavaScript minifier backed by rjsmin."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import rjsmin

from packsmith.core.config.models import MinifySettings
from packsmith.core.errors import MinifyError
from packsmith.core.minify.models import MinifyResult

logger = logging.getLogger(__name__)

SOURCE_MAP_SUFFIX = ".map"


def source_map_path(output_path: Path) -> Path:
    """Sibling path holding the source map for ``output_path``."""
    return output_path.with_suffix(SOURCE_MAP_SUFFIX)


def build_source_map(code: str, output_path: Path | None) -> str:
    """Build a version 3 source map embedding the unminified source.

    The single ``sources`` entry names the artifact itself.

    rjsmin does not track token positions, so the map carries the original
    text in ``sourcesContent`` with no segment mappings.
    """
    name = output_path.name if output_path else "out.js"
    payload = {
        "version": 3,
        "file": name,
        "sources": [name],
        "sourcesContent": [code],
        "names": [],
        "mappings": "",
    }
    return json.dumps(payload, indent=None, separators=(",", ":"))


class JSMinifier:
    """Minifies JavaScript with rjsmin.

    Honours ``keep_bang_comments``; prefixes ``header`` as a banner so the
    minifier never sees (and never strips) it.
    """

    def minify(
        self,
        code: str,
        settings: MinifySettings,
        output_path: Path | None = None,
    ) -> MinifyResult:
        try:
            minified = rjsmin.jsmin(code, keep_bang_comments=settings.keep_bang_comments)
        except Exception as e:
            raise MinifyError(f"rjsmin failed: {e}") from e

        minified = minified.strip()
        if settings.header:
            minified = f"{settings.header.strip()}\n{minified}"

        source_map = None
        if settings.source_map:
            source_map = build_source_map(code, output_path)
            if output_path is not None:
                minified += f"\n//# sourceMappingURL={source_map_path(output_path).name}"

        logger.debug(f"Minified {len(code)} -> {len(minified)} chars")
        return MinifyResult(code=minified, source_map=source_map)
