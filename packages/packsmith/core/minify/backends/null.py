"""No-op minifier for development/testing.

Returns code unchanged apart from the banner.
"""

from pathlib import Path

from packsmith.core.config.models import MinifySettings
from packsmith.core.minify.backends.js import build_source_map
from packsmith.core.minify.models import MinifyResult


class NullMinifier:
    """
    No-op minifier.

    Prefixes ``settings.header`` like a real backend. The source map, when
    requested, embeds the code as given.
    """

    def minify(
        self,
        code: str,
        settings: MinifySettings,
        output_path: Path | None = None,
    ) -> MinifyResult:
        """Return ``code`` as-is (banner prefixed)."""
        source_map = build_source_map(code, output_path) if settings.source_map else None
        if settings.header:
            code = f"{settings.header.strip()}\n{code}"
        return MinifyResult(code=code, source_map=source_map)
