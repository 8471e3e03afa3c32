"""Protocol for minifier backends."""

from pathlib import Path
from typing import Protocol

from packsmith.core.config.models import MinifySettings

from .models import MinifyResult


class Minifier(Protocol):
    """
    Protocol for code minifiers.

    Implementations must:
    - Emit ``settings.header`` (when set) exactly once, ahead of the code
    - Return a source map if and only if ``settings.source_map`` is set
    - Raise ``MinifyError`` rather than returning partial output
    """

    def minify(
        self,
        code: str,
        settings: MinifySettings,
        output_path: Path | None = None,
    ) -> MinifyResult:
        """
        Minify ``code``.

        Args:
            code: Template-evaluated source
            settings: Effective settings for the artifact, header included
            output_path: Artifact path, used for source map bookkeeping

        Returns:
            MinifyResult with code and optional source map

        Raises:
            MinifyError: If the input cannot be minified
        """
        ...
