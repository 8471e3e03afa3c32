"""Packages: buildables backed directly by source files."""

from __future__ import annotations

import logging
from pathlib import Path

from packsmith.core.build.buildable import (
    SOURCE_SEPARATOR,
    Buildable,
    read_source,
    resolve_source_path,
)

logger = logging.getLogger(__name__)


class Package(Buildable):
    """Concatenates a list of source files into one artifact.

    ``files`` are relative to ``directory()``; a package that extends
    another one is built from the parent's files followed by its own.
    """

    kind = "package"

    def files(self) -> list[Path]:
        parent = self.parent
        base = parent.files() if parent is not None else []
        directory = self.directory()
        extension = self.project.extension
        own = [
            resolve_source_path(directory / name, extension, buildable=self.name)
            for name in self.spec.files
        ]
        return base + own

    def source(self) -> str:
        if self._source is None:
            paths = self.files()
            self._source = SOURCE_SEPARATOR.join(
                read_source(path, buildable=self.name) for path in paths
            )
            logger.debug(f"{self.name}: read {len(paths)} files")
        return self._source

    def _assemble(self, profile: str) -> str:
        return self._render(self.source(), profile)
