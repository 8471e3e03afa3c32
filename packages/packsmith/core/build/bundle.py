"""Bundles: buildables composed of other packages and bundles."""

from __future__ import annotations

import logging
from pathlib import Path

from packsmith.core.build.buildable import SOURCE_SEPARATOR, Buildable
from packsmith.core.config.models import MinifySettings
from packsmith.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Bundle(Buildable):
    """Joins the output of its members, in configured order.

    ``files`` in a bundle spec are member names. Members are looked up by
    name on access, so they do not need to exist when the bundle is created.
    """

    kind = "bundle"

    def members(self) -> list[Buildable]:
        """Resolve member names against the project registry."""
        members = []
        for name in self.spec.files:
            member = self.project.lookup(name)
            if member is None:
                raise ConfigurationError(f"bundle member '{name}' does not exist", name=self.name)
            members.append(member)
        return members

    def references(self) -> list[Buildable]:
        return [*super().references(), *self.members()]

    def files(self) -> list[Path]:
        parent = self.parent
        base = parent.files() if parent is not None else []
        return base + [path for member in self.members() for path in member.files()]

    def source(self) -> str:
        if self._source is None:
            self._source = SOURCE_SEPARATOR.join(member.source() for member in self.members())
        return self._source

    def _assemble(self, profile: str) -> str:
        # Minified bundles are rebuilt from raw sources as a single unit
        if isinstance(self.effective_settings(profile), MinifySettings):
            return self._render(self.source(), profile)

        parts = [member.code(profile, with_header=False).strip() for member in self.members()]
        logger.debug(f"{self.name} [{profile}]: joined {len(parts)} members")
        return SOURCE_SEPARATOR.join(part for part in parts if part)
