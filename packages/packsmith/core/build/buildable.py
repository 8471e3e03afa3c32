"""Shared behaviour for packages and bundles.

A ``Buildable`` is anything that turns into one artifact per build
profile. Subclasses decide where the source comes from (``files`` and
``source``) and how it is assembled (``_assemble``); everything else
(parent resolution, paths, staleness, settings and header inheritance,
writing) lives here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import contextlib
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from packsmith.core.build.result import WriteOutcome, created_outcome, skipped_outcome
from packsmith.core.config.models import BuildableSpec, Layout, MinifySettings
from packsmith.core.errors import (
    ArtifactError,
    ArtifactWriteError,
    ConfigurationError,
    MinifyError,
    MissingSourceError,
)
from packsmith.core.minify import MinifyResult, source_map_path

if TYPE_CHECKING:
    from packsmith.core.build.project import Project

logger = logging.getLogger(__name__)

EffectiveSettings = MinifySettings | Literal[False] | None

SOURCE_SEPARATOR = "\n\n"


def resolve_source_path(path: Path, extension: str, *, buildable: str) -> Path:
    """Find ``path`` on disk, retrying with ``.<extension>`` appended.

    Raises:
        MissingSourceError: If neither form exists
        ArtifactError: If the path cannot be inspected
    """
    with_extension = path.with_name(f"{path.name}.{extension}")
    try:
        if path.is_file():
            return path
        if with_extension.is_file():
            return with_extension
    except OSError as e:
        raise ArtifactError(f"Could not inspect {path} for '{buildable}': {e}") from e
    raise MissingSourceError(path, buildable=buildable)


def read_source(path: Path, *, buildable: str) -> str:
    """Read a source file with surrounding whitespace removed."""
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as e:
        raise MissingSourceError(path, buildable=buildable) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ArtifactError(f"Could not read {path} for '{buildable}': {e}") from e


class Buildable(ABC):
    """A named group of sources producing one artifact per build profile.

    Attributes:
        project: Owning project (registry, directories, profiles, services)
        name: Unique name across packages and bundles
        spec: Canonical configuration record
    """

    kind: ClassVar[str] = "buildable"

    def __init__(self, project: Project, name: str, spec: BuildableSpec) -> None:
        self.project = project
        self.name = name
        self.spec = spec
        self._parent: Buildable | None = None
        self._parent_resolved = False
        self._source: str | None = None
        self._bodies: dict[str, str] = {}
        self._headers: dict[str, str | None] = {}
        self._artifacts: dict[tuple[str, bool], MinifyResult] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    @property
    def meta(self) -> dict[str, Any]:
        """Opaque metadata attached in the config."""
        return dict(self.spec.meta)

    @property
    def abstract(self) -> bool:
        return self.spec.abstract

    def resolve_parent(self) -> Buildable | None:
        """Return the buildable named by ``extends`` (memoized).

        Raises:
            ConfigurationError: If the name does not resolve
        """
        if not self._parent_resolved:
            parent_name = self.spec.extends
            parent = None
            if parent_name is not None:
                parent = self.project.lookup(parent_name)
                if parent is None:
                    raise ConfigurationError(
                        f"extends unknown package or bundle '{parent_name}'", name=self.name
                    )
            self._parent = parent
            self._parent_resolved = True
        return self._parent

    @property
    def parent(self) -> Buildable | None:
        return self.resolve_parent()

    def references(self) -> list[Buildable]:
        """Buildables this one reads from (parent plus, for bundles, members)."""
        parent = self.parent
        return [parent] if parent is not None else []

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def directory(self) -> Path:
        """Directory that relative file and header paths resolve against."""
        if self.spec.directory is not None:
            return self.project.source_directory / self.spec.directory
        parent = self.parent
        if parent is not None:
            return parent.directory()
        return self.project.source_directory

    def output_path(self, profile: str) -> Path:
        """Artifact path for ``profile``.

        ``together``: ``{build_dir}/{name}-{profile}.{ext}`` (suffix optional per profile)
        ``apart``:    ``{build_dir}/{profile}/{name}.{ext}``
        """
        project = self.project
        if project.layout is Layout.TOGETHER:
            suffix = f"-{profile}" if project.use_suffix(profile) else ""
            return project.build_directory / f"{self.name}{suffix}.{project.extension}"
        return project.build_directory / profile / f"{self.name}.{project.extension}"

    def source_map_path(self, profile: str) -> Path:
        return source_map_path(self.output_path(profile))

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @abstractmethod
    def files(self) -> list[Path]:
        """Every source file this artifact is built from, in order."""
        ...

    @abstractmethod
    def source(self) -> str:
        """Raw, untemplated source text (cached for the run)."""
        ...

    def header_files(self) -> list[Path]:
        """Header file(s) feeding ``effective_header``."""
        if self.spec.header is not None:
            return [self._header_path(self.spec.header)]
        parent = self.parent
        if parent is not None:
            return parent.header_files()
        return self.project.header_files()

    def dependencies(self) -> list[Path]:
        """Files whose modification makes this artifact stale."""
        return [*self.files(), *self.header_files(), *self.project.config_files]

    def is_stale(self, profile: str) -> bool:
        """Whether the artifact for ``profile`` must be regenerated."""
        if self.project.forced:
            return True

        path = self.output_path(profile)
        built_at = self._mtime(path)
        if built_at is None or not path.is_file():
            return True
        if _wants_source_map(self.effective_settings(profile)):
            if not self.source_map_path(profile).is_file():
                logger.debug(f"{self.name} [{profile}] stale: source map is missing")
                return True

        try:
            inputs = self.dependencies()
        except MissingSourceError as e:
            logger.debug(f"{self.name} [{profile}] stale: {e}")
            return True

        for input_path in inputs:
            modified_at = self._mtime(input_path)
            if modified_at is None or modified_at > built_at:
                logger.debug(f"{self.name} [{profile}] stale: {input_path} is missing or newer")
                return True
        return False

    def _mtime(self, path: Path) -> float | None:
        """Modification time of ``path``, or None when it does not exist.

        Raises:
            ArtifactError: If the file exists but cannot be inspected
        """
        try:
            return path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ArtifactError(f"Could not inspect {path} for '{self.name}': {e}") from e

    # ------------------------------------------------------------------
    # Inherited settings
    # ------------------------------------------------------------------

    def _header_path(self, header: str) -> Path:
        return resolve_source_path(
            self.directory() / header, self.project.extension, buildable=self.name
        )

    def effective_header(self, profile: str | None = None) -> str | None:
        """Template-evaluated header: own, else parent's, else the project's."""
        if self.spec.header is not None:
            path = self._header_path(self.spec.header)
            text = read_source(path, buildable=self.name)
            return self.project.render_header(text, profile, origin=str(path))
        parent = self.parent
        if parent is not None:
            return parent.effective_header(profile)
        return self.project.header(profile)

    def effective_settings(self, profile: str) -> EffectiveSettings:
        """Minify settings for ``profile``.

        Returns:
            None when the profile produces no output, False for raw output,
            otherwise the settings record. The closest explicit ``packer``
            in the ``extends`` chain wins; an own record is layered over the
            profile's record, or used as-is when the profile does not minify.
        """
        profile_settings = self.project.profile_settings(profile)
        if profile_settings is None:
            return None

        own = self.spec.packer
        if own is None:
            parent = self.parent
            return parent.effective_settings(profile) if parent is not None else profile_settings
        if own is False or not own.minify:
            return False
        if profile_settings is False:
            return own
        return profile_settings.layered(own)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @abstractmethod
    def _assemble(self, profile: str) -> str:
        """Template-evaluated code for ``profile``, before header and minifier."""
        ...

    def _body(self, profile: str) -> str:
        body = self._bodies.get(profile)
        if body is None:
            body = self._assemble(profile)
            self._bodies[profile] = body
        return body

    def _header(self, profile: str) -> str | None:
        if profile not in self._headers:
            self._headers[profile] = self.effective_header(profile)
        return self._headers[profile]

    def _artifact(self, profile: str, with_header: bool) -> MinifyResult:
        key = (profile, with_header)
        cached = self._artifacts.get(key)
        if cached is not None:
            logger.debug(f"{self.name} [{profile}] code cache hit")
            return cached

        header = self._header(profile) if with_header else None
        if with_header and not header:
            result = self._artifact(profile, False)
        else:
            result = self._finish(self._body(profile), profile, header)
        self._artifacts[key] = result
        return result

    def code(self, profile: str, with_header: bool = True) -> str:
        """Final artifact text for ``profile`` (cached for the run)."""
        return self._artifact(profile, with_header).code

    def source_map(self, profile: str) -> str | None:
        """Source map payload for ``profile``, if the minifier produced one."""
        return self._artifact(profile, True).source_map

    def _render(self, text: str, profile: str) -> str:
        return self.project.renderer.evaluate(
            text, self.project.scope.for_profile(profile), origin=self.name
        )

    def _finish(self, code: str, profile: str, header: str | None) -> MinifyResult:
        """Apply the header and, when requested, the minifier."""
        settings = self.effective_settings(profile)

        if not isinstance(settings, MinifySettings):
            if header:
                code = f"{header}{SOURCE_SEPARATOR}{code}"
            return MinifyResult(code=code)

        try:
            return self.project.minifier.minify(
                code, settings.with_header(header), self.output_path(profile)
            )
        except ArtifactError:
            raise
        except Exception as e:
            raise MinifyError(f"Minifier failed for '{self.name}' [{profile}]: {e}") from e

    def materialize(self, profile: str) -> WriteOutcome:
        """Write the artifact for ``profile`` if it is enabled and stale.

        The source map is written before the artifact, so a failed run never
        leaves an up-to-date artifact next to a missing map.

        Raises:
            ArtifactError: If the artifact cannot be produced or written
        """
        path = self.output_path(profile)
        settings = self.effective_settings(profile)
        if settings is None:
            return skipped_outcome(self.name, profile, path, reason="Profile disabled")
        if self.abstract:
            return skipped_outcome(self.name, profile, path, reason="Abstract")
        if not self.is_stale(profile):
            return skipped_outcome(self.name, profile, path)

        data = (self.code(profile).strip() + "\n").encode("utf-8")

        map_path = None
        if _wants_source_map(settings):
            payload = self.source_map(profile)
            if payload is not None:
                map_path = self.source_map_path(profile)
                self._write(map_path, payload.encode("utf-8"))

        self._write(path, data)
        logger.info(f"Wrote {path} ({len(data)} bytes)")
        return created_outcome(self.name, profile, path, len(data), source_map_path=map_path)

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        """Write ``data`` to a temporary sibling, then move it over ``path``."""
        tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as e:
            # Drop the partial temp file
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise ArtifactWriteError(path, e.strerror or str(e)) from e


def _wants_source_map(settings: EffectiveSettings) -> bool:
    return isinstance(settings, MinifySettings) and settings.source_map
