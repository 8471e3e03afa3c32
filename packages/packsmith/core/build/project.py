"""Project coordinator.

A ``Project`` owns one parsed configuration, the registry of packages and
bundles built from it, and the services a run needs (renderer, minifier,
event bus). Constructing it validates the whole build graph; ``run``
writes every stale artifact.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
import time
from typing import Any

from packsmith.core.build.buildable import (
    Buildable,
    EffectiveSettings,
    read_source,
    resolve_source_path,
)
from packsmith.core.build.bundle import Bundle
from packsmith.core.build.package import Package
from packsmith.core.build.result import BuildReport, OutcomeStatus, WriteOutcome, failed_outcome
from packsmith.core.config import (
    HELPER_FILE,
    Layout,
    ProjectConfig,
    find_config_file,
    load_helper_module,
    load_project_config,
    parse_project_config,
)
from packsmith.core.errors import ArtifactError, ConfigurationError
from packsmith.core.events import BuildEvent, EventBus
from packsmith.core.minify import JSMinifier, Minifier
from packsmith.core.templating import HelperRegistry, TemplateRenderer, TemplateScope
from packsmith.core.utils.logging import get_logger

logger = logging.getLogger(__name__)

_VISITING = 1
_VISITED = 2

PROJECT_HEADER = "<project header>"


class Project:
    """Coordinates one build of a configured project.

    Example:
        >>> project = Project.from_directory("path/to/project")
        >>> report = project.run()
        >>> [o.path.name for o in report.created]
        ['core-src.js', 'core-min.js']
    """

    def __init__(
        self,
        root: Path | str,
        config: ProjectConfig | Mapping[str, Any],
        *,
        helpers: HelperRegistry | None = None,
        events: EventBus | None = None,
        minifier: Minifier | None = None,
        renderer: TemplateRenderer | None = None,
        options: Mapping[str, Any] | None = None,
        config_files: list[Path] | tuple[Path, ...] = (),
        force: bool = False,
    ) -> None:
        """Build the package and bundle registries and validate the graph.

        Args:
            root: Directory relative paths in the config resolve against
            config: Parsed configuration (model or raw mapping)
            helpers: Template helper registry
            events: Event bus for lifecycle notifications
            minifier: Minifier backend (defaults to JSMinifier)
            renderer: Template renderer
            options: Free-form options exposed to templates as ``options``
            config_files: Config files whose changes invalidate every artifact
            force: Ignore timestamps and rebuild everything

        Raises:
            ConfigurationError: On a missing ``packages`` section, duplicate
                names, unresolved or cyclic ``extends``, or unknown bundle members
        """
        self.root = Path(root).resolve()
        self.config = parse_project_config(
            config if isinstance(config, ProjectConfig) else dict(config)
        )
        self.helpers = helpers or HelperRegistry()
        self.events = events or EventBus()
        self.minifier: Minifier = minifier or JSMinifier()
        self.renderer = renderer or TemplateRenderer()
        self.scope = TemplateScope(helpers=self.helpers, options=dict(options or {}))
        self.config_files = [Path(path).resolve() for path in config_files]
        self._forced = force

        self._packages: dict[str, Package] = {
            name: Package(self, name, spec) for name, spec in self.config.packages.items()
        }
        self._bundles: dict[str, Bundle] = {}
        for name, spec in self.config.bundles.items():
            if name in self._packages:
                raise ConfigurationError("name is used by both a package and a bundle", name=name)
            self._bundles[name] = Bundle(self, name, spec)

        self._resolve_graph()
        logger.debug(
            f"Project {self.root}: {len(self._packages)} packages, {len(self._bundles)} bundles, "
            f"profiles={self.profiles}"
        )

    @classmethod
    def from_directory(
        cls,
        directory: Path | str,
        *,
        config_path: Path | str | None = None,
        force: bool = False,
        options: Mapping[str, Any] | None = None,
        minifier: Minifier | None = None,
        events: EventBus | None = None,
    ) -> Project:
        """Load a project from its directory.

        Registers helpers and hooks from ``packsmith_helpers.py`` (if present),
        then renders and parses the project file.

        Raises:
            ConfigurationError: If the project file is missing or invalid
        """
        root = Path(directory).resolve()
        helpers = HelperRegistry()
        events = events or EventBus()

        helper_file = root / HELPER_FILE
        has_helpers = load_helper_module(helper_file, helpers, events)

        path = Path(config_path) if config_path is not None else find_config_file(root)
        if not path.is_absolute():
            path = root / path
        renderer = TemplateRenderer()
        scope = TemplateScope(helpers=helpers, options=dict(options or {}))
        config = load_project_config(path, renderer, scope)

        config_files = [path, helper_file] if has_helpers else [path]
        return cls(
            root,
            config,
            helpers=helpers,
            events=events,
            minifier=minifier,
            renderer=renderer,
            options=options,
            config_files=config_files,
            force=force,
        )

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def _resolve_graph(self) -> None:
        """Resolve every reference once, before anything is built."""
        for buildable in self.buildables:
            self._check_extends_chain(buildable)

        state: dict[str, int] = {}
        for buildable in self.buildables:
            self._check_references(buildable, state, [])

    def _check_extends_chain(self, buildable: Buildable) -> None:
        seen = [buildable.name]
        current = buildable
        while current.spec.extends is not None:
            parent = current.resolve_parent()
            if parent is None:
                break
            if isinstance(current, Package) and not isinstance(parent, Package):
                raise ConfigurationError(
                    f"a package can only extend another package, '{parent.name}' is a bundle",
                    name=current.name,
                )
            if parent.name in seen:
                chain = " -> ".join([*seen, parent.name])
                raise ConfigurationError(f"circular extends chain: {chain}", name=buildable.name)
            seen.append(parent.name)
            current = parent

    def _check_references(
        self, buildable: Buildable, state: dict[str, int], trail: list[str]
    ) -> None:
        status = state.get(buildable.name)
        if status == _VISITED:
            return
        if status == _VISITING:
            chain = " -> ".join([*trail, buildable.name])
            raise ConfigurationError(f"circular reference: {chain}", name=buildable.name)

        state[buildable.name] = _VISITING
        for reference in buildable.references():
            self._check_references(reference, state, [*trail, buildable.name])
        state[buildable.name] = _VISITED

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def lookup(self, name: str) -> Buildable | None:
        """Find a package or bundle by name (packages first)."""
        return self._packages.get(name) or self._bundles.get(name)

    def __getitem__(self, name: str) -> Buildable:
        buildable = self.lookup(name)
        if buildable is None:
            raise KeyError(name)
        return buildable

    @property
    def packages(self) -> list[Package]:
        return list(self._packages.values())

    @property
    def bundles(self) -> list[Bundle]:
        return list(self._bundles.values())

    @property
    def buildables(self) -> list[Buildable]:
        """All packages, then all bundles, in declaration order."""
        return [*self._packages.values(), *self._bundles.values()]

    @property
    def package_names(self) -> list[str]:
        return [buildable.name for buildable in self.buildables]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def profiles(self) -> list[str]:
        return list(self.config.profiles)

    @property
    def build_directory(self) -> Path:
        return self.root / self.config.build_directory

    @property
    def source_directory(self) -> Path:
        return self.root / self.config.source_directory

    @property
    def layout(self) -> Layout:
        return self.config.layout

    @property
    def extension(self) -> str:
        return self.config.extension

    @property
    def forced(self) -> bool:
        return self._forced

    def force_rebuild(self) -> None:
        """Treat every artifact as stale for the rest of this run."""
        self._forced = True

    def profile_settings(self, profile: str) -> EffectiveSettings:
        """Project-level settings for ``profile``.

        Returns:
            None if the profile is disabled, False if it emits raw output,
            otherwise its settings record
        """
        build_profile = self.config.profiles.get(profile)
        if build_profile is None:
            return False
        if not build_profile.enabled:
            return None
        return build_profile.settings

    def use_suffix(self, profile: str) -> bool:
        build_profile = self.config.profiles.get(profile)
        return True if build_profile is None else build_profile.suffix

    def header_files(self) -> list[Path]:
        if self.config.header is None:
            return []
        path = self.source_directory / self.config.header
        return [resolve_source_path(path, self.extension, buildable=PROJECT_HEADER)]

    def header(self, profile: str | None = None) -> str | None:
        """Template-evaluated global header, or None when none is configured."""
        if self.config.header is None:
            return None
        path = self.header_files()[0]
        text = read_source(path, buildable=PROJECT_HEADER)
        return self.render_header(text, profile, origin=str(path))

    def render_header(self, text: str, profile: str | None, origin: str) -> str | None:
        scope = self.scope.for_profile(profile) if profile else self.scope
        rendered = self.renderer.evaluate(text, scope, origin=origin).strip()
        return rendered or None

    def output_paths(self) -> dict[tuple[str, str], Path]:
        """Artifact path for every concrete buildable/profile pair."""
        return {
            (buildable.name, profile): buildable.output_path(profile)
            for buildable in self.buildables
            if not buildable.abstract
            for profile in self.profiles
        }

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> BuildReport:
        """Materialize every buildable for every profile.

        Failures are confined to their artifact: they are logged, fired as
        ``file_failed`` and collected in the report.
        """
        start_time = time.perf_counter()
        outcomes: list[WriteOutcome] = []

        for buildable in self.buildables:
            if buildable.abstract:
                continue
            for profile in self.profiles:
                outcomes.append(self._materialize(buildable, profile))

        report = BuildReport(
            outcomes=outcomes,
            total_duration_ms=(time.perf_counter() - start_time) * 1000,
            forced=self.forced,
        )
        logger.info(
            f"Build finished in {report.total_duration_ms:.0f}ms: {len(report.created)} created, "
            f"{len(report.skipped)} unchanged, {len(report.failures)} failed"
        )
        self.events.fire(BuildEvent.BUILD_COMPLETE, project=self, report=report)
        return report

    def _materialize(self, buildable: Buildable, profile: str) -> WriteOutcome:
        path = buildable.output_path(profile)
        try:
            outcome = buildable.materialize(profile)
        except ArtifactError as e:
            log = get_logger(__name__, buildable=buildable.name, profile=profile)
            log.error(f"✗ {buildable.name} [{profile}]: {e}")
            self.events.fire(
                BuildEvent.FILE_FAILED, buildable=buildable, profile=profile, path=path, error=e
            )
            return failed_outcome(buildable.name, profile, path, str(e))

        if outcome.status is OutcomeStatus.CREATED:
            self.events.fire(
                BuildEvent.FILE_CREATED, buildable=buildable, profile=profile, path=path
            )
        else:
            self.events.fire(
                BuildEvent.FILE_NOT_CHANGED, buildable=buildable, profile=profile, path=path
            )
        return outcome


def build(directory: Path | str, *, force: bool = False, **kwargs: Any) -> BuildReport:
    """Load the project in ``directory`` and run it.

    Raises:
        ConfigurationError: If the project cannot be loaded
    """
    return Project.from_directory(directory, force=force, **kwargs).run()
