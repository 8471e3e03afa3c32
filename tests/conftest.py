"""Shared pytest fixtures for packsmith tests."""

from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path
from typing import Any

import pytest

from packsmith.core.build import Project
from packsmith.core.config import MinifySettings
from packsmith.core.events import BuildEvent, EventBus
from packsmith.core.minify import MinifyResult

# Old enough that anything written during a test is newer
BASE_MTIME = 1_600_000_000.0


# ============================================================================
# Test Doubles
# ============================================================================


class RecordingMinifier:
    """Deterministic minifier that records every call.

    Collapses whitespace runs to single spaces and prefixes the banner.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def minify(
        self,
        code: str,
        settings: MinifySettings,
        output_path: Path | None = None,
    ) -> MinifyResult:
        self.calls.append({"code": code, "settings": settings, "output_path": output_path})
        minified = " ".join(code.split())
        if settings.header:
            minified = f"{settings.header}\n{minified}"
        source_map = '{"version":3,"mappings":""}' if settings.source_map else None
        return MinifyResult(code=minified, source_map=source_map)


class FailingMinifier:
    """Minifier that rejects every input."""

    def minify(
        self,
        code: str,
        settings: MinifySettings,
        output_path: Path | None = None,
    ) -> MinifyResult:
        raise ValueError("unexpected token")


class EventRecorder:
    """Subscribes to every build event and records (event, name, profile, filename)."""

    def __init__(self, events: EventBus) -> None:
        self.records: list[tuple[str, str | None, str | None, str | None]] = []
        for event in BuildEvent:
            events.subscribe(event, self._handler(event))

    def _handler(self, event: BuildEvent) -> Callable[..., None]:
        def record(**payload: Any) -> None:
            buildable = payload.get("buildable")
            path = payload.get("path")
            self.records.append(
                (
                    event.value,
                    buildable.name if buildable is not None else None,
                    payload.get("profile"),
                    path.name if path is not None else None,
                )
            )

        return record

    def of(self, event: BuildEvent) -> list[tuple[str, str | None, str | None, str | None]]:
        return [record for record in self.records if record[0] == event.value]


# ============================================================================
# Filesystem Helpers
# ============================================================================


def set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


def write_files(root: Path, files: dict[str, str], mtime: float | None = BASE_MTIME) -> None:
    """Write ``files`` (relative path -> content) under ``root``."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            set_mtime(path, mtime)


# ============================================================================
# Project Fixtures
# ============================================================================


@pytest.fixture
def minifier() -> RecordingMinifier:
    return RecordingMinifier()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(events: EventBus) -> EventRecorder:
    return EventRecorder(events)


@pytest.fixture
def make_project(
    tmp_path: Path, minifier: RecordingMinifier, events: EventBus
) -> Callable[..., Project]:
    """Factory fixture: write sources under tmp_path and build a Project over them."""

    def _make(
        config: dict[str, Any],
        files: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> Project:
        write_files(tmp_path, files or {})
        kwargs.setdefault("minifier", minifier)
        kwargs.setdefault("events", events)
        return Project(tmp_path, config, **kwargs)

    return _make


@pytest.fixture
def core_files() -> dict[str, str]:
    """Two-file package sources."""
    return {
        "a.js": "var a = 1;\n",
        "b.js": "var b   =   2;\n",
    }
