"""End-to-end builds of projects loaded from disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from packsmith.core.build import OutcomeStatus, Project, build
from packsmith.core.errors import ConfigurationError
from packsmith.core.events import BuildEvent
from tests.conftest import BASE_MTIME, set_mtime, write_files

PROJECT_FILE = """\
source_directory: src
build_directory: {{ options.get("out", "build") }}
header: license
builds:
  src: false
  min:
    keep_bang_comments: true
packages:
  core:
    directory: core
    files: [intro, main]
  plugins:
    extends: core
    directory: plugins
    files: [widgets]
    meta:
      requires: [core]
bundles:
  everything: [core, plugins]
"""

HELPERS = """\
def register(helpers, events):
    helpers.register("version", lambda: "4.2.0")

    @events.on("build_complete")
    def stamp(project, report, **_):
        (project.build_directory / "BUILD_INFO").write_text(
            f"{len(report.created)} created\\n"
        )
"""

SOURCES = {
    "src/license.js": "/*! Lib v{{ version() }} ({{ build }}) */",
    "src/core/intro.js": "var Lib = {version: '{{ version() }}'};",
    "src/core/main.js": "// internal note\nLib.start = function () { return true; };",
    "src/plugins/widgets.js": "Lib.widgets = [];",
}


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    write_files(
        tmp_path,
        {"packsmith.yml": PROJECT_FILE, "packsmith_helpers.py": HELPERS, **SOURCES},
        mtime=BASE_MTIME,
    )
    return tmp_path


class TestEndToEnd:
    def test_full_build(self, project_dir: Path):
        report = build(project_dir)
        out = project_dir / "build"

        assert report.success
        assert sorted(path.name for path in out.iterdir()) == [
            "BUILD_INFO",
            "core-min.js",
            "core-src.js",
            "everything-min.js",
            "everything-src.js",
            "plugins-min.js",
            "plugins-src.js",
        ]
        assert (out / "BUILD_INFO").read_text() == "6 created\n"

        core_src = (out / "core-src.js").read_text()
        assert core_src == (
            "/*! Lib v4.2.0 (src) */\n\n"
            "var Lib = {version: '4.2.0'};\n\n"
            "// internal note\nLib.start = function () { return true; };\n"
        )

        core_min = (out / "core-min.js").read_text()
        assert core_min.startswith("/*! Lib v4.2.0 (min) */\n")
        assert core_min.count("/*! Lib v4.2.0 (min) */") == 1
        assert "internal note" not in core_min
        assert "var Lib={version:'4.2.0'};" in core_min

    def test_child_package_includes_parent_files(self, project_dir: Path):
        build(project_dir)

        plugins_src = (project_dir / "build" / "plugins-src.js").read_text()
        assert "var Lib" in plugins_src
        assert plugins_src.rstrip().endswith("Lib.widgets = [];")

    def test_bundle_has_single_header(self, project_dir: Path):
        build(project_dir)

        bundle_src = (project_dir / "build" / "everything-src.js").read_text()
        assert bundle_src.count("/*! Lib v4.2.0 (src) */") == 1
        assert bundle_src.count("Lib.widgets = [];") == 1
        assert bundle_src.count("var Lib =") == 2

    def test_second_build_is_a_no_op(self, project_dir: Path):
        build(project_dir)

        events = []
        project = Project.from_directory(project_dir)
        project.events.subscribe(BuildEvent.FILE_NOT_CHANGED, lambda **kw: events.append(kw))
        report = project.run()

        assert report.created == []
        assert len(events) == 6

    def test_touching_project_file_rebuilds_everything(self, project_dir: Path):
        build(project_dir)
        built = (project_dir / "build" / "core-src.js").stat().st_mtime

        set_mtime(project_dir / "packsmith.yml", built + 10)
        report = build(project_dir)

        assert len(report.created) == 6

    def test_touching_helper_file_rebuilds_everything(self, project_dir: Path):
        build(project_dir)
        built = (project_dir / "build" / "core-src.js").stat().st_mtime

        set_mtime(project_dir / "packsmith_helpers.py", built + 10)
        report = build(project_dir)

        assert len(report.created) == 6

    def test_touching_widget_rebuilds_dependents_only(self, project_dir: Path):
        build(project_dir)
        built = (project_dir / "build" / "core-src.js").stat().st_mtime

        set_mtime(project_dir / "src/plugins/widgets.js", built + 10)
        report = build(project_dir)

        assert {o.buildable for o in report.created} == {"plugins", "everything"}
        assert report.get("core", "min").status is OutcomeStatus.SKIPPED

    def test_options_template_the_project_file(self, project_dir: Path):
        report = build(project_dir, options={"out": "dist"})

        assert report.success
        assert (project_dir / "dist" / "core-min.js").is_file()
        assert not (project_dir / "build").exists()

    def test_meta_is_exposed(self, project_dir: Path):
        project = Project.from_directory(project_dir)

        assert project["plugins"].meta == {"requires": ["core"]}

    def test_json_project_file(self, tmp_path: Path):
        write_files(
            tmp_path,
            {
                "packsmith.json": '{"packages": {"app": ["app"]}, "builds": {"dev": false}}',
                "app.js": "run();",
            },
        )

        report = build(tmp_path)

        assert [o.path.name for o in report.created] == ["app-dev.js"]

    def test_invalid_project_aborts_before_writing(self, project_dir: Path):
        (project_dir / "packsmith.yml").write_text(
            PROJECT_FILE.replace("everything: [core, plugins]", "everything: [core, ghost]")
        )

        with pytest.raises(ConfigurationError, match="ghost"):
            build(project_dir)

        assert not (project_dir / "build").exists()
