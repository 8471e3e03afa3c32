"""Command-line interface for packsmith."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from packsmith.core.build import BuildReport, Project
from packsmith.core.config import configure_logging as configure_project_logging
from packsmith.core.errors import ConfigurationError
from packsmith.core.events import BuildEvent, EventBus
from packsmith.core.utils.formatting import display_path, format_kb
from packsmith.core.utils.logging import configure_logging

console = Console()
logger = logging.getLogger(__name__)


def _parse_options(pairs: list[str] | None) -> dict[str, str]:
    """Turn ``KEY=VALUE`` arguments into a dict."""
    options: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{pair}'")
        options[key.strip()] = value
    return options


def _progress_reporter(events: EventBus, root: Path) -> None:
    """Print one line per artifact as the build runs."""

    def created(buildable: Any, profile: str, path: Path, **_: Any) -> None:
        size = format_kb(path.stat().st_size) if path.is_file() else "?"
        shown = escape(display_path(path, root))
        console.print(f"  [green]create[/green]     {shown}  [dim]{size}[/dim]")

    def unchanged(buildable: Any, profile: str, path: Path, **_: Any) -> None:
        console.print(f"  [dim]unchanged  {escape(display_path(path, root))}[/dim]")

    def failed(buildable: Any, profile: str, path: Path, error: Exception, **_: Any) -> None:
        console.print(f"  [red]failed[/red]     {escape(display_path(path, root))}")

    events.subscribe(BuildEvent.FILE_CREATED, created)
    events.subscribe(BuildEvent.FILE_NOT_CHANGED, unchanged)
    events.subscribe(BuildEvent.FILE_FAILED, failed)


def _print_summary(report: BuildReport) -> None:
    console.print(
        f"\n{len(report.created)} created, {len(report.skipped)} unchanged, "
        f"{len(report.failures)} failed in {report.total_duration_ms:.0f}ms"
    )
    if report.failures:
        console.print("\n[red]Failed artifacts:[/red]")
        for outcome in report.failures:
            label = escape(f"{outcome.buildable} [{outcome.profile}]")
            console.print(f"   - {label}: {escape(outcome.error or '')}")


def _load_project(args: argparse.Namespace, events: EventBus | None = None) -> Project | None:
    directory = Path(args.directory).resolve()
    try:
        project = Project.from_directory(
            directory,
            config_path=args.config,
            force=getattr(args, "force", False),
            options=args.options,
            events=events,
        )
    except ConfigurationError as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        return None

    if args.log_level is None and project.config.logging is not None:
        configure_project_logging(project.config.logging)
    return project


def run_build(args: argparse.Namespace) -> int:
    """Build every stale artifact. Returns the process exit code."""
    events = EventBus()
    _progress_reporter(events, Path(args.directory).resolve())

    project = _load_project(args, events)
    if project is None:
        return 1

    console.print(f"[bold]Building[/bold] {project.root}")
    report = project.run()
    _print_summary(report)
    return 0 if report.success else 1


def run_list(args: argparse.Namespace) -> int:
    """Print every artifact the project would produce."""
    project = _load_project(args)
    if project is None:
        return 1

    table = Table(title=f"packsmith: {project.root}")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Profile")
    table.add_column("Output")
    table.add_column("Stale")

    for (name, profile), path in project.output_paths().items():
        buildable = project[name]
        stale = "yes" if buildable.is_stale(profile) else "no"
        table.add_row(name, buildable.kind, profile, display_path(path, project.root), stale)

    console.print(table)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="packsmith",
        description="packsmith - build packages and bundles from source files",
    )
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from project file, else WARNING)",
    )
    p.add_argument("--log-json", action="store_true", help="Emit structured JSON logs")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_project_args(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument(
            "directory", nargs="?", default=".", help="Project directory (default: current dir)"
        )
        cmd.add_argument(
            "--config", default=None, help="Project file (default: <directory>/packsmith.yml)"
        )
        cmd.add_argument(
            "-o",
            "--option",
            dest="options",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Option exposed to templates as options.KEY (repeatable)",
        )

    build = sub.add_parser("build", help="Generate every stale artifact")
    add_project_args(build)
    build.add_argument(
        "-f", "--force", action="store_true", help="Rebuild even if outputs look up to date"
    )

    listing = sub.add_parser("list", help="List artifacts and whether they are stale")
    add_project_args(listing)

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        args.options = _parse_options(args.options)
    except argparse.ArgumentTypeError as e:
        p.error(str(e))

    configure_logging(level=args.log_level or "WARNING", structured=args.log_json)

    if args.cmd == "build":
        sys.exit(run_build(args))
    elif args.cmd == "list":
        sys.exit(run_list(args))


if __name__ == "__main__":
    main()
