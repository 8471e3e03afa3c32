"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
import yaml

from packsmith.core.config.models import LoggingConfig, ProjectConfig
from packsmith.core.errors import ConfigurationError, TemplateError
from packsmith.core.events import EventBus
from packsmith.core.templating import HelperRegistry, TemplateRenderer, TemplateScope
from packsmith.core.utils.logging import configure_logging as _configure_logging

logger = logging.getLogger(__name__)

CONFIG_FILE = "packsmith.yml"
HELPER_FILE = "packsmith_helpers.py"

_CONFIG_CANDIDATES = (CONFIG_FILE, "packsmith.yaml", "packsmith.json")


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Args:
        file_path: Path to config file

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("packsmith.json")
        'json'
        >>> detect_format("packsmith.yml")
        'yaml'
    """
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def find_config_file(directory: Path | str) -> Path:
    """Locate the project file inside ``directory``.

    Raises:
        ConfigurationError: If no project file exists
    """
    directory = Path(directory)
    for name in _CONFIG_CANDIDATES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    raise ConfigurationError(f"No {CONFIG_FILE} found in {directory}")


def load_config(
    path: str | Path,
    renderer: TemplateRenderer | None = None,
    scope: TemplateScope | None = None,
) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    The file text is evaluated as a template first (when a renderer is
    given), then parsed as JSON or YAML depending on its extension.

    Args:
        path: Path to config file (.json, .yaml, or .yml)
        renderer: Template renderer for the file text
        scope: Helper scope for the template evaluation

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
        TemplateError: If the file text fails to render
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)
    text = path.read_text(encoding="utf-8")
    if renderer is not None:
        text = renderer.evaluate(text, scope or TemplateScope(), origin=str(path))

    if fmt == "json":
        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            content = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    # safe_load returns None for empty files
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root in {path} must be a mapping")
    return content


def parse_project_config(raw: dict[str, Any] | ProjectConfig) -> ProjectConfig:
    """Validate a raw mapping into a ``ProjectConfig``.

    Raises:
        ConfigurationError: If ``packages`` is missing or any entry is malformed
    """
    if isinstance(raw, ProjectConfig):
        return raw
    if "packages" not in raw:
        raise ConfigurationError("Missing required 'packages' section", name="packages")
    try:
        return ProjectConfig.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigurationError(f"Invalid configuration: {e}", name=location) from e


def load_project_config(
    path: str | Path,
    renderer: TemplateRenderer | None = None,
    scope: TemplateScope | None = None,
) -> ProjectConfig:
    """Load and validate a project file.

    Args:
        path: Path to the project file
        renderer: Template renderer for the file text
        scope: Helper scope for the template evaluation

    Returns:
        Validated ProjectConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    try:
        raw = load_config(path, renderer, scope)
    except (FileNotFoundError, ValueError, TemplateError) as e:
        raise ConfigurationError(str(e)) from e

    config = parse_project_config(raw)
    logger.debug(
        f"Loaded {path}: {len(config.packages)} packages, {len(config.bundles)} bundles, "
        f"profiles={list(config.profiles)}"
    )
    return config


def load_helper_module(path: str | Path, helpers: HelperRegistry, events: EventBus) -> bool:
    """Import a project helper file and let it register helpers and hooks.

    The module must define ``register(helpers, events)``.

    Args:
        path: Path to the helper file
        helpers: Registry the module adds template helpers to
        events: Event bus the module subscribes hooks on

    Returns:
        True if a helper file was found and registered, False if absent

    Raises:
        ConfigurationError: If the module cannot be imported or lacks ``register``
    """
    path = Path(path)
    if not path.is_file():
        return False

    spec = importlib.util.spec_from_file_location(f"packsmith_project_helpers_{id(helpers)}", path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot import helper file {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ConfigurationError(f"Helper file {path} failed to import: {e}") from e

    register = getattr(module, "register", None)
    if not callable(register):
        raise ConfigurationError(f"Helper file {path} must define register(helpers, events)")

    register(helpers, events)
    logger.debug(f"Registered {len(helpers)} helpers from {path}")
    return True


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure Python logging from a project's logging section.

    Args:
        config: LoggingConfig instance (defaults if None)
    """
    if config is None:
        config = LoggingConfig()

    _configure_logging(
        level=config.level,
        format_string=config.format,
        structured=config.structured,
    )
