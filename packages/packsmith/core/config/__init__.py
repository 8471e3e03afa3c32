"""Configuration management for packsmith."""

from packsmith.core.config.loader import (
    CONFIG_FILE,
    HELPER_FILE,
    configure_logging,
    detect_format,
    find_config_file,
    load_config,
    load_helper_module,
    load_project_config,
    parse_project_config,
)
from packsmith.core.config.models import (
    BuildableSpec,
    BuildProfile,
    Layout,
    LoggingConfig,
    MinifySettings,
    PackerSetting,
    ProjectConfig,
)

__all__ = [
    # Loaders
    "CONFIG_FILE",
    "HELPER_FILE",
    "configure_logging",
    "detect_format",
    "find_config_file",
    "load_config",
    "load_helper_module",
    "load_project_config",
    "parse_project_config",
    # Models
    "BuildProfile",
    "BuildableSpec",
    "Layout",
    "LoggingConfig",
    "MinifySettings",
    "PackerSetting",
    "ProjectConfig",
]
