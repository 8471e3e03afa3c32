"""Configuration models for packsmith projects.

A project file is parsed once into these models. Every loosely shaped
input (package given as a single path, a bare file list, a build profile
given as ``false``) is normalized here so the build engine only ever sees
one canonical record shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Layout(str, Enum):
    """Output directory layout."""

    TOGETHER = "together"
    APART = "apart"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines")


class MinifySettings(BaseModel):
    """Settings record handed to the minifier.

    Known keys are typed; anything else is passed through untouched so
    custom minifiers can read their own options (``mangle``, ``shrink_vars``
    and so on).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    minify: bool = Field(default=True, description="Whether this record requests minification")
    keep_bang_comments: bool = Field(
        default=False, description="Preserve /*! ... */ license comments"
    )
    source_map: bool = Field(default=False, description="Write a .map file next to the artifact")
    header: str | None = Field(
        default=None, description="Banner emitted ahead of the minified code (set by the engine)"
    )

    def with_header(self, header: str | None) -> MinifySettings:
        """Return a copy carrying the given banner."""
        return self.model_copy(update={"header": header or None})

    def layered(self, override: MinifySettings) -> MinifySettings:
        """Return these settings with every key set on ``override`` replacing ours."""
        merged = self.model_dump(exclude={"header"})
        merged.update(override.model_dump(exclude_unset=True, exclude={"header"}))
        return MinifySettings.model_validate(merged)


PackerSetting = MinifySettings | Literal[False] | None


def _coerce_packer(value: Any) -> Any:
    """Accept ``true`` as "default settings"; everything else is validated as-is."""
    if value is True:
        return {}
    return value


class BuildProfile(BaseModel):
    """A named output variant (``src``, ``min``, ...)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    packer: MinifySettings | Literal[False] = False
    suffix: bool = Field(default=True, description="Append -<name> to output filenames")
    enabled: bool = Field(default=True, description="Set to false to produce no output at all")

    @classmethod
    def from_config(cls, name: str, value: Any) -> BuildProfile:
        """Build a profile from its raw configuration value.

        ``false``/``null`` means raw output, a mapping is either a settings
        record or a record with ``packer``/``suffix``/``enabled`` keys.
        """
        if isinstance(value, BuildProfile):
            return value
        if value is None or value is False:
            return cls(name=name, packer=False)
        if value is True or isinstance(value, MinifySettings):
            return cls(name=name, packer=_coerce_packer(value))
        if not isinstance(value, dict):
            raise ValueError(f"Build profile '{name}' must be false or a mapping")

        data = dict(value)
        suffix = data.pop("suffix", True)
        enabled = data.pop("enabled", True)
        if "packer" in data:
            packer = data.pop("packer")
            if data:
                raise ValueError(
                    f"Build profile '{name}' has unexpected keys next to packer: {sorted(data)}"
                )
        else:
            packer = data
        if packer is None:
            packer = False
        return cls(name=name, packer=_coerce_packer(packer), suffix=suffix, enabled=enabled)

    @property
    def settings(self) -> MinifySettings | Literal[False]:
        """Settings for this profile, ``False`` when it does not minify."""
        if self.packer is False or not self.packer.minify:
            return False
        return self.packer


class BuildableSpec(BaseModel):
    """Canonical shape of one ``packages`` or ``bundles`` entry."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    directory: str | None = None
    files: list[str] = Field(default_factory=list)
    extends: str | None = None
    header: str | None = None
    packer: PackerSetting = None
    meta: dict[str, Any] = Field(default_factory=dict)
    abstract: bool = Field(default=False, description="Shared parent spec, never written")

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, str):
            return {"files": [data]}
        if isinstance(data, list):
            return {"files": data}
        return data

    @field_validator("files", mode="before")
    @classmethod
    def _stringify_files(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("extends", mode="before")
    @classmethod
    def _stringify_extends(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("packer", mode="before")
    @classmethod
    def _accept_true(cls, value: Any) -> Any:
        return _coerce_packer(value)

    @field_validator("meta", mode="before")
    @classmethod
    def _empty_meta(cls, value: Any) -> Any:
        return {} if value is None else value


def _string_keys(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(key): item for key, item in value.items()}
    return value


class ProjectConfig(BaseModel):
    """Parsed project file (``packsmith.yml``).

    Example:
        >>> config = ProjectConfig.model_validate(
        ...     {"packages": {"core": ["a.js", "b.js"]}, "build_directory": "build"}
        ... )
        >>> list(config.builds)
        ['src', 'min']
    """

    model_config = ConfigDict(extra="forbid")

    source_directory: str = "."
    build_directory: str = "."
    header: str | None = None
    layout: Layout = Layout.TOGETHER
    extension: str = Field(default="js", min_length=1)
    packer: PackerSetting = None
    builds: dict[str, BuildProfile] | None = None
    packages: dict[str, BuildableSpec]
    bundles: dict[str, BuildableSpec] = Field(default_factory=dict)
    logging: LoggingConfig | None = None

    @field_validator("packages", "bundles", mode="before")
    @classmethod
    def _normalize_registry(cls, value: Any) -> Any:
        return _string_keys(value)

    @field_validator("packer", mode="before")
    @classmethod
    def _accept_true(cls, value: Any) -> Any:
        return _coerce_packer(value)

    @field_validator("builds", mode="before")
    @classmethod
    def _parse_builds(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, dict):
            raise ValueError("builds must be a mapping of profile name to settings")
        return {
            str(name): BuildProfile.from_config(str(name), settings)
            for name, settings in value.items()
        }

    @field_validator("extension", mode="before")
    @classmethod
    def _strip_dot(cls, value: Any) -> Any:
        return value.lstrip(".") if isinstance(value, str) else value

    @model_validator(mode="after")
    def _default_builds(self) -> ProjectConfig:
        if self.builds is None:
            self.builds = {
                "src": BuildProfile(name="src", packer=False),
                "min": BuildProfile(
                    name="min",
                    packer=MinifySettings() if self.packer is None else self.packer,
                ),
            }
        return self

    @property
    def profiles(self) -> dict[str, BuildProfile]:
        """Declared build profiles in declaration order."""
        return self.builds or {}
