"""Tests for project configuration models."""

from pydantic import ValidationError
import pytest

from packsmith.core.config.models import (
    BuildableSpec,
    BuildProfile,
    Layout,
    MinifySettings,
    ProjectConfig,
)


class TestBuildableSpecShapes:
    """Loosely shaped package entries normalize to one record."""

    def test_single_path(self):
        spec = BuildableSpec.model_validate("core.js")

        assert spec.files == ["core.js"]
        assert spec.extends is None

    def test_bare_list(self):
        spec = BuildableSpec.model_validate(["a", "b"])

        assert spec.files == ["a", "b"]

    def test_null_entry(self):
        spec = BuildableSpec.model_validate(None)

        assert spec.files == []
        assert spec.meta == {}

    def test_full_record(self):
        spec = BuildableSpec.model_validate(
            {
                "directory": "lib",
                "files": ["x"],
                "extends": "base",
                "header": "head.txt",
                "packer": {"keep_bang_comments": True},
                "meta": {"requires": ["base"]},
            }
        )

        assert spec.directory == "lib"
        assert spec.extends == "base"
        assert isinstance(spec.packer, MinifySettings)
        assert spec.packer.keep_bang_comments is True
        assert spec.meta == {"requires": ["base"]}

    def test_files_as_string_and_numbers(self):
        assert BuildableSpec.model_validate({"files": "one"}).files == ["one"]
        assert BuildableSpec.model_validate({"files": [1, 2]}).files == ["1", "2"]

    def test_packer_false_and_true(self):
        assert BuildableSpec.model_validate({"packer": False}).packer is False
        assert BuildableSpec.model_validate({"packer": True}).packer == MinifySettings()

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            BuildableSpec.model_validate({"files": [], "unknown": 1})


class TestMinifySettings:
    """Tests for settings layering."""

    def test_defaults(self):
        settings = MinifySettings()

        assert settings.minify is True
        assert settings.keep_bang_comments is False
        assert settings.source_map is False
        assert settings.header is None

    def test_extra_keys_pass_through(self):
        settings = MinifySettings.model_validate({"shrink_vars": True})

        assert settings.model_dump()["shrink_vars"] is True

    def test_layered_override_wins_only_for_set_keys(self):
        base = MinifySettings.model_validate({"keep_bang_comments": True, "shrink_vars": True})
        override = MinifySettings.model_validate({"source_map": True, "shrink_vars": False})

        merged = base.layered(override)

        assert merged.keep_bang_comments is True
        assert merged.source_map is True
        assert merged.model_dump()["shrink_vars"] is False

    def test_with_header(self):
        settings = MinifySettings().with_header("/* banner */")

        assert settings.header == "/* banner */"
        assert MinifySettings().with_header("").header is None

    def test_frozen(self):
        with pytest.raises(ValidationError):
            MinifySettings().minify = False


class TestBuildProfile:
    """Tests for profile value parsing."""

    def test_false_is_raw_output(self):
        profile = BuildProfile.from_config("src", False)

        assert profile.enabled is True
        assert profile.settings is False

    def test_null_is_raw_output(self):
        assert BuildProfile.from_config("src", None).settings is False

    def test_settings_record(self):
        profile = BuildProfile.from_config("min", {"keep_bang_comments": True})

        assert isinstance(profile.settings, MinifySettings)
        assert profile.settings.keep_bang_comments is True
        assert profile.suffix is True

    def test_empty_mapping_minifies_with_defaults(self):
        assert BuildProfile.from_config("min", {}).settings == MinifySettings()

    def test_record_with_minify_false_is_raw(self):
        assert BuildProfile.from_config("dev", {"minify": False}).settings is False

    def test_explicit_packer_suffix_enabled(self):
        profile = BuildProfile.from_config(
            "min", {"packer": {"source_map": True}, "suffix": False, "enabled": True}
        )

        assert profile.suffix is False
        assert profile.settings.source_map is True

    def test_disabled(self):
        assert BuildProfile.from_config("docs", {"enabled": False}).enabled is False

    def test_packer_with_stray_keys_rejected(self):
        with pytest.raises(ValueError):
            BuildProfile.from_config("min", {"packer": {}, "keep_bang_comments": True})

    def test_scalar_rejected(self):
        with pytest.raises(ValueError):
            BuildProfile.from_config("min", 3)


class TestProjectConfig:
    """Tests for the top-level project model."""

    def test_defaults(self):
        config = ProjectConfig.model_validate({"packages": {"core": ["a"]}})

        assert config.source_directory == "."
        assert config.build_directory == "."
        assert config.layout is Layout.TOGETHER
        assert config.extension == "js"
        assert config.bundles == {}

    def test_default_builds_use_global_packer(self):
        config = ProjectConfig.model_validate(
            {"packages": {}, "packer": {"keep_bang_comments": True}}
        )

        assert list(config.profiles) == ["src", "min"]
        assert config.profiles["src"].settings is False
        assert config.profiles["min"].settings.keep_bang_comments is True

    def test_default_min_profile_without_global_packer(self):
        config = ProjectConfig.model_validate({"packages": {}})

        assert config.profiles["min"].settings == MinifySettings()

    def test_declared_builds_keep_order(self):
        config = ProjectConfig.model_validate(
            {"packages": {}, "builds": {"min": {}, "src": False, "debug": None}}
        )

        assert list(config.profiles) == ["min", "src", "debug"]

    def test_layout_apart(self):
        config = ProjectConfig.model_validate({"packages": {}, "layout": "apart"})

        assert config.layout is Layout.APART

    def test_invalid_layout(self):
        with pytest.raises(ValidationError):
            ProjectConfig.model_validate({"packages": {}, "layout": "sideways"})

    def test_extension_leading_dot_stripped(self):
        config = ProjectConfig.model_validate({"packages": {}, "extension": ".css"})

        assert config.extension == "css"

    def test_null_registries_become_empty(self):
        config = ProjectConfig.model_validate({"packages": None, "bundles": None})

        assert config.packages == {}
        assert config.bundles == {}

    def test_numeric_names_become_strings(self):
        config = ProjectConfig.model_validate({"packages": {1: ["a"]}})

        assert list(config.packages) == ["1"]

    def test_builds_must_be_mapping(self):
        with pytest.raises(ValidationError):
            ProjectConfig.model_validate({"packages": {}, "builds": ["src"]})
