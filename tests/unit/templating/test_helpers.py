"""Tests for the helper registry and template scope."""

import pytest

from packsmith.core.templating import HelperRegistry, TemplateScope


class TestHelperRegistry:
    def test_register_and_get(self):
        helpers = HelperRegistry()
        helpers.register("version", lambda: "1.0")

        assert "version" in helpers
        assert helpers.get("version")() == "1.0"
        assert helpers.get("missing") is None
        assert len(helpers) == 1

    def test_decorator_uses_function_name(self):
        helpers = HelperRegistry()

        @helpers.helper()
        def year():
            return 2026

        @helpers.helper("copyright")
        def _copyright(owner):
            return f"(c) {owner}"

        assert list(helpers) == ["year", "copyright"]
        assert helpers.as_dict()["copyright"]("ACME") == "(c) ACME"

    def test_duplicate_name_rejected(self):
        helpers = HelperRegistry({"a": lambda: 1})

        with pytest.raises(ValueError, match="already registered"):
            helpers.register("a", lambda: 2)

    def test_non_callable_rejected(self):
        with pytest.raises(ValueError, match="not callable"):
            HelperRegistry().register("a", "not a function")

    def test_as_dict_is_a_copy(self):
        helpers = HelperRegistry({"a": lambda: 1})
        helpers.as_dict().clear()

        assert "a" in helpers


class TestTemplateScope:
    def test_variables(self):
        scope = TemplateScope(
            helpers=HelperRegistry({"version": lambda: "1.0"}),
            options={"env": "prod"},
            extra={"name": "core"},
        )

        values = scope.variables()

        assert values["version"]() == "1.0"
        assert values["options"] == {"env": "prod"}
        assert values["name"] == "core"
        assert values["build"] is None

    def test_for_profile_returns_bound_copy(self):
        scope = TemplateScope()

        bound = scope.for_profile("min")

        assert bound.build == "min"
        assert scope.build is None
        assert bound.helpers is scope.helpers

    def test_helpers_cannot_shadow_build_or_options(self):
        scope = TemplateScope(
            helpers=HelperRegistry({"build": lambda: "x", "options": lambda: "y"}),
            options={"a": 1},
        ).for_profile("src")

        values = scope.variables()

        assert values["build"] == "src"
        assert values["options"] == {"a": 1}
