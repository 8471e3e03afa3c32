"""Helper registry and template scope.

Helpers are plain callables registered by name before a build starts. The
registry is handed to the renderer as part of the template scope; nothing
is attached to classes at runtime.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

HelperFn = Callable[..., Any]


class HelperRegistry:
    """Explicit ``name -> function`` registry for template helpers.

    Example:
        >>> helpers = HelperRegistry()
        >>> @helpers.helper()
        ... def version() -> str:
        ...     return "1.0.0"
        >>> helpers.as_dict()["version"]()
        '1.0.0'
    """

    def __init__(self, helpers: Mapping[str, HelperFn] | None = None) -> None:
        self._helpers: dict[str, HelperFn] = {}
        for name, fn in (helpers or {}).items():
            self.register(name, fn)

    def register(self, name: str, fn: HelperFn) -> HelperFn:
        """Register a helper under ``name``.

        Raises:
            ValueError: If the name is taken or the helper is not callable
        """
        if not callable(fn):
            raise ValueError(f"Helper '{name}' is not callable")
        if name in self._helpers:
            raise ValueError(f"Helper '{name}' is already registered")
        self._helpers[name] = fn
        return fn

    def helper(self, name: str | None = None) -> Callable[[HelperFn], HelperFn]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: HelperFn) -> HelperFn:
            return self.register(name or fn.__name__, fn)

        return decorator

    def get(self, name: str) -> HelperFn | None:
        return self._helpers.get(name)

    def as_dict(self) -> dict[str, HelperFn]:
        return dict(self._helpers)

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def __iter__(self) -> Iterator[str]:
        return iter(self._helpers)

    def __len__(self) -> int:
        return len(self._helpers)


@dataclass(frozen=True)
class TemplateScope:
    """Values visible to source, header and config templates.

    Attributes:
        helpers: Registered helper functions, exposed by name
        options: Free-form options passed on the command line
        build: Name of the profile being generated (``None`` outside a write)
        extra: Additional variables
    """

    helpers: HelperRegistry = field(default_factory=HelperRegistry)
    options: dict[str, Any] = field(default_factory=dict)
    build: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def for_profile(self, profile: str) -> TemplateScope:
        """Return a copy of this scope bound to ``profile``."""
        return replace(self, build=profile)

    def variables(self) -> dict[str, Any]:
        """Flatten the scope into renderer variables.

        Helpers come first so ``options``/``build`` cannot be shadowed by them.
        """
        values: dict[str, Any] = {}
        values.update(self.helpers.as_dict())
        values.update(self.extra)
        values["options"] = dict(self.options)
        values["build"] = self.build
        return values
