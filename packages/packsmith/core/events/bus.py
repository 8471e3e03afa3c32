"""Build lifecycle events.

An ``EventBus`` belongs to one project run. Anything that wants to observe
the build (the CLI, helper modules, tests) subscribes to that instance;
there is no process-wide observer list.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[..., None]


class BuildEvent(str, Enum):
    """Events fired while a project is built."""

    FILE_CREATED = "file_created"
    FILE_NOT_CHANGED = "file_not_changed"
    FILE_FAILED = "file_failed"
    BUILD_COMPLETE = "build_complete"


class EventBus:
    """Fire-and-forget event dispatcher.

    Handlers receive the event payload as keyword arguments. A handler that
    raises is logged and skipped; return values are ignored.

    Example:
        >>> bus = EventBus()
        >>> bus.subscribe(BuildEvent.FILE_CREATED, lambda **kw: print(kw["path"]))
        >>> bus.fire(BuildEvent.FILE_CREATED, buildable=pkg, profile="min", path=path)
    """

    def __init__(self) -> None:
        self._handlers: dict[BuildEvent, list[EventHandler]] = {}

    def subscribe(self, event: BuildEvent | str, handler: EventHandler) -> EventHandler:
        """Register ``handler`` for ``event``.

        Returns:
            The handler, so this can be used as a decorator target
        """
        self._handlers.setdefault(BuildEvent(event), []).append(handler)
        return handler

    def on(self, event: BuildEvent | str) -> Callable[[EventHandler], EventHandler]:
        """Decorator form of :meth:`subscribe`."""

        def decorator(handler: EventHandler) -> EventHandler:
            return self.subscribe(event, handler)

        return decorator

    def unsubscribe(self, event: BuildEvent | str, handler: EventHandler) -> None:
        handlers = self._handlers.get(BuildEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: BuildEvent | str) -> list[EventHandler]:
        return list(self._handlers.get(BuildEvent(event), []))

    def fire(self, event: BuildEvent | str, **payload: Any) -> None:
        """Notify every handler subscribed to ``event``."""
        event = BuildEvent(event)
        logger.debug(f"Event {event.value}: {sorted(payload)}")
        for handler in self.handlers(event):
            try:
                handler(**payload)
            except Exception:
                logger.exception(f"Handler for '{event.value}' failed")
