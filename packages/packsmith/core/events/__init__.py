"""Build lifecycle event bus."""

from packsmith.core.events.bus import BuildEvent, EventBus, EventHandler

__all__ = [
    "BuildEvent",
    "EventBus",
    "EventHandler",
]
