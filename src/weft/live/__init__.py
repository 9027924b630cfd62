"""Live observation helpers (event bus for relaxer lifecycles)."""

from .event_bus import EventBus, make_event

__all__ = ["EventBus", "make_event"]
