"""Bounded event bus used to observe relaxer lifecycles."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Mapping

Event = Mapping[str, Any]


class EventBus:
    """Keeps the most recent ``capacity`` events and fans them out to subscribers.

    Publishing may happen from a relaxer's background thread, so the buffer and
    subscriber list are guarded by a lock; callbacks run outside it.
    """

    def __init__(self, capacity: int = 1024):
        self.capacity = capacity
        self._events: Deque[Event] = deque(maxlen=capacity)
        self._subscribers: List[Callable[[Event], None]] = []
        self._lock = threading.Lock()

    def publish(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(event)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def drain(self) -> List[Event]:
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def kinds(self) -> List[str]:
        """Event names currently buffered, oldest first."""

        with self._lock:
            return [str(event.get("event")) for event in self._events]

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._events)


def make_event(kind: str, **fields: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"event": kind}
    payload.update(fields)
    return payload
