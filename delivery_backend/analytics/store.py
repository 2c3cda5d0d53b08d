"""
In-memory log of API events (recommendation generations, mostly).

The log is capped at ``ANALYTICS_MAX_EVENTS`` entries; once full, the oldest
events are dropped first.
"""
from __future__ import annotations

import os
import time
from collections import deque
from typing import Any

MAX_EVENTS = int(os.environ.get("ANALYTICS_MAX_EVENTS", "10000"))


class EventLog:
    def __init__(self, maxlen: int = MAX_EVENTS) -> None:
        self._events: deque[dict[str, Any]] = deque(maxlen=maxlen)

    def record(self, event_type: str, data: dict[str, Any]) -> None:
        self._events.append({"type": event_type, "timestamp": time.time(), **data})

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if e["type"] == event_type]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


_log = EventLog()


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _log.record(event_type, data)


def get_events(event_type: str | None = None) -> list[dict[str, Any]]:
    """Return a snapshot of recorded events, optionally only *event_type* ones."""
    return _log.events(event_type)


def clear_events() -> None:
    _log.clear()
