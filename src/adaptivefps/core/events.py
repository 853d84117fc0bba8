"""Thread-safe pub/sub bus for the adaptivefps runtime."""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from adaptivefps.logging import get_logger

EventHandler = Callable[[Any], None]

HOST_TICK = "host.tick"
STATE_SAMPLED = "state.sampled"
STATUS_UPDATED = "status.updated"
CAP_APPLIED = "cap.applied"


class EventBus:
    """Minimal event bus. A failing handler is logged and never reaches the emitter
    or the handlers after it.
    """

    def __init__(self) -> None:
        self._subscribers: defaultdict[str, list[EventHandler]] = defaultdict(list)
        self._lock = threading.RLock()
        self.logger = get_logger("events")

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        with self._lock:
            if handler not in self._subscribers[topic]:
                self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._subscribers[topic]:
                self._subscribers[topic].remove(handler)

    def emit(self, topic: str, payload: Any) -> None:
        with self._lock:
            handlers = list(self._subscribers.get(topic, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception as e:
                self.logger.opt(exception=e).error(f"Handler for {topic} failed: {e}")
