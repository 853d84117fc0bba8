"""Host game-state provider contract and an in-process simulation of it."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from adaptivefps.config import CapTier
from adaptivefps.core.events import HOST_TICK, EventBus
from adaptivefps.logging import get_logger

TickHandler = Callable[[object], None]


@runtime_checkable
class GameHost(Protocol):
    """What the cache reads and the engine writes.

    ``get_cap`` and ``get_refresh_rate_hz`` return 0 when the value is unknown.
    """

    def is_logged_in(self) -> bool: ...

    def is_in_combat(self) -> bool: ...

    def get_cap(self) -> int: ...

    def get_refresh_rate_hz(self) -> int: ...

    def set_cap(self, value: int) -> None: ...

    def subscribe_tick(self, handler: TickHandler) -> None: ...

    def unsubscribe_tick(self, handler: TickHandler) -> None: ...


class SimulatedHost:
    """Scriptable host whose ticks are delivered over an ``EventBus``."""

    def __init__(
        self,
        events: EventBus,
        *,
        logged_in: bool = True,
        in_combat: bool = False,
        cap: int = int(CapTier.MAIN_REFRESH),
        refresh_hz: int = 60,
    ) -> None:
        self.events = events
        self.logger = get_logger("host")
        self.logged_in = logged_in
        self.in_combat = in_combat
        self.cap = cap
        self.refresh_hz = refresh_hz
        self.writes: list[int] = []
        self._frame = 0
        self._lock = threading.RLock()

    def is_logged_in(self) -> bool:
        return self.logged_in

    def is_in_combat(self) -> bool:
        return self.in_combat

    def get_cap(self) -> int:
        return self.cap

    def get_refresh_rate_hz(self) -> int:
        return self.refresh_hz

    def set_cap(self, value: int) -> None:
        with self._lock:
            self.cap = int(value)
            self.writes.append(self.cap)
        self.logger.debug("host cap <- {}", value)

    def subscribe_tick(self, handler: TickHandler) -> None:
        self.events.subscribe(HOST_TICK, handler)

    def unsubscribe_tick(self, handler: TickHandler) -> None:
        self.events.unsubscribe(HOST_TICK, handler)

    def tick(self, count: int = 1) -> int:
        """Deliver ``count`` tick notifications and return the frame number."""

        for _ in range(count):
            with self._lock:
                self._frame += 1
                frame = self._frame
            self.events.emit(HOST_TICK, frame)
        return self._frame
