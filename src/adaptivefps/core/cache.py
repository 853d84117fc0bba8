"""Per-tick snapshot cache over the host state provider."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TypeVar

from adaptivefps.core.events import STATE_SAMPLED, EventBus
from adaptivefps.core.state import Snapshot
from adaptivefps.logging import get_logger
from adaptivefps.services.host import GameHost

T = TypeVar("T")


class StateCache:
    """Samples the host at most once per tick and serves the result to every reader.

    The published value is a single ``(version, snapshot)`` tuple replaced in one
    assignment, so a reader on another thread sees either the old pair or the
    new one, never a mix. ``version`` only moves when a sampled field changes.
    """

    def __init__(self, host: GameHost, events: EventBus | None = None) -> None:
        self.host = host
        self.events = events
        self.logger = get_logger("state-cache")
        self._published: tuple[int, Snapshot] = (0, Snapshot())
        self._lock = threading.RLock()
        self._seeded = False
        self._subscribed = False

    @property
    def version(self) -> int:
        return self._published[0]

    def initialize(self) -> None:
        with self._lock:
            if self._subscribed:
                return
            self._sample()
            self.host.subscribe_tick(self._on_host_tick)
            self._subscribed = True
        self.logger.info("State cache started at version {}", self.version)

    def shutdown(self) -> None:
        with self._lock:
            if not self._subscribed:
                return
            self.host.unsubscribe_tick(self._on_host_tick)
            self._subscribed = False
        self.logger.info("State cache stopped")

    def current(self) -> Snapshot:
        return self._published[1]

    def read(self) -> tuple[int, Snapshot]:
        return self._published

    def on_tick(self) -> bool:
        """Resample the host; returns True when a new snapshot was published."""

        with self._lock:
            changed = self._sample()
            version = self.version
        if self.events is not None:
            self.events.emit(STATE_SAMPLED, version)
        return changed

    def _on_host_tick(self, _payload: object) -> None:
        self.on_tick()

    def _sample(self) -> bool:
        logged_in = self._query("logged-in", self.host.is_logged_in, False)
        in_combat = logged_in and self._query("in-combat", self.host.is_in_combat, False)
        current_cap = self._query("cap", self.host.get_cap, 0)
        refresh_hz = self._query("refresh-rate", self.host.get_refresh_rate_hz, 0)
        snapshot = Snapshot(
            logged_in=bool(logged_in),
            in_combat=bool(in_combat),
            current_cap=int(current_cap),
            refresh_hz=int(refresh_hz),
        )

        version, previous = self._published
        if self._seeded and snapshot == previous:
            return False

        self._published = (version + 1, snapshot)
        self._seeded = True
        self.logger.trace("Published snapshot v{}: {}", version + 1, snapshot)
        return True

    def _query(self, what: str, fn: Callable[[], T], sentinel: T) -> T:
        try:
            value = fn()
        except Exception as e:
            self.logger.warning(f"Host {what} query failed, using {sentinel!r}: {e}")
            return sentinel
        return sentinel if value is None else value
