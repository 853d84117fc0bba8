from __future__ import annotations

import pytest

from adaptivefps.config import CapConfig, CapDefaults, CapTier, ConfigPersistError
from adaptivefps.core.cache import StateCache
from adaptivefps.core.engine import CapEngine
from adaptivefps.core.events import STATUS_UPDATED, EventBus
from adaptivefps.services.config_store import ConfigStore
from adaptivefps.ui.status import StatusEntry


class FakeHost:
    """Host double with failure switches and a record of every cap write."""

    def __init__(self, *, logged_in=True, in_combat=False, cap=int(CapTier.MAIN_REFRESH), refresh_hz=144):
        self.logged_in = logged_in
        self.in_combat = in_combat
        self.cap = cap
        self.refresh_hz = refresh_hz
        self.writes: list[int] = []
        self.handlers = []
        self.fail_reads: set[str] = set()
        self.fail_writes = False
        self.queries = 0

    def _read(self, name, value):
        self.queries += 1
        if name in self.fail_reads:
            raise RuntimeError(f"{name} unavailable")
        return value

    def is_logged_in(self):
        return self._read("logged_in", self.logged_in)

    def is_in_combat(self):
        return self._read("in_combat", self.in_combat)

    def get_cap(self):
        return self._read("cap", self.cap)

    def get_refresh_rate_hz(self):
        return self._read("refresh_hz", self.refresh_hz)

    def set_cap(self, value):
        if self.fail_writes:
            raise RuntimeError("config locked")
        self.cap = value
        self.writes.append(value)

    def subscribe_tick(self, handler):
        self.handlers.append(handler)

    def unsubscribe_tick(self, handler):
        self.handlers.remove(handler)

    def tick(self):
        for handler in list(self.handlers):
            handler(None)


class FailingStore(ConfigStore):
    def save(self, config):
        raise ConfigPersistError("disk full")


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "config" / "adaptivefps.json", CapDefaults())


@pytest.fixture
def config():
    return CapConfig(combat_cap=CapTier.SIXTY, out_of_combat_cap=CapTier.THIRTY)


@pytest.fixture
def cache(host, events):
    cache = StateCache(host, events)
    yield cache
    cache.shutdown()


@pytest.fixture
def status(events):
    return StatusEntry(events=events)


@pytest.fixture
def redraws(events):
    seen = []
    events.subscribe(STATUS_UPDATED, seen.append)
    return seen


@pytest.fixture
def engine(config, cache, host, store, status, events):
    cache.initialize()
    return CapEngine(config, cache, host, store, status, events)
