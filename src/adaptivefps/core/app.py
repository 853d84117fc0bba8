"""AdaptiveFPS application composition root."""

from __future__ import annotations

from dataclasses import dataclass

from adaptivefps.config import AdaptiveFpsSettings, CapConfig
from adaptivefps.core.cache import StateCache
from adaptivefps.core.engine import CapEngine
from adaptivefps.core.events import STATE_SAMPLED, EventBus
from adaptivefps.logging import get_logger
from adaptivefps.services.commands import CommandSurface, Printer
from adaptivefps.services.config_store import ConfigStore
from adaptivefps.services.host import GameHost
from adaptivefps.ui.status import StatusEntry


@dataclass(slots=True)
class AfpsContext:
    settings: AdaptiveFpsSettings
    events: EventBus
    host: GameHost
    store: ConfigStore
    cache: StateCache
    engine: CapEngine
    status: StatusEntry
    commands: CommandSurface
    running: bool = False

    def start(self) -> None:
        if self.running:
            return
        self.cache.initialize()
        self.engine.resume()
        self.status.on_click = self.engine.on_entry_click
        self.events.subscribe(STATE_SAMPLED, self.engine.on_sampled)
        self.engine.apply_and_refresh()
        self.running = True

    def stop(self) -> None:
        if not self.running:
            return
        self.events.unsubscribe(STATE_SAMPLED, self.engine.on_sampled)
        self.status.on_click = None
        self.engine.release()
        self.cache.shutdown()
        self.running = False


def build_context(
    settings: AdaptiveFpsSettings,
    host: GameHost,
    printer: Printer,
    *,
    events: EventBus | None = None,
    store: ConfigStore | None = None,
    config: CapConfig | None = None,
) -> AfpsContext:
    events = events or EventBus()
    store = store or ConfigStore(settings.paths.config_file, settings.defaults)
    config = config if config is not None else store.load()
    cache = StateCache(host, events)
    status = StatusEntry(events=events)
    engine = CapEngine(config, cache, host, store, status, events, settings.defaults)
    commands = CommandSurface(engine, cache, printer)

    logger = get_logger("bootstrap")
    logger.info("AdaptiveFPS context ready")

    return AfpsContext(
        settings=settings,
        events=events,
        host=host,
        store=store,
        cache=cache,
        engine=engine,
        status=status,
        commands=commands,
    )
