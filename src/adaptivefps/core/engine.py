"""Cap decision and apply engine."""

from __future__ import annotations

import threading

from adaptivefps.config import (
    CapConfig,
    CapDefaults,
    CapTier,
    ConfigPersistError,
    next_tier,
    parse_tier,
)
from adaptivefps.core.cache import StateCache
from adaptivefps.core.events import CAP_APPLIED, EventBus
from adaptivefps.core.state import Decision, EngineState, Snapshot
from adaptivefps.logging import get_logger
from adaptivefps.services.config_store import ConfigStore
from adaptivefps.services.host import GameHost
from adaptivefps.ui.status import ClickKind, StatusEntry, render

UiStamp = tuple[int, bool, int, int]


class CapEngine:
    """Turns (snapshot, config) into at most one host cap write per pass.

    The engine owns the override bookkeeping: the first applicable pass
    records the user's own cap in ``config.last_user_cap`` before any write,
    and disabling writes it back. Status redraws are keyed on a stamp of the
    cache version plus the config fields the status text depends on.
    """

    def __init__(
        self,
        config: CapConfig,
        cache: StateCache,
        host: GameHost,
        store: ConfigStore,
        status: StatusEntry | None = None,
        events: EventBus | None = None,
        defaults: CapDefaults | None = None,
    ) -> None:
        self.config = config
        self.cache = cache
        self.host = host
        self.store = store
        self.status = status
        self.events = events
        self.defaults = defaults or store.defaults
        self.state = EngineState()
        self.logger = get_logger("engine")
        self._last_ui_stamp: UiStamp | None = None
        self._lock = threading.RLock()

    # steady state

    def apply_and_refresh(self) -> None:
        with self._lock:
            version, snapshot = self.cache.read()
            self._apply(version, snapshot)
            self._refresh(version, snapshot)

    def on_sampled(self, _version: int) -> None:
        self.apply_and_refresh()

    def disable_and_refresh(self) -> None:
        with self._lock:
            version, snapshot = self.cache.read()
            if self.state.override_active and self.config.last_user_cap is not None:
                self._write(self.config.last_user_cap, version, "restore")
                self.state.override_active = False
                self.config.last_user_cap = None
                self._persist()
            self._refresh(version, snapshot)

    def on_entry_click(self, kind: ClickKind | str) -> None:
        with self._lock:
            if ClickKind(kind) is ClickKind.PRIMARY:
                self.config.combat_cap = next_tier(self.config.combat_cap)
            else:
                self.config.out_of_combat_cap = next_tier(self.config.out_of_combat_cap)
            self._persist()
            self.apply_and_refresh()

    # config mutations

    def rotate_combat_cap(self) -> CapTier:
        with self._lock:
            self.config.combat_cap = next_tier(self.config.combat_cap)
            self._commit()
            return self.config.combat_cap

    def rotate_out_of_combat_cap(self) -> CapTier:
        with self._lock:
            self.config.out_of_combat_cap = next_tier(self.config.out_of_combat_cap)
            self._commit()
            return self.config.out_of_combat_cap

    def set_combat_cap(self, tier: int | CapTier) -> CapTier:
        parsed = parse_tier(tier)
        with self._lock:
            self.config.combat_cap = parsed
            self._commit()
        return parsed

    def set_out_of_combat_cap(self, tier: int | CapTier) -> CapTier:
        parsed = parse_tier(tier)
        with self._lock:
            self.config.out_of_combat_cap = parsed
            self._commit()
        return parsed

    def reset_caps(self) -> None:
        with self._lock:
            self.config.combat_cap = self.defaults.combat_cap
            self.config.out_of_combat_cap = self.defaults.out_of_combat_cap
            self._commit()

    def toggle_enabled(self) -> bool:
        with self._lock:
            self.config.enabled = not self.config.enabled
            error = self._persist()
            if self.config.enabled:
                self.apply_and_refresh()
            else:
                self.disable_and_refresh()
            if error is not None:
                raise error
            return self.config.enabled

    # lifecycle

    def resume(self) -> None:
        """Adopt a ``last_user_cap`` left behind by a previous process."""

        with self._lock:
            if self.config.last_user_cap is None or self.state.override_active:
                return
            self.state.override_active = True
            self.logger.info(
                "Resuming override from previous session, user cap {} will be restored",
                self.config.last_user_cap,
            )

    def release(self) -> None:
        """Write any saved user cap back to the host and forget it."""

        with self._lock:
            if self.config.last_user_cap is None:
                return
            self._write(self.config.last_user_cap, self.cache.version, "release")
            self.config.last_user_cap = None
            self.state.override_active = False
            self._persist()

    def describe(self) -> Decision:
        with self._lock:
            version, snapshot = self.cache.read()
            return Decision(
                applicable=snapshot.is_applicable(self.config),
                in_combat=snapshot.in_combat,
                current_cap=self._effective_cap(version, snapshot),
                target=snapshot.desired_cap(self.config),
                refresh_hz=snapshot.refresh_hz,
            )

    # internals

    def _effective_cap(self, version: int, snapshot: Snapshot) -> int:
        # a write made since this snapshot was sampled is newer than the snapshot
        last = self.state.last_write
        if last is not None and last[0] == version:
            return last[1]
        return snapshot.current_cap

    def _apply(self, version: int, snapshot: Snapshot) -> bool:
        if not snapshot.is_applicable(self.config):
            return False

        desired = snapshot.desired_cap(self.config)
        current = self._effective_cap(version, snapshot)

        if not self.state.override_active:
            self.config.last_user_cap = current
            self.state.override_active = True
            self.logger.info("Captured user cap {}", current)
            self._persist()

        if current == desired:
            return False

        mode = "combat" if snapshot.in_combat else "ooc"
        return self._write(int(desired), version, mode)

    def _write(self, value: int, version: int, reason: str) -> bool:
        self.logger.info("{} -> cap {}", reason, value)
        try:
            self.host.set_cap(value)
        except Exception as e:
            self.logger.warning(f"Host rejected cap {value}: {e}")
            return False
        self.state.last_write = (version, value)
        if self.events is not None:
            self.events.emit(CAP_APPLIED, value)
        return True

    def _refresh(self, version: int, snapshot: Snapshot) -> bool:
        stamp: UiStamp = (
            version,
            self.config.enabled,
            int(self.config.combat_cap),
            int(self.config.out_of_combat_cap),
        )
        if stamp == self._last_ui_stamp:
            return False
        if self.status is not None:
            self.status.show(render(self.config, snapshot))
        self._last_ui_stamp = stamp
        return True

    def _persist(self) -> ConfigPersistError | None:
        try:
            self.store.save(self.config)
        except ConfigPersistError as e:
            self.logger.error("Config save failed, keeping in-memory values: {}", e)
            return e
        return None

    def _commit(self) -> None:
        error = self._persist()
        if error is not None:
            raise error
