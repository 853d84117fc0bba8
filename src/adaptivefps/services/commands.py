"""The /afps text command."""

from __future__ import annotations

from collections.abc import Callable

from adaptivefps.config import CapTier, ConfigPersistError
from adaptivefps.core.cache import StateCache
from adaptivefps.core.engine import CapEngine
from adaptivefps.logging import get_logger
from adaptivefps.ui import strings
from adaptivefps.ui.status import format_cap

Printer = Callable[[str], None]


def parse_tier_token(token: str) -> CapTier | None:
    """Map a user token to a tier; only the literal numbers 1, 2 and 3 are accepted."""

    token = token.strip()
    if token not in {"1", "2", "3"}:
        return None
    return CapTier(int(token))


class CommandSurface:
    def __init__(self, engine: CapEngine, cache: StateCache, printer: Printer) -> None:
        self.engine = engine
        self.cache = cache
        self.print = printer
        self.logger = get_logger("commands")

    def handle(self, args: str | None) -> None:
        tokens = (args or "").split()
        if not tokens:
            self._status()
            self.print(strings.COMMAND_HELP)
            return

        verb = tokens[0].lower()
        self.logger.debug("command {} {}", verb, tokens[1:])
        try:
            if verb in {"ic", "incombat"}:
                self._set_tier(tokens, combat=True)
            elif verb in {"ooc", "outofcombat"}:
                self._set_tier(tokens, combat=False)
            elif verb == "toggle":
                self._toggle()
            elif verb == "reset":
                self._reset()
            elif verb == "debug":
                self._debug()
            else:
                self.print(strings.UNKNOWN_COMMAND)
        except ConfigPersistError as e:
            self.print(strings.SAVE_FAILED.format(e))

    def _status(self) -> None:
        config = self.engine.config
        hz = self.cache.current().refresh_hz
        self.print(
            strings.STATUS_FORMAT.format(
                format_cap(config.combat_cap, hz),
                format_cap(config.out_of_combat_cap, hz),
                "on" if config.enabled else "off",
            )
        )

    def _set_tier(self, tokens: list[str], *, combat: bool) -> None:
        tier = parse_tier_token(tokens[1]) if len(tokens) >= 2 else None
        if tier is None:
            self.print(strings.USAGE_IC if combat else strings.USAGE_OOC)
            return

        try:
            if combat:
                self.engine.set_combat_cap(tier)
            else:
                self.engine.set_out_of_combat_cap(tier)
        finally:
            self.engine.apply_and_refresh()

        hz = self.cache.current().refresh_hz
        template = strings.COMBAT_SET_FORMAT if combat else strings.OOC_SET_FORMAT
        self.print(template.format(format_cap(tier, hz)))

    def _toggle(self) -> None:
        try:
            self.engine.toggle_enabled()
        finally:
            state = "enabled" if self.engine.config.enabled else "disabled"
            self.print(strings.ENABLED_FORMAT.format(state))

    def _reset(self) -> None:
        try:
            self.engine.reset_caps()
        finally:
            self.engine.apply_and_refresh()

        hz = self.cache.current().refresh_hz
        config = self.engine.config
        self.print(
            strings.RESET_FORMAT.format(
                format_cap(config.combat_cap, hz), format_cap(config.out_of_combat_cap, hz)
            )
        )

    def _debug(self) -> None:
        decision = self.engine.describe()
        hz = decision.refresh_hz
        self.print(
            strings.DEBUG_FORMAT.format(
                "Combat" if decision.in_combat else "Out of Combat",
                format_cap(decision.current_cap, hz),
                format_cap(decision.target, hz),
            )
        )
