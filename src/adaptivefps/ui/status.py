"""Status entry surface and the pure functions that render into it."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from adaptivefps.config import CapConfig, CapTier
from adaptivefps.core.events import STATUS_UPDATED, EventBus
from adaptivefps.core.state import Snapshot
from adaptivefps.logging import get_logger
from adaptivefps.ui import strings


class ClickKind(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


ClickHandler = Callable[[ClickKind], None]


@dataclass(frozen=True, slots=True)
class DisplayText:
    text: str
    tooltip: str


def format_cap(cap: int, refresh_hz: int = 0) -> str:
    if cap == CapTier.MAIN_REFRESH:
        return f"{refresh_hz} (main)" if refresh_hz > 0 else "main"
    if cap == CapTier.SIXTY:
        return "60"
    if cap == CapTier.THIRTY:
        return "30"
    return str(cap)


def _highlight(text: str) -> str:
    return f"[{text}]"


def build_status(config: CapConfig, snapshot: Snapshot) -> str:
    """Combat and out-of-combat caps, the one currently in effect bracketed."""

    if not config.enabled:
        return strings.OFF_TEXT

    combat = format_cap(config.combat_cap, snapshot.refresh_hz)
    ooc = format_cap(config.out_of_combat_cap, snapshot.refresh_hz)
    if snapshot.in_combat:
        combat = _highlight(combat)
    else:
        ooc = _highlight(ooc)
    return combat + strings.MID_SEPARATOR + ooc


def build_tooltip(refresh_hz: int) -> str:
    if refresh_hz > 0:
        return strings.TOOLTIP_BASE + strings.TOOLTIP_MAIN_SUFFIX.format(refresh_hz)
    return strings.TOOLTIP_BASE


def render(config: CapConfig, snapshot: Snapshot) -> DisplayText:
    return DisplayText(build_status(config, snapshot), build_tooltip(snapshot.refresh_hz))


class StatusEntry:
    """In-process stand-in for the host's status bar entry."""

    def __init__(self, title: str = strings.PLUGIN_NAME, events: EventBus | None = None) -> None:
        self.title = title
        self.events = events
        self.logger = get_logger("status")
        self.text = ""
        self.tooltip = ""
        self.on_click: ClickHandler | None = None

    def set_text(self, text: str) -> None:
        self.text = text

    def set_tooltip(self, tooltip: str) -> None:
        self.tooltip = tooltip

    def show(self, display: DisplayText) -> None:
        self.set_text(display.text)
        self.set_tooltip(display.tooltip)
        self.logger.debug("{}: {}", self.title, display.text)
        if self.events is not None:
            self.events.emit(STATUS_UPDATED, display)

    def click(self, kind: ClickKind = ClickKind.PRIMARY) -> None:
        if self.on_click is None:
            return
        self.on_click(kind)
