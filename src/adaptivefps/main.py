"""Interactive session over a simulated host."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable

from adaptivefps.config import AdaptiveFpsSettings, load_settings
from adaptivefps.core.app import AfpsContext, build_context
from adaptivefps.core.events import CAP_APPLIED, STATUS_UPDATED, EventBus
from adaptivefps.logging import configure_logging, get_logger
from adaptivefps.services.host import SimulatedHost
from adaptivefps.ui.status import ClickKind, DisplayText
from adaptivefps.utils.process import SessionLock

SESSION_HELP = (
    "login on|off, combat on|off, cap <n>, hz <n>, click [left|right], "
    "tick [n], /afps ..., quit"
)


def _switch(token: str | None) -> bool | None:
    if token in {"on", "1", "yes"}:
        return True
    if token in {"off", "0", "no"}:
        return False
    return None


class Session:
    """Drives a context line by line; every line except ``tick`` ends with one tick."""

    def __init__(self, ctx: AfpsContext, host: SimulatedHost, echo: Callable[[str], None]) -> None:
        self.ctx = ctx
        self.host = host
        self.echo = echo
        ctx.events.subscribe(STATUS_UPDATED, self._on_status)
        ctx.events.subscribe(CAP_APPLIED, self._on_cap)

    def _on_status(self, display: DisplayText) -> None:
        self.echo(f"[status] {display.text}")

    def _on_cap(self, value: int) -> None:
        self.echo(f"[host] cap <- {value}")

    def feed(self, line: str) -> bool:
        """Handle one input line; returns False once the session should end."""

        line = line.strip()
        if not line:
            return True
        if line.startswith(self.ctx.settings.command_name):
            self.ctx.commands.handle(line[len(self.ctx.settings.command_name):])
            self.host.tick()
            return True

        verb, _, rest = line.partition(" ")
        arg = rest.strip() or None
        verb = verb.lower()
        if verb in {"quit", "exit"}:
            return False
        if verb == "tick":
            self.host.tick(int(arg) if arg and arg.isdigit() else 1)
            return True

        if verb == "login" and (flag := _switch(arg)) is not None:
            self.host.logged_in = flag
        elif verb == "combat" and (flag := _switch(arg)) is not None:
            self.host.in_combat = flag
        elif verb == "cap" and arg and arg.isdigit():
            self.host.cap = int(arg)
        elif verb == "hz" and arg and arg.isdigit():
            self.host.refresh_hz = int(arg)
        elif verb == "click":
            kind = ClickKind.SECONDARY if arg in {"right", "secondary"} else ClickKind.PRIMARY
            self.ctx.status.click(kind)
        else:
            self.echo(SESSION_HELP)
            return True
        self.host.tick()
        return True

    def run(self, lines: Iterable[str]) -> None:
        for line in lines:
            if not self.feed(line):
                break


def open_session(
    settings: AdaptiveFpsSettings,
    echo: Callable[[str], None],
    **host_state,
) -> tuple[AfpsContext, Session]:
    events = EventBus()
    host = SimulatedHost(events, **host_state)
    ctx = build_context(settings, host, echo, events=events)
    session = Session(ctx, host, echo)
    return ctx, session


def main() -> None:
    settings: AdaptiveFpsSettings = load_settings()
    configure_logging(settings)
    logger = get_logger("main")

    with SessionLock(settings.paths.lock_file):
        ctx, session = open_session(settings, print)
        ctx.start()
        logger.info("adaptivefps ready")
        print(SESSION_HELP)
        try:
            session.run(sys.stdin)
        finally:
            ctx.stop()


if __name__ == "__main__":
    main()
