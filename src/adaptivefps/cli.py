"""Typer CLI for adaptivefps."""

from __future__ import annotations

import json
import platform
from collections.abc import Iterator
from contextlib import contextmanager

import typer

from adaptivefps.config import AdaptiveFpsSettings, ConfigError, load_settings
from adaptivefps.logging import configure_logging
from adaptivefps.main import main as launch
from adaptivefps.main import open_session
from adaptivefps.utils.process import SessionLock, SessionLockedError

app = typer.Typer(no_args_is_help=True)


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"error: {error}", err=True)
    return typer.Exit(1)


@contextmanager
def _exclusive(settings: AdaptiveFpsSettings) -> Iterator[None]:
    """Hold the session lock for the duration of a one-shot command."""

    try:
        with SessionLock(settings.paths.lock_file):
            yield
    except SessionLockedError as e:
        raise _fail(e) from e


@app.command()
def run() -> None:
    """Start an interactive session over a simulated host."""

    try:
        launch()
    except (ConfigError, SessionLockedError) as e:
        raise _fail(e) from e


@app.command()
def simulate(
    ticks: int = typer.Option(10, min=1, help="Number of ticks to run."),
    combat_from: int = typer.Option(3, help="First tick spent in combat."),
    combat_to: int = typer.Option(6, help="Last tick spent in combat."),
    cap: int = typer.Option(1, help="Cap the user had set before the session."),
    hz: int = typer.Option(144, help="Display refresh rate."),
    logged_in: bool = typer.Option(True, "--logged-in/--logged-out"),
) -> None:
    """Run a scripted combat timeline and print every host write and redraw."""

    settings = load_settings()
    configure_logging(settings, level="WARNING")
    with _exclusive(settings):
        try:
            ctx, session = open_session(
                settings, typer.echo, logged_in=logged_in, cap=cap, refresh_hz=hz
            )
        except ConfigError as e:
            raise _fail(e) from e

        ctx.start()
        try:
            for tick in range(1, ticks + 1):
                session.host.in_combat = combat_from <= tick <= combat_to
                typer.echo(f"tick {tick}: {'combat' if session.host.in_combat else 'ooc'}")
                session.host.tick()
        finally:
            ctx.stop()
    typer.echo(f"host writes: {session.host.writes}")


@app.command()
def command(
    args: list[str] | None = typer.Argument(None, help="Verb and arguments, e.g. 'ic 2'."),
    cap: int = typer.Option(1, help="Current host cap."),
    hz: int = typer.Option(60, help="Display refresh rate."),
) -> None:
    """Run one /afps command against the saved configuration."""

    settings = load_settings()
    configure_logging(settings, level="WARNING")
    with _exclusive(settings):
        try:
            ctx, _session = open_session(settings, typer.echo, cap=cap, refresh_hz=hz)
        except ConfigError as e:
            raise _fail(e) from e

        ctx.start()
        try:
            ctx.commands.handle(" ".join(args or []))
        finally:
            ctx.stop()


@app.command()
def doctor() -> None:
    """Print environment diagnostics."""

    settings = load_settings()
    configure_logging(settings)
    lock = SessionLock(settings.paths.lock_file)
    info = {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "paths": {
            "home": str(settings.paths.base_dir),
            "config": str(settings.paths.config_file),
            "logs": str(settings.paths.logs_dir),
        },
        "config_present": settings.paths.config_file.exists(),
        "last_session_pid": lock.holder(),
    }
    typer.echo(json.dumps(info, indent=2))


@app.command()
def settings(key: str | None = typer.Argument(None)) -> None:
    """Display current settings or a specific section."""

    data = load_settings().model_dump()
    if key:
        data = data.get(key, {})
    typer.echo(json.dumps(data, indent=2, default=str))
