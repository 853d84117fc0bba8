"""Process-wide helpers."""

from __future__ import annotations

import os
from pathlib import Path

import portalocker


class SessionLockedError(RuntimeError):
    """Another session holds the lock."""


class SessionLock:
    """Ensures only one session drives the host cap at a time.

    The holder's pid is written into the lock file so ``doctor`` can report it.
    """

    def __init__(self, lockfile: Path) -> None:
        self.lockfile = lockfile
        self._lock: portalocker.Lock | None = None

    @property
    def held(self) -> bool:
        return self._lock is not None

    def acquire(self) -> bool:
        self.lockfile.parent.mkdir(parents=True, exist_ok=True)
        lock = portalocker.Lock(str(self.lockfile), mode="w", timeout=0)
        try:
            handle = lock.acquire()
        except portalocker.exceptions.LockException:
            return False
        handle.write(str(os.getpid()))
        handle.flush()
        self._lock = lock
        return True

    def release(self) -> None:
        if self._lock:
            self._lock.release()
            self._lock = None

    def holder(self) -> int | None:
        """Pid recorded by the current or last holder, if any."""

        try:
            text = self.lockfile.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return int(text) if text.isdigit() else None

    def __enter__(self) -> SessionLock:
        if not self.acquire():
            raise SessionLockedError(f"another adaptivefps session is already running ({self.lockfile})")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.release()
