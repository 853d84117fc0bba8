"""Runtime state containers."""

from __future__ import annotations

from dataclasses import dataclass

from adaptivefps.config import CapConfig, CapTier


@dataclass(frozen=True, slots=True)
class Snapshot:
    """One sampling of host state, never mutated after publication."""

    logged_in: bool = False
    in_combat: bool = False
    current_cap: int = 0
    refresh_hz: int = 0

    def is_applicable(self, config: CapConfig) -> bool:
        return config.enabled and self.logged_in

    def desired_cap(self, config: CapConfig) -> CapTier:
        return config.combat_cap if self.in_combat else config.out_of_combat_cap


@dataclass(slots=True)
class EngineState:
    override_active: bool = False
    # (sample version, value) of the most recent host write
    last_write: tuple[int, int] | None = None


@dataclass(frozen=True, slots=True)
class Decision:
    """Live view of what the engine would do with the current snapshot."""

    applicable: bool
    in_combat: bool
    current_cap: int
    target: CapTier
    refresh_hz: int
