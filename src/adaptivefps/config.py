"""Application configuration models and helpers."""

from __future__ import annotations

import os
from enum import IntEnum
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class ConfigError(RuntimeError):
    """Persisted configuration could not be read or validated."""


class ConfigPersistError(ConfigError):
    """Persisted configuration could not be written."""


class InvalidTierError(ValueError):
    """A cap tier outside the three known values was requested."""


class CapTier(IntEnum):
    """Selectable cap targets, valued with the host's raw encoding."""

    MAIN_REFRESH = 1
    SIXTY = 2
    THIRTY = 3


_ROTATION: dict[int, CapTier] = {
    CapTier.MAIN_REFRESH: CapTier.SIXTY,
    CapTier.SIXTY: CapTier.THIRTY,
    CapTier.THIRTY: CapTier.MAIN_REFRESH,
}


def parse_tier(value: int | CapTier) -> CapTier:
    """Return the tier for ``value`` or raise ``InvalidTierError``."""

    if isinstance(value, bool):
        raise InvalidTierError(f"invalid cap tier: {value!r}")
    try:
        return CapTier(value)
    except (TypeError, ValueError):
        raise InvalidTierError(f"invalid cap tier: {value!r}") from None


def next_tier(value: int) -> CapTier:
    # unknown values restart the cycle
    return _ROTATION.get(int(value), CapTier.MAIN_REFRESH)


class AppPaths(BaseModel):
    """Resolved directories for adaptivefps runtime assets."""

    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("AFPS_HOME", Path.home() / ".adaptivefps"))
    )

    @property
    def config_dir(self) -> Path:
        return self.base_dir / "config"

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"

    @property
    def config_file(self) -> Path:
        return self.config_dir / "adaptivefps.json"

    @property
    def lock_file(self) -> Path:
        return self.base_dir / "adaptivefps.lock"

    def ensure(self) -> None:
        for path in (self.base_dir, self.config_dir, self.logs_dir):
            path.mkdir(parents=True, exist_ok=True)


class CapDefaults(BaseModel):
    """Values a fresh or reset cap record starts from."""

    enabled: bool = True
    combat_cap: CapTier = CapTier.SIXTY
    out_of_combat_cap: CapTier = CapTier.THIRTY


class LoggingSettings(BaseModel):
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"] = "INFO"
    file_level: str = "DEBUG"
    rotation: str = "1 week"
    retention: int = Field(default=4, ge=1)


class CapConfig(BaseModel):
    """Persisted cap record.

    Tier and cap fields are strict: a stored ``"2"``, ``2.0`` or ``true`` is
    rejected rather than coerced. ``last_user_cap`` holds the raw cap observed
    before the engine first overrode it. ``None`` means no override is pending
    or active.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    version: int = Field(default=1, alias="Version")
    enabled: bool = Field(default=True, alias="Enabled")
    combat_cap: CapTier = Field(default=CapTier.SIXTY, alias="CombatCap", strict=True)
    out_of_combat_cap: CapTier = Field(default=CapTier.THIRTY, alias="OutOfCombatCap", strict=True)
    last_user_cap: int | None = Field(default=None, ge=0, alias="LastUserCap", strict=True)

    @classmethod
    def from_defaults(cls, defaults: CapDefaults) -> CapConfig:
        return cls(
            enabled=defaults.enabled,
            combat_cap=defaults.combat_cap,
            out_of_combat_cap=defaults.out_of_combat_cap,
        )


class AdaptiveFpsSettings(BaseModel):
    app_name: str = "adaptivefps"
    command_name: str = "/afps"
    paths: AppPaths = Field(default_factory=AppPaths)
    defaults: CapDefaults = Field(default_factory=CapDefaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _maybe_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _maybe_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None


def load_settings(env_path: Path | None = None) -> AdaptiveFpsSettings:
    """Load user settings from environment variables and defaults."""

    env_file = env_path or Path('.env')
    if env_file.exists():
        load_dotenv(env_file)

    overrides: dict[str, Any] = {}

    if level := os.getenv('AFPS_LOG_LEVEL'):
        overrides.setdefault('logging', {})['level'] = level.upper()

    if (combat := _maybe_int(os.getenv('AFPS_DEFAULT_COMBAT_CAP'))) is not None:
        overrides.setdefault('defaults', {})['combat_cap'] = combat

    if (ooc := _maybe_int(os.getenv('AFPS_DEFAULT_OOC_CAP'))) is not None:
        overrides.setdefault('defaults', {})['out_of_combat_cap'] = ooc

    if (enabled := _maybe_bool(os.getenv('AFPS_DEFAULT_ENABLED'))) is not None:
        overrides.setdefault('defaults', {})['enabled'] = enabled

    settings = AdaptiveFpsSettings(**overrides)
    settings.paths.ensure()
    return settings
