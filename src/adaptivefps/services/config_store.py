"""JSON-backed persistence for the cap record."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from adaptivefps.config import CapConfig, CapDefaults, ConfigError, ConfigPersistError
from adaptivefps.logging import get_logger


class ConfigStore:
    def __init__(self, path: Path, defaults: CapDefaults | None = None) -> None:
        self.path = path
        self.defaults = defaults or CapDefaults()
        self.logger = get_logger("config-store")

    def load(self) -> CapConfig:
        """Read the stored record, or the defaults when nothing was saved yet.

        Raises ``ConfigError`` for unreadable files and for stored values that
        do not validate, such as a cap tier outside 1-3.
        """

        if not self.path.exists():
            self.logger.info("No stored config at {}, using defaults", self.path)
            return CapConfig.from_defaults(self.defaults)

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read {self.path}: {e}") from e

        # JSON mode so the strict tier fields still accept plain 1/2/3
        try:
            return CapConfig.model_validate_json(text)
        except ValidationError as e:
            raise ConfigError(f"invalid config in {self.path}: {e}") from e

    def save(self, config: CapConfig) -> None:
        data = config.model_dump(mode="json", by_alias=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigPersistError(f"cannot write {self.path}: {e}") from e
        self.logger.debug("Saved config to {}", self.path)
