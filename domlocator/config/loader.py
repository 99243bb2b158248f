from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from domlocator.config.schema import LocatorSettings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DOMLOCATOR_CONFIG"


class ConfigLoader:
    """Loads and validates the JSON locator settings file."""

    @staticmethod
    def load(path: str | Path) -> LocatorSettings:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return LocatorSettings.model_validate(payload)

    @classmethod
    def load_or_default(cls, path: str | Path | None = None) -> LocatorSettings:
        """Loads ``path`` or the file named by ``DOMLOCATOR_CONFIG``; built-in defaults otherwise."""

        location = path or os.getenv(CONFIG_ENV_VAR)
        if not location:
            return LocatorSettings()
        if not Path(location).is_file():
            logger.warning("Locator settings file %s not found; using defaults", location)
            return LocatorSettings()
        return cls.load(location)
