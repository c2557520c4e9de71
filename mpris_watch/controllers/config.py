"""Logic to load the (optional) settings file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import aiofiles
from mashumaro import DataClassDictMixin
from mashumaro.exceptions import InvalidFieldValue, MissingField

from mpris_watch.constants import (
    APP_NAME,
    CONFIG_ENV_VAR,
    DEFAULT_LOG_LEVEL,
    MPRIS_WATCH_LOGGER_NAME,
    SERVICE_PREFIX,
    SETTINGS_FILENAME,
)
from mpris_watch.errors import InvalidConfigError
from mpris_watch.helpers.json import JSON_DECODE_EXCEPTIONS, async_json_loads

LOGGER = logging.getLogger(f"{MPRIS_WATCH_LOGGER_NAME}.config")


@dataclass
class WatchConfig(DataClassDictMixin):
    """Settings of mpris-watch."""

    service_prefix: str = SERVICE_PREFIX
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        """Validate the values."""
        if not isinstance(self.service_prefix, str) or not self.service_prefix:
            msg = "service_prefix must be a non-empty string"
            raise ValueError(msg)
        if not isinstance(self.log_level, str) or not isinstance(
            logging.getLevelName(self.log_level.upper()), int
        ):
            msg = f"Invalid log_level: {self.log_level!r}"
            raise ValueError(msg)


def default_settings_path() -> Path:
    """Return the default location of the settings file."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    return Path(config_home, APP_NAME, SETTINGS_FILENAME)


class ConfigController:
    """Controller that loads and holds the settings."""

    def __init__(self, filename: str | os.PathLike[str] | None = None) -> None:
        """Initialize ConfigController.

        :param filename: Explicit settings file, which must exist if given.
        """
        self._explicit = filename is not None or bool(os.environ.get(CONFIG_ENV_VAR))
        if filename is None:
            filename = os.environ.get(CONFIG_ENV_VAR) or default_settings_path()
        self.filename = Path(filename)
        self.config = WatchConfig()
        self.initialized = False

    async def setup(self) -> None:
        """Async initialize of the settings."""
        self.config = await self._load()
        self.initialized = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get value(s) for a specific key."""
        return getattr(self.config, key, default)

    async def _load(self) -> WatchConfig:
        """Load settings from the settings file."""
        try:
            async with aiofiles.open(self.filename, encoding="utf-8") as _file:
                data = await async_json_loads(await _file.read())
        except FileNotFoundError as err:
            if self._explicit:
                msg = f"Settings file {self.filename} does not exist"
                raise InvalidConfigError(msg) from err
            LOGGER.debug("No settings file found at %s, using defaults", self.filename)
            return WatchConfig()
        except (OSError, UnicodeDecodeError) as err:
            msg = f"Unable to read settings file {self.filename}: {err}"
            raise InvalidConfigError(msg) from err
        except JSON_DECODE_EXCEPTIONS as err:
            msg = f"Error while reading settings file {self.filename}: {err}"
            raise InvalidConfigError(msg) from err
        if not isinstance(data, dict):
            msg = f"Settings file {self.filename} must contain a JSON object"
            raise InvalidConfigError(msg)
        known_keys = {field.name for field in fields(WatchConfig)}
        for key in data.keys() - known_keys:
            LOGGER.warning("Ignoring unknown setting %s in %s", key, self.filename)
        try:
            config = WatchConfig.from_dict({k: v for k, v in data.items() if k in known_keys})
        except (MissingField, InvalidFieldValue, ValueError, TypeError) as err:
            msg = f"Invalid settings in {self.filename}: {err}"
            raise InvalidConfigError(msg) from err
        LOGGER.debug("Loaded settings from %s", self.filename)
        return config
