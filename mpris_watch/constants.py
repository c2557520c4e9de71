"""All constants for mpris-watch."""

from __future__ import annotations

import logging
from typing import Final

APP_NAME: Final[str] = "mpris-watch"
MPRIS_WATCH_LOGGER_NAME: Final[str] = "mpris_watch"

VERBOSE_LOG_LEVEL: Final[int] = 5
logging.addLevelName(VERBOSE_LOG_LEVEL, "VERBOSE")

# MPRIS naming
SERVICE_PREFIX: Final[str] = "org.mpris.MediaPlayer2."
MPRIS_OBJECT_PATH: Final[str] = "/org/mpris/MediaPlayer2"
MPRIS_PLAYER_INTERFACE: Final[str] = "org.mpris.MediaPlayer2.Player"

# org.freedesktop.DBus daemon
DBUS_SERVICE_NAME: Final[str] = "org.freedesktop.DBus"
DBUS_OBJECT_PATH: Final[str] = "/org/freedesktop/DBus"
DBUS_PROPERTIES_INTERFACE: Final[str] = "org.freedesktop.DBus.Properties"
SIGNAL_NAME_OWNER_CHANGED: Final[str] = "NameOwnerChanged"
SIGNAL_PROPERTIES_CHANGED: Final[str] = "PropertiesChanged"

# player properties we read or subscribe to
PROP_METADATA: Final[str] = "Metadata"
PROP_VOLUME: Final[str] = "Volume"
PROP_CAN_CONTROL: Final[str] = "CanControl"

# metadata keys (xesam ontology)
METADATA_ARTIST_KEY: Final[str] = "xesam:artist"
METADATA_TITLE_KEY: Final[str] = "xesam:title"

# config
CONF_SERVICE_PREFIX: Final[str] = "service_prefix"
CONF_LOG_LEVEL: Final[str] = "log_level"
CONFIG_ENV_VAR: Final[str] = "MPRIS_WATCH_CONFIG"
SETTINGS_FILENAME: Final[str] = "settings.json"
DEFAULT_LOG_LEVEL: Final[str] = "info"

# presentation
NOTHING_PLAYING: Final[str] = "Nothing"
ARTIST_SEPARATOR: Final[str] = ", "
ARTIST_TITLE_SEPARATOR: Final[str] = " - "
