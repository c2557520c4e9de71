"""sdbus interface definitions for the D-Bus daemon and MPRIS players."""

from __future__ import annotations

from typing import Any

from sdbus import (
    DbusInterfaceCommonAsync,
    dbus_method_async,
    dbus_property_async,
)

from mpris_watch.constants import DBUS_SERVICE_NAME, MPRIS_PLAYER_INTERFACE


class FreedesktopDbusInterface(DbusInterfaceCommonAsync, interface_name=DBUS_SERVICE_NAME):
    """The parts of org.freedesktop.DBus we need for player discovery."""

    @dbus_method_async(result_signature="as")
    async def list_names(self) -> list[str]:
        """Return all names currently present on the bus."""
        raise NotImplementedError


class MprisPlayerInterface(DbusInterfaceCommonAsync, interface_name=MPRIS_PLAYER_INTERFACE):
    """The (read only) parts of org.mpris.MediaPlayer2.Player we need."""

    @dbus_property_async("b")
    def can_control(self) -> bool:
        """Return if the player can be controlled."""
        raise NotImplementedError

    @dbus_property_async("a{sv}")
    def metadata(self) -> dict[str, tuple[str, Any]]:
        """Return the metadata of the current track."""
        raise NotImplementedError

    @dbus_property_async("d")
    def volume(self) -> float:
        """Return the volume level."""
        raise NotImplementedError
