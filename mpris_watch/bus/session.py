"""
Session bus collaborator built on sdbus.

Translates sdbus (and OS level) errors at this boundary:
failures of a single entity become PlayerUnreachable,
failures of the bus itself become TransportUnavailable.

Signal subscriptions register their match rule before they are handed out,
signals are queued from then on until the subscription is closed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Self

from sdbus import sd_bus_open_user
from sdbus.exceptions import SdBusBaseError

from mpris_watch.constants import (
    DBUS_OBJECT_PATH,
    DBUS_PROPERTIES_INTERFACE,
    DBUS_SERVICE_NAME,
    MPRIS_OBJECT_PATH,
    MPRIS_PLAYER_INTERFACE,
    MPRIS_WATCH_LOGGER_NAME,
    PROP_CAN_CONTROL,
    PROP_METADATA,
    PROP_VOLUME,
    SIGNAL_NAME_OWNER_CHANGED,
    SIGNAL_PROPERTIES_CHANGED,
    VERBOSE_LOG_LEVEL,
)
from mpris_watch.errors import MprisWatchError, PlayerUnreachable, TransportUnavailable
from mpris_watch.helpers.util import empty_queue
from mpris_watch.models.events import NameOwnerChange

from .base import Subscription
from .interfaces import FreedesktopDbusInterface, MprisPlayerInterface
from .variant import decode_value, unwrap_variant

if TYPE_CHECKING:
    from sdbus import SdBus
    from sdbus.sd_bus_internals import SdBusMessage, SdBusSlot

LOGGER = logging.getLogger(f"{MPRIS_WATCH_LOGGER_NAME}.bus")

# D-Bus property name -> (attribute on the sdbus interface, signature)
PLAYER_PROPERTIES: dict[str, tuple[str, str]] = {
    PROP_CAN_CONTROL: ("can_control", "b"),
    PROP_METADATA: ("metadata", "a{sv}"),
    PROP_VOLUME: ("volume", "d"),
}

TRANSPORT_ERRORS = (SdBusBaseError, OSError)
SIGNAL_DECODE_ERRORS = (*TRANSPORT_ERRORS, ValueError, TypeError)

SignalParser = Callable[[tuple[Any, ...]], Iterable[Any]]


class SignalMatch:
    """
    A signal match rule on the bus, feeding the parsed signal bodies into a queue.

    Iterating yields the parsed items in the order the signals arrived,
    a signal body that can not be decoded is raised as error_type.
    """

    def __init__(
        self, name: str, parse: SignalParser, error_type: type[MprisWatchError]
    ) -> None:
        """Initialize SignalMatch.

        :param name: Human readable description, used for logging.
        :param parse: Maps a signal body to the items to deliver (none to drop it).
        :param error_type: Error raised when registering or decoding fails.
        """
        self.name = name
        self._parse = parse
        self._error_type = error_type
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._slot: SdBusSlot | None = None
        self._closed = False

    async def register(
        self, bus: SdBus, sender: str, path: str, interface: str, member: str
    ) -> Self:
        """Add the match rule to the bus, returns once the bus daemon confirmed it."""
        try:
            self._slot = await bus.match_signal_async(
                sender, path, interface, member, self._on_message
            )
        except TRANSPORT_ERRORS as err:
            msg = f"Unable to subscribe to {self.name}: {err}"
            raise self._error_type(msg) from err
        LOGGER.log(VERBOSE_LOG_LEVEL, "Registered match for %s", self.name)
        return self

    def _on_message(self, message: SdBusMessage) -> None:
        if self._closed:
            return
        try:
            items = list(self._parse(message.parse_to_tuple()))
        except SIGNAL_DECODE_ERRORS as err:
            error = self._error_type(f"Unable to decode {self.name}: {err}")
            error.__cause__ = err
            self._queue.put_nowait(error)
            return
        for item in items:
            self._queue.put_nowait(item)

    def __aiter__(self) -> Self:
        """Return the async iterator."""
        return self

    async def __anext__(self) -> Any:
        """Return the next parsed item."""
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if isinstance(item, MprisWatchError):
            raise item
        return item

    async def aclose(self) -> None:
        """Remove the match rule from the bus."""
        if self._closed:
            return
        self._closed = True
        slot, self._slot = self._slot, None
        if slot is not None:
            slot.close()
        empty_queue(self._queue)


def _property_change_parser(name: str) -> SignalParser:
    def parse(body: tuple[Any, ...]) -> Iterable[Any]:
        interface_name, changed, invalidated = body
        if interface_name != MPRIS_PLAYER_INTERFACE:
            return ()
        if name in changed:
            return (unwrap_variant(changed[name]),)
        if name in invalidated:
            return (None,)
        return ()

    return parse


def _parse_name_owner_changed(body: tuple[Any, ...]) -> Iterable[NameOwnerChange]:
    change = NameOwnerChange(*body)
    LOGGER.log(
        VERBOSE_LOG_LEVEL,
        "Name %s %s (%r -> %r)",
        change.name,
        "appeared" if change.appeared else "vanished",
        change.old_owner,
        change.new_owner,
    )
    return (change,)


class SessionPlayerConnection:
    """Connection to one MPRIS player on the session bus."""

    def __init__(self, bus: SdBus, identity: str) -> None:
        """Initialize SessionPlayerConnection."""
        self.identity = identity
        self._bus = bus
        self._proxy = MprisPlayerInterface.new_proxy(identity, MPRIS_OBJECT_PATH, bus=bus)

    async def read_property(self, name: str) -> Any:
        """Read and decode a property of the player interface."""
        attr, signature = self._lookup(name)
        try:
            value = await getattr(self._proxy, attr).get_async()
        except TRANSPORT_ERRORS as err:
            msg = f"Unable to read {name} of {self.identity}: {err}"
            raise PlayerUnreachable(msg) from err
        return decode_value(signature, value)

    async def subscribe_property_changed(self, name: str) -> Subscription[Any]:
        """Subscribe to changes of a single property (yields the new decoded value)."""
        self._lookup(name)
        match = SignalMatch(
            f"{self.identity}:{name}", _property_change_parser(name), PlayerUnreachable
        )
        await match.register(
            self._bus,
            self.identity,
            MPRIS_OBJECT_PATH,
            DBUS_PROPERTIES_INTERFACE,
            SIGNAL_PROPERTIES_CHANGED,
        )
        return Subscription(match.name, match)

    @staticmethod
    def _lookup(name: str) -> tuple[str, str]:
        if name not in PLAYER_PROPERTIES:
            msg = f"Unsupported player property: {name}"
            raise ValueError(msg)
        return PLAYER_PROPERTIES[name]


class SessionBus:
    """The user's session bus."""

    def __init__(self, bus: SdBus) -> None:
        """Initialize SessionBus (use connect to open the user bus)."""
        self._bus = bus
        self._dbus = FreedesktopDbusInterface.new_proxy(
            DBUS_SERVICE_NAME, DBUS_OBJECT_PATH, bus=bus
        )

    @classmethod
    def connect(cls) -> SessionBus:
        """Open a connection to the user session bus."""
        try:
            bus = sd_bus_open_user()
        except TRANSPORT_ERRORS as err:
            msg = f"Unable to connect to the session bus: {err}"
            raise TransportUnavailable(msg) from err
        LOGGER.debug("Connected to the session bus")
        return cls(bus)

    async def list_names_with_prefix(self, prefix: str) -> list[str]:
        """Return a snapshot of all bus names starting with prefix."""
        try:
            names = await self._dbus.list_names()
        except TRANSPORT_ERRORS as err:
            msg = f"Unable to list bus names: {err}"
            raise TransportUnavailable(msg) from err
        return [name for name in names if name.startswith(prefix)]

    async def subscribe_name_owner_changes(self) -> Subscription[NameOwnerChange]:
        """Subscribe to entities (dis)appearing on the bus."""
        match = SignalMatch(
            SIGNAL_NAME_OWNER_CHANGED, _parse_name_owner_changed, TransportUnavailable
        )
        await match.register(
            self._bus,
            DBUS_SERVICE_NAME,
            DBUS_OBJECT_PATH,
            DBUS_SERVICE_NAME,
            SIGNAL_NAME_OWNER_CHANGED,
        )
        return Subscription(match.name, match)

    def bind(self, identity: str) -> SessionPlayerConnection:
        """Return a connection bound to the given entity."""
        return SessionPlayerConnection(self._bus, identity)
