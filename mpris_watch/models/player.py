"""
Handle to a single MPRIS player on the bus.

A PlayerHandle is bound to one identity (and one appearance of it on the bus),
it reads the properties we display and hands out the change subscriptions
the roster controller merges. Every subscription it hands out is tracked
and released when the handle is closed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from mpris_watch.constants import (
    METADATA_ARTIST_KEY,
    METADATA_TITLE_KEY,
    MPRIS_WATCH_LOGGER_NAME,
    PROP_CAN_CONTROL,
    PROP_METADATA,
    PROP_VOLUME,
    SERVICE_PREFIX,
)
from mpris_watch.errors import PlayerUnreachable, TitleUnavailable
from mpris_watch.helpers.title import resolve_title
from mpris_watch.models.snapshot import MetadataFields, PlayerSnapshot

if TYPE_CHECKING:
    from mpris_watch.bus.base import BusCollaborator, PlayerConnection, Subscription

LOGGER = logging.getLogger(f"{MPRIS_WATCH_LOGGER_NAME}.player")


class PlayerHandle:
    """Capability object for a single player identity."""

    def __init__(
        self, connection: PlayerConnection, prefix: str = SERVICE_PREFIX
    ) -> None:
        """Initialize PlayerHandle (use create to bind and probe in one go)."""
        self.connection = connection
        self.identity = connection.identity
        self.prefix = prefix
        self.logger = LOGGER.getChild(self.identity.removeprefix(prefix) or self.identity)
        self._subscriptions: list[Subscription[Any]] = []
        self._closed = False

    def __repr__(self) -> str:
        """Return representation of the handle."""
        return f"<PlayerHandle {self.identity}>"

    @classmethod
    async def create(
        cls, bus: BusCollaborator, identity: str, prefix: str = SERVICE_PREFIX
    ) -> PlayerHandle:
        """
        Bind to identity and make sure the player is actually there.

        :raises PlayerUnreachable: If the player vanished (or does not answer).
        """
        handle = cls(bus.bind(identity), prefix)
        await handle.connection.read_property(PROP_CAN_CONTROL)
        return handle

    @property
    def closed(self) -> bool:
        """Return if the handle was closed."""
        return self._closed

    @property
    def subscriptions(self) -> list[Subscription[Any]]:
        """Return the subscriptions handed out by this handle which are still open."""
        return [sub for sub in self._subscriptions if not sub.closed]

    async def read_volume(self) -> float | None:
        """Return the volume of the player, None if it is not a number."""
        volume = await self.connection.read_property(PROP_VOLUME)
        if isinstance(volume, bool) or not isinstance(volume, int | float):
            return None
        return float(volume)

    async def read_metadata(self) -> MetadataFields:
        """Return the raw artist and title fields of the player's metadata."""
        metadata = await self.connection.read_property(PROP_METADATA)
        if not isinstance(metadata, dict):
            msg = f"Metadata of {self.identity} is not a property bag"
            raise TitleUnavailable(msg)
        return MetadataFields(
            artists=metadata.get(METADATA_ARTIST_KEY),
            title=metadata.get(METADATA_TITLE_KEY),
        )

    async def subscribe_metadata_changed(self) -> Subscription[Any]:
        """Subscribe to changes of the Metadata property."""
        return await self._subscribe(PROP_METADATA)

    async def subscribe_volume_changed(self) -> Subscription[Any]:
        """Subscribe to changes of the Volume property."""
        return await self._subscribe(PROP_VOLUME)

    async def snapshot(self) -> PlayerSnapshot:
        """Read title and volume, unreachable or unusable data results in None values."""
        title_result, volume_result = await asyncio.gather(
            self._read_title(), self.read_volume(), return_exceptions=True
        )
        title: str | None = None
        volume: float | None = None
        if isinstance(title_result, str):
            title = title_result
        elif isinstance(title_result, TitleUnavailable | PlayerUnreachable):
            self.logger.debug("No title: %s", title_result)
        elif isinstance(title_result, BaseException):
            raise title_result
        if isinstance(volume_result, PlayerUnreachable):
            self.logger.debug("No volume: %s", volume_result)
        elif isinstance(volume_result, BaseException):
            raise volume_result
        else:
            volume = volume_result
        return PlayerSnapshot(self.identity, title=title, volume=volume, prefix=self.prefix)

    async def close(self) -> None:
        """Release all subscriptions handed out by this handle."""
        self._closed = True
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            await subscription.aclose()

    async def _read_title(self) -> str:
        return resolve_title(await self.read_metadata())

    async def _subscribe(self, prop: str) -> Subscription[Any]:
        if self._closed:
            msg = f"Handle of {self.identity} is closed"
            raise PlayerUnreachable(msg)
        subscription = await self.connection.subscribe_property_changed(prop)
        self._subscriptions.append(subscription)
        return subscription
