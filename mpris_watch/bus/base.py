"""
Transport-agnostic contract of the bus collaborator.

The roster controller only talks to these protocols, the sdbus implementation
lives in :mod:`mpris_watch.bus.session`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, Generic, Protocol, Self, TypeVar

from mpris_watch.helpers.util import close_async_generator

if TYPE_CHECKING:
    from mpris_watch.models.events import NameOwnerChange

_T = TypeVar("_T")


class Subscription(Generic[_T]):
    """
    An established signal subscription.

    Iterating yields the signal payloads in the order they arrived.
    Closing releases the underlying match, after which iteration stops.
    """

    def __init__(self, name: str, iterator: AsyncIterator[_T]) -> None:
        """Initialize Subscription.

        :param name: Human readable description, used for logging.
        :param iterator: The async iterator (usually a generator) delivering payloads.
        """
        self.name = name
        self._iterator = iterator
        self._closed = False

    def __repr__(self) -> str:
        """Return representation of the subscription."""
        state = "closed" if self._closed else "open"
        return f"<Subscription {self.name} ({state})>"

    @property
    def closed(self) -> bool:
        """Return if the subscription was released."""
        return self._closed

    def __aiter__(self) -> Self:
        """Return the async iterator."""
        return self

    async def __anext__(self) -> _T:
        """Return the next payload."""
        if self._closed:
            raise StopAsyncIteration
        return await anext(self._iterator)

    async def aclose(self) -> None:
        """Release the subscription, calling it again is a no-op."""
        if self._closed:
            return
        self._closed = True
        await close_async_generator(self._iterator)


class PlayerConnection(Protocol):
    """Connection to a single bus entity implementing the MPRIS player interface."""

    identity: str

    async def read_property(self, name: str) -> Any:
        """Read and decode a property of the player interface."""

    async def subscribe_property_changed(self, name: str) -> Subscription[Any]:
        """Subscribe to changes of a single property (yields the new decoded value)."""


class BusCollaborator(Protocol):
    """The session bus as seen by the roster controller."""

    async def list_names_with_prefix(self, prefix: str) -> list[str]:
        """Return a snapshot of all bus names starting with prefix."""

    async def subscribe_name_owner_changes(self) -> Subscription[NameOwnerChange]:
        """Subscribe to entities (dis)appearing on the bus."""

    def bind(self, identity: str) -> PlayerConnection:
        """Return a connection bound to the given entity."""
