"""
RosterController.

Keeps the set of tracked players in line with the players present on the bus
and keeps a display snapshot of each of them.

The controller owns a single EventMultiplexer which merges the NameOwnerChanged
signals (filtered to MPRIS names) with the Metadata and Volume change signals
of every tracked player. A roster change rebuilds the whole set (roster,
handles and multiplexer), a property change only refreshes the snapshot of
the player that emitted it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from mpris_watch.constants import (
    MPRIS_WATCH_LOGGER_NAME,
    PROP_METADATA,
    PROP_VOLUME,
    SERVICE_PREFIX,
    VERBOSE_LOG_LEVEL,
)
from mpris_watch.errors import MultiplexerClosed, PlayerUnreachable
from mpris_watch.helpers.multiplexer import EventMultiplexer, SourceSpec
from mpris_watch.models.events import NameOwnerChange, RosterChanged, StateChanged, TaggedEvent
from mpris_watch.models.player import PlayerHandle

if TYPE_CHECKING:
    from mpris_watch.bus.base import BusCollaborator, Subscription
    from mpris_watch.models.snapshot import PlayerSnapshot

LOGGER = logging.getLogger(f"{MPRIS_WATCH_LOGGER_NAME}.roster")

SnapshotsCallback = Callable[[list["PlayerSnapshot"]], None]


class ReconcilerState(StrEnum):
    """State of the roster controller."""

    REBUILDING = "rebuilding"
    STABLE = "stable"


class RosterController:
    """Controller that tracks all MPRIS players on the bus."""

    def __init__(
        self,
        bus: BusCollaborator,
        prefix: str = SERVICE_PREFIX,
        on_update: SnapshotsCallback | None = None,
    ) -> None:
        """Initialize RosterController.

        :param bus: The bus collaborator to discover and subscribe players with.
        :param prefix: Well-known name prefix of the players to track.
        :param on_update: Called with all snapshots after every reconciliation cycle.
        """
        self.bus = bus
        self.prefix = prefix
        self.on_update = on_update
        self.state = ReconcilerState.REBUILDING
        self._roster: list[str] = []
        self._handles: dict[str, PlayerHandle] = {}
        self._snapshots: dict[str, PlayerSnapshot] = {}
        self._multiplexer: EventMultiplexer[TaggedEvent] | None = None

    @property
    def roster(self) -> list[str]:
        """Return the identities of all tracked players."""
        return list(self._roster)

    @property
    def handles(self) -> dict[str, PlayerHandle]:
        """Return the handles of all tracked players."""
        return dict(self._handles)

    @property
    def multiplexer(self) -> EventMultiplexer[TaggedEvent] | None:
        """Return the active multiplexer."""
        return self._multiplexer

    def snapshots(self) -> list[PlayerSnapshot]:
        """Return the snapshots of all tracked players, in roster order."""
        return [self._snapshots[identity] for identity in self._roster]

    async def run(self) -> None:
        """
        Run the control loop, until cancelled.

        :raises TransportUnavailable: When the bus itself is lost.
        """
        await self.rebuild()
        self._publish()
        while True:
            if self._multiplexer is None:
                msg = "Roster controller was closed"
                raise MultiplexerClosed(msg)
            event = await self._multiplexer.next()
            await self.handle_event(event)
            self._publish()

    async def handle_event(self, event: TaggedEvent) -> None:
        """Dispatch a single event to a rebuild or a refresh."""
        LOGGER.log(VERBOSE_LOG_LEVEL, "Handling %s", event)
        if isinstance(event, RosterChanged):
            await self.rebuild()
            return
        if event.identity not in self._handles:
            LOGGER.debug("Ignoring %s for untracked player", event)
            return
        await self.refresh(event.identity)

    async def rebuild(self) -> None:
        """Rediscover all players and replace roster, handles and subscriptions."""
        self.state = ReconcilerState.REBUILDING
        roster_source = await self.bus.subscribe_name_owner_changes()
        handles: dict[str, PlayerHandle] = {}
        try:
            names = await self.bus.list_names_with_prefix(self.prefix)
            handles = await self._create_handles(names)
            multiplexer: EventMultiplexer[TaggedEvent] = await EventMultiplexer.build(
                self._sources(roster_source, handles.values())
            )
        except BaseException:
            await roster_source.aclose()
            await self._close_handles(handles.values())
            raise
        # only now release the previous set, the new one is complete
        old_multiplexer, old_handles = self._multiplexer, self._handles
        self._multiplexer = multiplexer
        self._handles = handles
        self._roster = [name for name in names if name in handles]
        if old_multiplexer is not None:
            await old_multiplexer.close()
        await self._close_handles(old_handles.values())
        self.state = ReconcilerState.STABLE
        LOGGER.info("Tracking %s player(s)", len(self._roster))
        await self.refresh_all()

    async def refresh(self, identity: str) -> None:
        """Recompute the snapshot of a single player."""
        self._snapshots[identity] = await self._handles[identity].snapshot()

    async def refresh_all(self) -> None:
        """Recompute the snapshots of all tracked players."""
        snapshots = await asyncio.gather(
            *(self._handles[identity].snapshot() for identity in self._roster)
        )
        self._snapshots = {snapshot.identity: snapshot for snapshot in snapshots}

    async def close(self) -> None:
        """Release the multiplexer and all handles."""
        multiplexer, self._multiplexer = self._multiplexer, None
        handles, self._handles = self._handles, {}
        self._roster = []
        self._snapshots = {}
        if multiplexer is not None:
            await multiplexer.close()
        await self._close_handles(handles.values())

    def _publish(self) -> None:
        if self.on_update is not None:
            self.on_update(self.snapshots())

    async def _create_handles(self, names: list[str]) -> dict[str, PlayerHandle]:
        """Probe all names concurrently, names that fail to answer are left out."""
        results = await asyncio.gather(
            *(PlayerHandle.create(self.bus, name, self.prefix) for name in names),
            return_exceptions=True,
        )
        handles: dict[str, PlayerHandle] = {}
        fatal: BaseException | None = None
        for name, result in zip(names, results, strict=True):
            if isinstance(result, PlayerUnreachable):
                LOGGER.debug("Player %s vanished: %s", name, result)
            elif isinstance(result, BaseException):
                fatal = fatal or result
            else:
                handles[name] = result
        if fatal is not None:
            await self._close_handles(handles.values())
            raise fatal
        return handles

    def _sources(
        self, roster_source: Subscription[NameOwnerChange], handles: Iterable[PlayerHandle]
    ) -> list[SourceSpec[TaggedEvent]]:
        async def established() -> Subscription[NameOwnerChange]:
            return roster_source

        sources: list[SourceSpec[TaggedEvent]] = [
            SourceSpec(established, self._tag_name_owner_change, True, "NameOwnerChanged")
        ]
        for handle in handles:
            sources.append(
                SourceSpec(
                    handle.subscribe_metadata_changed,
                    _state_tagger(handle.identity, PROP_METADATA),
                    name=f"{handle.identity}:{PROP_METADATA}",
                )
            )
            sources.append(
                SourceSpec(
                    handle.subscribe_volume_changed,
                    _state_tagger(handle.identity, PROP_VOLUME),
                    name=f"{handle.identity}:{PROP_VOLUME}",
                )
            )
        return sources

    def _tag_name_owner_change(self, change: NameOwnerChange) -> RosterChanged | None:
        if not change.name.startswith(self.prefix):
            return None
        return RosterChanged(change.name)

    @staticmethod
    async def _close_handles(handles: Iterable[PlayerHandle]) -> None:
        for handle in list(handles):
            await handle.close()


def _state_tagger(identity: str, prop: str) -> Callable[[Any], StateChanged]:
    def tag(_value: Any) -> StateChanged:
        return StateChanged(identity, prop)

    return tag
