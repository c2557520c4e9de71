"""Main mpris-watch class."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from mpris_watch.constants import CONF_SERVICE_PREFIX, MPRIS_WATCH_LOGGER_NAME
from mpris_watch.controllers.config import ConfigController
from mpris_watch.controllers.roster import RosterController

if TYPE_CHECKING:
    from mpris_watch.bus.base import BusCollaborator
    from mpris_watch.models.snapshot import PlayerSnapshot

LOGGER = logging.getLogger(MPRIS_WATCH_LOGGER_NAME)

SnapshotsSubscriber = Callable[[list["PlayerSnapshot"]], None]
BusFactory = Callable[[], "BusCollaborator"]


def _session_bus() -> BusCollaborator:
    # sdbus is only imported once we actually need the session bus
    from mpris_watch.bus.session import SessionBus  # noqa: PLC0415

    return SessionBus.connect()


class MprisWatch:
    """Main MprisWatch object."""

    config: ConfigController
    bus: BusCollaborator
    roster: RosterController

    def __init__(
        self,
        config_path: str | None = None,
        bus_factory: BusFactory | None = None,
    ) -> None:
        """Initialize MprisWatch.

        :param config_path: Explicit path to the settings file.
        :param bus_factory: Callable returning the bus collaborator (session bus by default).
        """
        self.config_path = config_path
        self._bus_factory = bus_factory or _session_bus
        self._subscribers: list[SnapshotsSubscriber] = []
        self.started = False

    async def start(self) -> None:
        """Load the settings and connect to the bus."""
        self.config = ConfigController(self.config_path)
        await self.config.setup()
        self.bus = self._bus_factory()
        prefix = self.config.get(CONF_SERVICE_PREFIX)
        self.roster = RosterController(self.bus, prefix=prefix, on_update=self._signal_update)
        self.started = True
        LOGGER.info("Watching players with prefix %s", prefix)

    async def run(self) -> None:
        """Run until cancelled (or the bus is lost)."""
        if not self.started:
            await self.start()
        await self.roster.run()

    async def stop(self) -> None:
        """Release all subscriptions."""
        if not self.started:
            return
        LOGGER.debug("Stop called, cleaning up...")
        await self.roster.close()
        self.started = False

    def subscribe(self, cb_func: SnapshotsSubscriber) -> Callable[[], None]:
        """
        Subscribe to the snapshots published after every reconciliation cycle.

        Returns function to remove the subscription.
        """
        self._subscribers.append(cb_func)

        def remove_listener() -> None:
            self._subscribers.remove(cb_func)

        return remove_listener

    def _signal_update(self, snapshots: list[PlayerSnapshot]) -> None:
        for cb_func in list(self._subscribers):
            cb_func(snapshots)
