"""Tagged events flowing from the bus subscriptions to the roster controller."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RosterChanged:
    """A player (dis)appeared on the bus, the roster needs a rebuild."""

    name: str | None = None


@dataclass(frozen=True, slots=True)
class StateChanged:
    """A property of a single player changed."""

    identity: str
    prop: str


TaggedEvent = RosterChanged | StateChanged


@dataclass(frozen=True, slots=True)
class NameOwnerChange:
    """Payload of the org.freedesktop.DBus NameOwnerChanged signal."""

    name: str
    old_owner: str
    new_owner: str

    @property
    def appeared(self) -> bool:
        """Return if the name got a new owner."""
        return bool(self.new_owner)
