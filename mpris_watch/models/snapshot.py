"""Immutable display state of a single player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mpris_watch.constants import SERVICE_PREFIX


@dataclass(frozen=True, slots=True)
class MetadataFields:
    """The (raw) artist and title fields of a player's Metadata property."""

    artists: Any = None
    title: Any = None


@dataclass(frozen=True, slots=True)
class PlayerSnapshot:
    """Last known display-relevant state of one player."""

    identity: str
    title: str | None = None
    volume: float | None = None
    prefix: str = SERVICE_PREFIX

    @property
    def short_name(self) -> str:
        """Return the identity without the well-known prefix."""
        return self.identity.removeprefix(self.prefix)
