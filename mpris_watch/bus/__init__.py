"""Session bus access for mpris-watch."""

from __future__ import annotations

from .base import BusCollaborator, PlayerConnection, Subscription

__all__ = ("BusCollaborator", "PlayerConnection", "Subscription")
