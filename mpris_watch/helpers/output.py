"""Render player snapshots as console lines."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable
from decimal import Decimal
from typing import TextIO

from mpris_watch.constants import NOTHING_PLAYING
from mpris_watch.models.snapshot import PlayerSnapshot


def format_volume(volume: float) -> str:
    """Format a volume the short way (0.8, 1, 0.35), never in exponent notation."""
    volume = float(volume)
    if not math.isfinite(volume):
        return repr(volume)
    text = format(Decimal(repr(volume)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_snapshot(snapshot: PlayerSnapshot) -> str:
    """Return the console line for a single player."""
    if snapshot.title is None:
        return f"{snapshot.short_name}: {NOTHING_PLAYING}"
    if snapshot.volume is None:
        return f"{snapshot.short_name}: {snapshot.title}"
    return f"{snapshot.short_name}[{format_volume(snapshot.volume)}]: {snapshot.title}"


class SnapshotPrinter:
    """Print all snapshots each time the roster controller publishes them."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize."""
        self._stream = stream

    def __call__(self, snapshots: Iterable[PlayerSnapshot]) -> None:
        """Write one line per snapshot."""
        stream = self._stream or sys.stdout
        for snapshot in snapshots:
            stream.write(format_snapshot(snapshot) + "\n")
        stream.flush()
