"""Tests for rendering snapshots as console lines."""

import io

from mpris_watch.helpers.output import SnapshotPrinter, format_snapshot, format_volume
from mpris_watch.models.snapshot import PlayerSnapshot

SPOTIFY = "org.mpris.MediaPlayer2.spotify"


def test_format_volume() -> None:
    """Test the short representation of volumes."""
    assert format_volume(0.8) == "0.8"
    assert format_volume(1.0) == "1"
    assert format_volume(0) == "0"
    assert format_volume(0.35) == "0.35"
    assert format_volume(1.5) == "1.5"
    assert format_volume(100.0) == "100"
    # plain decimals for very small and very large values
    assert format_volume(1e-07) == "0.0000001"
    assert format_volume(2.5e-05) == "0.000025"
    assert format_volume(1e16) == "10000000000000000"


def test_format_snapshot() -> None:
    """Test the line of a single player, with and without volume/title."""
    snapshot = PlayerSnapshot(SPOTIFY, title="Queen - Bohemian Rhapsody", volume=0.8)
    assert format_snapshot(snapshot) == "spotify[0.8]: Queen - Bohemian Rhapsody"
    snapshot = PlayerSnapshot(SPOTIFY, title="Track 1")
    assert format_snapshot(snapshot) == "spotify: Track 1"
    snapshot = PlayerSnapshot(SPOTIFY, volume=0.5)
    assert format_snapshot(snapshot) == "spotify: Nothing"
    snapshot = PlayerSnapshot(SPOTIFY)
    assert format_snapshot(snapshot) == "spotify: Nothing"


def test_format_snapshot_custom_prefix() -> None:
    """Identities without the prefix are shown in full."""
    snapshot = PlayerSnapshot("com.example.Player", title="Song", prefix="org.mpris.MediaPlayer2.")
    assert format_snapshot(snapshot) == "com.example.Player: Song"
    snapshot = PlayerSnapshot("com.example.Player", title="Song", prefix="com.example.")
    assert format_snapshot(snapshot) == "Player: Song"


def test_snapshot_printer() -> None:
    """Test that the printer writes one line per snapshot."""
    stream = io.StringIO()
    printer = SnapshotPrinter(stream)
    printer(
        [
            PlayerSnapshot(SPOTIFY, title="Queen - Bohemian Rhapsody", volume=0.8),
            PlayerSnapshot("org.mpris.MediaPlayer2.vlc"),
        ]
    )
    printer([])
    assert stream.getvalue() == "spotify[0.8]: Queen - Bohemian Rhapsody\nvlc: Nothing\n"
