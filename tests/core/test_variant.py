"""Tests for decoding of sdbus variants."""

from mpris_watch.bus.variant import decode_value, split_signature, unwrap_variant


def test_split_signature() -> None:
    """Test splitting signatures in complete types."""
    assert split_signature("sss") == ["s", "s", "s"]
    assert split_signature("sa{sv}as") == ["s", "a{sv}", "as"]
    assert split_signature("(ia(sd))b") == ["(ia(sd))", "b"]
    assert split_signature("aa{sv}") == ["aa{sv}"]


def test_decode_metadata() -> None:
    """Test decoding of a typical MPRIS metadata property bag."""
    raw = {
        "mpris:trackid": ("o", "/org/mpris/MediaPlayer2/Track/1"),
        "mpris:length": ("x", 354000000),
        "xesam:artist": ("as", ["Queen"]),
        "xesam:title": ("s", "Bohemian Rhapsody"),
        "xesam:nested": ("v", ("s", "deep")),
    }
    assert decode_value("a{sv}", raw) == {
        "mpris:trackid": "/org/mpris/MediaPlayer2/Track/1",
        "mpris:length": 354000000,
        "xesam:artist": ["Queen"],
        "xesam:title": "Bohemian Rhapsody",
        "xesam:nested": "deep",
    }


def test_unwrap_variant() -> None:
    """Test unwrapping of variants holding plain and container values."""
    assert unwrap_variant(("d", 0.8)) == 0.8
    assert unwrap_variant(("av", [("s", "a"), ("i", 1)])) == ["a", 1]
    assert unwrap_variant(("(sv)", ("key", ("b", True)))) == ("key", True)
