"""Tests for the title resolver."""

import pytest

from mpris_watch.errors import TitleUnavailable
from mpris_watch.helpers.title import resolve_title
from mpris_watch.models.snapshot import MetadataFields


@pytest.mark.parametrize(
    ("artists", "title", "expected"),
    [
        (["Queen"], "Bohemian Rhapsody", "Queen - Bohemian Rhapsody"),
        (["Queen", "David Bowie"], "Under Pressure", "Queen, David Bowie - Under Pressure"),
        (None, "Track 1", "Track 1"),
        (["Daft Punk"], None, "Daft Punk"),
        (["Kraftwerk", "Florian"], None, "Kraftwerk, Florian"),
    ],
)
def test_resolve_title(artists: list[str] | None, title: str | None, expected: str) -> None:
    """Test joining of artists and title, and the fallbacks on either one."""
    assert resolve_title(MetadataFields(artists=artists, title=title)) == expected


def test_resolve_title_nothing_usable() -> None:
    """Test that missing artists and title raise TitleUnavailable."""
    with pytest.raises(TitleUnavailable):
        resolve_title(MetadataFields())


def test_resolve_title_wrong_shapes() -> None:
    """Values of the wrong type count as missing."""
    # a single artist string instead of a list
    assert resolve_title(MetadataFields(artists="Queen", title="Radio Ga Ga")) == "Radio Ga Ga"
    # list containing non strings
    assert resolve_title(MetadataFields(artists=["Queen", 3], title="Innuendo")) == "Innuendo"
    # title that is not a string
    assert resolve_title(MetadataFields(artists=["Queen"], title=42)) == "Queen"
    with pytest.raises(TitleUnavailable):
        resolve_title(MetadataFields(artists={"name": "Queen"}, title=["Innuendo"]))


def test_resolve_title_empty_values() -> None:
    """Empty artist lists and empty titles are not usable."""
    assert resolve_title(MetadataFields(artists=[], title="Track 1")) == "Track 1"
    assert resolve_title(MetadataFields(artists=["Queen"], title="")) == "Queen"
    with pytest.raises(TitleUnavailable):
        resolve_title(MetadataFields(artists=[], title=""))
