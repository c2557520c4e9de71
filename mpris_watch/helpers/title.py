"""Derive a display title from MPRIS metadata."""

from __future__ import annotations

from typing import Any

from mpris_watch.constants import ARTIST_SEPARATOR, ARTIST_TITLE_SEPARATOR
from mpris_watch.errors import TitleUnavailable
from mpris_watch.models.snapshot import MetadataFields


def _valid_artists(artists: Any) -> list[str] | None:
    if not isinstance(artists, list | tuple) or not artists:
        return None
    if not all(isinstance(artist, str) for artist in artists):
        return None
    return list(artists)


def _valid_title(title: Any) -> str | None:
    if not isinstance(title, str) or not title:
        return None
    return title


def resolve_title(fields: MetadataFields) -> str:
    """
    Return the display string for the given metadata fields.

    Artists are joined with a comma and put in front of the title.
    If only one of both is usable, that one is returned on its own.

    :param fields: The raw artist(s) and title as found in the metadata.
    :raises TitleUnavailable: If neither artists nor title are usable.
    """
    artists = _valid_artists(fields.artists)
    title = _valid_title(fields.title)
    if artists and title:
        return ARTIST_SEPARATOR.join(artists) + ARTIST_TITLE_SEPARATOR + title
    if title:
        return title
    if artists:
        return ARTIST_SEPARATOR.join(artists)
    msg = "Metadata holds neither a usable artist nor title"
    raise TitleUnavailable(msg)
