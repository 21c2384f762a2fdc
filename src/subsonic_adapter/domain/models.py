# subsonic_adapter/domain/models.py

"""Core domain models for music server entities.

Every entity is an immutable value built fresh from a server response.
Optional derived fields (``image``, ``url``) are ``None`` when the source
record carries nothing to derive them from.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AlbumSort(str, Enum):
    A_Z = "a-z"
    RECENTLY_ADDED = "recently-added"
    RECENTLY_PLAYED = "recently-played"
    MOST_PLAYED = "most-played"
    RANDOM = "random"


class FavouriteType(str, Enum):
    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"


@dataclass(frozen=True, slots=True)
class Genre:
    id: str
    name: str
    album_count: int = 0
    track_count: int = 0


@dataclass(frozen=True, slots=True)
class Track:
    """A single playable song."""

    id: str
    title: str
    duration: int = 0  # seconds
    favourite: bool = False
    track: int | None = None
    album: str | None = None
    album_id: str | None = None
    artist: str | None = None
    artist_id: str | None = None
    image: str | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True)
class Album:
    """An album with its tracks in server order."""

    id: str
    name: str
    artist: str
    artist_id: str
    year: int = 0  # 0 = unknown
    favourite: bool = False
    genre_id: str | None = None
    image: str | None = None
    tracks: tuple[Track, ...] = ()


@dataclass(frozen=True, slots=True)
class Artist:
    """An artist, optionally enriched with biography and discography."""

    id: str
    name: str
    album_count: int = 0
    favourite: bool = False
    description: str | None = None
    last_fm_url: str | None = None
    music_brainz_url: str | None = None
    albums: tuple[Album, ...] = ()
    similar_artists: tuple[Artist, ...] = ()


@dataclass(frozen=True, slots=True)
class SearchResult:
    artists: tuple[Artist, ...] = ()
    albums: tuple[Album, ...] = ()
    tracks: tuple[Track, ...] = ()


@dataclass(frozen=True, slots=True)
class Favourites:
    albums: tuple[Album, ...] = ()
    artists: tuple[Artist, ...] = ()
    tracks: tuple[Track, ...] = ()


@dataclass(frozen=True, slots=True)
class RadioStation:
    """An internet radio station, shaped so it can be queued like a Track."""

    id: str  # "radio-<server id>"
    title: str
    description: str | None
    url: str | None
    track: int | None = None  # display index, starting at 1
    duration: int = 0
    favourite: bool = False


@dataclass(frozen=True, slots=True)
class Playlist:
    id: str
    name: str
    tracks: tuple[Track, ...] = ()
    image: str | None = None
    comment: str | None = None
    owner: str | None = None
    track_count: int = 0
    duration: int = 0


@dataclass(frozen=True, slots=True)
class PodcastEpisode:
    """A podcast episode in Track-compatible shape."""

    id: str
    title: str
    duration: int = 0
    favourite: bool = False
    track: int | None = None  # newest episode = 1
    album: str | None = None
    album_id: str | None = None
    artist: str | None = ""
    artist_id: str | None = None
    image: str | None = None
    url: str | None = None
    description: str | None = None
    playable: bool = False  # downloaded on the server


@dataclass(frozen=True, slots=True)
class Podcast:
    id: str
    name: str
    description: str | None = None
    image: str | None = None
    url: str | None = None
    track_count: int = 0
    tracks: tuple[PodcastEpisode, ...] = ()
