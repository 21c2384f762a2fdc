# subsonic_adapter/domain/raw.py

"""Untrusted record shapes as they arrive from the server.

Every key is optional: servers omit fields freely, so normalization must
default each one explicitly.
"""

from __future__ import annotations

from typing import TypedDict


class RawGenre(TypedDict, total=False):
    value: str
    albumCount: int
    songCount: int


class RawSong(TypedDict, total=False):
    id: str
    title: str
    duration: int
    starred: str
    track: int
    album: str
    albumId: str
    artist: str
    artistId: str
    coverArt: str


class RawAlbum(TypedDict, total=False):
    id: str
    name: str
    artist: str
    artistId: str
    coverArt: str
    year: int
    starred: str
    genre: str
    song: list[RawSong]


class RawArtist(TypedDict, total=False):
    id: str
    name: str
    albumCount: int
    starred: str
    album: list[RawAlbum]
    # getArtistInfo2 fields, merged into the artist record
    biography: str
    lastFmUrl: str
    musicBrainzId: str
    similarArtist: list[RawArtist]


class RawPlaylist(TypedDict, total=False):
    id: str
    name: str
    comment: str
    owner: str
    songCount: int
    duration: int
    coverArt: str
    entry: list[RawSong]


class RawRadioStation(TypedDict, total=False):
    id: str
    name: str
    streamUrl: str
    homePageUrl: str


class RawPodcastEpisode(TypedDict, total=False):
    id: str
    streamId: str
    title: str
    description: str
    duration: int
    status: str


class RawPodcastChannel(TypedDict, total=False):
    id: str
    url: str
    title: str
    description: str
    originalImageUrl: str
    episode: list[RawPodcastEpisode]
