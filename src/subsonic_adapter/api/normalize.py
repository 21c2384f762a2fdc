# subsonic_adapter/api/normalize.py

"""Convert raw server records into domain entities.

All functions are pure: they read the raw record, default every missing
field explicitly and derive URLs through the given UrlBuilder.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from subsonic_adapter.api.request import UrlBuilder
from subsonic_adapter.domain.models import (
    Album,
    Artist,
    Genre,
    Playlist,
    Podcast,
    PodcastEpisode,
    RadioStation,
    Track,
)
from subsonic_adapter.domain.raw import (
    RawAlbum,
    RawArtist,
    RawGenre,
    RawPlaylist,
    RawPodcastChannel,
    RawRadioStation,
    RawSong,
)

RADIO_ID_PREFIX = "radio-"
UNNAMED_PLAYLIST = "(Unnamed)"
MUSICBRAINZ_ARTIST_URL = "https://musicbrainz.org/artist/"
EPISODE_PLAYABLE_STATUS = "completed"

_ANCHOR_RE = re.compile(r"<a[^>]*>.*?</a>")


def _int(value: object) -> int:
    """Coerce a numeric field, treating missing or malformed values as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _str(value: object) -> str:
    return "" if value is None else str(value)


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def strip_anchors(text: str) -> str:
    """Remove inline <a> elements together with their link text."""
    return _ANCHOR_RE.sub("", text)


def sort_by_year_desc(albums: Iterable[Album]) -> tuple[Album, ...]:
    # sorted() is stable with reverse=True, so equal years keep server order.
    return tuple(sorted(albums, key=lambda album: album.year, reverse=True))


def normalize_genre(item: RawGenre) -> Genre:
    value = _str(item.get("value"))
    return Genre(
        id=value,
        name=value,
        album_count=_int(item.get("albumCount")),
        track_count=_int(item.get("songCount")),
    )


def normalize_track(item: RawSong, urls: UrlBuilder) -> Track:
    track_number = item.get("track")
    return Track(
        id=_str(item.get("id")),
        title=_str(item.get("title")),
        duration=_int(item.get("duration")),
        favourite=bool(item.get("starred")),
        track=None if track_number is None else _int(track_number),
        album=_optional_str(item.get("album")),
        album_id=_optional_str(item.get("albumId")),
        artist=_optional_str(item.get("artist")),
        artist_id=_optional_str(item.get("artistId")),
        image=urls.cover_art(item.get("coverArt")),
        url=urls.stream(item.get("id")),
    )


def normalize_tracks(items: Iterable[RawSong] | None, urls: UrlBuilder) -> tuple[Track, ...]:
    return tuple(normalize_track(item, urls) for item in items or ())


def normalize_album(item: RawAlbum, urls: UrlBuilder) -> Album:
    return Album(
        id=_str(item.get("id")),
        name=_str(item.get("name")),
        artist=_str(item.get("artist")),
        artist_id=_str(item.get("artistId")),
        year=_int(item.get("year")),
        favourite=bool(item.get("starred")),
        genre_id=_optional_str(item.get("genre")),
        image=urls.cover_art(item.get("coverArt")),
        tracks=normalize_tracks(item.get("song"), urls),
    )


def normalize_albums(items: Iterable[RawAlbum] | None, urls: UrlBuilder) -> tuple[Album, ...]:
    return tuple(normalize_album(item, urls) for item in items or ())


def normalize_artist(item: RawArtist, urls: UrlBuilder, *, depth: int = 1) -> Artist:
    """Normalize an artist record.

    ``depth`` bounds the similar-artist recursion: with the default of 1 the
    similar artists are normalized, but their own similar artists are not.
    """
    biography = item.get("biography")
    mbid = item.get("musicBrainzId")

    similar: tuple[Artist, ...] = ()
    if depth > 0:
        similar = tuple(
            normalize_artist(other, urls, depth=depth - 1)
            for other in item.get("similarArtist") or ()
        )

    return Artist(
        id=_str(item.get("id")),
        name=_str(item.get("name")),
        album_count=_int(item.get("albumCount")),
        favourite=bool(item.get("starred")),
        description=None if biography is None else strip_anchors(str(biography)),
        last_fm_url=_optional_str(item.get("lastFmUrl")),
        music_brainz_url=f"{MUSICBRAINZ_ARTIST_URL}{mbid}" if mbid else None,
        albums=sort_by_year_desc(normalize_albums(item.get("album"), urls)),
        similar_artists=similar,
    )


def normalize_artists(items: Iterable[RawArtist] | None, urls: UrlBuilder) -> tuple[Artist, ...]:
    return tuple(normalize_artist(item, urls) for item in items or ())


def normalize_playlist(item: RawPlaylist, urls: UrlBuilder) -> Playlist:
    """Normalize a playlist summary or a full playlist with entries.

    The image is only derived for non-empty playlists, falling back to the
    first entry's cover when the playlist itself has none.
    """
    tracks = normalize_tracks(item.get("entry"), urls)
    track_count = _int(item.get("songCount")) or len(tracks)

    image = None
    if track_count > 0:
        entries = item.get("entry") or []
        cover = item.get("coverArt") or (entries[0].get("coverArt") if entries else None)
        image = urls.cover_art(cover)

    return Playlist(
        id=_str(item.get("id")),
        name=_str(item.get("name")) or UNNAMED_PLAYLIST,
        tracks=tracks,
        image=image,
        comment=_optional_str(item.get("comment")),
        owner=_optional_str(item.get("owner")),
        track_count=track_count,
        duration=_int(item.get("duration")),
    )


def normalize_radio_station(item: RawRadioStation, index: int | None = None) -> RadioStation:
    return RadioStation(
        id=f"{RADIO_ID_PREFIX}{_str(item.get('id'))}",
        title=_str(item.get("name")),
        description=_optional_str(item.get("homePageUrl")),
        url=_optional_str(item.get("streamUrl")),
        track=index,
    )


def server_radio_id(station_id: str) -> str:
    """Strip the local prefix from a radio station id before sending it."""
    return station_id.removeprefix(RADIO_ID_PREFIX)


def normalize_podcast(channel: RawPodcastChannel, urls: UrlBuilder) -> Podcast:
    """Normalize a podcast channel; episodes are numbered newest = 1."""
    title = _str(channel.get("title"))
    image = _optional_str(channel.get("originalImageUrl"))
    episodes = channel.get("episode") or []
    total = len(episodes)

    tracks = tuple(
        PodcastEpisode(
            id=_str(episode.get("id")),
            title=_str(episode.get("title")),
            duration=_int(episode.get("duration")),
            track=total - index,
            album=title,
            image=image,
            url=urls.stream(episode.get("streamId")),
            description=_optional_str(episode.get("description")),
            playable=episode.get("status") == EPISODE_PLAYABLE_STATUS,
        )
        for index, episode in enumerate(episodes)
    )

    return Podcast(
        id=_str(channel.get("id")),
        name=title,
        description=_optional_str(channel.get("description")),
        image=image,
        url=_optional_str(channel.get("url")),
        track_count=total,
        tracks=tracks,
    )
