# subsonic_adapter/api/client.py

"""Async adapter exposing one method per Subsonic operation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import httpx

from subsonic_adapter.api.errors import MissingPayloadError
from subsonic_adapter.api.normalize import (
    normalize_album,
    normalize_albums,
    normalize_artist,
    normalize_artists,
    normalize_genre,
    normalize_playlist,
    normalize_podcast,
    normalize_radio_station,
    normalize_tracks,
    server_radio_id,
)
from subsonic_adapter.api.request import UrlBuilder, build_request, read_envelope
from subsonic_adapter.auth.service import CredentialStore
from subsonic_adapter.domain.models import (
    Album,
    AlbumSort,
    Artist,
    Favourites,
    FavouriteType,
    Genre,
    Playlist,
    Podcast,
    RadioStation,
    SearchResult,
    Track,
)

logger = logging.getLogger(__name__)

RANDOM_PLAYLIST_ID = "random"
RANDOM_PLAYLIST_NAME = "Random"
RANDOM_SONGS_SIZE = 200

ALBUM_LIST_TYPES: dict[AlbumSort, str] = {
    AlbumSort.A_Z: "alphabeticalByName",
    AlbumSort.RECENTLY_ADDED: "newest",
    AlbumSort.RECENTLY_PLAYED: "recent",
    AlbumSort.MOST_PLAYED: "frequent",
    AlbumSort.RANDOM: "random",
}


def _favourite_params(item_id: str, kind: FavouriteType | str) -> dict[str, str | None]:
    kind = FavouriteType(kind)
    return {
        "id": item_id if kind is FavouriteType.TRACK else None,
        "albumId": item_id if kind is FavouriteType.ALBUM else None,
        "artistId": item_id if kind is FavouriteType.ARTIST else None,
    }


def _require(container: Mapping[str, Any] | None, key: str) -> Any:
    value = (container or {}).get(key)
    if not value:
        msg = f"Response is missing {key!r}."
        raise MissingPayloadError(msg)
    return value


class SubsonicClient:
    """Protocol adapter for a Subsonic-compatible music server.

    Every call is signed with the credentials currently held by ``auth``,
    checked against the response envelope and normalized before returning.
    Nothing is cached or retried.
    """

    def __init__(
        self,
        auth: CredentialStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth = auth
        self._http = httpx.AsyncClient(transport=transport)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> "SubsonicClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.aclose()

    @property
    def urls(self) -> UrlBuilder:
        return UrlBuilder(self._auth.credentials, self._auth.client_name)

    def build_request(self, path: str, params: Mapping[str, Any] | None = None) -> httpx.Request:
        return build_request(
            self._auth.credentials,
            path,
            params,
            client_name=self._auth.client_name,
        )

    async def _get(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        request = self.build_request(path, params)
        logger.debug("GET %s", path)
        response = await self._http.send(request)
        return read_envelope(response)

    # -- genres ------------------------------------------------------------

    async def get_genres(self) -> list[Genre]:
        """Return genres, most albums first (ties keep server order)."""
        response = await self._get("rest/getGenres.view")
        genres = [
            normalize_genre(item)
            for item in (response.get("genres") or {}).get("genre") or []
        ]
        return sorted(genres, key=lambda genre: genre.album_count, reverse=True)

    async def get_albums_by_genre(self, genre_id: str, size: int, offset: int = 0) -> list[Album]:
        params = {
            "type": "byGenre",
            "genre": genre_id,
            "size": size,
            "offset": offset,
        }
        response = await self._get("rest/getAlbumList2.view", params)
        albums = (response.get("albumList2") or {}).get("album")
        return list(normalize_albums(albums, self.urls))

    async def get_tracks_by_genre(self, genre_id: str, size: int, offset: int = 0) -> list[Track]:
        params = {
            "genre": genre_id,
            "count": size,
            "offset": offset,
        }
        response = await self._get("rest/getSongsByGenre.view", params)
        songs = (response.get("songsByGenre") or {}).get("song")
        return list(normalize_tracks(songs, self.urls))

    # -- library -----------------------------------------------------------

    async def get_artists(self) -> list[Artist]:
        """Return all artists, flattened out of the alphabetical index."""
        response = await self._get("rest/getArtists.view")
        indexes = (response.get("artists") or {}).get("index") or []
        raw = [artist for index in indexes for artist in index.get("artist") or []]
        return list(normalize_artists(raw, self.urls))

    async def get_albums(self, sort: AlbumSort | str, size: int, offset: int = 0) -> list[Album]:
        """Return a page of albums in the given order.

        Raises:
            ValueError: ``sort`` is not an AlbumSort value. No request is made.
        """
        list_type = ALBUM_LIST_TYPES[AlbumSort(sort)]
        params = {"type": list_type, "offset": offset, "size": size}
        response = await self._get("rest/getAlbumList2.view", params)
        albums = (response.get("albumList2") or {}).get("album")
        return list(normalize_albums(albums, self.urls))

    async def get_artist_details(self, artist_id: str) -> Artist:
        """Fetch the artist record and its extended info concurrently.

        Both requests must succeed; info fields win on key collisions.
        """
        params = {"id": artist_id}
        artist_response, info_response = await asyncio.gather(
            self._get("rest/getArtist.view", params),
            self._get("rest/getArtistInfo2.view", params),
        )
        artist = _require(artist_response, "artist")
        info = info_response.get("artistInfo2") or {}
        return normalize_artist({**artist, **info}, self.urls)

    async def get_album_details(self, album_id: str) -> Album:
        response = await self._get("rest/getAlbum.view", {"id": album_id})
        return normalize_album(_require(response, "album"), self.urls)

    # -- playlists ---------------------------------------------------------

    async def get_playlists(self) -> list[Playlist]:
        response = await self._get("rest/getPlaylists.view")
        urls = self.urls
        return [
            normalize_playlist(item, urls)
            for item in (response.get("playlists") or {}).get("playlist") or []
        ]

    async def get_playlist(self, playlist_id: str) -> Playlist:
        """Return a playlist with its tracks.

        The ``"random"`` id is served locally from a random-song query.
        """
        if playlist_id == RANDOM_PLAYLIST_ID:
            tracks = await self.get_random_songs()
            return Playlist(
                id=RANDOM_PLAYLIST_ID,
                name=RANDOM_PLAYLIST_NAME,
                tracks=tuple(tracks),
                track_count=len(tracks),
            )

        response = await self._get("rest/getPlaylist.view", {"id": playlist_id})
        return normalize_playlist(_require(response, "playlist"), self.urls)

    async def create_playlist(self, name: str) -> list[Playlist]:
        """Create a playlist and return the refreshed playlist list."""
        await self._get("rest/createPlaylist.view", {"name": name})
        return await self.get_playlists()

    async def edit_playlist(self, playlist_id: str, name: str, comment: str) -> None:
        params = {
            "playlistId": playlist_id,
            "name": name,
            "comment": comment,
        }
        await self._get("rest/updatePlaylist.view", params)

    async def delete_playlist(self, playlist_id: str) -> None:
        await self._get("rest/deletePlaylist.view", {"id": playlist_id})

    async def add_to_playlist(self, playlist_id: str, track_id: str) -> None:
        params = {
            "playlistId": playlist_id,
            "songIdToAdd": track_id,
        }
        await self._get("rest/updatePlaylist.view", params)

    async def remove_from_playlist(self, playlist_id: str, index: int) -> None:
        """Remove the entry at zero-based position ``index``."""
        params = {
            "playlistId": playlist_id,
            "songIndexToRemove": index,
        }
        await self._get("rest/updatePlaylist.view", params)

    async def get_random_songs(self) -> list[Track]:
        response = await self._get("rest/getRandomSongs.view", {"size": RANDOM_SONGS_SIZE})
        songs = (response.get("randomSongs") or {}).get("song")
        return list(normalize_tracks(songs, self.urls))

    # -- favourites --------------------------------------------------------

    async def get_favourites(self) -> Favourites:
        response = await self._get("rest/getStarred2.view")
        starred = response.get("starred2") or {}
        urls = self.urls
        return Favourites(
            albums=normalize_albums(starred.get("album"), urls),
            artists=normalize_artists(starred.get("artist"), urls),
            tracks=normalize_tracks(starred.get("song"), urls),
        )

    async def add_favourite(self, item_id: str, kind: FavouriteType | str) -> None:
        await self._get("rest/star.view", _favourite_params(item_id, kind))

    async def remove_favourite(self, item_id: str, kind: FavouriteType | str) -> None:
        await self._get("rest/unstar.view", _favourite_params(item_id, kind))

    async def search(self, query: str) -> SearchResult:
        response = await self._get("rest/search3.view", {"query": query})
        result = response.get("searchResult3") or {}
        urls = self.urls
        return SearchResult(
            artists=normalize_artists(result.get("artist"), urls),
            albums=normalize_albums(result.get("album"), urls),
            tracks=normalize_tracks(result.get("song"), urls),
        )

    # -- radio -------------------------------------------------------------

    async def get_radio_stations(self) -> list[RadioStation]:
        response = await self._get("rest/getInternetRadioStations.view")
        stations = (response.get("internetRadioStations") or {}).get("internetRadioStation") or []
        return [
            normalize_radio_station(item, index)
            for index, item in enumerate(stations, start=1)
        ]

    async def add_radio_station(self, title: str, url: str) -> RadioStation:
        """Create a station and return it.

        Servers usually answer with an empty envelope, in which case the
        newest listed station with the same name and stream URL is returned.
        """
        params = {"name": title, "streamUrl": url}
        response = await self._get("rest/createInternetRadioStation.view", params)
        if created := response.get("internetRadioStation"):
            return normalize_radio_station(created)

        matches = [
            station
            for station in await self.get_radio_stations()
            if station.title == title and station.url == url
        ]
        if not matches:
            msg = f"Created radio station {title!r} is not listed by the server."
            raise MissingPayloadError(msg)
        return matches[-1]

    async def update_radio_station(self, station: RadioStation) -> RadioStation:
        params = {
            "id": server_radio_id(station.id),
            "name": station.title,
            "streamUrl": station.url,
        }
        response = await self._get("rest/updateInternetRadioStation.view", params)
        if updated := response.get("internetRadioStation"):
            return normalize_radio_station(updated, station.track)
        return normalize_radio_station(
            {
                "id": params["id"],
                "name": station.title,
                "streamUrl": station.url,
                "homePageUrl": station.description,
            },
            station.track,
        )

    async def delete_radio_station(self, station_id: str) -> None:
        await self._get("rest/deleteInternetRadioStation.view", {"id": server_radio_id(station_id)})

    # -- podcasts ----------------------------------------------------------

    async def get_podcasts(self) -> list[Podcast]:
        response = await self._get("rest/getPodcasts.view")
        urls = self.urls
        return [
            normalize_podcast(channel, urls)
            for channel in (response.get("podcasts") or {}).get("channel") or []
        ]

    async def get_podcast(self, podcast_id: str) -> Podcast:
        response = await self._get("rest/getPodcasts.view", {"id": podcast_id})
        channels = _require(response.get("podcasts"), "channel")
        return normalize_podcast(channels[0], self.urls)

    async def refresh_podcasts(self) -> None:
        await self._get("rest/refreshPodcasts.view")

    # -- server ------------------------------------------------------------

    async def scan(self) -> None:
        """Ask the server to rescan its library."""
        await self._get("rest/startScan.view")

    async def scrobble(self, track_id: str) -> None:
        await self._get("rest/scrobble.view", {"id": track_id})

    def get_download_url(self, item_id: Any) -> str:
        return self.urls.download(item_id)
