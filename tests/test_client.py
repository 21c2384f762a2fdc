"""Tests for the protocol adapter against a fake server."""

from __future__ import annotations

import httpx
import pytest

from conftest import SERVER, FakeServer, failed, ok
from subsonic_adapter.api.client import SubsonicClient
from subsonic_adapter.api.errors import MissingPayloadError, ProtocolError
from subsonic_adapter.domain.models import AlbumSort, FavouriteType, RadioStation


@pytest.mark.asyncio
async def test_every_request_is_signed(client: SubsonicClient, server: FakeServer) -> None:
    await client.scrobble("42")

    (request,) = server.requests
    assert str(request.url).startswith(f"{SERVER}/rest/scrobble.view?")
    assert dict(request.url.params) == {
        "id": "42",
        "u": "u",
        "s": "s1",
        "p": "h1",
        "c": "web",
        "f": "json",
        "v": "1.9.0",
    }


@pytest.mark.asyncio
async def test_failed_envelope_rejects_with_server_message(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getGenres.view"] = failed("Wrong username or password")

    with pytest.raises(ProtocolError) as excinfo:
        await client.get_genres()

    assert str(excinfo.value) == "Wrong username or password"


@pytest.mark.asyncio
async def test_transport_errors_surface_unchanged(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    server.routes["getGenres.view"] = refuse

    with pytest.raises(httpx.ConnectError):
        await client.get_genres()


@pytest.mark.asyncio
async def test_genres_sorted_by_album_count_stable(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getGenres.view"] = ok(
        genres={
            "genre": [
                {"value": "Pop", "albumCount": 2, "songCount": 20},
                {"value": "Rock", "albumCount": 5, "songCount": 50},
                {"value": "Jazz", "albumCount": 2, "songCount": 7},
                {"value": "Ambient", "songCount": 1},
            ],
        },
    )

    genres = await client.get_genres()

    assert [g.name for g in genres] == ["Rock", "Pop", "Jazz", "Ambient"]
    assert genres[-1].album_count == 0


@pytest.mark.asyncio
async def test_genre_lists_default_to_empty(client: SubsonicClient, server: FakeServer) -> None:
    assert await client.get_albums_by_genre("Rock", 10) == []
    assert await client.get_tracks_by_genre("Rock", 10, offset=20) == []

    assert server.params("getAlbumList2.view")["type"] == "byGenre"
    songs_params = server.params("getSongsByGenre.view")
    assert (songs_params["genre"], songs_params["count"], songs_params["offset"]) == (
        "Rock",
        "10",
        "20",
    )


@pytest.mark.asyncio
async def test_get_artists_flattens_index(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getArtists.view"] = ok(
        artists={
            "index": [
                {"name": "A", "artist": [{"id": "1", "name": "ABBA", "albumCount": 9}]},
                {"name": "B", "artist": [{"id": "2", "name": "Beck"}, {"id": "3", "name": "Björk"}]},
                {"name": "C"},
            ],
        },
    )

    artists = await client.get_artists()

    assert [a.name for a in artists] == ["ABBA", "Beck", "Björk"]
    assert artists[0].album_count == 9


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("sort", "list_type"),
    [
        ("a-z", "alphabeticalByName"),
        ("recently-added", "newest"),
        ("recently-played", "recent"),
        ("most-played", "frequent"),
        (AlbumSort.RANDOM, "random"),
    ],
)
async def test_get_albums_maps_sort(
    client: SubsonicClient,
    server: FakeServer,
    sort: str,
    list_type: str,
) -> None:
    server.routes["getAlbumList2.view"] = ok(
        albumList2={"album": [{"id": "a", "name": "A", "coverArt": "al-a", "year": 2001}]},
    )

    albums = await client.get_albums(sort, 25, 50)

    params = server.params("getAlbumList2.view")
    assert (params["type"], params["size"], params["offset"]) == (list_type, "25", "50")
    assert albums[0].year == 2001
    assert albums[0].image is not None


@pytest.mark.asyncio
async def test_get_albums_rejects_unknown_sort_locally(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    with pytest.raises(ValueError):
        await client.get_albums("by-colour", 10)

    assert server.requests == []


@pytest.mark.asyncio
async def test_artist_details_merges_info(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getArtist.view"] = ok(
        artist={
            "id": "ar",
            "name": "X",
            "albumCount": 2,
            "album": [
                {"id": "a1", "name": "First", "year": 1999},
                {"id": "a2", "name": "Second", "year": 2004},
            ],
        },
    )
    server.routes["getArtistInfo2.view"] = ok(
        artistInfo2={
            "biography": "Great <a href='https://last.fm'>Read more</a>",
            "musicBrainzId": "mb",
            "lastFmUrl": "https://last.fm/x",
            "similarArtist": [{"id": "y", "name": "Y"}],
        },
    )

    artist = await client.get_artist_details("ar")

    assert server.params("getArtist.view")["id"] == "ar"
    assert server.params("getArtistInfo2.view")["id"] == "ar"
    assert artist.description == "Great "
    assert artist.music_brainz_url == "https://musicbrainz.org/artist/mb"
    assert artist.last_fm_url == "https://last.fm/x"
    assert [a.id for a in artist.albums] == ["a2", "a1"]
    assert [s.name for s in artist.similar_artists] == ["Y"]


@pytest.mark.asyncio
async def test_artist_details_fails_when_info_fails(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getArtist.view"] = ok(artist={"id": "ar", "name": "X"})
    server.routes["getArtistInfo2.view"] = failed("Artist info unavailable", code=70)

    with pytest.raises(ProtocolError, match="Artist info unavailable"):
        await client.get_artist_details("ar")


@pytest.mark.asyncio
async def test_album_details(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getAlbum.view"] = ok(
        album={
            "id": "a",
            "name": "A",
            "artist": "X",
            "artistId": "x",
            "starred": "2020-01-01",
            "song": [{"id": "1", "title": "one"}, {"id": "2", "title": "two"}],
        },
    )

    album = await client.get_album_details("a")

    assert album.favourite is True
    assert [t.title for t in album.tracks] == ["one", "two"]


@pytest.mark.asyncio
async def test_album_details_without_album_payload(client: SubsonicClient) -> None:
    with pytest.raises(MissingPayloadError):
        await client.get_album_details("missing")


@pytest.mark.asyncio
async def test_random_playlist_is_synthesized(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getRandomSongs.view"] = ok(
        randomSongs={"song": [{"id": "1", "title": "a"}, {"id": "2", "title": "b"}]},
    )

    playlist = await client.get_playlist("random")

    assert server.calls("getPlaylist.view") == []
    assert len(server.calls("getRandomSongs.view")) == 1
    assert server.params("getRandomSongs.view")["size"] == "200"
    assert playlist.id == "random"
    assert playlist.name == "Random"
    assert [t.id for t in playlist.tracks] == ["1", "2"]


@pytest.mark.asyncio
async def test_get_playlist(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getPlaylist.view"] = ok(
        playlist={
            "id": "p1",
            "name": "",
            "songCount": 1,
            "coverArt": "pl-p1",
            "entry": [{"id": "1", "title": "a"}],
        },
    )

    playlist = await client.get_playlist("p1")

    assert playlist.name == "(Unnamed)"
    assert [t.id for t in playlist.tracks] == ["1"]
    assert playlist.image is not None


@pytest.mark.asyncio
async def test_create_playlist_returns_refreshed_list(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getPlaylists.view"] = ok(
        playlists={
            "playlist": [
                {"id": "p1", "name": "Old", "songCount": 0, "coverArt": "pl-p1"},
                {"id": "p2", "name": "New", "songCount": 3, "coverArt": "pl-p2"},
            ],
        },
    )

    playlists = await client.create_playlist("New")

    assert server.params("createPlaylist.view")["name"] == "New"
    assert [p.name for p in playlists] == ["Old", "New"]
    assert playlists[0].image is None
    assert playlists[1].image is not None


@pytest.mark.asyncio
async def test_playlist_edits(client: SubsonicClient, server: FakeServer) -> None:
    await client.edit_playlist("p1", "Name", "Comment")
    await client.add_to_playlist("p1", "t9")
    await client.remove_from_playlist("p1", 0)
    await client.delete_playlist("p1")

    edit, add, remove = server.calls("updatePlaylist.view")
    assert dict(edit.url.params)["comment"] == "Comment"
    assert dict(add.url.params)["songIdToAdd"] == "t9"
    assert dict(remove.url.params)["songIndexToRemove"] == "0"
    assert server.params("deletePlaylist.view")["id"] == "p1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (FavouriteType.TRACK, "id"),
        ("album", "albumId"),
        ("artist", "artistId"),
    ],
)
async def test_favourite_sends_exactly_one_id(
    client: SubsonicClient,
    server: FakeServer,
    kind: str,
    expected: str,
) -> None:
    await client.add_favourite("42", kind)
    await client.remove_favourite("42", kind)

    for endpoint in ("star.view", "unstar.view"):
        params = server.params(endpoint)
        sent = {key for key in ("id", "albumId", "artistId") if key in params}
        assert sent == {expected}
        assert params[expected] == "42"


@pytest.mark.asyncio
async def test_favourite_rejects_unknown_type(client: SubsonicClient, server: FakeServer) -> None:
    with pytest.raises(ValueError):
        await client.add_favourite("42", "podcast")
    assert server.requests == []


@pytest.mark.asyncio
async def test_get_favourites(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getStarred2.view"] = ok(
        starred2={
            "album": [{"id": "a", "name": "A", "starred": "x"}],
            "song": [{"id": "t", "title": "T", "starred": "x"}],
        },
    )

    favourites = await client.get_favourites()

    assert [a.id for a in favourites.albums] == ["a"]
    assert favourites.artists == ()
    assert favourites.tracks[0].favourite is True


@pytest.mark.asyncio
async def test_search(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["search3.view"] = ok(
        searchResult3={
            "artist": [{"id": "ar", "name": "X"}],
            "song": [{"id": "t", "title": "T"}],
        },
    )

    result = await client.search("x")

    assert server.params("search3.view")["query"] == "x"
    assert [a.id for a in result.artists] == ["ar"]
    assert result.albums == ()
    assert [t.id for t in result.tracks] == ["t"]


@pytest.mark.asyncio
async def test_radio_stations_indexed_from_one(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getInternetRadioStations.view"] = ok(
        internetRadioStations={
            "internetRadioStation": [
                {"id": "1", "name": "One", "streamUrl": "http://one"},
                {"id": "2", "name": "Two", "streamUrl": "http://two"},
            ],
        },
    )

    stations = await client.get_radio_stations()

    assert [(s.id, s.track) for s in stations] == [("radio-1", 1), ("radio-2", 2)]


@pytest.mark.asyncio
async def test_add_radio_station_looks_up_created_station(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getInternetRadioStations.view"] = ok(
        internetRadioStations={
            "internetRadioStation": [
                {"id": "1", "name": "FIP", "streamUrl": "http://fip"},
                {"id": "5", "name": "FIP", "streamUrl": "http://fip"},
            ],
        },
    )

    station = await client.add_radio_station("FIP", "http://fip")

    params = server.params("createInternetRadioStation.view")
    assert (params["name"], params["streamUrl"]) == ("FIP", "http://fip")
    assert station.id == "radio-5"


@pytest.mark.asyncio
async def test_update_and_delete_radio_station_strip_prefix(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    station = RadioStation(id="radio-7", title="New name", description=None, url="http://x", track=3)

    updated = await client.update_radio_station(station)
    await client.delete_radio_station("radio-7")

    params = server.params("updateInternetRadioStation.view")
    assert (params["id"], params["name"], params["streamUrl"]) == ("7", "New name", "http://x")
    assert server.params("deleteInternetRadioStation.view")["id"] == "7"
    assert updated == station


@pytest.mark.asyncio
async def test_podcasts(client: SubsonicClient, server: FakeServer) -> None:
    channel = {
        "id": "ch",
        "title": "Show",
        "episode": [{"id": "e1", "title": "one"}, {"id": "e2", "title": "two"}],
    }
    server.routes["getPodcasts.view"] = ok(podcasts={"channel": [channel, {"id": "other"}]})

    podcasts = await client.get_podcasts()
    podcast = await client.get_podcast("ch")

    assert [p.id for p in podcasts] == ["ch", "other"]
    assert podcast.id == "ch"
    assert [e.track for e in podcast.tracks] == [2, 1]
    assert dict(server.requests[-1].url.params)["id"] == "ch"


@pytest.mark.asyncio
async def test_get_podcast_not_found(client: SubsonicClient, server: FakeServer) -> None:
    server.routes["getPodcasts.view"] = ok(podcasts={"channel": []})

    with pytest.raises(MissingPayloadError):
        await client.get_podcast("nope")


@pytest.mark.asyncio
async def test_fire_and_forget_operations(client: SubsonicClient, server: FakeServer) -> None:
    assert await client.scan() is None
    assert await client.refresh_podcasts() is None

    assert len(server.calls("startScan.view")) == 1
    assert len(server.calls("refreshPodcasts.view")) == 1


def test_download_url_uses_current_credentials(client: SubsonicClient) -> None:
    assert client.get_download_url("42") == (
        "https://s.example/rest/download.view?id=42&v=1.9.0&u=u&s=s1&p=h1&c=web"
    )


@pytest.mark.asyncio
async def test_malformed_error_still_raises_protocol_error(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getGenres.view"] = {"subsonic-response": {"status": "failed", "error": "boom"}}

    with pytest.raises(ProtocolError, match="^failed$"):
        await client.get_genres()


@pytest.mark.asyncio
async def test_artist_details_info_wins_on_shared_keys(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getArtist.view"] = ok(
        artist={"id": "ar", "name": "Old name", "albumCount": 1, "lastFmUrl": "https://old"},
    )
    server.routes["getArtistInfo2.view"] = ok(
        artistInfo2={"name": "New name", "albumCount": 7, "lastFmUrl": "https://new"},
    )

    artist = await client.get_artist_details("ar")

    assert artist.id == "ar"
    assert artist.name == "New name"
    assert artist.album_count == 7
    assert artist.last_fm_url == "https://new"


@pytest.mark.asyncio
async def test_artist_details_fails_when_artist_fails(
    client: SubsonicClient,
    server: FakeServer,
) -> None:
    server.routes["getArtist.view"] = failed("Artist not found", code=70)
    server.routes["getArtistInfo2.view"] = ok(artistInfo2={"biography": "Bio"})

    with pytest.raises(ProtocolError, match="Artist not found"):
        await client.get_artist_details("ar")
