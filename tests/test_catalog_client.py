import asyncio

import httpx
import pytest

from conftest import API, make_credentials, track_json
from spotibridge.core.errors import UpstreamFailure
from spotibridge.domain.models import EntityType, NormalizedEntity
from spotibridge.providers.spotify.client import SpotifyCatalogClient


def _client(fake, **kwargs):
    credentials = make_credentials(fake)
    return SpotifyCatalogClient(
        credentials, base_url=API, client_factory=fake.client_factory, **kwargs
    )


def test_get_track_single_item(fake_spotify):
    fake_spotify.resources["/v1/tracks/abc123"] = track_json(
        "abc123", "Song", "Artist", 210000, images=["https://img/large", "https://img/small"]
    )

    result = asyncio.run(_client(fake_spotify).get_track("abc123"))
    assert result.name is None
    assert result.tracks == [
        NormalizedEntity(
            id="abc123",
            title="Song",
            author_name="Artist",
            duration_ms=210000,
            artwork_url="https://img/large",
        )
    ]
    request = fake_spotify.api_requests()[0]
    assert request.headers["Authorization"] == "Bearer tok-1"


def test_missing_artist_defaults_to_unknown(fake_spotify):
    fake_spotify.resources["/v1/tracks/t1"] = track_json("t1", "Nameless", artist=None)

    result = asyncio.run(_client(fake_spotify).get_track("t1"))
    assert result.tracks[0].author_name == "Unknown"


def test_get_album_flat_collection(fake_spotify):
    fake_spotify.resources["/v1/albums/al1"] = {
        "name": "Record",
        "images": [{"url": "https://img/cover"}],
        "tracks": {
            "items": [track_json("a", "One"), track_json("b", "Two", "Other", 2000)],
            "next": None,
        },
    }

    result = asyncio.run(_client(fake_spotify).get_album("al1"))
    assert result.name == "Record"
    assert [t.id for t in result.tracks] == ["a", "b"]
    assert result.tracks[1].author_name == "Other"
    assert {t.artwork_url for t in result.tracks} == {"https://img/cover"}


def test_get_playlist_unwraps_items_and_skips_empty_slots(fake_spotify):
    fake_spotify.resources["/v1/playlists/xyz"] = {
        "name": "Mix",
        "items": [
            {"track": track_json("t1", "A", "B", 1000)},
            {"track": None},
            {"track": {"id": None, "name": "local.mp3", "artists": [], "duration_ms": 5}},
        ],
    }

    result = asyncio.run(_client(fake_spotify).get_playlist("xyz"))
    assert result.name == "Mix"
    assert result.tracks == [
        NormalizedEntity(id="t1", title="A", author_name="B", duration_ms=1000)
    ]


def test_playlist_follows_next_pages_up_to_limit(fake_spotify):
    fake_spotify.resources["/v1/playlists/big"] = {
        "name": "Big",
        "tracks": {
            "items": [{"track": track_json("p1", "One")}],
            "next": f"{API}/playlists/big/tracks?offset=1",
        },
    }
    fake_spotify.resources["/v1/playlists/big/tracks"] = {
        "items": [{"track": track_json("p2", "Two")}],
        "next": f"{API}/playlists/big/tracks?offset=2",
    }

    result = asyncio.run(_client(fake_spotify, max_pages=2).get_playlist("big"))
    assert [t.id for t in result.tracks] == ["p1", "p2"]
    assert len(fake_spotify.api_requests()) == 2


def test_fetch_dispatches_by_entity_type(fake_spotify):
    fake_spotify.resources["/v1/albums/al1"] = {
        "name": "Record",
        "tracks": {"items": [track_json("a", "One")]},
    }

    result = asyncio.run(_client(fake_spotify).fetch(EntityType.ALBUM, "al1"))
    assert result.name == "Record"


def test_missing_tracks_field_is_upstream_failure(fake_spotify):
    fake_spotify.resources["/v1/albums/broken"] = {"name": "No tracks"}

    with pytest.raises(UpstreamFailure, match="has no tracks"):
        asyncio.run(_client(fake_spotify).get_album("broken"))


def test_malformed_item_is_upstream_failure(fake_spotify):
    fake_spotify.resources["/v1/tracks/bad"] = {"id": "bad", "artists": []}

    with pytest.raises(UpstreamFailure, match="Unexpected Spotify track response"):
        asyncio.run(_client(fake_spotify).get_track("bad"))


def test_not_found_is_upstream_failure(fake_spotify):
    with pytest.raises(UpstreamFailure, match="was not found") as excinfo:
        asyncio.run(_client(fake_spotify).get_track("missing"))
    assert excinfo.value.status_code == 404


def test_server_error_is_upstream_failure(fake_spotify):
    fake_spotify.resources["/v1/tracks/t1"] = (503, {"error": "unavailable"})

    with pytest.raises(UpstreamFailure, match="HTTP 503"):
        asyncio.run(_client(fake_spotify).get_track("t1"))


def test_non_json_body_is_upstream_failure(fake_spotify):
    fake_spotify.resources["/v1/tracks/t1"] = (200, "<html>oops</html>")

    with pytest.raises(UpstreamFailure, match="non-JSON"):
        asyncio.run(_client(fake_spotify).get_track("t1"))


def test_timeout_is_upstream_failure(fake_spotify):
    original = fake_spotify.handler

    def handler(request):
        if request.url.path.startswith("/v1/"):
            raise httpx.ReadTimeout("slow", request=request)
        return original(request)

    fake_spotify.handler = handler

    with pytest.raises(UpstreamFailure, match="timed out"):
        asyncio.run(_client(fake_spotify).get_track("t1"))


def test_two_fetches_reuse_cached_credential(fake_spotify):
    fake_spotify.resources["/v1/tracks/a"] = track_json("a", "One")
    fake_spotify.resources["/v1/tracks/b"] = track_json("b", "Two")

    async def run():
        client = _client(fake_spotify)
        await client.get_track("a")
        await client.get_track("b")

    asyncio.run(run())
    assert fake_spotify.token_calls == 1
    assert [r.headers["Authorization"] for r in fake_spotify.api_requests()] == [
        "Bearer tok-1",
        "Bearer tok-1",
    ]
