import pytest

from spotibridge.core.builder import TrackBuilder
from spotibridge.core.errors import InvalidInput
from spotibridge.domain.models import NormalizedEntity
from spotibridge.engine import Node, UnresolvedTrack


def test_build_round_trips_entity_fields():
    entity = NormalizedEntity(id="abc123", title="Song", author_name="Artist", duration_ms=210000)
    node = Node(rest_version="v4")

    track = TrackBuilder().build(entity, requester="user-1", node=node)

    assert isinstance(track, UnresolvedTrack)
    assert (track.identifier, track.title, track.author, track.length) == (
        entity.id,
        entity.title,
        entity.author_name,
        entity.duration_ms,
    )
    assert track.requester == "user-1"
    assert track.node is node


def test_build_sets_provenance_fields():
    builder = TrackBuilder(source_name="spotify", open_domain="open.spotify.com")
    entity = NormalizedEntity(
        id="t1", title="A", author_name="", duration_ms=1, artwork_url="https://img/a"
    )

    track = builder.build(entity)

    assert track.track == ""
    assert track.info == {
        "identifier": "t1",
        "isSeekable": True,
        "author": "Unknown",
        "length": 1,
        "isStream": False,
        "sourceName": "spotify",
        "title": "A",
        "uri": "https://open.spotify.com/track/t1",
        "artworkUrl": "https://img/a",
        "position": 0,
    }


def test_build_none_entity_is_invalid_input():
    with pytest.raises(InvalidInput):
        TrackBuilder().build(None)


def test_build_all_preserves_order_and_uses_factory():
    calls = []

    def factory(metadata, requester, node):
        calls.append(metadata["info"]["identifier"])
        return ("engine-track", metadata["info"]["identifier"], requester)

    entities = [
        NormalizedEntity(id=str(i), title=f"T{i}", author_name="A", duration_ms=i)
        for i in range(5)
    ]
    tracks = TrackBuilder(track_factory=factory).build_all(entities, requester="me")

    assert [t[1] for t in tracks] == ["0", "1", "2", "3", "4"]
    assert calls == ["0", "1", "2", "3", "4"]
    assert all(t[2] == "me" for t in tracks)
