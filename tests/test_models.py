import pytest

from spotibridge.domain.models import (
    LEGACY_VOCABULARY,
    V4_VOCABULARY,
    ClassifiedQuery,
    Credential,
    EntityType,
    LoadResult,
    ResultVocabulary,
)


@pytest.mark.parametrize(
    "rest_version, expected",
    [
        ("v4", V4_VOCABULARY),
        (" V4 ", V4_VOCABULARY),
        ("v3", LEGACY_VOCABULARY),
        ("", LEGACY_VOCABULARY),
        (None, LEGACY_VOCABULARY),
    ],
)
def test_vocabulary_for_rest_version(rest_version, expected):
    assert ResultVocabulary.for_rest_version(rest_version) is expected


def test_vocabulary_codes():
    assert (V4_VOCABULARY.track_loaded, V4_VOCABULARY.playlist_loaded, V4_VOCABULARY.load_failed) == (
        "track",
        "playlist",
        "error",
    )
    assert LEGACY_VOCABULARY.load_failed == "LOAD_FAILED"


def test_failure_result_shape():
    result = LoadResult.failure("error", "The client ID or client secret is incorrect.")
    assert result.failed
    assert result.to_dict() == {
        "loadType": "error",
        "tracks": None,
        "playlistInfo": None,
        "exception": {
            "message": "The client ID or client secret is incorrect.",
            "severity": "COMMON",
        },
    }


def test_success_result_shape():
    result = LoadResult(load_type="playlist", tracks=["a", "b"], playlist_name="Mix")
    assert not result.failed
    data = result.to_dict()
    assert data["tracks"] == ["a", "b"]
    assert data["playlistInfo"] == {"name": "Mix"}
    assert data["exception"] is None


def test_credential_expiry_and_header():
    credential = Credential(token="abc", expires_at=100.0)
    assert not credential.is_expired(99.9)
    assert credential.is_expired(100.0)
    assert credential.authorization_header() == {"Authorization": "Bearer abc"}


def test_classified_query_matched():
    assert ClassifiedQuery(EntityType.TRACK, "id1", "track").matched
    assert not ClassifiedQuery(None, "id1", "artist").matched
    assert not ClassifiedQuery().matched
