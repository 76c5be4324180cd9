"""Domain types shared by the credential, classification and resolution layers.

Everything here is a plain value object. Frozen dataclasses are swapped as a
whole rather than mutated, so a reader never observes a half-updated value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional

UNKNOWN_AUTHOR = "Unknown"


class EntityType(StrEnum):
    """Catalog entity kinds the dispatcher knows how to resolve."""

    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"


@dataclass(frozen=True)
class Credential:
    """Bearer token together with the instant (Unix seconds) it stops being valid."""

    token: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@dataclass(frozen=True)
class ClassifiedQuery:
    """
    Outcome of matching a raw query against the catalog URL/URI grammar.

    Attributes:
        entity_type: Recognized entity type, or None when the query is not a
            catalog query or names an unsupported segment (e.g. "artist").
        entity_id: Alphanumeric catalog id when the grammar matched.
        segment: The raw path/URI segment captured before the id.
    """

    entity_type: Optional[EntityType] = None
    entity_id: Optional[str] = None
    segment: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.entity_type is not None and bool(self.entity_id)


@dataclass(frozen=True)
class NormalizedEntity:
    """Catalog-agnostic track record all upstream payload shapes reduce to."""

    id: str
    title: str
    author_name: str
    duration_ms: int
    artwork_url: Optional[str] = None


@dataclass
class CatalogResult:
    """Tracks returned by one catalog fetch; `name` is set for collections only."""

    tracks: list[NormalizedEntity] = field(default_factory=list)
    name: Optional[str] = None


@dataclass(frozen=True)
class ResultVocabulary:
    """Load-type codes understood by a node of a given REST API revision."""

    track_loaded: str
    playlist_loaded: str
    load_failed: str

    @classmethod
    def for_rest_version(cls, rest_version: Optional[str]) -> "ResultVocabulary":
        if (rest_version or "").strip().lower() == "v4":
            return V4_VOCABULARY
        return LEGACY_VOCABULARY


V4_VOCABULARY = ResultVocabulary(
    track_loaded="track", playlist_loaded="playlist", load_failed="error"
)
LEGACY_VOCABULARY = ResultVocabulary(
    track_loaded="TRACK_LOADED",
    playlist_loaded="PLAYLIST_LOADED",
    load_failed="LOAD_FAILED",
)


@dataclass(frozen=True)
class LoadException:
    message: str
    severity: str = "COMMON"


@dataclass(frozen=True)
class LoadResult:
    """
    Success/failure envelope handed back to the playback engine.

    Built once per classified resolve call and never mutated afterwards.
    """

    load_type: str
    tracks: Optional[list[Any]] = None
    playlist_name: Optional[str] = None
    exception: Optional[LoadException] = None

    @classmethod
    def failure(cls, load_type: str, message: str) -> "LoadResult":
        return cls(load_type=load_type, exception=LoadException(message=message))

    @property
    def failed(self) -> bool:
        return self.exception is not None

    def to_dict(self) -> dict[str, Any]:
        """Render the engine wire shape (camelCase keys, nulls for absent parts)."""
        return {
            "loadType": self.load_type,
            "tracks": list(self.tracks) if self.tracks is not None else None,
            "playlistInfo": (
                {"name": self.playlist_name} if self.playlist_name else None
            ),
            "exception": (
                {
                    "message": self.exception.message,
                    "severity": self.exception.severity,
                }
                if self.exception
                else None
            ),
        }
