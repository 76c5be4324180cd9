"""Pydantic schemas for the Spotify Web API payloads this package reads.

Only the fields that feed a NormalizedEntity are declared; everything else is
ignored. A payload that lacks a required field fails validation, which the
catalog client turns into an UpstreamFailure.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from spotibridge.domain.models import UNKNOWN_AUTHOR, NormalizedEntity


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TokenPayload(_Payload):
    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(..., gt=0, description="Lifetime of the token in seconds.")
    token_type: str = "Bearer"


class ArtistPayload(_Payload):
    name: Optional[str] = None


class ImagePayload(_Payload):
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class AlbumRefPayload(_Payload):
    images: list[ImagePayload] = Field(default_factory=list)


def first_image_url(images: list[ImagePayload]) -> Optional[str]:
    # Spotify orders images widest first.
    return images[0].url if images else None


class TrackPayload(_Payload):
    """A track object. `id` is null for local files inside playlists."""

    id: Optional[str] = None
    name: str
    artists: list[ArtistPayload] = Field(default_factory=list)
    duration_ms: int = Field(..., ge=0)
    album: Optional[AlbumRefPayload] = None

    def to_entity(self, artwork_url: Optional[str] = None) -> NormalizedEntity:
        author = self.artists[0].name if self.artists else None
        if artwork_url is None and self.album is not None:
            artwork_url = first_image_url(self.album.images)
        return NormalizedEntity(
            id=self.id or "",
            title=self.name,
            author_name=author or UNKNOWN_AUTHOR,
            duration_ms=self.duration_ms,
            artwork_url=artwork_url,
        )


class WrappedTrackPayload(_Payload):
    """Playlist slot: the track sits one level down under `track`."""

    track: Optional[TrackPayload] = None


class TrackPagePayload(_Payload):
    items: list[TrackPayload]
    next: Optional[str] = None


class WrappedTrackPagePayload(_Payload):
    items: list[WrappedTrackPayload]
    next: Optional[str] = None


class AlbumPayload(_Payload):
    """Album object; its tracks are a page under `tracks` (or a bare `items` list)."""

    name: str
    images: list[ImagePayload] = Field(default_factory=list)
    tracks: Optional[TrackPagePayload] = None
    items: Optional[list[TrackPayload]] = None


class PlaylistPayload(_Payload):
    """Playlist object; its wrapped slots are a page under `tracks` (or a bare `items` list)."""

    name: str
    images: list[ImagePayload] = Field(default_factory=list)
    tracks: Optional[WrappedTrackPagePayload] = None
    items: Optional[list[WrappedTrackPayload]] = None
