from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from spotibridge.config import SPOTIFY_API_BASE_URL, SPOTIFY_MAX_COLLECTION_PAGES
from spotibridge.core.errors import UpstreamFailure
from spotibridge.domain.models import CatalogResult, EntityType, NormalizedEntity
from spotibridge.utils.http_client import AsyncClientFactory, build_async_client

from .payloads import (
    AlbumPayload,
    PlaylistPayload,
    TrackPagePayload,
    TrackPayload,
    WrappedTrackPagePayload,
    WrappedTrackPayload,
    first_image_url,
)

if TYPE_CHECKING:
    from spotibridge.core.credentials import CredentialManager


class SpotifyCatalogClient:
    """
    Fetch tracks, albums and playlists from the Spotify Web API.

    Each fetch maps one upstream payload shape into a CatalogResult:
        - track:    a bare track object -> exactly one entity, no name
        - album:    tracks listed directly in a page -> entities + album name
        - playlist: each page slot wraps its track under `track` -> unwrapped
                    entities + playlist name
    """

    def __init__(
        self,
        credentials: "CredentialManager",
        *,
        base_url: str = SPOTIFY_API_BASE_URL,
        max_pages: int = SPOTIFY_MAX_COLLECTION_PAGES,
        client_factory: AsyncClientFactory = build_async_client,
    ) -> None:
        """
        Parameters:
            credentials (CredentialManager): Source of the bearer token attached to every request.
            base_url (str): API root, e.g. "https://api.spotify.com/v1".
            max_pages (int): Maximum number of pages read for one album or playlist.
            client_factory: Builds the httpx.AsyncClient used for one fetch operation.
        """
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._max_pages = max(1, max_pages)
        self._client_factory = client_factory

    async def fetch(self, entity_type: EntityType, entity_id: str) -> CatalogResult:
        """Dispatch to the fetch operation registered for `entity_type`."""
        fetcher = _FETCHERS.get(entity_type)
        if fetcher is None:
            raise UpstreamFailure(
                'Incorrect type for Spotify URL, must be one of "track", "album" or "playlist".'
            )
        return await fetcher(self, entity_id)

    async def get_track(self, track_id: str) -> CatalogResult:
        async with self._client_factory() as client:
            data = await self._get_json(client, f"{self._base_url}/tracks/{track_id}", "track", track_id)
        track = _validate(TrackPayload, data, "track", track_id)
        if not track.id:
            raise UpstreamFailure(f"Spotify track '{track_id}' has no catalog id")
        return CatalogResult(tracks=[track.to_entity()])

    async def get_album(self, album_id: str) -> CatalogResult:
        async with self._client_factory() as client:
            data = await self._get_json(client, f"{self._base_url}/albums/{album_id}", "album", album_id)
            album = _validate(AlbumPayload, data, "album", album_id)
            artwork = first_image_url(album.images)
            if album.tracks is not None:
                items = list(album.tracks.items)
                next_url = album.tracks.next
            elif album.items is not None:
                items, next_url = list(album.items), None
            else:
                raise UpstreamFailure(
                    f"Spotify album '{album_id}' response has no tracks"
                )

            pages = 1
            while next_url and pages < self._max_pages:
                page_data = await self._get_json(client, next_url, "album", album_id)
                page = _validate(TrackPagePayload, page_data, "album", album_id)
                items.extend(page.items)
                next_url = page.next
                pages += 1

        entities = [item.to_entity(artwork) for item in items if item.id]
        logger.debug("Spotify album {} -> {} tracks ({} pages)", album_id, len(entities), pages)
        return CatalogResult(tracks=entities, name=album.name)

    async def get_playlist(self, playlist_id: str) -> CatalogResult:
        async with self._client_factory() as client:
            data = await self._get_json(
                client, f"{self._base_url}/playlists/{playlist_id}", "playlist", playlist_id
            )
            playlist = _validate(PlaylistPayload, data, "playlist", playlist_id)
            if playlist.tracks is not None:
                slots = list(playlist.tracks.items)
                next_url = playlist.tracks.next
            elif playlist.items is not None:
                slots, next_url = list(playlist.items), None
            else:
                raise UpstreamFailure(
                    f"Spotify playlist '{playlist_id}' response has no tracks"
                )

            pages = 1
            while next_url and pages < self._max_pages:
                page_data = await self._get_json(client, next_url, "playlist", playlist_id)
                page = _validate(WrappedTrackPagePayload, page_data, "playlist", playlist_id)
                slots.extend(page.items)
                next_url = page.next
                pages += 1

        entities = _unwrap_slots(slots)
        skipped = len(slots) - len(entities)
        if skipped:
            logger.debug("Skipped {} empty/local slots in playlist {}", skipped, playlist_id)
        logger.debug(
            "Spotify playlist {} -> {} tracks ({} pages)", playlist_id, len(entities), pages
        )
        return CatalogResult(tracks=entities, name=playlist.name)

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, kind: str, entity_id: str
    ) -> Any:
        credential = await self._credentials.get_valid_credential()
        logger.trace("GET {}", url)
        try:
            response = await client.get(url, headers=credential.authorization_header())
        except httpx.TimeoutException as exc:
            raise UpstreamFailure(
                f"Spotify request for {kind} '{entity_id}' timed out"
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamFailure(
                f"Spotify request for {kind} '{entity_id}' failed: {exc}"
            ) from exc

        if response.status_code == 404:
            raise UpstreamFailure(
                f"Spotify {kind} '{entity_id}' was not found", status_code=404
            )
        if response.status_code >= 400:
            logger.warning(
                "Spotify API error for {} {} (status={})", kind, entity_id, response.status_code
            )
            raise UpstreamFailure(
                f"Spotify API request for {kind} '{entity_id}' failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFailure(
                f"Spotify returned a non-JSON body for {kind} '{entity_id}'"
            ) from exc


def _validate(model: Any, data: Any, kind: str, entity_id: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.debug("Unexpected Spotify {} payload for {}: {}", kind, entity_id, exc)
        raise UpstreamFailure(
            f"Unexpected Spotify {kind} response for '{entity_id}' "
            f"({exc.error_count()} validation errors)"
        ) from exc


def _unwrap_slots(slots: List[WrappedTrackPayload]) -> List[NormalizedEntity]:
    return [
        slot.track.to_entity()
        for slot in slots
        if slot.track is not None and slot.track.id
    ]


_FETCHERS: Dict[
    EntityType, Callable[[SpotifyCatalogClient, str], Awaitable[CatalogResult]]
] = {
    EntityType.TRACK: SpotifyCatalogClient.get_track,
    EntityType.ALBUM: SpotifyCatalogClient.get_album,
    EntityType.PLAYLIST: SpotifyCatalogClient.get_playlist,
}
