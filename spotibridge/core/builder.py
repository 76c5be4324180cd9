from __future__ import annotations

from typing import Any, Iterable, Optional

from spotibridge.config import SPOTIFY_OPEN_DOMAIN, SPOTIFY_SOURCE_NAME
from spotibridge.domain.models import UNKNOWN_AUTHOR, NormalizedEntity
from spotibridge.engine import EngineNode, TrackFactory, UnresolvedTrack

from .errors import InvalidInput


class TrackBuilder:
    """Turn normalized catalog entities into the engine's unresolved tracks."""

    def __init__(
        self,
        *,
        source_name: str = SPOTIFY_SOURCE_NAME,
        open_domain: str = SPOTIFY_OPEN_DOMAIN,
        track_factory: TrackFactory = UnresolvedTrack.from_metadata,
    ) -> None:
        self._source_name = source_name
        self._open_domain = open_domain
        self._track_factory = track_factory

    def metadata_for(self, entity: NormalizedEntity) -> dict[str, Any]:
        return {
            "track": "",
            "info": {
                "identifier": entity.id,
                "isSeekable": True,
                "author": entity.author_name or UNKNOWN_AUTHOR,
                "length": entity.duration_ms,
                "isStream": False,
                "sourceName": self._source_name,
                "title": entity.title,
                "uri": f"https://{self._open_domain}/track/{entity.id}",
                "artworkUrl": entity.artwork_url,
                "position": 0,
            },
        }

    def build(
        self,
        entity: Optional[NormalizedEntity],
        requester: Any = None,
        node: Optional[EngineNode] = None,
    ) -> Any:
        """
        Build one unresolved track.

        Raises:
            InvalidInput: `entity` is None.
        """
        if entity is None:
            raise InvalidInput("The Spotify track object was not provided")
        return self._track_factory(self.metadata_for(entity), requester, node)

    def build_all(
        self,
        entities: Iterable[Optional[NormalizedEntity]],
        requester: Any = None,
        node: Optional[EngineNode] = None,
    ) -> list[Any]:
        """Build every entity, preserving input order; fails as a whole on the first bad entity."""
        return [self.build(entity, requester, node) for entity in entities]
