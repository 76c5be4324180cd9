from __future__ import annotations

import re
from typing import Any, Mapping

from spotibridge.config import SPOTIFY_OPEN_DOMAIN, SPOTIFY_URI_SCHEME
from spotibridge.domain.models import ClassifiedQuery, EntityType

_MISS = ClassifiedQuery()


def _build_pattern(domain: str, scheme: str) -> re.Pattern[str]:
    """
    Compile the catalog grammar for a share-link domain and URI scheme.

    Accepted forms:
        https://<domain>/<segment>/<id>         (optionally /intl-xx/ after the domain)
        <scheme>:<segment>:<id>
    """
    return re.compile(
        r"(?:https://"
        + re.escape(domain)
        + r"/(?:intl-[a-z]{2}(?:-[a-z]+)?/)?(?P<url_segment>[a-z-]+)/"
        + r"|"
        + re.escape(scheme)
        + r":(?P<uri_segment>[a-z-]+):)"
        + r"(?P<id>[A-Za-z0-9]+)",
        re.IGNORECASE,
    )


def unwrap_query(query: Any) -> Any:
    """
    Return the raw query string from a structured wrapper.

    A mapping with a "query" key or an object exposing a `query` attribute is
    unwrapped one level; anything else is returned unchanged.
    """
    if isinstance(query, Mapping):
        inner = query.get("query")
        return inner if inner is not None else query
    inner = getattr(query, "query", None)
    if inner is not None and not callable(inner):
        return inner
    return query


class QueryClassifier:
    """Recognize catalog URLs/URIs and extract their entity type and id."""

    def __init__(
        self,
        *,
        domain: str = SPOTIFY_OPEN_DOMAIN,
        scheme: str = SPOTIFY_URI_SCHEME,
    ) -> None:
        self.domain = domain.lower()
        self.scheme = scheme.lower()
        self._pattern = _build_pattern(self.domain, self.scheme)

    def classify(self, query: Any) -> ClassifiedQuery:
        """
        Classify a raw query string.

        Returns an empty ClassifiedQuery for non-strings and non-matching
        strings. When the grammar matches but the segment is not one of
        track/album/playlist, `entity_type` stays None while `segment` and
        `entity_id` are still reported.

        The link must start the query (after surrounding whitespace is
        stripped); a link embedded later in free text is not recognized.
        """
        if not isinstance(query, str):
            return _MISS
        match = self._pattern.match(query.strip())
        if match is None:
            return _MISS
        segment = (match.group("url_segment") or match.group("uri_segment")).lower()
        try:
            entity_type = EntityType(segment)
        except ValueError:
            entity_type = None
        return ClassifiedQuery(
            entity_type=entity_type, entity_id=match.group("id"), segment=segment
        )

    def check(self, query: Any) -> bool:
        """Whether the (possibly wrapped) query resolves through the catalog."""
        return self.classify(unwrap_query(query)).matched

    def canonical_url(self, entity_type: EntityType, entity_id: str) -> str:
        return f"https://{self.domain}/{entity_type.value}/{entity_id}"
