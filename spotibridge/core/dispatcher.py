from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from loguru import logger

from spotibridge.domain.models import (
    ClassifiedQuery,
    EntityType,
    LoadResult,
    ResultVocabulary,
)
from spotibridge.engine import EngineNode

from .builder import TrackBuilder
from .classifier import QueryClassifier, unwrap_query
from .errors import InvalidInput

if TYPE_CHECKING:
    from spotibridge.core.credentials import CredentialManager
    from spotibridge.providers.spotify.client import SpotifyCatalogClient

_COLLECTION_TYPES = (EntityType.ALBUM, EntityType.PLAYLIST)


def _unpack_call(args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> tuple[Any, Any]:
    """
    Extract (query, requester) from any supported resolve() call shape.

    Supported:
        resolve({"query": ..., "requester": ...})
        resolve(wrapper)               # object with `query` and `requester` attributes
        resolve(query, requester)
        resolve(query=..., requester=...)
    """
    query = args[0] if args else kwargs.get("query")
    requester = args[1] if len(args) > 1 else kwargs.get("requester")
    if requester is None:
        if isinstance(query, Mapping):
            requester = query.get("requester")
        elif not isinstance(query, str):
            requester = getattr(query, "requester", None)
    return query, requester


class SpotifyResolver:
    """
    Resolve entry point that answers catalog queries and delegates the rest.

    A query the classifier does not recognize is forwarded, arguments
    untouched, to `wrapped` and its result returned as-is. A recognized query
    is fetched, built and returned as a LoadResult; any failure on that path
    becomes a failed LoadResult instead of an exception.
    """

    def __init__(
        self,
        engine: Any,
        wrapped: Callable[..., Any],
        *,
        classifier: QueryClassifier,
        catalog: "SpotifyCatalogClient",
        credentials: "CredentialManager",
        builder: TrackBuilder,
    ) -> None:
        """
        Parameters:
            engine: Host exposing `least_used_node()`; only the node's `rest_version` is read.
            wrapped: The original resolver all unrecognized queries are delegated to.
            classifier (QueryClassifier): Recognizes catalog URLs/URIs.
            catalog (SpotifyCatalogClient): Fetches entities for a classified query.
            credentials (CredentialManager): Ensures a bearer token exists before fetching.
            builder (TrackBuilder): Converts fetched entities into engine tracks.
        """
        if _owning_resolver(wrapped) is not None:
            raise InvalidInput("Refusing to wrap another SpotifyResolver")
        self.engine = engine
        self.wrapped = wrapped
        self._classifier = classifier
        self._catalog = catalog
        self._credentials = credentials
        self._builder = builder

    async def resolve(self, *args: Any, **kwargs: Any) -> Any:
        query, requester = _unpack_call(args, kwargs)
        classified = self._classifier.classify(unwrap_query(query))
        if not classified.matched:
            logger.trace("Delegating non-catalog query to wrapped resolver")
            return await self.delegate(*args, **kwargs)
        return await self.resolve_classified(classified, requester)

    __call__ = resolve

    async def delegate(self, *args: Any, **kwargs: Any) -> Any:
        result = self.wrapped(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _least_used_node(self) -> Optional[EngineNode]:
        try:
            return self.engine.least_used_node()
        except Exception as exc:
            logger.warning("No playback node available for Spotify resolution: {}", exc)
            return None

    async def resolve_classified(
        self, classified: ClassifiedQuery, requester: Any = None
    ) -> LoadResult:
        """Fetch, build and wrap a classified query into a LoadResult (never raises)."""
        node = self._least_used_node()
        vocabulary = ResultVocabulary.for_rest_version(
            getattr(node, "rest_version", None)
        )
        entity_type = classified.entity_type
        entity_id = classified.entity_id or ""
        logger.debug("Resolving Spotify {} {}", entity_type, entity_id)

        try:
            if entity_type is None:
                raise InvalidInput("Classified query carries no entity type")
            await self._credentials.get_valid_credential()
            result = await self._catalog.fetch(entity_type, entity_id)
            tracks = self._builder.build_all(result.tracks, requester, node)
        except Exception as exc:
            if isinstance(exc, InvalidInput):
                logger.exception("Invalid input while resolving Spotify {} {}", entity_type, entity_id)
            else:
                logger.warning("Spotify {} {} failed: {}", entity_type, entity_id, exc)
            return LoadResult.failure(
                getattr(exc, "load_type", None) or vocabulary.load_failed,
                str(exc) or vocabulary.load_failed,
            )

        if entity_type is EntityType.TRACK:
            load_type = vocabulary.track_loaded
        else:
            load_type = vocabulary.playlist_loaded
        name = result.name if entity_type in _COLLECTION_TYPES else None
        logger.info("Resolved Spotify {} {} ({} tracks)", entity_type, entity_id, len(tracks))
        return LoadResult(load_type=load_type, tracks=tracks, playlist_name=name)


def _owning_resolver(resolve: Any) -> Optional[SpotifyResolver]:
    # Either the resolver object itself or its bound `resolve`.
    if isinstance(resolve, SpotifyResolver):
        return resolve
    owner = getattr(resolve, "__self__", None)
    return owner if isinstance(owner, SpotifyResolver) else None


def installed_resolver(engine: Any) -> Optional[SpotifyResolver]:
    """Return the SpotifyResolver currently installed on `engine`, if any."""
    return _owning_resolver(getattr(engine, "resolve", None))


def install(
    engine: Any, factory: Callable[[Any, Callable[..., Any]], SpotifyResolver]
) -> SpotifyResolver:
    """
    Replace `engine.resolve` with a SpotifyResolver wrapping the original.

    `factory(engine, original_resolve)` builds the resolver. Installing onto an
    engine that already carries a SpotifyResolver is a no-op returning the
    existing resolver, so repeated installation never chains two resolvers.
    """
    existing = installed_resolver(engine)
    if existing is not None:
        logger.warning("Spotify resolver already installed on {}; skipping", type(engine).__name__)
        return existing
    resolver = factory(engine, engine.resolve)
    engine.resolve = resolver.resolve
    logger.info("Spotify resolver installed on {}", type(engine).__name__)
    return resolver


def uninstall(engine: Any) -> bool:
    """Restore the original resolver on `engine`. Returns False when nothing was installed."""
    resolver = installed_resolver(engine)
    if resolver is None:
        return False
    engine.resolve = resolver.wrapped
    logger.info("Spotify resolver removed from {}", type(engine).__name__)
    return True
