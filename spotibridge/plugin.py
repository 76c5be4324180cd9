from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from loguru import logger

from spotibridge import config
from spotibridge.core.builder import TrackBuilder
from spotibridge.core.classifier import QueryClassifier
from spotibridge.core.credentials import Clock, CredentialManager, Sleep
from spotibridge.core.dispatcher import SpotifyResolver, install, uninstall
from spotibridge.core.errors import InvalidInput
from spotibridge.engine import TrackFactory, UnresolvedTrack
from spotibridge.providers.spotify.client import SpotifyCatalogClient
from spotibridge.utils.http_client import AsyncClientFactory, build_async_client


@dataclass
class SpotifyOptions:
    """Client identity plus endpoint/limit overrides for one plugin instance."""

    client_id: str
    client_secret: str
    api_base_url: str = config.SPOTIFY_API_BASE_URL
    token_url: str = config.SPOTIFY_TOKEN_URL
    open_domain: str = config.SPOTIFY_OPEN_DOMAIN
    uri_scheme: str = config.SPOTIFY_URI_SCHEME
    source_name: str = config.SPOTIFY_SOURCE_NAME
    max_collection_pages: int = config.SPOTIFY_MAX_COLLECTION_PAGES
    renew_retry_seconds: float = config.SPOTIFY_RENEW_RETRY_SECONDS

    def __post_init__(self) -> None:
        if not self.client_id or not self.client_secret:
            raise InvalidInput("Spotify client_id and client_secret are required")

    @classmethod
    def from_env(cls) -> "SpotifyOptions":
        return cls(
            client_id=config.SPOTIFY_CLIENT_ID,
            client_secret=config.SPOTIFY_CLIENT_SECRET,
        )


class SpotifyPlugin:
    """
    Playback-engine plugin that resolves Spotify links through the Web API.

    Typical use inside a running event loop:

        plugin = SpotifyPlugin(SpotifyOptions(client_id=..., client_secret=...))
        await plugin.load(engine)       # starts token renewal, installs resolver
        ...
        await plugin.unload(engine)

    `wrap()` is the non-mutating alternative: it returns a resolver the host
    can register itself.
    """

    name = "spotify"

    def __init__(
        self,
        options: Optional[SpotifyOptions] = None,
        *,
        client_factory: AsyncClientFactory = build_async_client,
        track_factory: TrackFactory = UnresolvedTrack.from_metadata,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.options = options or SpotifyOptions.from_env()
        opts = self.options
        extra: dict[str, Any] = {}
        if clock is not None:
            extra["clock"] = clock
        if sleep is not None:
            extra["sleep"] = sleep
        self.credentials = CredentialManager(
            opts.client_id,
            opts.client_secret,
            token_url=opts.token_url,
            retry_seconds=opts.renew_retry_seconds,
            client_factory=client_factory,
            **extra,
        )
        self.classifier = QueryClassifier(domain=opts.open_domain, scheme=opts.uri_scheme)
        self.catalog = SpotifyCatalogClient(
            self.credentials,
            base_url=opts.api_base_url,
            max_pages=opts.max_collection_pages,
            client_factory=client_factory,
        )
        self.builder = TrackBuilder(
            source_name=opts.source_name,
            open_domain=opts.open_domain,
            track_factory=track_factory,
        )
        self.resolver: Optional[SpotifyResolver] = None

    def check(self, query: Any) -> bool:
        return self.classifier.check(query)

    def _make_resolver(self, engine: Any, wrapped: Callable[..., Any]) -> SpotifyResolver:
        return SpotifyResolver(
            engine,
            wrapped,
            classifier=self.classifier,
            catalog=self.catalog,
            credentials=self.credentials,
            builder=self.builder,
        )

    def wrap(self, engine: Any, resolve: Optional[Callable[..., Any]] = None) -> SpotifyResolver:
        """Build a resolver delegating to `resolve` (default: `engine.resolve`) without installing it."""
        self.credentials.start()
        return self._make_resolver(engine, resolve or engine.resolve)

    async def load(self, engine: Any) -> SpotifyResolver:
        """Start token renewal and install the resolver onto `engine`."""
        self.credentials.start()
        self.resolver = install(engine, self._make_resolver)
        logger.info("Spotify plugin loaded")
        return self.resolver

    async def unload(self, engine: Any) -> None:
        uninstall(engine)
        self.resolver = None
        await self.credentials.stop()
        logger.info("Spotify plugin unloaded")
