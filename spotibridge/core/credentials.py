from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional

from loguru import logger
from pydantic import ValidationError

from spotibridge.config import SPOTIFY_RENEW_RETRY_SECONDS, SPOTIFY_TOKEN_URL
from spotibridge.domain.models import Credential
from spotibridge.providers.spotify.payloads import TokenPayload
from spotibridge.utils.http_client import AsyncClientFactory, build_async_client

from .errors import AuthFailure, UpstreamFailure

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

# Statuses the token endpoint uses for an invalid client id/secret pair.
_REJECTED_CLIENT_STATUSES = (400, 401)


class CredentialManager:
    """
    Acquire and keep renewing a client-credentials bearer token.

    The renewal loop runs as one supervised asyncio task (see `start`/`stop`):
    it renews immediately, then sleeps for exactly the `expires_in` reported by
    the token endpoint and renews again, forever. A failed attempt keeps the
    previously cached credential and is retried after the same fixed interval;
    there is no backoff.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        token_url: str = SPOTIFY_TOKEN_URL,
        retry_seconds: float = SPOTIFY_RENEW_RETRY_SECONDS,
        client_factory: AsyncClientFactory = build_async_client,
        clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Parameters:
            client_id (str): Client identifier issued by the catalog.
            client_secret (str): Matching client secret.
            token_url (str): Token endpoint accepting a client-credentials grant.
            retry_seconds (float): Delay before retrying when no token lifetime is known yet.
            client_factory: Builds the httpx.AsyncClient used for each token request.
            clock: Returns the current time in Unix seconds.
            sleep: Awaitable delay used between renewals; tests pass a fake.
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._retry_seconds = retry_seconds
        self._client_factory = client_factory
        self._clock = clock
        self._sleep = sleep

        self._credential: Optional[Credential] = None
        self._interval: Optional[float] = None
        self._renew_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task[None]] = None
        self.renewal_count = 0
        self.last_error: Optional[Exception] = None

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the renewal loop on the running event loop (no-op if already running)."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self._renewal_loop(), name="spotibridge-credential-renewal"
        )
        logger.debug("Credential renewal task started")

    async def stop(self) -> None:
        """Cancel the renewal loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Credential renewal task stopped")

    async def _renewal_loop(self) -> None:
        # First tick reuses a token a caller obtained between start() and now.
        force = False
        while True:
            try:
                await self.renew(force=force)
            except Exception as exc:
                # Keep the cached credential; the next tick retries.
                self.last_error = exc
                logger.warning("Spotify token renewal failed: {}", exc)
            force = True
            delay = self._interval or self._retry_seconds
            logger.debug("Next Spotify token renewal in {}s", delay)
            await self._sleep(delay)

    async def renew(self, *, force: bool = True) -> Credential:
        """
        Request a fresh token, replacing the cached credential on success.

        With `force=False` a cached credential that has not expired yet is
        returned without contacting the token endpoint.
        """
        async with self._renew_lock:
            credential = self._credential
            if not force and credential is not None and not credential.is_expired(self._clock()):
                logger.debug("Spotify token already obtained; skipping initial renewal")
                return credential
            return await self._request_token()

    async def get_valid_credential(self) -> Credential:
        """
        Return the cached credential, obtaining the first one if none exists yet.

        A caller that arrives while the first renewal is in flight waits for it.
        Once a credential is cached it is returned even if renewal is currently
        failing; it is only stale until the upstream actively expires it.

        Raises:
            AuthFailure: The token endpoint rejected the client identity.
            UpstreamFailure: No credential is cached and the token request failed otherwise.
        """
        credential = self._credential
        if credential is not None:
            if credential.is_expired(self._clock()):
                logger.debug("Serving expired Spotify token while renewal catches up")
            return credential

        async with self._renew_lock:
            if self._credential is not None:
                return self._credential
            try:
                return await self._request_token()
            except (AuthFailure, UpstreamFailure):
                raise
            except Exception as exc:
                raise UpstreamFailure(
                    f"Unable to obtain a Spotify access token: {exc}"
                ) from exc

    async def _request_token(self) -> Credential:
        logger.debug("Requesting Spotify access token from {}", self._token_url)
        async with self._client_factory() as client:
            response = await client.post(
                self._token_url,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
            )
        if response.status_code in _REJECTED_CLIENT_STATUSES:
            logger.error(
                "Spotify token endpoint rejected the client identity (status={})",
                response.status_code,
            )
            raise AuthFailure()
        if response.status_code >= 400:
            raise UpstreamFailure(
                f"Spotify token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = TokenPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamFailure(
                f"Unexpected Spotify token response: {exc}"
            ) from exc

        credential = Credential(
            token=payload.access_token,
            expires_at=self._clock() + payload.expires_in,
        )
        # Single assignment: readers see either the old or the new credential.
        self._credential = credential
        self._interval = float(payload.expires_in)
        self.renewal_count += 1
        self.last_error = None
        logger.info("Spotify access token renewed (expires in {}s)", payload.expires_in)
        return credential
