from __future__ import annotations

from typing import Callable, Optional

import httpx
from loguru import logger

from spotibridge._version import user_agent
from spotibridge.config import SPOTIFY_HTTP_TIMEOUT_SECONDS

AsyncClientFactory = Callable[[], httpx.AsyncClient]


def build_async_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """
    Build an AsyncClient for catalog and token requests.

    Every request made through the client is bounded by `timeout` seconds
    (defaults to SPOTIFY_HTTP_TIMEOUT_SECONDS), so a stalled upstream call fails
    instead of hanging the resolve call that issued it.
    """
    seconds = SPOTIFY_HTTP_TIMEOUT_SECONDS if timeout is None else timeout
    logger.trace("Building catalog AsyncClient (timeout={}s)", seconds)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(seconds),
        follow_redirects=True,
        headers={"User-Agent": user_agent(), "Accept": "application/json"},
    )
