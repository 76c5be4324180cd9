"""Spotify Web API provider implementation."""

from .client import SpotifyCatalogClient
from .payloads import TokenPayload

__all__ = [
    "SpotifyCatalogClient",
    "TokenPayload",
]
