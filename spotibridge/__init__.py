"""SpotiBridge: resolve Spotify links for Lavalink-style playback engines."""

from spotibridge._version import __version__
from spotibridge.core.dispatcher import SpotifyResolver, install, uninstall
from spotibridge.core.errors import AuthFailure, InvalidInput, SpotifyError, UpstreamFailure
from spotibridge.domain.models import LoadResult
from spotibridge.plugin import SpotifyOptions, SpotifyPlugin

__all__ = [
    "AuthFailure",
    "InvalidInput",
    "LoadResult",
    "SpotifyError",
    "SpotifyOptions",
    "SpotifyPlugin",
    "SpotifyResolver",
    "UpstreamFailure",
    "__version__",
    "install",
    "uninstall",
]
