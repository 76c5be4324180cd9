from .errors import AuthFailure, InvalidInput, SpotifyError, UpstreamFailure

__all__ = [
    "AuthFailure",
    "InvalidInput",
    "SpotifyError",
    "UpstreamFailure",
]
