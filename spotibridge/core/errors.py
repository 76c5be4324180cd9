from typing import Optional


class SpotifyError(Exception):
    """Base class for failures raised while resolving a catalog query.

    `load_type` lets a failure override the load-failed code reported to the
    engine; it is None for every built-in subclass.
    """

    load_type: Optional[str] = None


class AuthFailure(SpotifyError):
    """Token endpoint rejected the configured client identity."""

    def __init__(self, message: str = "The client ID or client secret is incorrect.") -> None:
        super().__init__(message)


class UpstreamFailure(SpotifyError):
    """Catalog API call failed or returned an unexpected payload shape."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        """
        Parameters:
            message (str): Human-readable reason, surfaced as the load result message.
            status_code (Optional[int]): HTTP status of the upstream response, when one was received.
        """
        self.status_code = status_code
        super().__init__(message)


class InvalidInput(SpotifyError, ValueError):
    """Precondition violation by the caller (programming error)."""
