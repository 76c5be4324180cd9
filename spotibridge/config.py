import os

from dotenv import load_dotenv
from loguru import logger

from spotibridge.utils.logger import config as configure_logger, mask_secret

# Load .env as early as possible so all downstream imports see the intended env
load_dotenv()

# Configure logger after env is loaded (LOG_LEVEL honored)
configure_logger()


def _as_float(val: str | None, default: float, *, minimum: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        parsed = float(val)
    except ValueError:
        logger.warning(f"Invalid float value {val!r}; using {default}")
        return default
    return max(minimum, parsed)


def _as_int(val: str | None, default: int, *, minimum: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        parsed = int(val)
    except ValueError:
        logger.warning(f"Invalid integer value {val!r}; using {default}")
        return default
    return max(minimum, parsed)


# ---- Client identity ----
# Client-credentials pair issued by the Spotify developer dashboard.
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "").strip()
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "").strip()
logger.debug(
    f"SPOTIFY_CLIENT_ID={mask_secret(SPOTIFY_CLIENT_ID)}, "
    f"SPOTIFY_CLIENT_SECRET={mask_secret(SPOTIFY_CLIENT_SECRET)}"
)

# ---- Endpoints ----
SPOTIFY_API_BASE_URL = (
    os.getenv("SPOTIFY_API_BASE_URL", "https://api.spotify.com/v1").strip().rstrip("/")
)
SPOTIFY_TOKEN_URL = os.getenv(
    "SPOTIFY_TOKEN_URL", "https://accounts.spotify.com/api/token"
).strip()
logger.debug(
    f"SPOTIFY_API_BASE_URL={SPOTIFY_API_BASE_URL}, SPOTIFY_TOKEN_URL={SPOTIFY_TOKEN_URL}"
)

# ---- Query grammar / provenance ----
# Share-link host (https://<domain>/<type>/<id>) and URI scheme (<scheme>:<type>:<id>).
SPOTIFY_OPEN_DOMAIN = (
    os.getenv("SPOTIFY_OPEN_DOMAIN", "open.spotify.com").strip().lower()
    or "open.spotify.com"
)
SPOTIFY_URI_SCHEME = (
    os.getenv("SPOTIFY_URI_SCHEME", "spotify").strip().lower() or "spotify"
)
# sourceName stamped on every built track
SPOTIFY_SOURCE_NAME = os.getenv("SPOTIFY_SOURCE_NAME", "spotify").strip() or "spotify"
logger.debug(
    f"SPOTIFY_OPEN_DOMAIN={SPOTIFY_OPEN_DOMAIN}, SPOTIFY_URI_SCHEME={SPOTIFY_URI_SCHEME}, "
    f"SPOTIFY_SOURCE_NAME={SPOTIFY_SOURCE_NAME}"
)

# ---- Limits ----
# Timeout per upstream request (seconds)
SPOTIFY_HTTP_TIMEOUT_SECONDS = _as_float(
    os.getenv("SPOTIFY_HTTP_TIMEOUT_SECONDS"), 10.0, minimum=0.1
)
# Retry interval for token renewal when no expiry has been learned yet
SPOTIFY_RENEW_RETRY_SECONDS = _as_float(
    os.getenv("SPOTIFY_RENEW_RETRY_SECONDS"), 60.0, minimum=1.0
)
# Upper bound on pages read per album/playlist (100 tracks per playlist page)
SPOTIFY_MAX_COLLECTION_PAGES = _as_int(
    os.getenv("SPOTIFY_MAX_COLLECTION_PAGES"), 10, minimum=1
)
logger.debug(
    f"SPOTIFY_HTTP_TIMEOUT_SECONDS={SPOTIFY_HTTP_TIMEOUT_SECONDS}, "
    f"SPOTIFY_RENEW_RETRY_SECONDS={SPOTIFY_RENEW_RETRY_SECONDS}, "
    f"SPOTIFY_MAX_COLLECTION_PAGES={SPOTIFY_MAX_COLLECTION_PAGES}"
)

if not (SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET):
    logger.debug(
        "SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set; credentials must be passed explicitly."
    )
