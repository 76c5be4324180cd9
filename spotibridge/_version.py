from pathlib import Path

_DIST_NAME = "spotibridge"


def get_version() -> str:
    """Return the package version from a VERSION file or installed metadata."""
    vfile = Path(__file__).resolve().parents[1] / "VERSION"
    if vfile.exists():
        return vfile.read_text().strip()
    try:
        from importlib.metadata import version as _version

        return _version(_DIST_NAME)
    except Exception:
        return "0.0.0"


def user_agent() -> str:
    """User-Agent sent with every catalog request, e.g. ``spotibridge/1.2.0``."""
    return f"{_DIST_NAME}/{__version__}"


__version__ = get_version()
