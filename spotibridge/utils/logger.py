import os
import sys
from loguru import logger


def config(sink=None):
    """
    Configure the global Loguru logger. Keeps this function lightweight so it
    can be imported across the codebase without side-effects beyond the sink.

    `sink` defaults to stdout; the CLI passes stderr so its JSON output stays
    machine-readable.
    """
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger.remove()
    logger.add(
        sink if sink is not None else sys.stdout,
        level=LOG_LEVEL,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )


def mask_secret(value: str | None, visible: int = 4) -> str:
    """
    Mask a credential for log output, keeping only the trailing characters.

    Returns "<none>" for empty values.
    """
    if not value:
        return "<none>"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
