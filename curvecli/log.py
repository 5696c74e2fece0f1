"""
Logging for the curve tool.

All modules log through the "curve" logger. Nothing is emitted unless
setup_logging() runs (the console entry point does), which installs a rich
handler on stderr at the level named by CURVE_LOG_LEVEL (WARNING by default).
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .utils import Unset, coalesce

logger = logging.getLogger("curve")
logger.addHandler(logging.NullHandler())


def setup_logging(level=Unset, /):
    """
    Route the "curve" logger to a rich handler on stderr.

    Parameters
    - level: str | int | Unset
      Level name or number. When Unset, CURVE_LOG_LEVEL is read; unknown
      names fall back to WARNING.

    Returns
    - the configured logger.
    """
    level = coalesce(level, os.environ.get("CURVE_LOG_LEVEL", "WARNING"))
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.strip().upper(), logging.WARNING)

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger


__all__ = (
    "logger",
    "setup_logging",
)
