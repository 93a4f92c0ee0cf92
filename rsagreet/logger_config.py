# logger_config.py
import logging

from config import LOG_LEVEL, LOG_LEVELS

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(level: str = LOG_LEVEL) -> str:
    """Configure the root logger and return the level name actually applied.

    An unknown level falls back to "info" with a warning instead of
    aborting startup.
    """
    requested = level.strip().lower()
    applied = requested if requested in LOG_LEVELS else "info"

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(applied.upper())

    if applied != requested:
        logger.warning("Unknown log level %r, using %r; expected one of %s", level, applied, ", ".join(LOG_LEVELS))
    return applied
