"""Logging setup for the webauthz CLI and host applications.

Only the ``webauthz`` logger is configured. The root logger is left to the
host application, and records still propagate to it.
"""

import logging

from .config import StoreSettings

LOGGER_NAME = "webauthz"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _WebauthzHandler(logging.StreamHandler):
    """Marker type so repeated setup replaces our handler instead of stacking."""


def setup_logging(
    settings: StoreSettings | None = None,
    level: str | None = None,
) -> logging.Logger:
    """Configure the ``webauthz`` logger.

    Args:
        settings: Settings providing ``log_level`` (loaded from the
            environment when omitted)
        level: Explicit level that overrides the settings, e.g. from a
            command-line flag

    Returns:
        The ``webauthz`` logger

    Raises:
        ValueError: If the level is not a logging level name
    """
    if level is None:
        settings = settings or StoreSettings()
        level = settings.log_level

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        if isinstance(handler, _WebauthzHandler):
            logger.removeHandler(handler)

    handler = _WebauthzHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    return logger
