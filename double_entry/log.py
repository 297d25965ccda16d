"""
Logging setup for the ledger.

Every module logs through ``logging.getLogger(__name__)``, so all
records end up under the ``double_entry`` logger. Host applications
that already configure logging can ignore this module entirely.
"""

import logging

from double_entry.config import get_settings

LOGGER_NAME = "double_entry"
HANDLER_NAME = "double_entry.console"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Calling this more than once only updates the level; it never
    stacks duplicate handlers.
    """
    if level is None:
        level = get_settings().LOG_LEVEL

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
