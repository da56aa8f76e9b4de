"""
Logging setup for applications embedding klipper_discovery.

The library itself only creates module loggers (logging.getLogger(__name__));
call configure_logging() once at startup to get console output:

    2026-01-05 10:15:30 [INFO    ] klipper_discovery.ws - WebSocket connected to Klipper
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "klipper_discovery.console"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a console handler to the package logger. Calling it again only updates the level."""
    logger = logging.getLogger("klipper_discovery")
    logger.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)

    return logger
