from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import ConnectionConfig, KlipperConfig, load_config, validate_config
from .const import DOMAIN
from .exceptions import (
    ConfigError,
    ConnectionClosedError,
    KlipperDiscoveryError,
    MalformedFrameError,
    NetworkAPIError,
    TransportOpenError,
)
from .log import configure_logging
from .models import ConnectionStatus, KlipperStatus
from .network_api import NetworkAPI
from .reconnect import Phase
from .store import Store
from .ws import KlipperWS

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "ConfigError",
    "ConnectionClosedError",
    "ConnectionConfig",
    "ConnectionStatus",
    "KlipperConfig",
    "KlipperDiscoveryError",
    "KlipperStatus",
    "KlipperWS",
    "MalformedFrameError",
    "NetworkAPI",
    "NetworkAPIError",
    "Phase",
    "Store",
    "TransportOpenError",
    "async_setup",
    "configure_logging",
    "load_config",
    "validate_config",
]


async def async_setup(config: Optional[KlipperConfig] = None) -> KlipperWS:
    """Build a client from config (environment by default) and start connecting.

    The first open is not awaited; watch client.connection_status instead.
    """
    if config is None:
        config = load_config()

    ok, errors = validate_config(config)
    if not ok:
        _LOGGER.warning("%s config problems for %s: %s", DOMAIN, config.printer_name, "; ".join(errors))

    client = KlipperWS(config.connection_config())
    client.connect().add_done_callback(_log_first_open)
    return client


def _log_first_open(fut: asyncio.Future) -> None:
    if fut.cancelled():
        return
    if fut.exception():
        _LOGGER.warning("Initial connection failed: %s", fut.exception())
