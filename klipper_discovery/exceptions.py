"""
Exceptions raised by klipper_discovery.

Hierarchy:
    KlipperDiscoveryError (base)
    ├── ConfigError          - bad environment value while loading config
    ├── TransportOpenError   - a pending connect() handle was rejected
    │   └── ConnectionClosedError - disconnect() ran before the open completed
    ├── MalformedFrameError  - inbound payload is not a JSON object
    └── NetworkAPIError      - the wifi configuration service failed

Exhausted reconnects are not raised; they are published on the
connection status instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class KlipperDiscoveryError(Exception):
    """Base exception for all klipper_discovery errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(KlipperDiscoveryError):
    """An environment variable could not be parsed."""


class TransportOpenError(KlipperDiscoveryError):
    """The transport reported an error while a connect() was pending."""


class ConnectionClosedError(TransportOpenError):
    """disconnect() was called before the pending open completed."""


class MalformedFrameError(KlipperDiscoveryError):
    """A wire payload could not be decoded into a frame."""


class NetworkAPIError(KlipperDiscoveryError):
    """
    A request to the network configuration service failed.

    `status` is the HTTP status when the service answered at all, and
    `response` the parsed validation error body when one was returned.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details={"status": status} if status is not None else None)
        self.status = status
        self.response = response
