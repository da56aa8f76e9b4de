from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import voluptuous as vol

from .const import (
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_MOONRAKER_HOST,
    DEFAULT_MOONRAKER_PORT,
    DEFAULT_PRINTER_NAME,
    ENV_CONNECTION_TIMEOUT,
    ENV_MOONRAKER_API_URL,
    ENV_MOONRAKER_HOST,
    ENV_MOONRAKER_PORT,
    ENV_MOONRAKER_WS_URL,
    ENV_PRINTER_NAME,
)
from .exceptions import ConfigError


@dataclass(frozen=True)
class ConnectionConfig:
    """Where the websocket service connects to. Fixed for the service lifetime."""

    endpoint_url: str
    connect_timeout: Optional[float] = None  # seconds


@dataclass(frozen=True)
class KlipperConfig:
    moonraker_host: str
    moonraker_port: int
    moonraker_ws_url: str
    moonraker_api_url: str
    printer_name: str = DEFAULT_PRINTER_NAME
    connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT  # ms

    def connection_config(self) -> ConnectionConfig:
        timeout = self.connection_timeout / 1000 if self.connection_timeout else None
        return ConnectionConfig(endpoint_url=self.moonraker_ws_url, connect_timeout=timeout)


def ws_url_for(host: str, port: int) -> str:
    return f"ws://{host}:{port}/websocket"


def api_url_for(host: str, port: int) -> str:
    return f"http://{host}:{port}"


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer", {"value": raw}) from e


def load_config(env: Optional[Mapping[str, str]] = None) -> KlipperConfig:
    """Build the Moonraker config from environment variables + defaults.

    Missing URLs are derived from host and port.
    """
    if env is None:
        env = os.environ

    host = env.get(ENV_MOONRAKER_HOST, DEFAULT_MOONRAKER_HOST)
    port = _int_env(env, ENV_MOONRAKER_PORT, DEFAULT_MOONRAKER_PORT)

    return KlipperConfig(
        moonraker_host=host,
        moonraker_port=port,
        moonraker_ws_url=env.get(ENV_MOONRAKER_WS_URL) or ws_url_for(host, port),
        moonraker_api_url=env.get(ENV_MOONRAKER_API_URL) or api_url_for(host, port),
        printer_name=env.get(ENV_PRINTER_NAME, DEFAULT_PRINTER_NAME),
        connection_timeout=_int_env(env, ENV_CONNECTION_TIMEOUT, DEFAULT_CONNECTION_TIMEOUT),
    )


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required("moonraker_host"): vol.All(
            str, vol.Length(min=1), msg="Moonraker host is required"
        ),
        vol.Required("moonraker_port"): vol.All(
            int, vol.Range(min=1, max=65535), msg="Moonraker port must be between 1 and 65535"
        ),
        # zero/unset timeout means "no timeout" and is not checked
        vol.Optional("connection_timeout"): vol.All(
            int, vol.Range(min=1000), msg="Connection timeout should be at least 1000ms"
        ),
    }
)


def validate_config(config: KlipperConfig) -> tuple[bool, list[str]]:
    """Return (is_valid, errors), collecting every problem rather than the first."""
    data = {
        "moonraker_host": config.moonraker_host,
        "moonraker_port": config.moonraker_port,
    }
    if config.connection_timeout:
        data["connection_timeout"] = config.connection_timeout

    errors: list[str] = []
    try:
        CONFIG_SCHEMA(data)
    except vol.MultipleInvalid as err:
        errors = [e.msg for e in err.errors]
    return not errors, errors
