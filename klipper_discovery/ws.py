from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Mapping, Optional, Union

from .config import ConnectionConfig
from .const import (
    DEFAULT_WS_URL,
    ERR_CONNECTION_FAILED,
    ERR_CREATE_FAILED,
    ERR_RETRIES_EXHAUSTED,
    MAX_RECONNECT_ATTEMPTS,
    METHOD_SERVER_INFO,
    RECONNECT_DELAY,
)
from .exceptions import ConnectionClosedError, TransportOpenError
from .models import (
    CONNECTED,
    CONNECTING,
    DISCONNECTED,
    ConnectionStatus,
    KlipperStatus,
    encode_request,
)
from .reconnect import Phase, ReconnectPolicy
from .router import MessageRouter
from .store import Store
from .transport import Transport, WSTransport

_LOGGER = logging.getLogger(__name__)


def _consume_result(fut: asyncio.Future) -> None:
    # retry handles have no awaiting caller
    if not fut.cancelled():
        fut.exception()


class KlipperWS:
    """Moonraker websocket client + observable state for one printer.

    connection_status and klipper_status are the two cells consumers subscribe to.
    Everything runs on one asyncio loop: transport events and retry timers are
    handled one at a time.
    """

    def __init__(
        self,
        config: Union[ConnectionConfig, str, None] = None,
        *,
        transport: Optional[Transport] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
        base_delay: float = RECONNECT_DELAY,
    ):
        if config is None:
            config = ConnectionConfig(DEFAULT_WS_URL)
        elif isinstance(config, str):
            config = ConnectionConfig(config)
        self._config = config

        if transport is None:
            transport = WSTransport(config.endpoint_url, connect_timeout=config.connect_timeout)
        self._transport = transport
        self._transport.on_open = self._on_open
        self._transport.on_message = self._on_message
        self._transport.on_error = self._on_error
        self._transport.on_close = self._on_close

        self._loop = loop
        self._policy = ReconnectPolicy(max_attempts, base_delay)
        self._phase = Phase.IDLE
        self._pending: Optional[asyncio.Future] = None
        self._retry_handle: Optional[asyncio.TimerHandle] = None

        # Shared state
        self.connection_status: Store[ConnectionStatus] = Store(DISCONNECTED, "connection_status")
        self.klipper_status: Store[Optional[KlipperStatus]] = Store(None, "klipper_status")
        self._router = MessageRouter(self.klipper_status)

    # ---------- Public API ----------

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def reconnect_attempts(self) -> int:
        return self._policy.attempts

    @property
    def retry_pending(self) -> bool:
        return self._retry_handle is not None

    def connect(self) -> asyncio.Future:
        """Open the websocket. The returned future resolves on open, fails on transport error.

        Calling it while open resolves immediately; calling it while an open is
        in flight returns that same pending future.
        """
        if self._phase in (Phase.IDLE, Phase.FAILED):
            self._policy.reset()
        self._cancel_retry()
        return self._open()

    def disconnect(self) -> None:
        """Close on purpose. Never triggers a reconnect; safe to call repeatedly."""
        self._cancel_retry()
        self._transport.close()
        self._reject(ConnectionClosedError("Disconnected before the connection was established"))
        self._phase = Phase.IDLE
        self.connection_status.set(DISCONNECTED)
        self.klipper_status.set(None)

    async def aclose(self) -> None:
        self.disconnect()
        await self._transport.aclose()

    def send(self, frame: Mapping[str, Any]) -> bool:
        """Best effort: dropped (and logged) unless the socket is open."""
        return self._transport.send(json.dumps(frame))

    def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """Send a JSON-RPC style request; returns its id, or None when it was dropped."""
        req_id = uuid.uuid4().hex
        return req_id if self._transport.send(encode_request(method, req_id, params)) else None

    def request_status(self) -> Optional[str]:
        return self.request(METHOD_SERVER_INFO)

    def get_klipper_info(self) -> Optional[str]:
        return self.request(METHOD_SERVER_INFO)

    # ---------- Internal: connect / retry ----------

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def _open(self) -> asyncio.Future:
        loop = self._get_loop()
        if self._transport.is_open:
            fut = loop.create_future()
            fut.set_result(None)
            return fut
        if self._pending is not None and not self._pending.done():
            return self._pending

        self._phase = Phase.CONNECTING
        self.connection_status.set(CONNECTING)
        fut = self._pending = loop.create_future()
        try:
            self._transport.open()
        except Exception as e:
            _LOGGER.error("Failed to create WebSocket connection to %s: %s", self._config.endpoint_url, e)
            self._phase = Phase.IDLE
            self.connection_status.set(ConnectionStatus(error=ERR_CREATE_FAILED))
            self._reject(TransportOpenError(ERR_CREATE_FAILED, {"error": str(e)}))
        return fut

    def _retry(self) -> None:
        self._retry_handle = None
        self._open().add_done_callback(_consume_result)

    def _schedule_reconnect(self) -> None:
        delay = self._policy.next_delay()
        if delay is None:
            _LOGGER.error("Max reconnection attempts reached")
            self._phase = Phase.FAILED
            self.connection_status.set(ConnectionStatus(error=ERR_RETRIES_EXHAUSTED))
            return
        self._phase = Phase.RETRYING
        _LOGGER.info(
            "Attempting to reconnect (%s/%s) in %.1fs",
            self._policy.attempts,
            self._policy.max_attempts,
            delay,
        )
        self._retry_handle = self._get_loop().call_later(delay, self._retry)

    def _cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None

    def _resolve(self) -> None:
        fut, self._pending = self._pending, None
        if fut is not None and not fut.done():
            fut.set_result(None)

    def _reject(self, exc: BaseException) -> None:
        fut, self._pending = self._pending, None
        if fut is not None and not fut.done():
            fut.set_exception(exc)

    # ---------- Transport events ----------

    def _on_open(self) -> None:
        _LOGGER.info("WebSocket connected to Klipper at %s", self._config.endpoint_url)
        self._phase = Phase.CONNECTED
        self.connection_status.set(CONNECTED)
        self._policy.reset()
        self.request_status()
        self._resolve()

    def _on_message(self, text: str) -> None:
        self._router.feed(text)

    def _on_error(self, exc: BaseException) -> None:
        _LOGGER.warning("WebSocket error: %s", exc)
        self.connection_status.set(ConnectionStatus(error=ERR_CONNECTION_FAILED))
        self._reject(TransportOpenError(ERR_CONNECTION_FAILED, {"error": str(exc)}))

    def _on_close(self, local: bool) -> None:
        if local:
            return
        _LOGGER.info("WebSocket disconnected from Klipper")
        self.connection_status.set(DISCONNECTED)
        self._reject(TransportOpenError("Connection closed before it was established"))
        self._schedule_reconnect()
