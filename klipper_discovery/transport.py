from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable, Optional, Protocol

import aiohttp

from .const import HEARTBEAT_SEC

_LOGGER = logging.getLogger(__name__)


class Transport(Protocol):
    """What KlipperWS needs from a duplex message channel."""

    on_open: Optional[Callable[[], None]]
    on_message: Optional[Callable[[str], None]]
    on_error: Optional[Callable[[BaseException], None]]
    on_close: Optional[Callable[[bool], None]]

    @property
    def is_open(self) -> bool: ...

    @property
    def is_opening(self) -> bool: ...

    def open(self) -> None: ...

    def send(self, text: str) -> bool: ...

    def close(self) -> None: ...

    async def aclose(self) -> None: ...


class WSTransport:
    """aiohttp websocket to a single fixed endpoint.

    Events (each emitted once per underlying event, on the event loop):
      on_open()            socket is open
      on_message(text)     one text frame
      on_error(exc)        open failed or protocol error
      on_close(local)      connection ended; local=True only when close() ended it
    A failed open emits on_error followed by on_close(False).
    """

    def __init__(
        self,
        url: str,
        session: Optional[aiohttp.ClientSession] = None,
        connect_timeout: Optional[float] = None,
        heartbeat: Optional[float] = HEARTBEAT_SEC,
    ):
        self._url = url
        self._session = session
        self._owns_session = session is None
        self._connect_timeout = connect_timeout
        self._heartbeat = heartbeat

        self._task: Optional[asyncio.Task] = None
        self._closing: Optional[asyncio.Task] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._out_queue: Optional["asyncio.Queue[str]"] = None
        # bumped by close(); events from older runs are dropped
        self._gen = 0

        self.on_open: Optional[Callable[[], None]] = None
        self.on_message: Optional[Callable[[str], None]] = None
        self.on_error: Optional[Callable[[BaseException], None]] = None
        self.on_close: Optional[Callable[[bool], None]] = None

    # ---------- Public API ----------

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed

    @property
    def is_opening(self) -> bool:
        return self._task is not None and not self._task.done() and self._ws is None

    def open(self) -> None:
        """Start connecting unless a connection is already open or opening."""
        if self._task and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._runner(self._gen))

    def send(self, text: str) -> bool:
        """Best effort: queued only while open, otherwise dropped and logged."""
        if not self.is_open or self._out_queue is None:
            _LOGGER.warning("WebSocket not connected, message not sent: %s", text)
            return False
        self._out_queue.put_nowait(text)
        return True

    def close(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        self._gen += 1
        self._ws = None
        self._out_queue = None
        task.cancel()
        self._closing = task
        self._call(self.on_close, True)

    async def aclose(self) -> None:
        """close() plus wait for teardown and release an owned session."""
        self.close()
        task, self._closing = self._closing, None
        if task:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

    # ---------- Internal: WS loop ----------

    def _call(self, cb: Optional[Callable[..., None]], *args: Any) -> None:
        if cb is None:
            return
        try:
            cb(*args)
        except Exception:
            _LOGGER.exception("WS event handler %r failed", cb)

    def _emit(self, gen: int, name: str, *args: Any) -> None:
        if gen != self._gen:
            return
        self._call(getattr(self, name), *args)

    async def _runner(self, gen: int) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        _LOGGER.info("Connecting to %s", self._url)
        try:
            ws = await asyncio.wait_for(
                self._session.ws_connect(self._url, heartbeat=self._heartbeat),
                self._connect_timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _LOGGER.warning("WS open to %s failed: %s", self._url, e)
            self._emit(gen, "on_error", e)
            self._emit(gen, "on_close", False)
            return

        queue: "asyncio.Queue[str]" = asyncio.Queue()
        self._ws = ws
        self._out_queue = queue
        _LOGGER.info("WebSocket connected to %s", self._url)
        self._emit(gen, "on_open")

        sender = asyncio.create_task(self._send_loop(ws, queue))
        try:
            await self._recv_loop(ws, gen)
        finally:
            sender.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sender
            if self._ws is ws:
                self._ws = None
                self._out_queue = None
            if not ws.closed:
                await ws.close()

        _LOGGER.info("WebSocket disconnected from %s", self._url)
        self._emit(gen, "on_close", False)

    async def _recv_loop(self, ws: aiohttp.ClientWebSocketResponse, gen: int) -> None:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                self._emit(gen, "on_message", msg.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                self._emit(gen, "on_error", ws.exception() or RuntimeError("WS error"))
                break
            else:
                _LOGGER.debug("Ignoring WS frame of type %s", msg.type)

    async def _send_loop(self, ws: aiohttp.ClientWebSocketResponse, queue: "asyncio.Queue[str]") -> None:
        """Drain queued frames to Moonraker."""
        while not ws.closed:
            text = await queue.get()
            try:
                await ws.send_str(text)
                _LOGGER.debug("WS -> %s", text)
            except Exception as e:
                _LOGGER.debug("Failed to send WS frame: %s", e)
