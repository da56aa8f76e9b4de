"""Shared fixtures: a hand-driven transport and a loop whose timers fire on demand."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, List, Optional

import pytest

from klipper_discovery.ws import KlipperWS

WS_URL = "ws://printer.local:7125/websocket"

STATUS_PARAMS = {
    "state": "ready",
    "state_message": "",
    "hostname": "h",
    "klipper_path": "/p",
    "config_file": "/c",
    "software_version": "v1",
    "cpu_usage": 3.2,
}


class FakeTransport:
    """Transport double. Tests drive its events with fire_* helpers."""

    def __init__(self):
        self.on_open: Optional[Callable[[], None]] = None
        self.on_message: Optional[Callable[[str], None]] = None
        self.on_error: Optional[Callable[[BaseException], None]] = None
        self.on_close: Optional[Callable[[bool], None]] = None

        self.state = "closed"  # closed | opening | open
        self.open_calls = 0
        self.close_calls = 0
        self.sent: List[str] = []
        self.raise_on_open: Optional[Exception] = None

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @property
    def is_opening(self) -> bool:
        return self.state == "opening"

    def open(self) -> None:
        if self.state != "closed":
            return
        if self.raise_on_open:
            raise self.raise_on_open
        self.open_calls += 1
        self.state = "opening"

    def send(self, text: str) -> bool:
        if not self.is_open:
            return False
        self.sent.append(text)
        return True

    def close(self) -> None:
        self.close_calls += 1
        was = self.state
        self.state = "closed"
        if was != "closed":
            self.on_close(True)

    async def aclose(self) -> None:
        self.close()

    # ---------- drivers ----------

    def fire_open(self) -> None:
        self.state = "open"
        self.on_open()

    def fire_message(self, payload: Any) -> None:
        self.on_message(payload if isinstance(payload, str) else json.dumps(payload))

    def fire_error(self, exc: Optional[BaseException] = None) -> None:
        self.on_error(exc or ConnectionRefusedError("refused"))

    def fire_close(self) -> None:
        self.state = "closed"
        self.on_close(False)

    def fail_open(self) -> None:
        # what a refused connection looks like: error, then close
        self.fire_error()
        self.fire_close()

    def sent_frames(self) -> List[dict]:
        return [json.loads(t) for t in self.sent]


class FakeTimer:
    def __init__(self, delay: float, cb: Callable[..., None], args: tuple):
        self.delay = delay
        self._cb = cb
        self._args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        assert not self.cancelled, "cancelled timer fired"
        self.fired = True
        self._cb(*self._args)


class FakeLoop:
    """Records call_later() instead of sleeping; futures come from the running loop."""

    def __init__(self):
        self.timers: List[FakeTimer] = []

    def call_later(self, delay: float, cb: Callable[..., None], *args: Any) -> FakeTimer:
        timer = FakeTimer(delay, cb, args)
        self.timers.append(timer)
        return timer

    def create_future(self) -> asyncio.Future:
        return asyncio.get_running_loop().create_future()

    @property
    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    @property
    def delays(self) -> List[float]:
        return [t.delay for t in self.timers]

    def fire_next(self) -> FakeTimer:
        timer = self.pending[0]
        timer.fire()
        return timer


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def client(transport: FakeTransport, clock: FakeLoop) -> KlipperWS:
    return KlipperWS(WS_URL, transport=transport, loop=clock)


@pytest.fixture
def statuses(client: KlipperWS) -> list:
    """Every connection_status notification, in order."""
    seen: list = []
    client.connection_status.add_listener(seen.append)
    return seen
