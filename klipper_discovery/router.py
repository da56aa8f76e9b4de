from __future__ import annotations

import logging
from typing import Optional, Union

from .exceptions import MalformedFrameError
from .models import Frame, KlipperStatus, RpcError, StatusUpdate, decode_frame
from .store import Store

_LOGGER = logging.getLogger(__name__)


class MessageRouter:
    """Routes decoded frames into shared state. Only status updates are consumed today."""

    def __init__(self, status: Store[Optional[KlipperStatus]]):
        self._status = status

    def feed(self, raw: Union[str, bytes]) -> Optional[Frame]:
        """Decode + route one wire message. Malformed payloads are logged and dropped."""
        try:
            frame = decode_frame(raw)
        except MalformedFrameError as e:
            _LOGGER.debug("Bad JSON from WS: %s", e)
            return None
        self.route(frame)
        return frame

    def route(self, frame: Frame) -> None:
        if isinstance(frame, StatusUpdate):
            # replaced wholesale, never merged
            self._status.set(frame.params)
        elif isinstance(frame, RpcError):
            _LOGGER.debug("RPC error for id=%s: %s (%s)", frame.id, frame.message, frame.code)
        else:
            _LOGGER.debug("Ignoring frame %s", frame)
