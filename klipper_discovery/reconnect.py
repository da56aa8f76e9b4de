from __future__ import annotations

import enum
from typing import Optional

from .const import MAX_RECONNECT_ATTEMPTS, RECONNECT_DELAY


class Phase(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RETRYING = "retrying"
    FAILED = "failed"  # terminal until an explicit connect()


class ReconnectPolicy:
    """Bounded, linearly increasing retry schedule (1s, 2s, 3s, ...).

    Only unsolicited closes consume attempts; a successful open resets the counter.
    """

    def __init__(self, max_attempts: int = MAX_RECONNECT_ATTEMPTS, base_delay: float = RECONNECT_DELAY):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def exhausted(self) -> bool:
        return self._attempts >= self.max_attempts

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt

    def next_delay(self) -> Optional[float]:
        """Consume one attempt and return its delay, or None when out of attempts."""
        if self.exhausted:
            return None
        self._attempts += 1
        return self.delay_for(self._attempts)

    def reset(self) -> None:
        self._attempts = 0

    def __repr__(self) -> str:
        return f"ReconnectPolicy({self._attempts}/{self.max_attempts})"
