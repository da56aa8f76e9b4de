from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class Store(Generic[T]):
    """Single observable value.

    Every set() notifies all listeners synchronously, in registration order,
    with the new value. No diffing: setting an identical value notifies again.
    """

    def __init__(self, initial: T, name: str = "store"):
        self._value = initial
        self._name = name
        self._listeners: list[Callable[[T], None]] = []

    def get(self) -> T:
        return self._value

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        # snapshot: listeners added/removed mid-notify apply from the next set()
        for cb in list(self._listeners):
            try:
                cb(value)
            except Exception:
                _LOGGER.exception("Listener %r on %s failed", cb, self._name)

    def add_listener(self, cb: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(cb)

        def remove() -> None:
            if cb in self._listeners:
                self._listeners.remove(cb)

        return remove

    def __repr__(self) -> str:
        return f"Store({self._name}={self._value!r})"
