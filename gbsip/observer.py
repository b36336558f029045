"""Wait for a named event with a timeout, signalled from another thread."""

from __future__ import annotations

import threading
import time
from typing import Callable

ObserverHandler = Callable[..., bool]

DEFAULT_WAIT = 7.0


class Observer:
    """Registry of handlers that are removed once they report completion."""

    def __init__(self) -> None:
        self._handlers: dict[str, ObserverHandler] = {}
        self._lock = threading.Lock()

    def _remove(self, key: str, handler: ObserverHandler) -> None:
        with self._lock:
            if self._handlers.get(key) is handler:
                del self._handlers[key]

    def register(self, device_id: str, duration: float, fn: ObserverHandler) -> bool:
        """Block until ``fn`` accepts a notification or ``duration`` seconds pass.

        Returns True when notified, False on timeout.
        """
        done = threading.Event()

        def handler(did: str, *args: str) -> bool:
            if fn(did, *args):
                done.set()
                return True
            return False

        with self._lock:
            self._handlers[device_id] = handler
        if done.wait(duration):
            return True
        self._remove(device_id, handler)
        return done.is_set()

    def register_with_timeout(self, device_id: str, duration: float) -> bool:
        """Wait up to ``duration`` seconds for a notification for ``device_id``."""
        key = f"{device_id}:{int(time.time() * 1000)}"
        return self.register(key, duration, lambda did, *_: did == device_id)

    def default_register(self, device_id: str) -> bool:
        """Wait up to seven seconds for a notification for ``device_id``."""
        return self.register_with_timeout(device_id, DEFAULT_WAIT)

    def notify(self, device_id: str, *args: str) -> None:
        """Offer a notification to every handler, dropping those that accept it."""
        with self._lock:
            snapshot = list(self._handlers.items())
        for key, handler in snapshot:
            if handler(device_id, *args):
                self._remove(key, handler)

    def pending(self) -> int:
        """Number of handlers still waiting."""
        with self._lock:
            return len(self._handlers)