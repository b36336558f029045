"""Gather items arriving in pieces under a key and hand them over when complete."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from .observer import Observer

log = logging.getLogger(__name__)

T = TypeVar("T")

_POLL = 0.05


@dataclass
class CollectorMsg(Generic[T]):
    """One item for ``key``; ``total`` is how many items the key expects."""

    key: str
    data: T
    total: int


@dataclass
class _Content(Generic[T]):
    last_update_at: float
    data: list[T] = field(default_factory=list)
    total: int = -1


class Collector(Generic[T]):
    """Collects items per key and saves them once complete or idle.

    A key must be opened with :meth:`run` before items written for it are kept.
    Items for which ``no_repeat_fn(existing, new)`` is true for an existing item
    are dropped. The event loop in :meth:`start` checks every ``check_interval``
    seconds; a key is saved when all expected items arrived or nothing arrived
    for ``expire_after`` seconds.
    """

    def __init__(
        self,
        no_repeat_fn: Callable[[T, T], bool],
        *,
        check_interval: float = 3.0,
        expire_after: float = 10.0,
    ) -> None:
        self._no_repeat = no_repeat_fn
        self._check_interval = check_interval
        self._expire_after = expire_after
        self._data: dict[str, _Content[T]] = {}
        self._messages: queue.Queue[CollectorMsg[T]] = queue.Queue(maxsize=512)
        self._creates: queue.Queue[str] = queue.Queue(maxsize=100)
        self._stopped = threading.Event()
        self.observer = Observer()

    def run(self, key: str) -> None:
        """Open collection for ``key``; dropped silently if the backlog is full."""
        try:
            self._creates.put_nowait(key)
        except queue.Full:
            pass

    def write(self, info: CollectorMsg[T]) -> None:
        """Queue an item for collection."""
        self._messages.put(info)

    def wait(self, key: str) -> bool:
        """Block until ``key`` is saved or seven seconds pass; True if saved."""
        return self.observer.default_register(key)

    def stop(self) -> None:
        """Make :meth:`start` return."""
        self._stopped.set()

    def start(self, save: Callable[[str, list[T]], None]) -> None:
        """Run the event loop in the calling thread until :meth:`stop`."""
        next_check = time.monotonic() + self._check_interval
        while not self._stopped.is_set():
            timeout = min(max(next_check - time.monotonic(), 0.0), _POLL)
            try:
                msg: CollectorMsg[T] | None = self._messages.get(timeout=timeout)
            except queue.Empty:
                msg = None
            self._drain_creates()
            if msg is not None:
                self._accept(msg)
            now = time.monotonic()
            if now >= next_check:
                self._flush(save, now)
                next_check = now + self._check_interval

    def _drain_creates(self) -> None:
        while True:
            try:
                key = self._creates.get_nowait()
            except queue.Empty:
                return
            self._data[key] = _Content(last_update_at=time.monotonic())

    def _accept(self, msg: CollectorMsg[T]) -> None:
        content = self._data.get(msg.key)
        if content is None:
            log.debug("key missing or expired: key=%s data=%r", msg.key, msg.data)
            return
        if any(self._no_repeat(existing, msg.data) for existing in content.data):
            log.debug("duplicate item: key=%s data=%r", msg.key, msg.data)
            return
        content.data.append(msg.data)
        content.last_update_at = time.monotonic()
        content.total = msg.total

    def _flush(self, save: Callable[[str, list[T]], None], now: float) -> None:
        for key, content in list(self._data.items()):
            expired = now - content.last_update_at > self._expire_after
            complete = content.total > 0 and len(content.data) >= content.total
            if expired or complete:
                save(key, content.data)
                self.observer.notify(key)
                del self._data[key]