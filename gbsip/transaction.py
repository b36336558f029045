"""Client and server transactions keyed by Call-ID, with idle expiry."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Protocol

from .message import Message, Request, Response
from .utils import rand_string

log = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT = 20.0

_PROVISIONAL_SKIPPED = frozenset({100, 101})


class Connection(Protocol):
    """Anything that can send bytes to an address."""

    def write_to(self, data: bytes, address: Any) -> int: ...


class Transaction:
    """Queue of responses for one exchange; closes itself after an idle period."""

    def __init__(
        self,
        key: str,
        conn: Connection,
        registry: TransactionRegistry | None = None,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
    ) -> None:
        self.key = key
        self.conn = conn
        self.idle_timeout = idle_timeout
        self._registry = registry
        self._responses: queue.Queue[Response | None] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._timer: threading.Timer | None = None
        self._touch()

    @property
    def closed(self) -> bool:
        """Whether the transaction has been closed."""
        return self._closed

    def _touch(self) -> None:
        with self._lock:
            if self._closed:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.idle_timeout, self.close)
            self._timer.daemon = True
            self._timer.start()

    def get_response(self, timeout: float | None = None) -> Response | None:
        """Next final response; provisional 100/101 answers are skipped.

        Returns None once the transaction is closed and raises
        ``TimeoutError`` if nothing arrives within ``timeout`` seconds.
        """
        while True:
            try:
                response = self._responses.get(timeout=timeout)
            except queue.Empty:
                raise TimeoutError(f"no response for transaction {self.key}") from None
            if response is None:
                # Keep the marker so later callers also see the close.
                self._responses.put(None)
                return None
            self._touch()
            if response.status_code in _PROVISIONAL_SKIPPED:
                continue
            return response

    def close(self) -> None:
        """Stop the transaction and drop it from its registry."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        if self._registry is not None:
            self._registry.remove(self)
        self._responses.put(None)

    def receive_response(self, response: Response) -> None:
        """Hand a received response to whoever waits; ignored once closed."""
        with self._lock:
            if self._closed:
                log.debug("response for closed transaction %s dropped", self.key)
                return
            self._responses.put(response)
        self._touch()

    def respond(self, response: Response) -> None:
        """Send ``response`` to its destination."""
        self.conn.write_to(bytes(response), response.destination)

    def request(self, request: Request) -> None:
        """Send ``request`` to its destination."""
        self.conn.write_to(bytes(request), request.destination)

    def __repr__(self) -> str:
        return f"Transaction(key={self.key!r}, closed={self._closed})"


class TransactionRegistry:
    """Thread-safe table of live transactions."""

    def __init__(self, idle_timeout: float = DEFAULT_IDLE_TIMEOUT) -> None:
        self.idle_timeout = idle_timeout
        self._txs: dict[str, Transaction] = {}
        self._lock = threading.RLock()

    def new_tx(self, key: str, conn: Connection) -> Transaction:
        """Create and store a transaction under ``key``."""
        tx = Transaction(key, conn, registry=self, idle_timeout=self.idle_timeout)
        with self._lock:
            self._txs[key] = tx
        return tx

    def get_tx(self, key: str) -> Transaction | None:
        """Transaction stored under ``key``, if any."""
        with self._lock:
            return self._txs.get(key)

    def remove(self, tx: Transaction) -> None:
        """Forget ``tx`` if it is still the one stored under its key."""
        with self._lock:
            if self._txs.get(tx.key) is tx:
                del self._txs[tx.key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._txs)


def get_tx_key(message: Message) -> str:
    """Transaction key of a message: its Call-ID header, or a random string."""
    call_id = message.call_id()
    if call_id is not None:
        return str(call_id)
    return rand_string(10)