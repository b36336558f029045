"""Per-request handler chain with a small value cache."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from .address import Address
from .headers import address_from_header
from .message import Request, new_response_from_request

log = logging.getLogger(__name__)

ABORT_INDEX = 127 >> 1

HandlerFunc = Callable[["Context"], None]


class Context:
    """State passed through the handlers that process one incoming request."""

    def __init__(
        self,
        request: Request,
        tx: Any,
        handlers: Iterable[HandlerFunc] = (),
        *,
        server: Any = None,
        from_address: Address | None = None,
    ) -> None:
        self.request = request
        self.tx = tx
        self.handlers: list[HandlerFunc] = list(handlers)
        self.server = server
        self.from_address = from_address
        self._index = -1
        self._cache: dict[str, Any] = {}
        self.device_id = ""
        self.host = ""
        self.port = ""
        self.source: Any = None
        self.to: Address | None = None
        self.log: logging.Logger | logging.LoggerAdapter = log
        try:
            self._parse_request()
        except ValueError as exc:
            log.error("parse request: %s", exc)

    def _parse_request(self) -> None:
        header = self.request.from_header()
        if header is None:
            raise ValueError("request has no From header")
        if header.address is None:
            raise ValueError("From header has no address")
        user = header.address.user
        if user is None:
            raise ValueError("From address has no user")
        self.device_id = user
        self.host = header.address.host
        hop = self.request.via_hop()
        if hop is None:
            raise ValueError("request has no Via header")
        self.host = hop.host
        self.port = "" if hop.port is None else str(hop.port)
        self.source = self.request.source
        self.to = address_from_header(header)
        self.log = logging.LoggerAdapter(
            log, {"device_id": self.device_id, "host": self.host}
        )

    def next(self) -> None:
        """Run the remaining handlers in order until done or aborted."""
        self._index += 1
        while self._index < len(self.handlers):
            handler = self.handlers[self._index]
            if handler is not None:
                handler(self)
            self._index += 1

    def get_header(self, key: str) -> str:
        """Value of the first ``key`` header, when it holds a single colon."""
        headers = self.request.get_headers(key)
        if headers:
            parts = str(headers[0]).split(":")
            if len(parts) == 2:
                return parts[1].strip()
        return ""

    def abort(self) -> None:
        """Skip every handler not yet run."""
        self._index = ABORT_INDEX

    @property
    def aborted(self) -> bool:
        """Whether :meth:`abort` was called."""
        return self._index >= ABORT_INDEX

    def abort_with(self, status: int, msg: str) -> None:
        """Abort the chain and answer with ``status`` and reason ``msg``."""
        self.abort()
        self.respond(status, msg)

    def respond(self, status: int, msg: str) -> None:
        """Answer the request with ``status`` and reason ``msg``; send errors are logged."""
        response = new_response_from_request(self.request, status, msg)
        try:
            self.tx.respond(response)
        except OSError as exc:
            self.log.error("respond failed: %s", exc)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` for later handlers."""
        self._cache[key] = value

    def get(self, key: str) -> Any:
        """Stored value, or None when absent."""
        return self._cache.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def get_str(self, key: str) -> str:
        """Stored string, or an empty string when absent."""
        if key not in self._cache:
            return ""
        value = self._cache[key]
        if not isinstance(value, str):
            raise TypeError(f"value of {key!r} is {type(value).__name__}, not str")
        return value

    def get_int(self, key: str) -> int:
        """Stored integer, or 0 when absent."""
        if key not in self._cache:
            return 0
        value = self._cache[key]
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"value of {key!r} is {type(value).__name__}, not int")
        return value