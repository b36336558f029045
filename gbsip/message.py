"""SIP messages: ordered header storage, requests and responses."""

from __future__ import annotations

import abc
import uuid
from typing import Any, Iterable, TypeVar

from .address import URI
from .headers import (
    CallID,
    ContactHeader,
    ContentLength,
    ContentType,
    CSeq,
    FromHeader,
    Header,
    RecordRouteHeader,
    RouteHeader,
    ToHeader,
    ViaHeader,
    ViaHop,
)
from .models import DEFAULT_PROTOCOL, DEFAULT_SIP_VERSION, Method, generate_branch
from .params import Params

H = TypeVar("H", bound=Header)


class Headers:
    """Headers grouped by case-insensitive name, kept in first-seen order."""

    def __init__(self, headers: Iterable[Header] | None = None) -> None:
        self._headers: dict[str, list[Header]] = {}
        for header in headers or ():
            self.append_header(header)

    def append_header(self, header: Header) -> None:
        """Add ``header`` after any others of the same name."""
        self._headers.setdefault(header.name.lower(), []).append(header)

    def get_headers(self, name: str) -> list[Header]:
        """All headers called ``name`` (any case), in order."""
        return list(self._headers.get(name.lower(), ()))

    def remove_header(self, name: str) -> None:
        """Drop every header called ``name``."""
        self._headers.pop(name.lower(), None)

    def all(self) -> list[Header]:
        """Every header, grouped by name in first-seen order."""
        return [header for group in self._headers.values() for header in group]

    def clone_headers(self) -> list[Header]:
        """Copies of every header, in order."""
        return [header.clone() for header in self.all()]

    def _first(self, name: str, kind: type[H]) -> H | None:
        group = self._headers.get(name.lower())
        if group and isinstance(group[0], kind):
            return group[0]
        return None

    def via(self) -> ViaHeader | None:
        """The top Via header."""
        return self._first("Via", ViaHeader)

    def via_hop(self) -> ViaHop | None:
        """The first hop of the top Via header."""
        via = self.via()
        if via is None or not via.hops:
            return None
        return via.hops[0]

    def call_id(self) -> CallID | None:
        """The Call-ID header."""
        return self._first("Call-ID", CallID)

    def cseq(self) -> CSeq | None:
        """The CSeq header."""
        return self._first("CSeq", CSeq)

    def contact(self) -> ContactHeader | None:
        """The first Contact header."""
        return self._first("Contact", ContactHeader)

    def content_length(self) -> ContentLength | None:
        """The Content-Length header."""
        return self._first("Content-Length", ContentLength)

    def content_type(self) -> ContentType | None:
        """The Content-Type header."""
        return self._first("Content-Type", ContentType)

    def from_header(self) -> FromHeader | None:
        """The From header."""
        return self._first("From", FromHeader)

    def to_header(self) -> ToHeader | None:
        """The To header."""
        return self._first("To", ToHeader)

    def __str__(self) -> str:
        return "".join(f"{header}\r\n" for header in self.all())


class Message(Headers, abc.ABC):
    """Common part of SIP requests and responses (RFC 3261, section 7)."""

    def __init__(
        self,
        sip_version: str,
        headers: Iterable[Header] | None,
        body: bytes,
        message_id: str | None,
    ) -> None:
        super().__init__(headers)
        self.message_id = message_id or str(uuid.uuid4())
        self.sip_version = sip_version
        self.body = b""
        self.source: Any = None
        self.destination: Any = None
        self.conn: Any = None
        if body:
            self.set_body(body, True)

    @abc.abstractmethod
    def start_line(self) -> str:
        """First line of the message."""

    def set_body(self, body: bytes | str, set_content_length: bool) -> None:
        """Replace the body, optionally setting Content-Length to its size."""
        self.body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        if set_content_length:
            length = ContentLength(len(self.body))
            group = self._headers.get("content-length")
            if group:
                group[0] = length
            else:
                self.append_header(length)

    def transport(self) -> str:
        """Transport of the top Via hop, or the default protocol."""
        hop = self.via_hop()
        return DEFAULT_PROTOCOL if hop is None else hop.transport

    def __bytes__(self) -> bytes:
        head = f"{self.start_line()}\r\n{Headers.__str__(self)}\r\n"
        return head.encode("utf-8") + self.body

    def __str__(self) -> str:
        return bytes(self).decode("utf-8", errors="replace")


class Request(Message):
    """A SIP request."""

    def __init__(
        self,
        method: str,
        recipient: URI | None,
        sip_version: str = DEFAULT_SIP_VERSION,
        headers: Iterable[Header] | None = None,
        body: bytes = b"",
        message_id: str | None = None,
    ) -> None:
        self.method = str(method)
        self.recipient = recipient
        super().__init__(sip_version, headers, body, message_id)

    def start_line(self) -> str:
        """Request line: method, Request-URI and version."""
        return f"{self.method} {self.recipient} {self.sip_version}"

    def clone(self) -> Request:
        """Copy with a fresh message id."""
        return Request(
            self.method,
            None if self.recipient is None else self.recipient.clone(),
            self.sip_version,
            self.clone_headers(),
            self.body,
        )

    def is_invite(self) -> bool:
        """Whether this is an INVITE."""
        return self.method == Method.INVITE

    def is_ack(self) -> bool:
        """Whether this is an ACK."""
        return self.method == Method.ACK

    def is_cancel(self) -> bool:
        """Whether this is a CANCEL."""
        return self.method == Method.CANCEL


class Response(Message):
    """A SIP response."""

    def __init__(
        self,
        status_code: int,
        reason: str,
        sip_version: str = DEFAULT_SIP_VERSION,
        headers: Iterable[Header] | None = None,
        body: bytes = b"",
        message_id: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(sip_version, headers, body, message_id)

    def start_line(self) -> str:
        """Status line: version, status code and reason."""
        return f"{self.sip_version} {self.status_code} {self.reason}"

    def clone(self) -> Response:
        """Copy with a fresh message id."""
        return Response(
            self.status_code,
            self.reason,
            self.sip_version,
            self.clone_headers(),
            self.body,
        )

    def _cseq_method_is(self, method: Method) -> bool:
        cseq = self.cseq()
        return cseq is not None and cseq.method_name == method

    def is_ack(self) -> bool:
        """Whether this answers an ACK."""
        return self._cseq_method_is(Method.ACK)

    def is_cancel(self) -> bool:
        """Whether this answers a CANCEL."""
        return self._cseq_method_is(Method.CANCEL)


def copy_headers(name: str, source: Headers, target: Headers) -> None:
    """Append copies of every ``name`` header of ``source`` to ``target``."""
    for header in source.get_headers(name):
        target.append_header(header.clone())


def new_request_from_response(method: str, response: Response) -> Request:
    """In-dialog request (such as ACK or BYE) built from an INVITE response."""
    contact = response.contact()
    if contact is None:
        raise ValueError("response has no Contact header")
    request = Request(
        method,
        contact.address,
        response.sip_version,
        message_id=response.message_id,
    )

    copy_headers("Via", response, request)
    hop = request.via_hop()
    if hop is None:
        raise ValueError("response has no Via header")
    if hop.params is None:
        hop.params = Params()
    # A 2xx ACK is a separate transaction and needs its own branch.
    hop.params.add("branch", generate_branch())

    if response.get_headers("Route"):
        copy_headers("Route", response, request)
    else:
        for record_route in response.get_headers("Record-Route"):
            if isinstance(record_route, RecordRouteHeader):
                request.append_header(
                    RouteHeader([uri.clone() for uri in record_route.addresses])
                )

    copy_headers("From", response, request)
    copy_headers("To", response, request)
    copy_headers("Call-ID", response, request)

    cseq = response.cseq()
    if cseq is None:
        raise ValueError("response has no CSeq header")
    cseq = cseq.clone()
    cseq.method_name = str(method)
    # ACK and CANCEL reuse the number of the request they refer to.
    if method not in (Method.ACK, Method.CANCEL):
        cseq.seq_no += 1
    request.append_header(cseq)

    request.source = response.destination
    request.destination = response.source
    return request


def new_response_from_request(
    request: Request, status_code: int, reason: str, body: bytes = b""
) -> Response:
    """Response to ``request`` carrying its dialog headers."""
    response = Response(status_code, reason, request.sip_version)
    for name in ("Record-Route", "Via", "From", "To", "Call-ID", "CSeq"):
        copy_headers(name, request, response)
    if status_code == 100:
        copy_headers("Timestamp", request, response)
    response.source = request.destination
    response.destination = request.source
    if body:
        response.set_body(body, True)
    return response