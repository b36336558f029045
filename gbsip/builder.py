"""Assemble the usual header set of an outgoing request."""

from __future__ import annotations

from .address import Address
from .headers import (
    DEFAULT_ALLOW_METHODS,
    AllowHeader,
    CallID,
    ContactHeader,
    ContentType,
    CSeq,
    FromHeader,
    Header,
    MaxForwards,
    SupportedHeader,
    ToHeader,
    UserAgentHeader,
    ViaHeader,
    ViaHop,
)
from .params import Params
from .utils import rand_string

DEFAULT_USER_AGENT = "gbsip"
DEFAULT_MAX_FORWARDS = 70

_UINT32_MAX = 0xFFFFFFFF


def _prepared(address: Address, host: str) -> Address:
    if address.uri is None:
        raise ValueError("address has no URI")
    address = address.clone()
    if not address.uri.host:
        address.uri.host = host
    return address


class HeadersBuilder:
    """Fluent builder of request headers with sensible defaults."""

    def __init__(self, *, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.protocol = "SIP"
        self.protocol_version = "2.0"
        self.host = "localhost"
        self.transport = "UDP"
        self.method = ""
        self._content_type: ContentType | None = None
        self._from: FromHeader | None = None
        self._to: ToHeader | None = None
        self._contact: ContactHeader | None = None
        self._via: list[ViaHop] = []
        self._cseq = CSeq(seq_no=1)
        self._call_id = CallID(rand_string(32))
        self._user_agent = UserAgentHeader(user_agent)
        self._max_forwards = MaxForwards(DEFAULT_MAX_FORWARDS)
        self._allow = AllowHeader(list(DEFAULT_ALLOW_METHODS))
        self._supported = SupportedHeader([])

    def build(self) -> list[Header]:
        """Headers in wire order; unset ones are left out."""
        headers: list[Header] = [self._supported, self._allow]
        if self._via:
            headers.append(ViaHeader(list(self._via)))
        headers.append(self._cseq)
        if self._from is not None:
            headers.append(self._from)
        if self._to is not None:
            headers.append(self._to)
        headers.append(self._call_id)
        if self._contact is not None:
            headers.append(self._contact)
        headers.extend([self._max_forwards, self._user_agent])
        if self._content_type is not None:
            headers.append(self._content_type)
        return headers

    def set_method(self, method: str) -> HeadersBuilder:
        """Set the request method, also in CSeq."""
        self.method = str(method)
        self._cseq.method_name = str(method)
        return self

    def set_seq_no(self, seq_no: int) -> HeadersBuilder:
        """Set the CSeq number."""
        if not 0 <= seq_no <= _UINT32_MAX:
            raise ValueError(f"CSeq number out of range: {seq_no}")
        self._cseq.seq_no = seq_no
        return self

    def set_from(self, address: Address) -> HeadersBuilder:
        """Set From from a copy of ``address``, adding a random tag if missing."""
        address = _prepared(address, self.host)
        if address.params is None:
            address.params = Params()
        if "tag" not in address.params:
            address.params.add("tag", rand_string(32))
        self._from = FromHeader(
            display_name=address.display_name, address=address.uri, params=address.params
        )
        return self

    def set_to(self, address: Address | None) -> HeadersBuilder:
        """Set To from ``address`` without its parameters; ``None`` is ignored."""
        if address is None:
            return self
        address = _prepared(address, self.host)
        self._to = ToHeader(display_name=address.display_name, address=address.uri)
        return self

    def set_to_with_param(self, address: Address) -> HeadersBuilder:
        """Set To from ``address`` keeping its parameters (such as the tag)."""
        address = _prepared(address, self.host)
        self._to = ToHeader(
            display_name=address.display_name, address=address.uri, params=address.params
        )
        return self

    def set_contact(self, address: Address) -> HeadersBuilder:
        """Set Contact from a copy of ``address``."""
        address = _prepared(address, self.host)
        self._contact = ContactHeader(
            display_name=address.display_name, address=address.uri, params=address.params
        )
        return self

    def add_via(self, via: ViaHop) -> HeadersBuilder:
        """Append a Via hop, filling its empty fields with the builder's defaults."""
        via.protocol_name = via.protocol_name or self.protocol
        via.protocol_version = via.protocol_version or self.protocol_version
        via.transport = via.transport or self.transport
        via.host = via.host or self.host
        if via.params is None:
            via.params = Params()
        self._via.append(via)
        return self

    def set_content_type(self, content_type: ContentType | str | None) -> HeadersBuilder:
        """Set or clear the Content-Type."""
        if isinstance(content_type, str):
            content_type = ContentType(content_type)
        self._content_type = content_type
        return self

    def set_call_id(self, call_id: CallID | str | None) -> HeadersBuilder:
        """Replace the Call-ID; ``None`` keeps the current one."""
        if call_id is not None:
            self._call_id = call_id if isinstance(call_id, CallID) else CallID(call_id)
        return self