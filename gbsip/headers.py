"""SIP header types."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import ClassVar, Iterator

from .address import URI, Address
from .models import Method
from .params import Params

DEFAULT_ALLOW_METHODS: tuple[str, ...] = tuple(
    method.value
    for method in (
        Method.INVITE,
        Method.ACK,
        Method.CANCEL,
        Method.MESSAGE,
        Method.REGISTER,
    )
)

_UINT32_MAX = 0xFFFFFFFF


class Header:
    """Base of every SIP header: a name, a wire form and a copy operation."""

    name: ClassVar[str] = ""

    def clone(self) -> Header:
        """Independent copy of the header."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class _SimpleHeader(Header):
    """Immutable header holding a single value."""

    value: object

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"

    def clone(self) -> Header:
        return self


@dataclass(frozen=True)
class _CountHeader(_SimpleHeader):
    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"{self.name} value must be int")
        if not 0 <= self.value <= _UINT32_MAX:
            raise ValueError(f"{self.name} value out of range: {self.value}")


@dataclass(frozen=True)
class ContentLength(_CountHeader):
    """'Content-Length' header."""

    value: int
    name: ClassVar[str] = "Content-Length"


@dataclass(frozen=True)
class MaxForwards(_CountHeader):
    """'Max-Forwards' header."""

    value: int
    name: ClassVar[str] = "Max-Forwards"


@dataclass(frozen=True)
class Expires(_CountHeader):
    """'Expires' header."""

    value: int
    name: ClassVar[str] = "Expires"


@dataclass(frozen=True)
class CallID(_SimpleHeader):
    """'Call-ID' header."""

    value: str
    name: ClassVar[str] = "Call-ID"


@dataclass(frozen=True)
class ContentType(_SimpleHeader):
    """'Content-Type' header."""

    value: str
    name: ClassVar[str] = "Content-Type"


@dataclass(frozen=True)
class UserAgentHeader(_SimpleHeader):
    """'User-Agent' header."""

    value: str
    name: ClassVar[str] = "User-Agent"


@dataclass(frozen=True)
class Accept(_SimpleHeader):
    """'Accept' header."""

    value: str
    name: ClassVar[str] = "Accept"


@dataclass
class ViaHop:
    """One element of a Via header, added by one node of the routing chain."""

    protocol_name: str = ""
    protocol_version: str = ""
    transport: str = ""
    host: str = ""
    port: int | None = None
    params: Params | None = field(default_factory=Params)

    def sent_by(self) -> str:
        """``host[:port]`` of this hop."""
        return self.host if self.port is None else f"{self.host}:{self.port}"

    def __str__(self) -> str:
        text = f"{self.protocol_name}/{self.protocol_version}/{self.transport} {self.sent_by()}"
        if self.params:
            text += ";" + self.params.to_string(";")
        return text

    def clone(self) -> ViaHop:
        """Independent copy of the hop."""
        return ViaHop(
            protocol_name=self.protocol_name,
            protocol_version=self.protocol_version,
            transport=self.transport,
            host=self.host,
            port=self.port,
            params=None if self.params is None else self.params.clone(),
        )


@dataclass
class ViaHeader(Header):
    """'Via' header: an ordered list of hops."""

    hops: list[ViaHop] = field(default_factory=list)
    name: ClassVar[str] = "Via"

    def __iter__(self) -> Iterator[ViaHop]:
        return iter(self.hops)

    def __len__(self) -> int:
        return len(self.hops)

    def __getitem__(self, index: int) -> ViaHop:
        return self.hops[index]

    def __str__(self) -> str:
        return "Via: " + ", ".join(str(hop) for hop in self.hops)

    def clone(self) -> ViaHeader:
        return ViaHeader([hop.clone() for hop in self.hops])


@dataclass
class CSeq(Header):
    """'CSeq' header: sequence number and method."""

    seq_no: int = 0
    method_name: str = ""
    name: ClassVar[str] = "CSeq"

    def __post_init__(self) -> None:
        if not 0 <= self.seq_no <= _UINT32_MAX:
            raise ValueError(f"CSeq number out of range: {self.seq_no}")

    def __str__(self) -> str:
        return f"CSeq: {self.seq_no} {self.method_name}"

    def clone(self) -> CSeq:
        return CSeq(seq_no=self.seq_no, method_name=self.method_name)


@dataclass
class _NameAddrHeader(Header):
    """Header carrying an optional display name, a URI and parameters."""

    display_name: str | None = None
    address: URI | None = None
    params: Params | None = None

    def __str__(self) -> str:
        parts = [f"{self.name}: "]
        if self.display_name:
            parts.append(f'"{self.display_name}" ')
        parts.append(f"<{'' if self.address is None else self.address}>")
        if self.params:
            parts.append(";" + self.params.to_string(";"))
        return "".join(parts)

    def clone(self) -> _NameAddrHeader:
        return type(self)(
            display_name=self.display_name,
            address=None if self.address is None else self.address.clone(),
            params=None if self.params is None else self.params.clone(),
        )


@dataclass
class ToHeader(_NameAddrHeader):
    """'To' header."""

    name: ClassVar[str] = "To"


@dataclass
class FromHeader(_NameAddrHeader):
    """'From' header."""

    name: ClassVar[str] = "From"


@dataclass
class ContactHeader(_NameAddrHeader):
    """'Contact' header."""

    name: ClassVar[str] = "Contact"


@dataclass
class AllowHeader(Header):
    """'Allow' header listing supported methods."""

    methods: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOW_METHODS))
    name: ClassVar[str] = "Allow"

    def __str__(self) -> str:
        return "Allow: " + ", ".join(str(method) for method in self.methods)

    def clone(self) -> AllowHeader:
        return AllowHeader(list(self.methods))


@dataclass
class SupportedHeader(Header):
    """'Supported' header listing option tags."""

    options: list[str] = field(default_factory=list)
    name: ClassVar[str] = "Supported"

    def __str__(self) -> str:
        return "Supported: " + ", ".join(self.options)

    def clone(self) -> SupportedHeader:
        return SupportedHeader(list(self.options))


@dataclass
class _RouteLikeHeader(Header):
    addresses: list[URI] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.name}: " + ", ".join(f"<{uri}>" for uri in self.addresses)

    def clone(self) -> _RouteLikeHeader:
        return type(self)([uri.clone() for uri in self.addresses])


@dataclass
class RouteHeader(_RouteLikeHeader):
    """'Route' header."""

    name: ClassVar[str] = "Route"


@dataclass
class RecordRouteHeader(_RouteLikeHeader):
    """'Record-Route' header."""

    name: ClassVar[str] = "Record-Route"


@dataclass
class GenericHeader(Header):
    """A header without a dedicated type, kept as raw text."""

    header_name: str = ""
    contents: str = ""

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.header_name

    def __str__(self) -> str:
        return f"{self.header_name}: {self.contents}"

    def clone(self) -> GenericHeader:
        return GenericHeader(self.header_name, self.contents)


def address_from_header(header: _NameAddrHeader) -> Address:
    """Address made from a From, To or Contact header, with copied URI and params."""
    return Address(
        display_name=header.display_name,
        uri=None if header.address is None else header.address.clone(),
        params=None if header.params is None else header.params.clone(),
    )