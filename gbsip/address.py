"""SIP URIs and name-addresses."""

from __future__ import annotations

from dataclasses import dataclass

from .params import Params


def _clone_or_empty(params: Params | None) -> Params:
    return Params() if params is None else params.clone()


def _same_params(left: Params | None, right: Params | None) -> bool:
    return (left if left is not None else Params()) == (
        right if right is not None else Params()
    )


@dataclass(eq=False)
class URI:
    """A ``sip:`` or ``sips:`` URI with its parameters and headers."""

    host: str = ""
    user: str | None = None
    password: str | None = None
    port: int | None = None
    is_encrypted: bool = False
    uri_params: Params | None = None
    headers: Params | None = None

    def __post_init__(self) -> None:
        if self.port is not None and not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    def __str__(self) -> str:
        parts = ["sips:" if self.is_encrypted else "sip:"]
        if self.user:
            parts.append(self.user)
            if self.password:
                parts.append(":" + self.password)
            parts.append("@")
        parts.append(self.host)
        if self.port is not None:
            parts.append(f":{self.port}")
        if self.uri_params:
            parts.append(";" + self.uri_params.to_string(";"))
        if self.headers:
            parts.append("?" + self.headers.to_string("&"))
        return "".join(parts)

    def clone(self) -> URI:
        """Deep copy; absent parameter sets become empty ones."""
        return URI(
            host=self.host,
            user=self.user,
            password=self.password,
            port=self.port,
            is_encrypted=self.is_encrypted,
            uri_params=_clone_or_empty(self.uri_params),
            headers=_clone_or_empty(self.headers),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, URI):
            return NotImplemented
        return (
            self.is_encrypted == other.is_encrypted
            and self.user == other.user
            and self.password == other.password
            and self.host == other.host
            and self.port == other.port
            and _same_params(self.uri_params, other.uri_params)
            and _same_params(self.headers, other.headers)
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass
class Address:
    """A display name, URI and header parameters, as in From/To/Contact."""

    display_name: str | None = None
    uri: URI | None = None
    params: Params | None = None

    def __str__(self) -> str:
        uri = "" if self.uri is None else str(self.uri)
        params = "" if self.params is None else str(self.params)
        return f"{uri} {params}"

    def clone(self) -> Address:
        """Deep copy of the address."""
        return Address(
            display_name=self.display_name,
            uri=None if self.uri is None else self.uri.clone(),
            params=None if self.params is None else self.params.clone(),
        )