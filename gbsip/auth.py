"""Digest (MD5) authorization parsing and response computation."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field

_FIELD = re.compile(r'(\w+)="?([^",]+)"?', re.ASCII)
_PLAIN_FIELDS = frozenset(
    {"realm", "algorithm", "nonce", "username", "uri", "response", "nc", "cnonce"}
)
_QOP_VALUES = frozenset({"auth", "auth-int"})


def _md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def calc_response(
    username: str,
    realm: str,
    password: str,
    method: str,
    uri: str,
    nonce: str,
    qop: str,
    cnonce: str,
    nc: str,
) -> str:
    """Digest response as defined by RFC 2617."""
    ha1 = _md5_hex(f"{username}:{realm}:{password}")
    ha2 = _md5_hex(f"{method}:{uri}")
    if qop:
        return _md5_hex(f"{ha1}:{nonce}:{nc}:{cnonce}:{qop}:{ha2}")
    return _md5_hex(f"{ha1}:{nonce}:{ha2}")


@dataclass
class Authorization:
    """Fields of a Digest challenge or credentials."""

    realm: str = ""
    nonce: str = ""
    algorithm: str = "MD5"
    username: str = ""
    password: str = field(default_factory=str, repr=False)
    uri: str = ""
    response: str = ""
    method: str = ""
    qop: str = ""
    nc: str = ""
    cnonce: str = ""
    other: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str:
        """Raw value of a parsed field, or an empty string."""
        return self.data.get(key, "")

    def calc_response(self) -> str:
        """Compute, store and return the digest response for these fields."""
        self.response = calc_response(
            self.username,
            self.realm,
            self.password,
            self.method,
            self.uri,
            self.nonce,
            self.qop,
            self.cnonce,
            self.nc,
        )
        return self.response

    def __str__(self) -> str:
        text = (
            f'Digest realm="{self.realm}",algorithm={self.algorithm},'
            f'nonce="{self.nonce}",username="{self.username}",'
            f'uri="{self.uri}",response="{self.response}"'
        )
        if self.qop == "auth":
            text += f',qop={self.qop},nc={self.nc},cnonce="{self.cnonce}"'
        return text


def auth_from_value(value: str) -> Authorization:
    """Parse the value of a WWW-Authenticate or Authorization header."""
    auth = Authorization()
    for match in _FIELD.finditer(value):
        key, val = match.group(1), match.group(2)
        if key in _PLAIN_FIELDS:
            setattr(auth, key, val)
        elif key == "qop":
            if any(part.strip(" ") in _QOP_VALUES for part in val.split(",")):
                auth.qop = "auth"
        else:
            auth.other[key] = val
        auth.data[key] = val
    return auth