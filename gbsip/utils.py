"""Shared helpers: errors, JSON and XML coding, HTTP calls, random values."""

from __future__ import annotations

import ipaddress
import json
import logging
import random
import re
import socket
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET
from typing import Any

log = logging.getLogger(__name__)

LETTERS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
XML_HEADER = '<?xml version="1.0" encoding="GB2312"?>\n'

_HTTP_TIMEOUT = 30.0
_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>", re.S)


def _sprint(params: tuple[Any, ...]) -> str:
    """Join values, adding a space between two neighbours that are not strings."""
    parts: list[str] = []
    previous_is_str = True
    for position, value in enumerate(params):
        is_str = isinstance(value, str)
        if position and not is_str and not previous_is_str:
            parts.append(" ")
        parts.append(str(value))
        previous_is_str = is_str
    return "".join(parts)


class SipError(Exception):
    """An error carrying descriptive values and an optional cause."""

    def __init__(self, err: BaseException | None = None, *params: Any) -> None:
        super().__init__(err, *params)
        self.err = err
        self.params = params

    def __str__(self) -> str:
        text = _sprint(self.params)
        if self.err is not None:
            text += f" err:{self.err}"
        return text


def json_encode(data: Any) -> bytes:
    """Serialise ``data`` as compact UTF-8 JSON."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def json_decode(data: bytes | str) -> Any:
    """Parse a JSON document; raises ``ValueError`` on malformed input."""
    return json.loads(data)


def rand_int(low: int, high: int) -> int:
    """Random integer in ``[low, high]``, or 0 when the range is empty."""
    if high < low:
        return 0
    return random.randint(low, high)


def rand_string(n: int) -> str:
    """Random alphanumeric string of length ``n``."""
    return "".join(random.choices(LETTERS, k=max(n, 0)))


def _send(request: urllib.request.Request) -> bytes:
    try:
        with urllib.request.urlopen(request, timeout=_HTTP_TIMEOUT) as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        # The body of an error status is still a usable answer.
        with exc:
            return exc.read()


def get_request(url: str) -> bytes:
    """Perform an HTTP GET and return the response body."""
    return _send(urllib.request.Request(url, method="GET"))


def post_request(url: str, body_type: str, body: Any) -> bytes:
    """POST ``body`` (bytes or a readable object) with the given content type."""
    data = body.read() if hasattr(body, "read") else bytes(body)
    request = urllib.request.Request(
        url, data=data, headers={"Content-Type": body_type}, method="POST"
    )
    return _send(request)


def post_json_request(url: str, data: Any) -> bytes:
    """POST ``data`` encoded as JSON."""
    return post_request(url, "application/json;charset=UTF-8", json_encode(data))


def _parse_xml(data: bytes) -> ET.Element:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = data.decode("gb18030")
    return ET.fromstring(_DECLARATION.sub("", text, count=1))


def xml_decode(data: bytes) -> ET.Element:
    """Parse an XML document that may be UTF-8, GB2312/GB18030 or undeclared GBK."""
    try:
        return _parse_xml(data)
    except (ET.ParseError, UnicodeDecodeError):
        return _parse_xml(gbk_to_utf8(data))


def xml_encode(element: ET.Element) -> bytes:
    """Serialise ``element`` with a GB2312 declaration, encoded as GBK."""
    body = ET.tostring(element, encoding="unicode")
    return utf8_to_gbk((XML_HEADER + body).encode("utf-8"))


def resolve_self_ip() -> ipaddress.IPv4Address:
    """Return a non-loopback IPv4 address of this host."""
    candidates: list[str] = []
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            # Connecting a datagram socket sends nothing; it only picks a route.
            probe.connect(("192.0.2.1", 9))
            candidates.append(probe.getsockname()[0])
    except OSError:
        pass
    try:
        candidates.extend(socket.gethostbyname_ex(socket.gethostname())[2])
    except OSError:
        pass
    for candidate in candidates:
        try:
            ip = ipaddress.ip_address(candidate)
        except ValueError:
            continue
        if ip.version == 4 and not ip.is_loopback and not ip.is_unspecified:
            return ip
    raise OSError("server not connected to any network")


def gbk_to_utf8(data: bytes) -> bytes:
    """Convert GBK bytes to UTF-8, replacing undecodable sequences."""
    return data.decode("gbk", errors="replace").encode("utf-8")


def utf8_to_gbk(data: bytes) -> bytes:
    """Convert UTF-8 bytes to GBK; raises ``UnicodeEncodeError`` if impossible."""
    return data.decode("utf-8").encode("gbk")