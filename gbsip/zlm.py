"""Client for the REST API of a ZLMediaKit media server."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Union
from urllib.parse import urlencode

from .utils import SipError, get_request, json_decode

log = logging.getLogger(__name__)

DEVICE_VF = {
    0: "H264",
    1: "H265",
    2: "ACC",
    3: "G711A",
    4: "G711U",
}

UNKNOWN_VF = "undefind"

QueryValues = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def trans_device_vf(codec: int) -> str:
    """Name of a codec id reported by the media server."""
    return DEVICE_VF.get(codec, UNKNOWN_VF)


@dataclass
class MediaTrack:
    """One track of a media stream."""

    codec_type: int = 0
    codec_id: int = 0
    height: int = 0
    width: int = 0
    fps: int = 0

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> MediaTrack:
        return cls(
            codec_type=data.get("codec_type", 0),
            codec_id=data.get("codec_id", 0),
            height=data.get("height", 0),
            width=data.get("width", 0),
            fps=data.get("fps", 0),
        )


@dataclass
class MediaListItem:
    """One stream known to the media server."""

    app: str = ""
    stream: str = ""
    schema: str = ""
    origin_type: int = 0
    tracks: list[MediaTrack] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> MediaListItem:
        return cls(
            app=data.get("app", ""),
            stream=data.get("stream", ""),
            schema=data.get("schema", ""),
            origin_type=data.get("originType", 0),
            tracks=[MediaTrack.from_json(track) for track in data.get("tracks") or ()],
        )


@dataclass
class MediaList:
    """Answer of ``getMediaList``."""

    code: int = 0
    data: list[MediaListItem] = field(default_factory=list)


@dataclass
class RtpInfo:
    """Answer of ``getRtpInfo``."""

    code: int = 0
    exist: bool = False


def _sprint(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _encode_sorted(values: QueryValues) -> str:
    pairs = values.items() if isinstance(values, Mapping) else values
    expanded: list[tuple[str, Any]] = []
    for key, value in sorted(pairs, key=lambda pair: pair[0]):
        if isinstance(value, (list, tuple)):
            expanded.extend((key, item) for item in value)
        else:
            expanded.append((key, value))
    return urlencode(expanded)


class ZLMClient:
    """Calls to the media server; ``fetch`` performs an HTTP GET returning the body."""

    def __init__(
        self,
        restful: str,
        secret: str,
        fetch: Callable[[str], bytes] = get_request,
    ) -> None:
        self.restful = restful
        self.secret = secret
        self._fetch = fetch

    def _url(self, path: str, query: str) -> str:
        return f"{self.restful}/index/api/{path}?{query}"

    def _get_json(self, url: str) -> Any:
        return json_decode(self._fetch(url))

    def get_media_list(
        self, stream_id: str = "", app: str = "", schema: str = "", vhost: str = ""
    ) -> MediaList:
        """Streams matching the given filters; empty when the call fails."""
        query = [("secret", self.secret)]
        for key, value in (("stream", stream_id), ("app", app), ("schema", schema), ("vhost", vhost)):
            if value:
                query.append((key, value))
        try:
            body = self._get_json(self._url("getMediaList", urlencode(query)))
        except (OSError, ValueError) as exc:
            log.error("get media list failed: %s", exc)
            return MediaList()
        if not isinstance(body, dict):
            return MediaList()
        return MediaList(
            code=body.get("code", 0),
            data=[MediaListItem.from_json(item) for item in body.get("data") or ()],
        )

    def get_media_info(self, ssrc: str) -> RtpInfo:
        """RTP state of a stream; a default answer when the call fails."""
        query = urlencode([("secret", self.secret), ("stream_id", ssrc)])
        try:
            body = self._get_json(self._url("getRtpInfo", query))
        except (OSError, ValueError) as exc:
            log.error("get rtp info failed: %s", exc)
            return RtpInfo()
        if not isinstance(body, dict):
            return RtpInfo()
        return RtpInfo(code=body.get("code", 0), exist=bool(body.get("exist", False)))

    def close_stream(self, ssrc: str) -> None:
        """Ask the server to close a stream; failures are ignored."""
        query = urlencode([("secret", self.secret), ("stream", ssrc)])
        try:
            self._fetch(self._url("close_streams", query))
        except OSError as exc:
            log.debug("close stream failed: %s", exc)

    def _command(self, path: str, values: QueryValues) -> None:
        body = self._get_json(self._url(path, _encode_sorted(values)))
        if not isinstance(body, dict) or "code" not in body or _sprint(body["code"]) != "0":
            raise SipError(None, body)

    def start_record(self, values: QueryValues) -> None:
        """Start recording; raises ``SipError`` if the server refuses."""
        self._command("startRecord", values)

    def stop_record(self, values: QueryValues) -> None:
        """Stop recording; raises ``SipError`` if the server refuses."""
        self._command("stopRecord", values)