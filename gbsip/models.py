"""SIP method names, protocol defaults and GB28181 query documents."""

from __future__ import annotations

import enum
from datetime import datetime

from .utils import rand_int, rand_string

DEFAULT_PROTOCOL = "udp"
DEFAULT_SIP_VERSION = "SIP/2.0"

CONTENT_TYPE_SDP = "application/sdp"
CONTENT_TYPE_XML = "Application/MANSCDP+xml"

RFC3261_BRANCH_MAGIC_COOKIE = "z9hG4bK"

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

CATALOG_XML = """<?xml version="1.0" encoding="GB2312"?>
<Query>
<CmdType>Catalog</CmdType>
<SN>{sn}</SN>
<DeviceID>{device_id}</DeviceID>
</Query>
"""

RECORD_INFO_XML = """<?xml version="1.0" encoding="GB2312"?>
<Query>
<CmdType>RecordInfo</CmdType>
<SN>{sn}</SN>
<DeviceID>{device_id}</DeviceID>
<StartTime>{start}</StartTime>
<EndTime>{end}</EndTime>
<Secrecy>0</Secrecy>
<Type>time</Type>
</Query>
"""

DEVICE_INFO_XML = """<?xml version="1.0" encoding="GB2312"?>
<Query>
<CmdType>DeviceInfo</CmdType>
<SN>{sn}</SN>
<DeviceID>{device_id}</DeviceID>
</Query>
"""


class Method(str, enum.Enum):
    """Standard SIP request methods."""

    INVITE = "INVITE"
    ACK = "ACK"
    CANCEL = "CANCEL"
    BYE = "BYE"
    REGISTER = "REGISTER"
    OPTIONS = "OPTIONS"
    NOTIFY = "NOTIFY"
    INFO = "INFO"
    MESSAGE = "MESSAGE"

    def __str__(self) -> str:
        return self.value


def _serial() -> int:
    return rand_int(100000, 999999)


def get_device_info_xml(device_id: str) -> bytes:
    """Query document asking a device for its details."""
    return DEVICE_INFO_XML.format(sn=_serial(), device_id=device_id).encode("utf-8")


def get_catalog_xml(device_id: str) -> bytes:
    """Query document asking a device for its channel catalog."""
    return CATALOG_XML.format(sn=_serial(), device_id=device_id).encode("utf-8")


def get_record_info_xml(device_id: str, sn: int, start: int, end: int) -> bytes:
    """Query document asking for recordings between two Unix times (local time)."""
    return RECORD_INFO_XML.format(
        sn=sn,
        device_id=device_id,
        start=datetime.fromtimestamp(start).strftime(_TIME_FORMAT),
        end=datetime.fromtimestamp(end).strftime(_TIME_FORMAT),
    ).encode("utf-8")


def generate_branch() -> str:
    """Random Via branch id carrying the RFC 3261 magic cookie."""
    return RFC3261_BRANCH_MAGIC_COOKIE + rand_string(32)