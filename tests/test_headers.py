import dataclasses

import pytest

from gbsip.address import URI
from gbsip.headers import (
    DEFAULT_ALLOW_METHODS,
    Accept,
    AllowHeader,
    CallID,
    ContactHeader,
    ContentLength,
    ContentType,
    CSeq,
    Expires,
    FromHeader,
    GenericHeader,
    MaxForwards,
    RecordRouteHeader,
    RouteHeader,
    SupportedHeader,
    ToHeader,
    UserAgentHeader,
    ViaHeader,
    ViaHop,
    address_from_header,
)
from gbsip.params import Params

DEVICE = "00000000000000000001"


def _uri(user=DEVICE, host="10.0.0.1", port=5060):
    return URI(host=host, user=user, port=port)


def _hop(branch="z9hG4bK1"):
    return ViaHop(
        protocol_name="SIP",
        protocol_version="2.0",
        transport="UDP",
        host="10.0.0.1",
        port=5060,
        params=Params().add("branch", branch).add("rport", None),
    )


def test_content_length_wire_form():
    assert str(ContentLength(0)) == "Content-Length: 0"
    assert ContentLength(12).name == "Content-Length"


@pytest.mark.parametrize("bad", [-1, 0x1_0000_0000])
def test_count_headers_reject_out_of_range(bad):
    with pytest.raises(ValueError):
        ContentLength(bad)
    with pytest.raises(ValueError):
        MaxForwards(bad)


def test_value_headers_are_immutable_and_clone_to_self():
    call_id = CallID("abc")
    assert call_id.clone() is call_id
    with pytest.raises(dataclasses.FrozenInstanceError):
        call_id.value = "other"


def test_value_headers_compare_by_type_and_value():
    assert CallID("abc") == CallID("abc")
    assert CallID("abc") != CallID("abd")
    assert CallID("abc") != ContentType("abc")
    assert Expires(3600) == Expires(3600)


def test_simple_headers_render_name_and_value():
    for header in (CallID("x1"), ContentType("application/sdp"), UserAgentHeader("GoWVP"), Accept("a/b"), Expires(5)):
        assert str(header) == f"{header.name}: {header.value}"


def test_via_hop_wire_form():
    assert str(_hop()) == "SIP/2.0/UDP 10.0.0.1:5060;branch=z9hG4bK1;rport"


def test_via_hop_sent_by():
    hop = _hop()
    assert hop.sent_by() == f"{hop.host}:{hop.port}"
    hop.port = None
    assert hop.sent_by() == hop.host
    assert ";" in str(hop) and ":5060" not in str(hop)


def test_via_hop_clone_is_independent():
    hop = _hop()
    dup = hop.clone()
    assert dup == hop
    dup.params.add("branch", "z9hG4bK2")
    assert hop.params.get("branch") == "z9hG4bK1"
    assert dup != hop


def test_via_hop_without_params_has_no_separator():
    hop = ViaHop("SIP", "2.0", "TCP", "host", None, None)
    assert ";" not in str(hop)
    assert hop.clone() == hop


def test_via_header_joins_hops():
    via = ViaHeader([_hop("b1"), _hop("b2")])
    text = str(via)
    assert text.startswith("Via: ")
    assert text[len("Via: "):].split(", ") == [str(h) for h in via]
    assert len(via) == 2
    assert via[1].params.get("branch") == "b2"


def test_via_header_clone_deep():
    via = ViaHeader([_hop()])
    dup = via.clone()
    assert dup == via
    dup[0].host = "elsewhere"
    assert via[0].host == "10.0.0.1"


def test_cseq_wire_form_and_clone():
    cseq = CSeq(seq_no=1, method_name="INVITE")
    assert str(cseq) == "CSeq: 1 INVITE"
    dup = cseq.clone()
    dup.seq_no += 1
    assert cseq.seq_no == 1
    assert dup != cseq


def test_from_header_wire_form():
    header = FromHeader(display_name="cam", address=_uri(), params=Params().add("tag", "t1"))
    assert str(header) == f'From: "cam" <{_uri()}>;tag=t1'


def test_to_header_without_params_or_name():
    header = ToHeader(address=_uri())
    assert str(header) == f"To: <{_uri()}>"
    assert ";" not in str(header)


def test_name_addr_headers_equality_respects_type():
    from_header = FromHeader(address=_uri(), params=Params().add("tag", "t"))
    to_header = ToHeader(address=_uri(), params=Params().add("tag", "t"))
    assert from_header != to_header
    assert from_header == FromHeader(address=_uri(), params=Params().add("tag", "t"))
    assert from_header != FromHeader(address=_uri(), params=Params().add("tag", "u"))


def test_contact_clone_is_independent():
    contact = ContactHeader(address=_uri(), params=Params().add("expires", "60"))
    dup = contact.clone()
    assert dup == contact
    assert dup.address is not contact.address
    dup.params.add("expires", "0")
    assert contact.params.get("expires") == "60"


def test_allow_header_defaults():
    allow = AllowHeader()
    assert allow.methods == list(DEFAULT_ALLOW_METHODS)
    assert str(allow) == "Allow: INVITE, ACK, CANCEL, MESSAGE, REGISTER"
    dup = allow.clone()
    dup.methods.append("BYE")
    assert len(allow.methods) == len(DEFAULT_ALLOW_METHODS)


def test_supported_header():
    assert str(SupportedHeader()) == "Supported: "
    supported = SupportedHeader(["timer", "100rel"])
    assert str(supported) == "Supported: " + ", ".join(supported.options)
    assert supported.clone() == supported


def test_route_headers_render_and_clone():
    route = RouteHeader([_uri(), _uri(host="10.0.0.2")])
    assert str(route) == f"Route: <{_uri()}>, <{_uri(host='10.0.0.2')}>"
    dup = route.clone()
    assert dup == route
    assert dup.addresses[0] is not route.addresses[0]
    record = RecordRouteHeader(list(route.addresses))
    assert str(record).startswith("Record-Route: ")
    assert record != route


def test_generic_header():
    header = GenericHeader("Subject", "abc:1")
    assert header.name == "Subject"
    assert str(header) == "Subject: abc:1"
    assert header.clone() == header


def test_address_from_header_copies_parts():
    header = FromHeader(display_name="cam", address=_uri(), params=Params().add("tag", "t"))
    address = address_from_header(header)
    assert address.display_name == "cam"
    assert address.uri == header.address
    assert address.uri is not header.address
    address.params.add("tag", "changed")
    assert header.params.get("tag") == "t"


def test_address_from_header_keeps_missing_params():
    address = address_from_header(ToHeader(address=_uri()))
    assert address.params is None
    assert address.uri == _uri()