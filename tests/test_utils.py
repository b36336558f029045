import ipaddress
import threading
import xml.etree.ElementTree as ET
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest import mock

import pytest

from gbsip.utils import (
    LETTERS,
    XML_HEADER,
    SipError,
    gbk_to_utf8,
    get_request,
    json_decode,
    json_encode,
    post_json_request,
    post_request,
    rand_int,
    rand_string,
    resolve_self_ip,
    utf8_to_gbk,
    xml_decode,
    xml_encode,
)


class _EchoHandler(BaseHTTPRequestHandler):
    def _reply(self, status, body):
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path.startswith("/missing"):
            self._reply(404, b"nope")
        else:
            self._reply(200, self.path.encode())

    def do_POST(self):
        length = int(self.headers["Content-Length"])
        data = self.rfile.read(length)
        self._reply(200, self.headers["Content-Type"].encode() + b"|" + data)

    def log_message(self, *args):
        pass


@pytest.fixture
def server_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _EchoHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_sip_error_message():
    assert str(SipError(None, "device", "offline")) == "deviceoffline"


def test_sip_error_with_cause():
    error = SipError(ValueError("boom"), "device", "offline")
    assert str(error) == "deviceoffline err:boom"
    assert isinstance(error.err, ValueError)


def test_json_round_trip():
    data = {"code": 0, "data": [{"app": "rtp", "stream": "abc"}]}
    assert json_decode(json_encode(data)) == data


def test_json_encode_compact():
    assert json_encode({"code": 0}) == b'{"code":0}'


def test_json_decode_invalid():
    with pytest.raises(ValueError):
        json_decode(b"{not json")


def test_rand_int_range():
    values = [rand_int(10, 20) for _ in range(200)]
    assert all(10 <= v <= 20 for v in values)


def test_rand_int_empty_range():
    assert rand_int(5, 1) == 0
    assert rand_int(3, 3) == 3


def test_rand_string():
    text = rand_string(32)
    assert len(text) == 32
    assert set(text) <= set(LETTERS)
    assert rand_string(0) == ""


def test_gbk_round_trip():
    original = "摄像头通道".encode("utf-8")
    gbk = utf8_to_gbk(original)
    assert gbk == "摄像头通道".encode("gbk")
    assert gbk_to_utf8(gbk) == original


def test_ascii_unchanged_by_gbk():
    assert utf8_to_gbk(b"abc") == b"abc"


def test_utf8_to_gbk_unencodable():
    with pytest.raises(UnicodeEncodeError):
        utf8_to_gbk("🙂".encode("utf-8"))


def test_xml_decode_gb2312_document():
    text = '<?xml version="1.0" encoding="GB2312"?><Notify><CmdType>Catalog</CmdType><Name>摄像头</Name></Notify>'
    root = xml_decode(text.encode("gbk"))
    assert root.tag == "Notify"
    assert root.findtext("Name") == "摄像头"


def test_xml_decode_undeclared_gbk():
    root = xml_decode("<Response><Name>摄像头</Name></Response>".encode("gbk"))
    assert root.findtext("Name") == "摄像头"


def test_xml_decode_utf8():
    root = xml_decode("<Query><CmdType>Keepalive</CmdType></Query>".encode("utf-8"))
    assert root.findtext("CmdType") == "Keepalive"


def test_xml_decode_garbage():
    with pytest.raises(ET.ParseError):
        xml_decode(b"<Query><CmdType>")


def test_xml_encode_round_trip():
    element = ET.Element("Response")
    ET.SubElement(element, "Name").text = "摄像头"
    data = xml_encode(element)
    assert data.startswith(XML_HEADER.encode())
    assert "摄像头".encode("gbk") in data
    assert xml_decode(data).findtext("Name") == "摄像头"


def test_get_request(server_url):
    assert get_request(server_url + "/index/api/getMediaList?app=rtp") == b"/index/api/getMediaList?app=rtp"


def test_get_request_error_status_returns_body(server_url):
    assert get_request(server_url + "/missing") == b"nope"


def test_post_request(server_url):
    assert post_request(server_url, "text/plain", b"hello") == b"text/plain|hello"


def test_post_json_request(server_url):
    payload = {"stream": "abc"}
    body = post_json_request(server_url, payload)
    content_type, _, data = body.partition(b"|")
    assert content_type == b"application/json;charset=UTF-8"
    assert json_decode(data) == payload


def test_resolve_self_ip_skips_loopback():
    with mock.patch("gbsip.utils.socket.socket", side_effect=OSError), mock.patch(
        "gbsip.utils.socket.gethostbyname_ex",
        return_value=("host", [], ["127.0.0.1", "10.1.2.3"]),
    ):
        assert resolve_self_ip() == ipaddress.IPv4Address("10.1.2.3")


def test_resolve_self_ip_without_network():
    with mock.patch("gbsip.utils.socket.socket", side_effect=OSError), mock.patch(
        "gbsip.utils.socket.gethostbyname_ex",
        return_value=("host", [], ["127.0.0.1"]),
    ):
        with pytest.raises(OSError, match="not connected"):
            resolve_self_ip()