import pytest

from gbsip.address import URI, Address
from gbsip.params import Params


def test_uri_with_user_and_port():
    uri = URI(user="alice", host="example.com", port=5060)
    assert str(uri) == "sip:alice@example.com:5060"


def test_sips_uri_with_password_params_and_headers():
    password = "password"
    uri = URI(
        is_encrypted=True,
        user="user",
        password=password,
        host="example.com",
        uri_params=Params().add("transport", "tcp"),
        headers=Params().add("subject", "call"),
    )
    assert str(uri) == "sips:user:password@example.com;transport=tcp?subject=call"


def test_uri_without_user_has_no_userinfo():
    uri = URI(host="example.com")
    text = str(uri)
    assert "@" not in text
    assert text.startswith("sip:")
    assert text.endswith("example.com")


def test_empty_user_is_not_rendered():
    assert "@" not in str(URI(user="", host="example.com"))


def test_password_without_user_is_not_rendered():
    password = "password"
    assert "password" not in str(URI(host="example.com", password=password))


def test_uri_clone_equal_and_independent():
    original = URI(user="alice", host="example.com", uri_params=Params().add("lr", None))
    copy = original.clone()
    assert copy == original
    copy.host = "other.example.com"
    copy.uri_params.add("transport", "udp")
    assert original.host == "example.com"
    assert "transport" not in original.uri_params


def test_clone_fills_missing_param_sets():
    copy = URI(host="example.com").clone()
    assert copy.uri_params is not None and len(copy.uri_params) == 0
    assert copy.headers is not None and len(copy.headers) == 0


def test_missing_params_equal_empty_params():
    assert URI(host="example.com") == URI(host="example.com", uri_params=Params())


def test_uri_inequality():
    base = URI(user="alice", host="example.com", port=5060)
    assert base != URI(user="alice", host="example.com", port=5061)
    assert base != URI(user="bob", host="example.com", port=5060)
    assert base != URI(user="alice", host="example.com", port=5060, is_encrypted=True)
    assert base != "sip:alice@example.com:5060"


def test_uri_param_difference_breaks_equality():
    left = URI(host="example.com", uri_params=Params().add("a", "1"))
    right = URI(host="example.com", uri_params=Params().add("a", "2"))
    assert left != right


@pytest.mark.parametrize("port", [-1, 70000])
def test_invalid_port_rejected(port):
    with pytest.raises(ValueError):
        URI(host="example.com", port=port)


def test_address_string():
    address = Address(uri=URI(user="alice", host="example.com"), params=Params().add("tag", "1"))
    assert str(address) == "sip:alice@example.com tag=1"


def test_address_without_params_starts_with_uri():
    address = Address(uri=URI(user="alice", host="example.com"))
    assert str(address).startswith(str(address.uri))
    assert str(address).strip() == str(address.uri)


def test_address_clone_equal_and_independent():
    original = Address(
        display_name="Alice",
        uri=URI(user="alice", host="example.com"),
        params=Params().add("tag", "1"),
    )
    copy = original.clone()
    assert copy == original
    copy.params.add("tag", "2")
    copy.uri.user = "bob"
    assert original.params.get("tag") == "1"
    assert original.uri.user == "alice"
    assert copy.display_name == "Alice"


def test_address_clone_keeps_missing_parts_missing():
    copy = Address().clone()
    assert copy.uri is None
    assert copy.params is None
    assert copy == Address()