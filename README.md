# gbsip

Building blocks for GB/T 28181 signalling over SIP: header and message
models, request/response construction, digest authentication, transactions,
a handler context, a result collector, an observer for awaiting
notifications, and a small client for the ZLMediaKit HTTP API.

The package uses only the standard library.

## Installation

From a checkout of the package:

```
pip install .
```

## Modules

- `gbsip.params.Params`: ordered `key[=value]` parameters. `None` marks a
  flag parameter; values containing whitespace are quoted by `to_string`.
- `gbsip.address`: `URI` (`sip:`/`sips:` with user, password, host, port,
  URI parameters and headers) and `Address` (display name, URI, params).
- `gbsip.headers`: typed headers — `ViaHop`, `ViaHeader`, `CallID`, `CSeq`,
  `FromHeader`, `ToHeader`, `ContactHeader`, `ContentType`, `ContentLength`,
  `MaxForwards`, `Expires`, `UserAgentHeader`, `Accept`, `AllowHeader`,
  `SupportedHeader`, `RouteHeader`, `RecordRouteHeader`, `GenericHeader` —
  and `address_from_header`.
- `gbsip.builder.HeadersBuilder`: fluent builder of the usual request
  headers (random Call-ID, CSeq 1, Max-Forwards 70, a default Allow list);
  `set_from` adds a random `tag` when the address has none.
- `gbsip.message`: `Headers`, `Request`, `Response`, `copy_headers`,
  `new_response_from_request` and `new_request_from_response`. `bytes(msg)`
  gives the wire form.
- `gbsip.auth`: `auth_from_value` parses a Digest challenge or credentials
  into an `Authorization`; `calc_response` computes the RFC 2617 MD5 response.
- `gbsip.transaction`: `Transaction`, `TransactionRegistry` and `get_tx_key`
  (the Call-ID, or a random key). A transaction closes itself after 20
  seconds without activity; `get_response` skips 100 and 101 answers,
  returns `None` once closed and raises `TimeoutError` on timeout.
- `gbsip.context.Context`: runs a request through a chain of handlers, with
  `next`, `abort`, `abort_with`, `respond` and a small value cache
  (`set`, `get`, `get_str`, `get_int`).
- `gbsip.collector`: `Collector` and `CollectorMsg` gather items reported
  piece by piece under a key and call a save function once the expected
  total has arrived or the key has been idle for too long.
- `gbsip.observer.Observer`: block until a notification for a key arrives
  or a timeout passes.
- `gbsip.zlm`: `ZLMClient` queries and controls streams on a ZLMediaKit
  server (`get_media_list`, `get_media_info`, `close_stream`,
  `start_record`, `stop_record`); `trans_device_vf` names codec ids.
- `gbsip.models`: the `Method` enum, protocol defaults, GB/T 28181 query
  bodies (`get_catalog_xml`, `get_device_info_xml`, `get_record_info_xml`)
  and `generate_branch`.
- `gbsip.utils`: `SipError`, JSON and XML helpers (`xml_decode` accepts
  UTF-8 as well as GB2312/GBK documents; `xml_encode` writes GBK with a
  GB2312 declaration), GBK/UTF-8 conversion, simple HTTP GET/POST,
  `rand_int`, `rand_string` and `resolve_self_ip`.

## Building a request

```python
from gbsip.address import Address, URI
from gbsip.builder import HeadersBuilder
from gbsip.headers import ViaHop
from gbsip.message import Request
from gbsip.models import Method, get_catalog_xml
from gbsip.params import Params

server = Address(uri=URI(user="00000000002000000001", host="192.0.2.1"), params=Params())
device = Address(uri=URI(user="00000000001320000001", host="192.0.2.10"), params=Params())

headers = (
    HeadersBuilder()
    .set_from(server)
    .set_to(device)
    .add_via(ViaHop())
    .set_method(Method.MESSAGE)
    .build()
)
request = Request(Method.MESSAGE, device.uri, headers=headers,
                  body=get_catalog_xml("00000000001320000001"))
print(str(request))
```

## Digest authentication

```python
from gbsip.auth import auth_from_value, calc_response

challenge = auth_from_value('Digest realm="example.com",nonce="abc123"')
password = "password"
challenge.username = "alice"
challenge.password = password
challenge.method = "REGISTER"
challenge.uri = "sip:example.com"
print(challenge.calc_response())

digest = calc_response("alice", "example.com", password, "REGISTER",
                       "sip:example.com", "abc123", "", "", "")
```

## Media server

```python
from gbsip.zlm import ZLMClient

zlm = ZLMClient("http://127.0.0.1", secret="secret")
info = zlm.get_media_info("0200000001")
print(info.exist)
```

`ZLMClient` takes an optional `fetch` callable used for HTTP GET, so it can
be pointed at another transport or a stub.

## What the package does not do

There is no SIP server here: nothing listens on UDP or TCP, parses incoming
datagrams into messages or routes them to handlers. `Transaction` sends
through any object with a `write_to(data, address)` method, and `Context`
expects the caller to build it from a request it has received. There is no
device registry, no stream bookkeeping and no storage; those are left to the
application using these pieces. The package has no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```