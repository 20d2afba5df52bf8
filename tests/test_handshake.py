"""Tests for the HTTP polling handshake."""

from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest

from sio_client.errors import (
    SIOProtocolError,
    SIOServerConnectionError,
    SIOUnsupportedTransportError,
)
from sio_client.handshake import (
    HandshakeNegotiator,
    build_handshake_url,
    parse_handshake_body,
)
from sio_client.types import EngineOptions
from sio_client.url import parse_url

from .conftest import HandshakeServer


def _negotiate(server, url="http://localhost:1337", options=None, **kwargs):
    negotiator = HandshakeNegotiator(
        parse_url(url), options or EngineOptions(), http_client=server.client(), **kwargs
    )
    return negotiator.negotiate()


class TestHandshakeUrl:
    def test_query_order_and_values(self):
        target = build_handshake_url(parse_url("http://localhost:1337"), EngineOptions())
        assert target == "http://localhost:1337/socket.io/?use_b64=0&EIO=3&transport=polling"

    def test_url_query_appended_and_overrides(self):
        url = parse_url("https://example.com/io/?token=abc&EIO=4")
        target = build_handshake_url(url, EngineOptions(use_b64=True))
        parts = urlsplit(target)
        assert parts.scheme == "https"
        assert parts.netloc == "example.com:443"
        assert parts.path == "/io/"
        assert parse_qsl(parts.query) == [
            ("use_b64", "1"),
            ("EIO", "4"),
            ("transport", "polling"),
            ("token", "abc"),
        ]


class TestNegotiate:
    def test_builds_session(self, handshake_server):
        session = _negotiate(handshake_server).session
        assert session.id == "abc123"
        assert session.heartbeat_interval == 25.0
        assert session.heartbeat_timeout == 5.0
        assert "websocket" in session.upgrades

    def test_request_target(self, handshake_server):
        _negotiate(handshake_server)
        (request,) = handshake_server.requests
        assert request.method == "GET"
        assert str(request.url) == (
            "http://localhost:1337/socket.io/?use_b64=0&EIO=3&transport=polling"
        )

    def test_sends_extra_headers(self, handshake_server):
        options = EngineOptions(headers={"Authorization": "Bearer t", "X-My-Header": "rocks"})
        _negotiate(handshake_server, options=options)
        request = handshake_server.requests[0]
        assert request.headers["Authorization"] == "Bearer t"
        assert request.headers["X-My-Header"] == "rocks"

    def test_captures_cookies(self):
        server = HandshakeServer(cookies=["io=abc123; Path=/; HttpOnly", "lb=node-2"])
        assert _negotiate(server).cookies == ["io=abc123", "lb=node-2"]

    def test_no_cookies(self, handshake_server):
        assert _negotiate(handshake_server).cookies == []

    def test_session_uses_clock(self, handshake_server):
        result = _negotiate(handshake_server, clock=lambda: 42.0)
        assert result.session.last_heartbeat == 42.0

    def test_request_failure(self):
        server = HandshakeServer(error=httpx.ConnectError("connection refused"))
        with pytest.raises(SIOServerConnectionError) as exc_info:
            _negotiate(server)
        assert "connection refused" in exc_info.value.error_message

    def test_http_error_status(self):
        server = HandshakeServer('{"code":0,"message":"Transport unknown"}', status=400)
        with pytest.raises(SIOServerConnectionError) as exc_info:
            _negotiate(server)
        assert "400" in exc_info.value.error_message

    def test_empty_body(self):
        with pytest.raises(SIOServerConnectionError):
            _negotiate(HandshakeServer(""))

    def test_websocket_not_offered(self):
        server = HandshakeServer(
            '{"sid":"abc","upgrades":["polling"],"pingInterval":25000,"pingTimeout":5000}'
        )
        with pytest.raises(SIOUnsupportedTransportError) as exc_info:
            _negotiate(server)
        assert exc_info.value.transport == "websocket"

    def test_invalid_body(self):
        with pytest.raises(SIOProtocolError):
            _negotiate(HandshakeServer("ok"))


class TestParseBody:
    def test_extracts_embedded_object(self):
        decoded = parse_handshake_body(
            '96:0{"sid":"x","upgrades":[],"pingInterval":1,"pingTimeout":2}2:40'
        )
        assert decoded["sid"] == "x"

    @pytest.mark.parametrize(
        "body",
        [
            "no json here",
            "{not json}",
            '{"sid":"x","upgrades":[]}',
            "}{",
        ],
    )
    def test_invalid(self, body):
        with pytest.raises(SIOProtocolError):
            parse_handshake_body(body)
