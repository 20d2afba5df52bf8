"""Tests for Engine.IO / Socket.IO packet encoding."""

import pytest

from sio_client.errors import SIOProtocolError
from sio_client.packet import (
    encode_engine_packet,
    encode_event,
    encode_socket_packet,
    parse_engine_packet,
)
from sio_client.types import EnginePacketType, SocketPacketType


class TestEncoding:
    def test_engine_packet(self):
        assert encode_engine_packet(EnginePacketType.PING) == "2"
        assert encode_engine_packet(EnginePacketType.MESSAGE, "2[]") == "42[]"

    def test_event_root_namespace(self):
        assert encode_event("broadcast", {"foo": "bar"}) == '2["broadcast",{"foo":"bar"}]'

    def test_event_with_namespace(self):
        body = encode_event("broadcast", {"foo": "bar"}, "/namespace")
        assert body == '2/namespace,["broadcast",{"foo":"bar"}]'

    def test_connect_packet_has_bare_namespace(self):
        assert encode_socket_packet(SocketPacketType.CONNECT, "/chat") == "0/chat"

    def test_connect_root(self):
        assert encode_socket_packet(SocketPacketType.CONNECT) == "0"


class TestParsing:
    def test_ping(self):
        packet = parse_engine_packet("2probe")
        assert packet.type is EnginePacketType.PING
        assert packet.data == "probe"
        assert packet.socket_type is None

    def test_open(self):
        packet = parse_engine_packet('0{"sid":"abc"}')
        assert packet.type is EnginePacketType.OPEN
        assert packet.data == '{"sid":"abc"}'

    def test_event_root(self):
        packet = parse_engine_packet('42["news",{"hello":"world"}]')
        assert packet.type is EnginePacketType.MESSAGE
        assert packet.socket_type is SocketPacketType.EVENT
        assert packet.namespace == ""
        assert packet.event == "news"
        assert packet.args == [{"hello": "world"}]

    def test_event_namespaced(self):
        packet = parse_engine_packet('42/chat,["msg","hi"]')
        assert packet.namespace == "/chat"
        assert packet.event == "msg"
        assert packet.args == ["hi"]

    def test_connect_namespace(self):
        packet = parse_engine_packet("40/chat")
        assert packet.socket_type is SocketPacketType.CONNECT
        assert packet.namespace == "/chat"
        assert packet.payload is None

    def test_ack_id_skipped(self):
        packet = parse_engine_packet('4212["reply"]')
        assert packet.event == "reply"

    def test_binary_event_attachment_prefix(self):
        packet = parse_engine_packet('451-["upload",{"_placeholder":true,"num":0}]')
        assert packet.socket_type is SocketPacketType.BINARY_EVENT
        assert packet.payload[0] == "upload"

    def test_non_event_has_no_event_name(self):
        packet = parse_engine_packet('44{"message":"denied"}')
        assert packet.socket_type is SocketPacketType.ERROR
        assert packet.event is None
        assert packet.args == []

    @pytest.mark.parametrize("text", ["", "9", "x1", "4", "49", "42[broken"])
    def test_malformed(self, text):
        with pytest.raises(SIOProtocolError):
            parse_engine_packet(text)
