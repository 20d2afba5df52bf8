# =============================================================================
# SIO Client -- Packet Codec
# =============================================================================
#
# Engine.IO packet:    <type digit><data>
# Socket.IO packet:    <type digit>[/namespace,]<json>   (inside MESSAGE)
# =============================================================================

from __future__ import annotations

import json
from typing import Any

from ._logging import logger
from .errors import SIOProtocolError
from .types import EnginePacket, EnginePacketType, SocketPacketType

try:
    import orjson

    def _json_loads(data: str | bytes) -> Any:
        return orjson.loads(data)

    def _json_dumps(obj: Any) -> str:
        return orjson.dumps(obj).decode()

except ImportError:

    def _json_loads(data: str | bytes) -> Any:
        return json.loads(data)

    def _json_dumps(obj: Any) -> str:
        return json.dumps(obj, separators=(",", ":"))


def encode_engine_packet(type: EnginePacketType | int, data: str = "") -> str:
    return f"{int(type)}{data}"


def encode_socket_packet(
    type: SocketPacketType,
    namespace: str = "",
    payload: Any = None,
) -> str:
    """Encode a Socket.IO packet body.

    A non-root namespace is followed by a comma when anything comes after
    it. CONNECT packets carry the bare namespace.
    """
    body = "" if payload is None else _json_dumps(payload)
    if namespace and body:
        namespace = f"{namespace},"
    return f"{int(type)}{namespace}{body}"


def encode_event(event: str, args: Any, namespace: str = "") -> str:
    """Encode an EVENT body, e.g. ``2["broadcast",{"foo":"bar"}]``."""
    return encode_socket_packet(SocketPacketType.EVENT, namespace, [event, args])


def parse_engine_packet(text: str) -> EnginePacket:
    """Parse one Engine.IO packet, and its Socket.IO sub-packet for MESSAGE.

    Raises:
        SIOProtocolError: On an empty packet, an unknown type digit or a
            sub-packet whose JSON does not parse.
    """
    if not text:
        raise SIOProtocolError("Empty Engine.IO packet")
    try:
        type = EnginePacketType(int(text[0]))
    except ValueError as exc:
        raise SIOProtocolError(f"Unknown Engine.IO packet type {text[0]!r}") from exc

    data = text[1:]
    if type is not EnginePacketType.MESSAGE:
        return EnginePacket(type=type, data=data)

    socket_type, namespace, payload = _parse_socket_packet(data)
    return EnginePacket(
        type=type,
        data=data,
        socket_type=socket_type,
        namespace=namespace,
        payload=payload,
    )


def _parse_socket_packet(data: str) -> tuple[SocketPacketType, str, Any]:
    if not data:
        raise SIOProtocolError("Empty Socket.IO packet")
    try:
        socket_type = SocketPacketType(int(data[0]))
    except ValueError as exc:
        raise SIOProtocolError(f"Unknown Socket.IO packet type {data[0]!r}") from exc

    rest = data[1:]
    if socket_type in (SocketPacketType.BINARY_EVENT, SocketPacketType.BINARY_ACK):
        # attachment count prefix, e.g. "1-"; attachments themselves are not read
        count, sep, tail = rest.partition("-")
        if sep and count.isdigit():
            logger.debug("Ignoring %s binary attachment(s)", count)
            rest = tail

    namespace = ""
    if rest.startswith("/"):
        namespace, sep, rest = rest.partition(",")
        if not sep:
            rest = ""

    # ack id digits precede the JSON payload
    index = 0
    while index < len(rest) and rest[index].isdigit():
        index += 1
    rest = rest[index:]

    payload = None
    if rest:
        try:
            payload = _json_loads(rest)
        except ValueError as exc:
            raise SIOProtocolError(f"Invalid Socket.IO payload: {rest[:64]!r}") from exc
    return socket_type, namespace, payload
