# =============================================================================
# SIO Client -- Type Definitions
# =============================================================================

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from .constants import (
    DEFAULT_EIO_VERSION,
    DEFAULT_TIMEOUT,
    DEFAULT_TRANSPORT,
    DEFAULT_WAIT,
)
from .errors import SIOProtocolError


class Opcode(IntEnum):
    """WebSocket frame opcode (RFC 6455 section 5.2).

    Every 4-bit value has a member so a decoded opcode always maps to one.
    Reserved values are never produced by this client.
    """

    CONTINUATION = 0x0
    TEXT = 0x1
    BINARY = 0x2
    NON_CONTROL_RESERVED_1 = 0x3
    NON_CONTROL_RESERVED_2 = 0x4
    NON_CONTROL_RESERVED_3 = 0x5
    NON_CONTROL_RESERVED_4 = 0x6
    NON_CONTROL_RESERVED_5 = 0x7
    CLOSE = 0x8
    PING = 0x9
    PONG = 0xA
    CONTROL_RESERVED_1 = 0xB
    CONTROL_RESERVED_2 = 0xC
    CONTROL_RESERVED_3 = 0xD
    CONTROL_RESERVED_4 = 0xE
    CONTROL_RESERVED_5 = 0xF

    @property
    def is_control(self) -> bool:
        return self >= Opcode.CLOSE

    @property
    def is_reserved(self) -> bool:
        return self not in _DEFINED_OPCODES


_DEFINED_OPCODES = frozenset(
    {Opcode.CONTINUATION, Opcode.TEXT, Opcode.BINARY, Opcode.CLOSE, Opcode.PING, Opcode.PONG}
)


class EnginePacketType(IntEnum):
    """Engine.IO packet type, the first character of every packet."""

    OPEN = 0
    CLOSE = 1
    PING = 2
    PONG = 3
    MESSAGE = 4
    UPGRADE = 5
    NOOP = 6


class SocketPacketType(IntEnum):
    """Socket.IO packet type, carried inside an Engine.IO MESSAGE."""

    CONNECT = 0
    DISCONNECT = 1
    EVENT = 2
    ACK = 3
    ERROR = 4
    BINARY_EVENT = 5
    BINARY_ACK = 6


class ConnectionState(str, Enum):
    """Engine connection lifecycle.

    DISCONNECTED -> CONNECTED -> NAMESPACED -> DISCONNECTED.
    """

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    NAMESPACED = "namespaced"


@dataclass(frozen=True, slots=True)
class URLDescriptor:
    """A parsed connection URL with defaults applied.

    Attributes:
        scheme: ``"http"`` or ``"https"``.
        host: Server host name or address.
        port: TCP port, 80/443 when the URL carries none.
        path: Socket.IO endpoint path, ``"socket.io"`` by default.
        query: Extra query parameters forwarded on the handshake.
        secured: True for ``https`` URLs.
    """

    scheme: str
    host: str
    port: int
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    secured: bool = False

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"

    @property
    def resource(self) -> str:
        """Path with surrounding slashes stripped."""
        return self.path.strip("/")


@dataclass(frozen=True, slots=True)
class Frame:
    """One decoded WebSocket frame.

    Attributes:
        fin: Final-fragment bit, always 1 for frames this client sends.
        rsv: The three reserved bits (rsv1, rsv2, rsv3).
        opcode: Frame opcode.
        masked: Whether the payload was masked on the wire.
        mask_key: The 4-byte mask key, ``None`` when unmasked.
        payload: The unmasked payload bytes.
    """

    fin: int
    rsv: tuple[int, int, int]
    opcode: Opcode
    masked: bool
    mask_key: bytes | None
    payload: bytes

    @property
    def text(self) -> str:
        """Payload decoded as UTF-8.

        Raises:
            SIOProtocolError: If the payload is not valid UTF-8.
        """
        try:
            return self.payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SIOProtocolError(
                f"{self.opcode.name} frame payload is not valid UTF-8"
            ) from exc


@dataclass(frozen=True, slots=True)
class EnginePacket:
    """An Engine.IO packet, with the Socket.IO sub-packet for MESSAGE.

    Attributes:
        type: Engine.IO packet type.
        data: Raw packet body after the type digit.
        socket_type: Socket.IO packet type (MESSAGE only).
        namespace: Socket.IO namespace, ``""`` for the root (MESSAGE only).
        payload: Decoded JSON payload of the sub-packet, if any.
    """

    type: EnginePacketType
    data: str = ""
    socket_type: SocketPacketType | None = None
    namespace: str = ""
    payload: Any = None

    @property
    def event(self) -> str | None:
        """Event name for EVENT packets."""
        if self.socket_type is SocketPacketType.EVENT and isinstance(self.payload, list):
            if self.payload and isinstance(self.payload[0], str):
                return self.payload[0]
        return None

    @property
    def args(self) -> list[Any]:
        """Event arguments for EVENT packets."""
        if self.event is None:
            return []
        return list(self.payload[1:])


@dataclass
class EngineOptions:
    """Configuration for :class:`~sio_client.engine.SocketIOEngine`.

    Attributes:
        version: Engine.IO protocol version sent as ``EIO``.
        use_b64: Ask the server for base64 payloads on polling.
        transport: Transport used for the handshake request.
        wait: Seconds to sleep after each write.
        timeout: Socket and HTTP timeout in seconds.
        headers: Extra HTTP headers for the handshake. An ``Origin``
            entry is also used for the upgrade request.
        verify: Verify TLS certificates on secured URLs.
        verify_accept: Check ``Sec-WebSocket-Accept`` when the server sends it.
    """

    version: int = DEFAULT_EIO_VERSION
    use_b64: bool = False
    transport: str = DEFAULT_TRANSPORT
    wait: float = DEFAULT_WAIT
    timeout: float = DEFAULT_TIMEOUT
    headers: dict[str, str] = field(default_factory=dict)
    verify: bool = True
    verify_accept: bool = True
