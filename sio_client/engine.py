# =============================================================================
# SIO Client -- Socket.IO Engine
# =============================================================================
#
# Connection lifecycle over one blocking socket:
#   handshake (HTTP polling) -> socket open -> upgrade -> framed packets
# =============================================================================

from __future__ import annotations

import ssl
import struct
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from ._logging import logger
from .errors import SIOError, SIOProtocolError, SIOSocketError, SIOWriteError
from .frame import FrameDecoder, encode_frame, ensure_64bit, frame_header_length
from .handshake import HandshakeNegotiator
from .packet import encode_engine_packet, encode_event, encode_socket_packet, parse_engine_packet
from .session import Session
from .stream import SocketStream
from .types import (
    ConnectionState,
    EngineOptions,
    EnginePacket,
    EnginePacketType,
    Frame,
    Opcode,
    SocketPacketType,
    URLDescriptor,
)
from .upgrade import TransportUpgrader
from .url import parse_url


@runtime_checkable
class Engine(Protocol):
    """Capabilities of a transport variant."""

    @property
    def name(self) -> str: ...

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def read(self) -> str: ...

    def write(self, engine_type: EnginePacketType | int, message: str = "") -> int: ...

    def emit(self, event: str, args: Any) -> int: ...

    def of(self, namespace: str) -> None: ...

    def keep_alive(self) -> None: ...


class SocketIOEngine:
    """Socket.IO client engine for Engine.IO versions 2 to 4 over WebSocket.

    Blocking and single-threaded. Only one namespace is active at a time.

    Args:
        url: Server URL, e.g. ``"http://localhost:1337"``.
        options: Engine options; defaults to :class:`EngineOptions`.
        http_client: ``httpx.Client`` used for the handshake.
        clock: Wall-clock source for heartbeat timing.

    Example::

        with SocketIOEngine("http://localhost:1337") as engine:
            engine.of("/chat")
            engine.emit("broadcast", {"foo": "bar"})
    """

    def __init__(
        self,
        url: str,
        options: EngineOptions | None = None,
        *,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._url: URLDescriptor = parse_url(url)
        self._options = options or EngineOptions()
        self._http_client = http_client
        self._clock = clock

        self._stream: SocketStream | None = None
        self._session: Session | None = None
        self._cookies: list[str] = []
        self._namespace = ""

    # -- Properties -----------------------------------------------------------

    @property
    def name(self) -> str:
        return f"SocketIO Version {self._options.version}.X"

    @property
    def url(self) -> URLDescriptor:
        return self._url

    @property
    def options(self) -> EngineOptions:
        return self._options

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def cookies(self) -> list[str]:
        return list(self._cookies)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def is_connected(self) -> bool:
        return self._stream is not None and not self._stream.closed

    @property
    def state(self) -> ConnectionState:
        if not self.is_connected:
            return ConnectionState.DISCONNECTED
        if self._namespace:
            return ConnectionState.NAMESPACED
        return ConnectionState.CONNECTED

    # -- Connect / Close ------------------------------------------------------

    def connect(self) -> None:
        """Handshake, open the socket and upgrade it to WebSocket.

        No-op when already connected.
        """
        if self.is_connected:
            return

        self._handshake()
        try:
            self._stream = SocketStream.open(
                self._url.host,
                self._url.port,
                timeout=self._options.timeout,
                ssl_context=self._ssl_context(),
            )
            self._upgrade_transport()
        except BaseException:
            self._release()
            raise

    def close(self) -> None:
        """Send CLOSE and release the socket. Safe to call repeatedly."""
        if not self.is_connected:
            self._release()
            return
        try:
            self.write(EnginePacketType.CLOSE)
        finally:
            self._release()
        logger.debug("Connection closed")

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()
        self._session = None
        self._cookies = []
        self._namespace = ""

    def __enter__(self) -> SocketIOEngine:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        stream = getattr(self, "_stream", None)
        if stream is not None:
            stream.close()

    # -- Handshake / Upgrade --------------------------------------------------

    def _handshake(self) -> None:
        if self._session is not None:
            return
        negotiator = HandshakeNegotiator(
            self._url,
            self._options,
            http_client=self._http_client,
            clock=self._clock,
        )
        result = negotiator.negotiate()
        self._session = result.session
        self._cookies = result.cookies

    def _upgrade_transport(self) -> None:
        assert self._stream is not None and self._session is not None
        upgrader = TransportUpgrader(self._stream, self._url, self._options)
        upgrader.upgrade(self._session.id, self._cookies)

        self.write(EnginePacketType.UPGRADE)

        # EIO 2 servers push a CONNECT ("40") right after UPGRADE
        if self._options.version == 2 and self._stream.has_buffered_data:
            try:
                self.read_frame()
            except SIOError as exc:
                logger.debug("Ignoring unreadable post-upgrade frame: %s", exc)

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self._url.secured:
            return None
        context = ssl.create_default_context()
        if not self._options.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    # -- Write ----------------------------------------------------------------

    def write(self, engine_type: EnginePacketType | int, message: str = "") -> int:
        """Send one Engine.IO packet as a masked text frame.

        Returns the number of bytes written, 0 when not connected.

        Raises:
            ValueError: If *engine_type* is not an Engine.IO packet type.
            SIOWriteError: If nothing could be written.
        """
        if not self.is_connected:
            return 0
        try:
            engine_type = EnginePacketType(engine_type)
        except ValueError:
            raise ValueError(
                "Wrong message type when trying to write on the socket"
            ) from None

        payload = encode_engine_packet(engine_type, message).encode("utf-8")
        written = self._write_frame(encode_frame(payload, Opcode.TEXT, mask=True))

        logger.debug("Sent %s packet (%d bytes)", engine_type.name, written)
        if self._options.wait > 0:
            time.sleep(self._options.wait)
        return written

    def _write_frame(self, frame: bytes) -> int:
        stream = self._require_stream()
        try:
            written = stream.write(frame)
        except SIOSocketError as exc:
            raise SIOWriteError(f"Message was not delivered: {exc}") from exc
        if not written:
            raise SIOWriteError("Message was not delivered")
        return written

    def keep_alive(self) -> None:
        """Send a PING when the session says a heartbeat is due."""
        if self._session is not None and self._session.needs_heartbeat():
            self.write(EnginePacketType.PING)

    def emit(self, event: str, args: Any) -> int:
        """Emit *event* with *args* on the active namespace."""
        self.keep_alive()
        return self.write(
            EnginePacketType.MESSAGE, encode_event(event, args, self._namespace)
        )

    def of(self, namespace: str) -> None:
        """Switch to *namespace* and send its CONNECT packet."""
        self.keep_alive()
        self._namespace = namespace
        self.write(
            EnginePacketType.MESSAGE,
            encode_socket_packet(SocketPacketType.CONNECT, namespace),
        )

    # -- Read -----------------------------------------------------------------

    def read_frame(self) -> Frame:
        """Block until one full frame is read and return it decoded."""
        self.keep_alive()
        stream = self._require_stream()

        header = stream.read_exact(2)
        raw_length = header[1] & 0x7F
        if raw_length == 127:
            ensure_64bit()

        extra = stream.read_exact(frame_header_length(header[1]))
        if raw_length == 126:
            length = struct.unpack_from("!H", extra)[0]
            if not length:
                raise SIOProtocolError("Invalid extended packet len")
        elif raw_length == 127:
            left, right = struct.unpack_from("!II", extra)
            length = left << 32 | right
        else:
            length = raw_length

        raw = header + extra + stream.read_exact(length)
        frame = FrameDecoder(raw).frame
        logger.debug("Read %s frame (%d bytes)", frame.opcode.name, len(frame.payload))
        return frame

    def read(self) -> str:
        """Block until one full frame is read and return its text payload."""
        return self.read_frame().text

    def read_packet(self) -> EnginePacket:
        """Read one Engine.IO packet and react to control packets.

        A server PING is answered with a PONG carrying the same data; a
        CLOSE releases the connection. Every packet is returned.
        """
        frame = self.read_frame()
        match frame.opcode:
            case Opcode.TEXT:
                pass
            case Opcode.BINARY | Opcode.CONTINUATION:
                logger.debug("Skipping unsupported %s frame", frame.opcode.name)
                return EnginePacket(type=EnginePacketType.NOOP)
            case Opcode.CLOSE:
                self._release()
                return EnginePacket(type=EnginePacketType.CLOSE)
            case Opcode.PING:
                self._write_frame(encode_frame(frame.payload, Opcode.PONG, mask=True))
                return EnginePacket(type=EnginePacketType.NOOP)
            case Opcode.PONG:
                return EnginePacket(type=EnginePacketType.NOOP)
            case _:
                raise SIOProtocolError(f"Reserved opcode {frame.opcode:#x}")

        packet = parse_engine_packet(frame.text)
        match packet.type:
            case EnginePacketType.PING:
                self.write(EnginePacketType.PONG, packet.data)
            case EnginePacketType.CLOSE:
                self._release()
            case (
                EnginePacketType.OPEN
                | EnginePacketType.PONG
                | EnginePacketType.MESSAGE
                | EnginePacketType.UPGRADE
                | EnginePacketType.NOOP
            ):
                pass
        return packet

    def _require_stream(self) -> SocketStream:
        if self._stream is None:
            raise SIOSocketError(None, "Not connected, call connect() first")
        return self._stream
