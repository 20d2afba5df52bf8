"""Blocking Socket.IO client over a hand-framed WebSocket transport.

Usage::

    from sio_client import connect

    with connect("http://localhost:1337") as client:
        client.of("/chat")
        client.emit("broadcast", {"foo": "bar"})

Lower level::

    from sio_client import EngineOptions, SocketIOEngine

    engine = SocketIOEngine("https://example.com", EngineOptions(version=3))
    engine.connect()
    engine.emit("broadcast", {"foo": "bar"})
    print(engine.read())
    engine.close()

Optional extras::

    pip install sio-client[fast]   # orjson
"""

from ._version import __version__
from .client import SIOClient
from .engine import Engine, SocketIOEngine
from .errors import (
    SIOArchitectureError,
    SIOError,
    SIOMalformedUrlError,
    SIOProtocolError,
    SIOServerConnectionError,
    SIOSocketError,
    SIOUnsupportedActionError,
    SIOUnsupportedTransportError,
    SIOWriteError,
)
from .frame import FrameDecoder, decode_frame, encode_frame, mask_data
from .session import Session
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
from .url import parse_url


def connect(url: str, **kwargs) -> SIOClient:
    """Create a client for *url*.

    Keyword arguments build the :class:`EngineOptions` -- common ones:
    ``version``, ``headers``, ``timeout``, ``wait``. The returned client
    is not connected yet; call ``initialize()`` or use it as a context
    manager.

    Raises:
        SIOMalformedUrlError: If *url* cannot be parsed.
    """
    return SIOClient(SocketIOEngine(url, EngineOptions(**kwargs)))


__all__ = [
    "__version__",
    "connect",
    "SIOClient",
    "Engine",
    "SocketIOEngine",
    "EngineOptions",
    "Session",
    "URLDescriptor",
    "parse_url",
    "Frame",
    "FrameDecoder",
    "encode_frame",
    "decode_frame",
    "mask_data",
    "Opcode",
    "EnginePacket",
    "EnginePacketType",
    "SocketPacketType",
    "ConnectionState",
    "SIOError",
    "SIOMalformedUrlError",
    "SIOServerConnectionError",
    "SIOUnsupportedTransportError",
    "SIOSocketError",
    "SIOUnsupportedActionError",
    "SIOProtocolError",
    "SIOArchitectureError",
    "SIOWriteError",
]
