"""Shared fixtures for SIO client tests."""

import re

import httpx
import pytest
from websockets.utils import accept_key

from sio_client.frame import FrameDecoder, frame_header_length

HANDSHAKE_BODY = (
    '97:0{"sid":"abc123","upgrades":["websocket"],'
    '"pingInterval":25000,"pingTimeout":5000}2:40'
)


class FakeSocket:
    """Scripted stand-in for a connected socket.

    Answers the WebSocket upgrade request as soon as it is fully sent,
    then serves any queued server frames.
    """

    def __init__(
        self,
        *,
        status: bytes = b"HTTP/1.1 101 Switching Protocols",
        accept: bool | str = True,
        after_upgrade: bytes = b"",
    ) -> None:
        self.sent = bytearray()
        self.incoming = bytearray()
        self.closed = False
        self.key: str | None = None
        self._status = status
        self._accept = accept
        self._after_upgrade = after_upgrade
        self._upgraded = False

    def sendall(self, data: bytes) -> None:
        if self.closed:
            raise OSError(9, "Bad file descriptor")
        self.sent += data
        if not self._upgraded and b"\r\n\r\n" in self.sent:
            self._upgraded = True
            self.key = re.search(rb"Sec-WebSocket-Key: (\S+)", self.sent).group(1).decode()
            lines = [self._status, b"Upgrade: websocket", b"Connection: Upgrade"]
            if self._accept is True:
                lines.append(f"Sec-WebSocket-Accept: {accept_key(self.key)}".encode())
            elif self._accept:
                lines.append(f"Sec-WebSocket-Accept: {self._accept}".encode())
            self.incoming += b"\r\n".join(lines) + b"\r\n\r\n" + self._after_upgrade

    def recv(self, size: int) -> bytes:
        chunk = bytes(self.incoming[:size])
        del self.incoming[:size]
        return chunk

    def feed(self, data: bytes) -> None:
        self.incoming += data

    def close(self) -> None:
        self.closed = True

    @property
    def request(self) -> bytes:
        """The HTTP upgrade request."""
        head, _, _ = bytes(self.sent).partition(b"\r\n\r\n")
        return head + b"\r\n\r\n"

    @property
    def frames(self) -> list:
        """Frames written after the upgrade request, decoded."""
        _, _, data = bytes(self.sent).partition(b"\r\n\r\n")
        return split_frames(data)

    @property
    def texts(self) -> list[str]:
        return [frame.text for frame in self.frames]


def split_frames(data: bytes) -> list:
    frames = []
    offset = 0
    while offset < len(data):
        second = data[offset + 1]
        extra = frame_header_length(second)
        raw_length = second & 0x7F
        if raw_length == 126:
            length = int.from_bytes(data[offset + 2 : offset + 4], "big")
        elif raw_length == 127:
            length = int.from_bytes(data[offset + 2 : offset + 10], "big")
        else:
            length = raw_length
        end = offset + 2 + extra + length
        frames.append(FrameDecoder(data[offset:end]).frame)
        offset = end
    return frames


class HandshakeServer:
    """Handler for ``httpx.MockTransport`` that records requests."""

    def __init__(
        self,
        body: str = HANDSHAKE_BODY,
        *,
        status: int = 200,
        cookies: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.body = body
        self.status = status
        self.cookies = list(cookies or [])
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        headers = [("set-cookie", cookie) for cookie in self.cookies]
        return httpx.Response(self.status, text=self.body, headers=headers)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def fake_socket(monkeypatch):
    """Patch socket creation to hand out a single FakeSocket."""
    sock = FakeSocket()
    calls = []

    def _create_connection(address, timeout=None):
        calls.append((address, timeout))
        return sock

    monkeypatch.setattr("sio_client.stream.socket.create_connection", _create_connection)
    sock.calls = calls
    return sock


@pytest.fixture
def handshake_server():
    return HandshakeServer()
