# =============================================================================
# SIO Client -- Socket Stream
# =============================================================================
#
# Buffered, blocking wrapper that owns one connected socket.
# =============================================================================

from __future__ import annotations

import socket
import ssl

from ._logging import logger
from .constants import RECV_CHUNK_SIZE
from .errors import SIOSocketError


class SocketStream:
    """Exclusive owner of a connected (optionally TLS) socket.

    Reads are buffered so the upgrade response can be consumed line by
    line and frames byte by byte off the same connection.
    """

    def __init__(self, sock: socket.socket) -> None:
        self._sock: socket.socket | None = sock
        self._buffer = bytearray()

    @classmethod
    def open(
        cls,
        host: str,
        port: int,
        *,
        timeout: float | None = None,
        ssl_context: ssl.SSLContext | None = None,
    ) -> SocketStream:
        """Connect to *host*:*port*, wrapping in TLS when *ssl_context* is set.

        Raises:
            SIOSocketError: If the connection cannot be opened.
        """
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            raise SIOSocketError(exc.errno, exc.strerror or str(exc)) from exc

        if ssl_context is not None:
            try:
                sock = ssl_context.wrap_socket(sock, server_hostname=host)
            except OSError as exc:
                sock.close()
                raise SIOSocketError(exc.errno, exc.strerror or str(exc)) from exc

        logger.debug("Socket connected to %s:%d", host, port)
        return cls(sock)

    @property
    def closed(self) -> bool:
        return self._sock is None

    @property
    def has_buffered_data(self) -> bool:
        """True if bytes were received but not consumed yet."""
        if self._buffer:
            return True
        if isinstance(self._sock, ssl.SSLSocket):
            return self._sock.pending() > 0
        return False

    def _fill(self) -> None:
        if self._sock is None:
            raise SIOSocketError(None, "Could not read from stream: stream is closed")
        try:
            chunk = self._sock.recv(RECV_CHUNK_SIZE)
        except OSError as exc:
            raise SIOSocketError(exc.errno, f"Could not read from stream: {exc}") from exc
        if not chunk:
            raise SIOSocketError(None, "Could not read from stream: connection closed by peer")
        self._buffer += chunk

    def read_exact(self, size: int) -> bytes:
        """Block until exactly *size* bytes are available and return them."""
        while len(self._buffer) < size:
            self._fill()
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def readline(self) -> bytes:
        """Return the next line including its ``\\n`` terminator."""
        while (end := self._buffer.find(b"\n")) < 0:
            self._fill()
        line = bytes(self._buffer[: end + 1])
        del self._buffer[: end + 1]
        return line

    def write(self, data: bytes) -> int:
        """Send all of *data* and return the number of bytes written.

        Raises:
            SIOSocketError: If the socket fails while sending.
        """
        if self._sock is None:
            return 0
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise SIOSocketError(exc.errno, f"Could not write to stream: {exc}") from exc
        return len(data)

    def close(self) -> None:
        sock, self._sock = self._sock, None
        self._buffer.clear()
        if sock is None:
            return
        try:
            sock.close()
        except OSError as exc:
            logger.debug("Error closing socket: %s", exc)

    def __enter__(self) -> SocketStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
