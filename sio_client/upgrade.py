# =============================================================================
# SIO Client -- Transport Upgrader
# =============================================================================
#
# RFC 6455 opening handshake on an already-connected stream:
#
#   GET /{path}/?sid=..&EIO=..&transport=websocket HTTP/1.1
#   Upgrade: WebSocket / Connection: Upgrade / Sec-WebSocket-Key / ...
#
# Success is the literal status prefix "HTTP/1.1 101".
# =============================================================================

from __future__ import annotations

import base64
import hashlib
import secrets
from collections.abc import Mapping, Sequence
from urllib.parse import urlencode

from websockets.datastructures import Headers
from websockets.utils import accept_key

from ._logging import logger
from .constants import (
    DEFAULT_ORIGIN,
    KEY_DIGEST_BYTES,
    KEY_ENTROPY_BYTES,
    TRANSPORT_WEBSOCKET,
    UPGRADE_STATUS,
    WS_VERSION,
)
from .errors import SIOProtocolError
from .stream import SocketStream
from .types import EngineOptions, URLDescriptor


def generate_key(version: int) -> str:
    """Random ``Sec-WebSocket-Key``.

    EIO 2 servers take the full 20-byte SHA-1 digest, later ones the
    first 16 bytes of it.
    """
    digest = hashlib.sha1(secrets.token_bytes(KEY_ENTROPY_BYTES)).digest()
    if version != 2:
        digest = digest[:KEY_DIGEST_BYTES]
    return base64.b64encode(digest).decode("ascii")


def find_origin(headers: Mapping[str, str]) -> str:
    for name, value in headers.items():
        if name.lower() == "origin":
            return value
    return DEFAULT_ORIGIN


class TransportUpgrader:
    """Switches a connected stream from HTTP to WebSocket framing.

    Args:
        stream: Connected stream, not yet used.
        url: Parsed server URL.
        options: Engine options.
    """

    def __init__(
        self,
        stream: SocketStream,
        url: URLDescriptor,
        options: EngineOptions,
    ) -> None:
        self._stream = stream
        self._url = url
        self._options = options

    def build_request(self, sid: str, key: str, cookies: Sequence[str] = ()) -> bytes:
        query = {
            "sid": sid,
            "EIO": str(self._options.version),
            "transport": TRANSPORT_WEBSOCKET,
        }
        if self._options.version == 2:
            query["use_b64"] = str(int(self._options.use_b64))

        target = f"/{self._url.resource}/?{urlencode(query)}"
        lines = [
            f"GET {target} HTTP/1.1",
            f"Host: {self._url.netloc}",
            "Upgrade: WebSocket",
            "Connection: Upgrade",
            f"Sec-WebSocket-Key: {key}",
            f"Sec-WebSocket-Version: {WS_VERSION}",
            f"Origin: {find_origin(self._options.headers)}",
        ]
        if cookies:
            lines.append(f"Cookie: {'; '.join(cookies)}")
        return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

    def upgrade(self, sid: str, cookies: Sequence[str] = ()) -> Headers:
        """Send the upgrade request and consume the ``101`` response.

        Returns:
            The response headers.

        Raises:
            SIOProtocolError: If the status line is not ``HTTP/1.1 101`` or
                the accept key does not match.
        """
        key = generate_key(self._options.version)
        self._stream.write(self.build_request(sid, key, cookies))

        status = self._stream.read_exact(len(UPGRADE_STATUS))
        if status != UPGRADE_STATUS:
            raise SIOProtocolError(
                "The server returned an unexpected value. "
                f'Expected "{UPGRADE_STATUS.decode()}", had "{status.decode("latin-1")}"'
            )

        # rest of the status line, then headers up to the blank line
        self._stream.readline()
        headers = Headers()
        while line := self._stream.readline().strip():
            name, sep, value = line.decode("latin-1").partition(":")
            if sep:
                headers[name.strip()] = value.strip()

        if self._options.verify_accept:
            self._check_accept(key, headers)

        logger.debug("Transport upgraded to websocket for sid=%s", sid)
        return headers

    @staticmethod
    def _check_accept(key: str, headers: Headers) -> None:
        received = headers.get("Sec-WebSocket-Accept")
        if received is None:
            logger.debug("Server sent no Sec-WebSocket-Accept header")
            return
        if received != accept_key(key):
            raise SIOProtocolError(
                f"Invalid Sec-WebSocket-Accept {received!r} for key {key!r}"
            )
