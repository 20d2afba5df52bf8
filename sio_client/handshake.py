# =============================================================================
# SIO Client -- Handshake Negotiator
# =============================================================================
#
# GET {scheme}://{host}:{port}/{path}/?use_b64=..&EIO=..&transport=polling
# The response body wraps the Engine.IO OPEN payload:
#   {"sid":"..","upgrades":["websocket"],"pingInterval":25000,"pingTimeout":5000}
# =============================================================================

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import urlencode

import httpx

from ._logging import logger
from .constants import TRANSPORT_WEBSOCKET
from .errors import (
    SIOProtocolError,
    SIOServerConnectionError,
    SIOUnsupportedTransportError,
)
from .packet import _json_loads
from .session import Session
from .types import EngineOptions, URLDescriptor

_REQUIRED_FIELDS = ("sid", "pingInterval", "pingTimeout", "upgrades")


@dataclass
class HandshakeResult:
    """Session plus the cookies to replay on the upgrade request."""

    session: Session
    cookies: list[str] = field(default_factory=list)


def build_handshake_url(url: URLDescriptor, options: EngineOptions) -> str:
    query: dict[str, str] = {
        "use_b64": str(int(options.use_b64)),
        "EIO": str(options.version),
        "transport": options.transport,
    }
    query.update(url.query)
    return f"{url.scheme}://{url.netloc}/{url.resource}/?{urlencode(query)}"


def extract_cookies(response: httpx.Response) -> list[str]:
    """Every ``Set-Cookie`` value, cut at the first ``;``."""
    return [
        value.split(";", 1)[0].strip()
        for value in response.headers.get_list("set-cookie")
    ]


def parse_handshake_body(body: str) -> dict:
    """Extract the JSON object between the first ``{`` and the last ``}``."""
    start = body.find("{")
    end = body.rfind("}")
    if start < 0 or end < start:
        raise SIOProtocolError(f"No handshake payload in server response: {body[:64]!r}")
    try:
        decoded = _json_loads(body[start : end + 1])
    except ValueError as exc:
        raise SIOProtocolError(f"Invalid handshake payload: {exc}") from exc
    if not isinstance(decoded, dict):
        raise SIOProtocolError("Handshake payload is not an object")
    missing = [name for name in _REQUIRED_FIELDS if name not in decoded]
    if missing:
        raise SIOProtocolError(f"Handshake payload misses {', '.join(missing)}")
    return decoded


class HandshakeNegotiator:
    """Performs the HTTP polling handshake and builds the :class:`Session`.

    Args:
        url: Parsed server URL.
        options: Engine options (version, base64 flag, transport, headers).
        http_client: ``httpx.Client`` to send the request with. A
            short-lived client is created per handshake when omitted.
        clock: Clock handed to the created :class:`Session`.
    """

    def __init__(
        self,
        url: URLDescriptor,
        options: EngineOptions,
        *,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._url = url
        self._options = options
        self._http = http_client
        self._clock = clock

    def _get(self, target: str) -> httpx.Response:
        headers = dict(self._options.headers)
        if self._http is not None:
            return self._http.get(target, headers=headers, timeout=self._options.timeout)
        with httpx.Client(
            verify=self._options.verify, timeout=self._options.timeout
        ) as client:
            return client.get(target, headers=headers)

    def negotiate(self) -> HandshakeResult:
        """Run the handshake.

        Raises:
            SIOServerConnectionError: If the request fails or returns nothing.
            SIOProtocolError: If the body holds no valid handshake object.
            SIOUnsupportedTransportError: If websocket is not offered.
        """
        target = build_handshake_url(self._url, self._options)
        logger.debug("Handshake: GET %s", target)

        try:
            response = self._get(target)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SIOServerConnectionError(str(exc)) from exc

        body = response.text
        if not body:
            raise SIOServerConnectionError("Empty handshake response")

        decoded = parse_handshake_body(body)
        upgrades = decoded["upgrades"] or []
        if TRANSPORT_WEBSOCKET not in upgrades:
            raise SIOUnsupportedTransportError(TRANSPORT_WEBSOCKET)

        cookies = extract_cookies(response)
        session = Session(
            str(decoded["sid"]),
            decoded["pingInterval"] / 1000,
            decoded["pingTimeout"] / 1000,
            upgrades,
            clock=self._clock,
        )
        logger.debug("Handshake succeeded: %r (%d cookie(s))", session, len(cookies))
        return HandshakeResult(session=session, cookies=cookies)
