# =============================================================================
# SIO Client -- URL Parsing
# =============================================================================

from __future__ import annotations

from types import MappingProxyType
from urllib.parse import parse_qsl, urlsplit

from .constants import (
    DEFAULT_HOST,
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    DEFAULT_PATH,
    DEFAULT_SCHEME,
)
from .errors import SIOMalformedUrlError
from .types import URLDescriptor


def parse_url(url: str) -> URLDescriptor:
    """Parse a connection URL into a :class:`URLDescriptor`.

    Missing parts fall back to ``http://localhost/socket.io`` with the
    scheme's default port. A bare ``/`` path also means ``socket.io``.

    Raises:
        SIOMalformedUrlError: If the URL cannot be parsed.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise SIOMalformedUrlError(url) from exc

    scheme = (parts.scheme or DEFAULT_SCHEME).lower()
    host = parts.hostname or DEFAULT_HOST
    if port is None:
        port = DEFAULT_HTTPS_PORT if scheme == "https" else DEFAULT_HTTP_PORT

    path = parts.path
    if not path or path == "/":
        path = DEFAULT_PATH

    query = dict(parse_qsl(parts.query, keep_blank_values=True))

    return URLDescriptor(
        scheme=scheme,
        host=host,
        port=port,
        path=path,
        query=MappingProxyType(query),
        secured=scheme == "https",
    )
