# =============================================================================
# SIO Client -- Error Types
# =============================================================================


class SIOError(Exception):
    """Base exception for all SIO client errors."""


class SIOMalformedUrlError(SIOError):
    """The connection URL could not be parsed."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"The url {url!r} seems to be malformed")


class SIOServerConnectionError(SIOError):
    """The handshake HTTP request could not be completed."""

    def __init__(self, error_message: str | None = None) -> None:
        self.error_message = error_message
        message = "An error occurred while trying to establish a connection to the server"
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(message)


class SIOUnsupportedTransportError(SIOError):
    """The server does not offer the transport we need."""

    def __init__(self, transport: str) -> None:
        self.transport = transport
        super().__init__(
            f"This server does not support the {transport} transport, aborting"
        )


class SIOSocketError(SIOError):
    """Low-level socket failure (connect, read)."""

    def __init__(self, errno: int | None, message: str) -> None:
        self.errno = errno
        self.message = message
        super().__init__(
            "There was an error while attempting to open a connection "
            f"to the socket (Err #{errno or 0} : {message})"
        )


class SIOUnsupportedActionError(SIOError):
    """The engine does not implement the requested action."""

    def __init__(self, engine_name: str, action: str) -> None:
        self.engine_name = engine_name
        self.action = action
        super().__init__(
            f'The action "{action}" is not supported by the engine "{engine_name}"'
        )


class SIOProtocolError(SIOError):
    """Wire protocol violations (bad upgrade response, malformed frame or packet)."""


class SIOArchitectureError(SIOError):
    """64-bit payload lengths are not supported on this interpreter."""


class SIOWriteError(SIOError):
    """Nothing could be written to the socket."""
