# =============================================================================
# SIO Client -- Client Facade
# =============================================================================
#
# Primary public API.  Chainable wrapper over any Engine variant.
# =============================================================================

from __future__ import annotations

from typing import Any

from ._logging import logger
from .engine import Engine
from .errors import SIOUnsupportedActionError


class SIOClient:
    """Blocking Socket.IO client.

    Wraps an :class:`~sio_client.engine.Engine` and tracks whether it was
    initialized, so a client dropped while connected still closes its
    connection.

    Args:
        engine: The transport variant to drive.

    Example::

        client = SIOClient(SocketIOEngine("http://localhost:1337"))
        client.initialize()
        client.of("/chat").emit("broadcast", {"foo": "bar"})
        client.close()
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._connected = False

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _action(self, action: str) -> Any:
        method = getattr(self._engine, action, None)
        if not callable(method):
            name = getattr(self._engine, "name", type(self._engine).__name__)
            raise SIOUnsupportedActionError(name, action)
        return method

    # -- Lifecycle ------------------------------------------------------------

    def initialize(self) -> SIOClient:
        """Connect the engine."""
        self._action("connect")()
        self._connected = True
        return self

    def close(self) -> SIOClient:
        self._action("close")()
        self._connected = False
        return self

    def __enter__(self) -> SIOClient:
        return self.initialize()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_connected", False):
            return
        try:
            self.close()
        except Exception as exc:
            logger.debug("Error closing client on collection: %s", exc)

    # -- Messaging ------------------------------------------------------------

    def read(self) -> str:
        """Read one message. Blocks until a full frame arrives."""
        return self._action("read")()

    def emit(self, event: str, args: Any) -> SIOClient:
        self._action("emit")(event, args)
        return self

    def of(self, namespace: str) -> SIOClient:
        """Set the namespace for the next messages."""
        self._action("of")(namespace)
        return self
