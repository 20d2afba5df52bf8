# =============================================================================
# SIO Client -- Session
# =============================================================================

from __future__ import annotations

import time
from collections.abc import Callable, Iterable

from .constants import HEARTBEAT_MARGIN


class Session:
    """Handshake state negotiated with the server.

    Everything but ``last_heartbeat`` is fixed at construction.

    Args:
        id: Engine.IO session id (``sid``).
        heartbeat_interval: Seconds between heartbeats (``pingInterval``).
        heartbeat_timeout: Seconds the server waits for one (``pingTimeout``).
        upgrades: Transports the server offers to upgrade to.
        clock: Wall-clock source, ``time.time`` by default.
    """

    __slots__ = ("_id", "_interval", "_timeout", "_upgrades", "_clock", "last_heartbeat")

    def __init__(
        self,
        id: str,
        heartbeat_interval: float,
        heartbeat_timeout: float,
        upgrades: Iterable[str],
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._id = id
        self._interval = float(heartbeat_interval)
        self._timeout = float(heartbeat_timeout)
        self._upgrades = frozenset(upgrades)
        self._clock = clock
        self.last_heartbeat = clock()

    @property
    def id(self) -> str:
        return self._id

    @property
    def heartbeat_interval(self) -> float:
        return self._interval

    @property
    def heartbeat_timeout(self) -> float:
        return self._timeout

    @property
    def upgrades(self) -> frozenset[str]:
        return self._upgrades

    def needs_heartbeat(self, now: float | None = None) -> bool:
        """Check whether a ping is due, recording it when it is.

        Fires ``HEARTBEAT_MARGIN`` seconds before the interval elapses so
        the ping reaches the server inside its timeout window.
        """
        if self._interval <= 0:
            return False
        if now is None:
            now = self._clock()
        if now > self.last_heartbeat + self._interval - HEARTBEAT_MARGIN:
            self.last_heartbeat = now
            return True
        return False

    def __repr__(self) -> str:
        return (
            f"Session(id={self._id!r}, heartbeat_interval={self._interval}, "
            f"heartbeat_timeout={self._timeout}, upgrades={sorted(self._upgrades)})"
        )
