"""Tests for session heartbeat bookkeeping."""

from sio_client.session import Session


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestSession:
    def test_fields(self):
        session = Session("sid", 25.0, 5.0, ["websocket", "polling"], clock=FakeClock())
        assert session.id == "sid"
        assert session.heartbeat_interval == 25.0
        assert session.heartbeat_timeout == 5.0
        assert session.upgrades == frozenset({"websocket", "polling"})
        assert session.last_heartbeat == 1000.0

    def test_heartbeat_margin(self):
        t0 = 1000.0
        session = Session("sid", 25.0, 5.0, [], clock=FakeClock(t0))
        assert session.needs_heartbeat(t0 + 19) is False
        assert session.needs_heartbeat(t0 + 21) is True
        assert session.needs_heartbeat(t0 + 21) is False
        assert session.last_heartbeat == t0 + 21

    def test_uses_clock_when_now_omitted(self):
        clock = FakeClock(0.0)
        session = Session("sid", 25.0, 5.0, [], clock=clock)
        assert session.needs_heartbeat() is False
        clock.now = 20.5
        assert session.needs_heartbeat() is True
        assert session.last_heartbeat == 20.5

    def test_exact_boundary_not_due(self):
        session = Session("sid", 25.0, 5.0, [], clock=FakeClock(0.0))
        assert session.needs_heartbeat(20.0) is False

    def test_zero_interval_never_due(self):
        session = Session("sid", 0, 5.0, [], clock=FakeClock(0.0))
        assert session.needs_heartbeat(10_000.0) is False

    def test_negative_interval_never_due(self):
        session = Session("sid", -1, 5.0, [], clock=FakeClock(0.0))
        assert session.needs_heartbeat(10_000.0) is False
