"""Test WallClock and SimClock."""

from datetime import datetime, timezone

from trade_analytics.core.clock import SimClock, WallClock


class TestWallClock:
    def test_now_returns_utc(self):
        now = WallClock().now()
        assert now.tzinfo == timezone.utc

    def test_now_is_recent(self):
        diff = abs((datetime.now(timezone.utc) - WallClock().now()).total_seconds())
        assert diff < 1.0

    def test_now_ms_returns_int(self):
        ms = WallClock().now_ms()
        assert isinstance(ms, int)
        assert ms > 0


class TestSimClock:
    def test_default_start(self):
        assert SimClock().now() == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_custom_start(self, sim_clock):
        assert sim_clock.now() == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_naive_start_is_utc(self):
        clock = SimClock(datetime(2024, 3, 1))
        assert clock.now().tzinfo == timezone.utc

    def test_from_ms(self):
        clock = SimClock.from_ms(1_704_067_200_000)
        assert clock.now() == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert clock.now_ms() == 1_704_067_200_000
