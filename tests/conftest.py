"""Shared fixtures for the trade-analytics test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from trade_analytics.core.clock import SimClock
from trade_analytics.core.config import Settings
from trade_analytics.core.models import Trade, TradeFees, TradeJournal

# 2024-01-01 00:00:00 UTC, a Monday
BASE_MS = 1_704_067_200_000
MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000
MS_PER_DAY = 86_400_000


def at(day: int = 0, hour: int = 12, minute: int = 0) -> int:
    """Millisecond timestamp ``day`` days after BASE_MS at hour:minute UTC."""
    return BASE_MS + day * MS_PER_DAY + hour * MS_PER_HOUR + minute * MS_PER_MINUTE


_counter = {"n": 0}


def make_trade(
    pnl: float = 10.0,
    *,
    trade_id: str | None = None,
    day: int = 0,
    hour: int = 12,
    open_ms: int | None = None,
    duration_minutes: float = 60,
    symbol: str = "BTC-PERP",
    instrument: str = "perpetual",
    side: str = "long",
    size: float = 1.0,
    entry_price: float = 100.0,
    exit_price: float | None = None,
    leverage: float = 1.0,
    fees: float | tuple[float, float, float] = 0.0,
    order_type: str = "market",
    journal: dict | None = None,
) -> Trade:
    """Helper to create a closed Trade.

    ``fees`` is either the total or an (entry, exit, funding) triple.
    """
    _counter["n"] += 1
    opened = open_ms if open_ms is not None else at(day, hour)
    if isinstance(fees, tuple):
        trade_fees = TradeFees.from_components(*fees)
    else:
        trade_fees = TradeFees(total=fees)
    return Trade(
        id=trade_id or f"t{_counter['n']}",
        timestamp=opened,
        close_timestamp=opened + int(duration_minutes * MS_PER_MINUTE),
        instrument=instrument,
        symbol=symbol,
        side=side,
        entry_price=entry_price,
        exit_price=exit_price if exit_price is not None else entry_price,
        size=size,
        leverage=leverage,
        pnl=pnl,
        fees=trade_fees,
        order_type=order_type,
        journal=TradeJournal(**journal) if journal is not None else None,
    )


@pytest.fixture
def sim_clock() -> SimClock:
    """Clock pinned to 2024-02-01 00:00 UTC (31 days after BASE_MS)."""
    return SimClock(datetime(2024, 2, 1, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def example_trades() -> list[Trade]:
    """Three trades over two close days: +100/-50 on day 0, +30 on day 1."""
    return [
        make_trade(100.0, trade_id="A", day=0, side="long", fees=5.0),
        make_trade(-50.0, trade_id="B", day=0, hour=14, side="short", fees=3.0),
        make_trade(30.0, trade_id="C", day=1, side="long", fees=2.0),
    ]
