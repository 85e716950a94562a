"""Equity curve, drawdown curve and daily P&L series.

The equity curve is fee-adjusted: each day advances equity by
``sum(pnl - fees.total)``.  The daily P&L series and the headline
``total_pnl`` use gross ``pnl``.  Both views are kept deliberately.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from ..core.models import Trade
from .grouping import group_by_day
from .rounding import round2, round_pct


@dataclass(frozen=True)
class EquityPoint:
    date: str
    equity: float
    pnl: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DrawdownPoint:
    date: str
    drawdown: float
    drawdown_percent: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DailyPnl:
    date: str
    pnl: float
    trade_count: int
    win_rate: float

    def to_dict(self) -> dict:
        return asdict(self)


def win_ratio(trades: list[Trade]) -> float:
    """Fraction of trades with positive P&L (0.0 for no trades)."""
    if not trades:
        return 0.0
    return sum(1 for t in trades if t.pnl > 0) / len(trades)


def build_equity_curve(
    trades: Iterable[Trade],
    initial_equity: float,
) -> tuple[list[EquityPoint], list[DrawdownPoint]]:
    """Build parallel equity and drawdown curves, one point per close day.

    Days without trades produce no point.  The running peak starts at
    ``initial_equity`` and never decreases.
    """
    by_day = group_by_day(trades)
    equity_curve: list[EquityPoint] = []
    drawdown_curve: list[DrawdownPoint] = []

    equity = initial_equity
    peak = initial_equity

    for day in sorted(by_day):
        day_pnl = sum(t.pnl - t.fees.total for t in by_day[day])
        equity += day_pnl
        peak = max(peak, equity)
        drawdown = peak - equity
        drawdown_pct = drawdown / peak * 100 if peak > 0 else 0.0

        equity_curve.append(EquityPoint(
            date=day, equity=round2(equity), pnl=round2(day_pnl),
        ))
        drawdown_curve.append(DrawdownPoint(
            date=day,
            drawdown=round2(drawdown),
            drawdown_percent=round2(drawdown_pct),
        ))

    return equity_curve, drawdown_curve


def build_daily_pnl(trades: Iterable[Trade]) -> list[DailyPnl]:
    """Gross P&L, trade count and win rate per close day, ascending."""
    by_day = group_by_day(trades)
    return [
        DailyPnl(
            date=day,
            pnl=round2(sum(t.pnl for t in by_day[day])),
            trade_count=len(by_day[day]),
            win_rate=round_pct(win_ratio(by_day[day])),
        )
        for day in sorted(by_day)
    ]
