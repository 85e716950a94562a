"""Core metrics calculator: the full dashboard aggregate.

``calculate_metrics`` turns a list of closed trades into one
``DashboardMetrics`` value.  It is recomputed wholesale on every change
of the underlying trade list; nothing here is incremental and nothing
holds state between calls.

Conventions
-----------
* A win is ``pnl > 0``.  Break-even trades count as losses for streaks,
  average loss and gross loss.
* ``total_pnl`` and the breakdowns are gross (fees not deducted); the
  equity curve, drawdown and risk ratios are fee-adjusted.
* Money is rounded with ``round2``; win rates are percentages rounded
  with ``round_pct``.
* ``profit_factor`` is ``PROFIT_FACTOR_INFINITE`` when there are winners
  but no losing P&L at all.

Example::

    metrics = calculate_metrics(trades, clock=SimClock(now))
    print(metrics.win_rate, metrics.sharpe_ratio)
    payload = metrics.to_dict()  # JSON-safe
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from ..core.clock import IClock, WallClock
from ..core.config import MetricsConfig, Settings
from ..core.enums import Instrument, OrderType, Side
from ..core.models import Trade
from .equity import (
    DailyPnl,
    DrawdownPoint,
    EquityPoint,
    build_daily_pnl,
    build_equity_curve,
    win_ratio,
)
from .grouping import filter_window, sort_chronologically
from .heatmap import build_heatmap, empty_heatmap
from .risk import daily_returns, sharpe_ratio, sortino_ratio
from .rounding import round2, round_int, round_pct

logger = logging.getLogger(__name__)

# "No losing trades" sentinel for the profit factor.
PROFIT_FACTOR_INFINITE = math.inf

ROLLING_WINDOW_DAYS = (7, 30, 90)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InstrumentMetrics:
    """Breakdown bucket for an instrument or a symbol."""

    pnl: float
    win_rate: float
    trade_count: int
    avg_pnl: float
    fees: float
    volume: float


@dataclass(frozen=True)
class OrderTypeMetrics:
    pnl: float
    win_rate: float
    trade_count: int


@dataclass(frozen=True)
class RollingWindow:
    sharpe: float = 0.0
    sortino: float = 0.0
    win_rate: float = 0.0
    pnl: float = 0.0


@dataclass(frozen=True)
class DashboardMetrics:
    """The single computed aggregate over a trade list."""

    total_pnl: float = 0.0
    total_pnl_percent: float = 0.0
    win_rate: float = 0.0
    trade_count: int = 0
    avg_trade_duration: int = 0  # minutes
    long_short_ratio: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0  # positive magnitude
    total_volume: float = 0.0
    total_fees: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    profit_factor: float = 0.0
    expectancy: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    consecutive_wins: int = 0
    consecutive_losses: int = 0
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    by_instrument: dict[str, InstrumentMetrics] = field(default_factory=dict)
    by_order_type: dict[str, OrderTypeMetrics] = field(default_factory=dict)
    by_symbol: dict[str, InstrumentMetrics] = field(default_factory=dict)
    equity_curve: list[EquityPoint] = field(default_factory=list)
    drawdown_curve: list[DrawdownPoint] = field(default_factory=list)
    daily_pnl: list[DailyPnl] = field(default_factory=list)
    heatmap_data: list[list[float]] = field(default_factory=empty_heatmap)
    rolling_7d: RollingWindow = field(default_factory=RollingWindow)
    rolling_30d: RollingWindow = field(default_factory=RollingWindow)
    rolling_90d: RollingWindow = field(default_factory=RollingWindow)

    @property
    def has_infinite_profit_factor(self) -> bool:
        """True when there were winners and no losing P&L."""
        return math.isinf(self.profit_factor)

    def to_dict(self) -> dict[str, Any]:
        """Export to a JSON-safe dictionary.

        An infinite profit factor is rendered as the string
        ``"Infinity"``.
        """
        data = asdict(self)
        if self.has_infinite_profit_factor:
            data["profit_factor"] = "Infinity"
        return data


def empty_metrics() -> DashboardMetrics:
    """Metrics for an empty trade list: zeros, empty maps, zero heatmap."""
    return DashboardMetrics()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _bucket_metrics(trades: list[Trade]) -> InstrumentMetrics:
    pnl = sum(t.pnl for t in trades)
    return InstrumentMetrics(
        pnl=round2(pnl),
        win_rate=round_pct(win_ratio(trades)),
        trade_count=len(trades),
        avg_pnl=round2(pnl / len(trades)),
        fees=round2(sum(t.fees.total for t in trades)),
        volume=round2(sum(t.notional for t in trades)),
    )


def _streaks(trades: Sequence[Trade]) -> tuple[int, int, int, int]:
    """Current and max consecutive wins / losses in the given order.

    Returns (current_wins, current_losses, max_wins, max_losses).
    """
    cur_w = cur_l = max_w = max_l = 0
    for trade in trades:
        if trade.pnl > 0:
            cur_w += 1
            cur_l = 0
            max_w = max(max_w, cur_w)
        else:
            cur_l += 1
            cur_w = 0
            max_l = max(max_l, cur_l)
    return cur_w, cur_l, max_w, max_l


def calc_rolling_window(
    trades: Sequence[Trade],
    days: int,
    now_ms: int,
    settings: Settings | None = None,
) -> RollingWindow:
    """Sharpe, Sortino, win rate and gross P&L over the trailing window.

    The window is ``close_timestamp >= now_ms - days``.  An empty window
    yields an all-zero ``RollingWindow``.
    """
    cfg = settings.metrics if settings else MetricsConfig()
    window = filter_window(trades, days, now_ms)
    if not window:
        return RollingWindow()

    returns = daily_returns(window, cfg.initial_equity)
    rf = cfg.daily_risk_free_rate
    periods = cfg.trading_days_per_year
    return RollingWindow(
        sharpe=round2(sharpe_ratio(returns, rf, periods)),
        sortino=round2(sortino_ratio(returns, rf, periods)),
        win_rate=round_pct(win_ratio(window)),
        pnl=round2(sum(t.pnl for t in window)),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def calculate_metrics(
    trades: Sequence[Trade],
    *,
    settings: Settings | None = None,
    clock: IClock | None = None,
) -> DashboardMetrics:
    """Compute the full ``DashboardMetrics`` aggregate.

    Parameters
    ----------
    trades : Sequence[Trade]
        Closed trades.  Not mutated.
    settings : Settings | None
        Equity / risk-free constants.  Defaults to ``MetricsConfig()``;
        the environment is only read by ``load_settings``.
    clock : IClock | None
        Source of "now" for the rolling windows, read once per call.
        Defaults to ``WallClock``.
    """
    if not trades:
        return empty_metrics()

    cfg = settings.metrics if settings else MetricsConfig()
    now_ms = (clock or WallClock()).now_ms()
    n = len(trades)

    wins = [t for t in trades if t.pnl > 0]
    losses = [t for t in trades if t.pnl <= 0]
    longs = sum(1 for t in trades if t.side == Side.LONG)

    total_pnl = sum(t.pnl for t in trades)
    gross_profit = sum(t.pnl for t in wins)
    gross_loss = abs(sum(t.pnl for t in losses))

    # Streaks assume chronological order; sort defensively (stable).
    cur_w, cur_l, max_w, max_l = _streaks(sort_chronologically(trades))

    # Risk ratios over fee-adjusted daily returns
    returns = daily_returns(trades, cfg.initial_equity)
    rf = cfg.daily_risk_free_rate
    periods = cfg.trading_days_per_year

    equity_curve, drawdown_curve = build_equity_curve(trades, cfg.initial_equity)
    max_dd = max((d.drawdown for d in drawdown_curve), default=0.0)
    max_dd_pct = max((d.drawdown_percent for d in drawdown_curve), default=0.0)

    # Breakdowns
    by_inst_trades: dict[str, list[Trade]] = defaultdict(list)
    by_ot_trades: dict[str, list[Trade]] = defaultdict(list)
    by_sym_trades: dict[str, list[Trade]] = defaultdict(list)
    for trade in trades:
        by_inst_trades[trade.instrument.value].append(trade)
        by_ot_trades[trade.order_type.value].append(trade)
        by_sym_trades[trade.symbol].append(trade)

    by_instrument = {
        inst.value: _bucket_metrics(by_inst_trades[inst.value])
        for inst in Instrument
        if by_inst_trades.get(inst.value)
    }
    by_order_type = {
        ot.value: OrderTypeMetrics(
            pnl=round2(sum(t.pnl for t in by_ot_trades[ot.value])),
            win_rate=round_pct(win_ratio(by_ot_trades[ot.value])),
            trade_count=len(by_ot_trades[ot.value]),
        )
        for ot in OrderType
        if by_ot_trades.get(ot.value)
    }
    by_symbol = {sym: _bucket_metrics(group) for sym, group in by_sym_trades.items()}

    win_frac = win_ratio(list(trades))
    avg_win = gross_profit / len(wins) if wins else 0.0
    avg_loss = gross_loss / len(losses) if losses else 0.0
    expectancy = win_frac * avg_win - (1 - win_frac) * avg_loss

    if gross_loss > 0:
        profit_factor = round2(gross_profit / gross_loss)
    elif gross_profit > 0:
        profit_factor = PROFIT_FACTOR_INFINITE
    else:
        profit_factor = 0.0

    avg_duration_ms = sum(t.duration_ms for t in trades) / n

    rolling = {
        days: calc_rolling_window(trades, days, now_ms, settings)
        for days in ROLLING_WINDOW_DAYS
    }

    logger.debug(
        "Computed metrics for %d trades over %d days", n, len(equity_curve)
    )

    return DashboardMetrics(
        total_pnl=round2(total_pnl),
        total_pnl_percent=round_pct(total_pnl / cfg.initial_equity),
        win_rate=round_pct(win_frac),
        trade_count=n,
        avg_trade_duration=round_int(avg_duration_ms / 60_000),
        long_short_ratio=longs / max(n - longs, 1),
        largest_win=round2(max(t.pnl for t in wins)) if wins else 0.0,
        largest_loss=round2(min(t.pnl for t in losses)) if losses else 0.0,
        avg_win=round2(avg_win),
        avg_loss=round2(avg_loss),
        total_volume=round2(sum(t.notional for t in trades)),
        total_fees=round2(sum(t.fees.total for t in trades)),
        sharpe_ratio=round2(sharpe_ratio(returns, rf, periods)),
        sortino_ratio=round2(sortino_ratio(returns, rf, periods)),
        profit_factor=profit_factor,
        expectancy=round2(expectancy),
        max_drawdown=round2(max_dd),
        max_drawdown_percent=round2(max_dd_pct),
        consecutive_wins=cur_w,
        consecutive_losses=cur_l,
        max_consecutive_wins=max_w,
        max_consecutive_losses=max_l,
        by_instrument=by_instrument,
        by_order_type=by_order_type,
        by_symbol=by_symbol,
        equity_curve=equity_curve,
        drawdown_curve=drawdown_curve,
        daily_pnl=build_daily_pnl(trades),
        heatmap_data=build_heatmap(trades),
        rolling_7d=rolling[7],
        rolling_30d=rolling[30],
        rolling_90d=rolling[90],
    )
