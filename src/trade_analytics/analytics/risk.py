"""Risk-adjusted return ratios over daily return series.

A daily return is that day's fee-adjusted P&L divided by the *initial*
equity constant, not by equity at the start of the day.  Both ratios are
annualised with the trading-day convention (``sqrt(252)``) regardless of
the calendar span actually covered.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Iterable, Sequence

from ..core.models import Trade
from .grouping import group_by_day

DEFAULT_DAILY_RISK_FREE = 0.05 / 365
DEFAULT_PERIODS = 252

# Sortino reported when no return ever fell below the risk-free rate.
# A fixed cap rather than infinity.
NO_DOWNSIDE_SORTINO = 3.0


def daily_pnls(trades: Iterable[Trade]) -> list[float]:
    """Fee-adjusted P&L per close day, in day first-seen order."""
    return [
        sum(t.pnl - t.fees.total for t in day_trades)
        for day_trades in group_by_day(trades).values()
    ]


def daily_returns(trades: Iterable[Trade], initial_equity: float) -> list[float]:
    """Daily P&L as a fraction of the initial equity constant."""
    return [p / initial_equity for p in daily_pnls(trades)]


def sharpe_ratio(
    returns: Sequence[float],
    daily_risk_free: float = DEFAULT_DAILY_RISK_FREE,
    periods: int = DEFAULT_PERIODS,
) -> float:
    """Annualised Sharpe ratio using the sample standard deviation.

    Returns 0.0 with fewer than two observations or zero dispersion.
    """
    if len(returns) < 2:
        return 0.0
    mean = statistics.fmean(returns)
    std = statistics.stdev(returns)
    if std == 0:
        return 0.0
    return (mean - daily_risk_free) / std * math.sqrt(periods)


def sortino_ratio(
    returns: Sequence[float],
    daily_risk_free: float = DEFAULT_DAILY_RISK_FREE,
    periods: int = DEFAULT_PERIODS,
) -> float:
    """Annualised Sortino ratio.

    Downside deviation is measured against the risk-free rate over the
    returns strictly below it, divided by the downside count.  With no
    downside observation the ratio is ``NO_DOWNSIDE_SORTINO`` when the
    mean beats the risk-free rate, else 0.0.
    """
    if len(returns) < 2:
        return 0.0
    mean = statistics.fmean(returns)
    downside = [r for r in returns if r < daily_risk_free]
    if not downside:
        return NO_DOWNSIDE_SORTINO if mean > daily_risk_free else 0.0
    downside_var = sum((r - daily_risk_free) ** 2 for r in downside) / len(downside)
    downside_dev = math.sqrt(downside_var)
    if downside_dev == 0:
        return 0.0
    return (mean - daily_risk_free) / downside_dev * math.sqrt(periods)
