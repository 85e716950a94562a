"""Grouping and windowing utilities.

Calendar days are always UTC days derived from the millisecond
timestamps, formatted ``YYYY-MM-DD``.  The same key is used by the
equity curve, the daily P&L series, the risk ratios and the correlation
matrix so every view agrees on which day a trade belongs to.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from ..core.models import FilterState, Trade, ms_to_datetime

MS_PER_DAY = 86_400_000


def day_key(ms: int) -> str:
    """UTC calendar day of a millisecond timestamp."""
    return ms_to_datetime(ms).strftime("%Y-%m-%d")


def group_by_day(trades: Iterable[Trade]) -> dict[str, list[Trade]]:
    """Group trades by the UTC day of their close timestamp.

    Only days with at least one trade get an entry; there is no
    zero-fill.  Keys appear in first-seen order, callers that need a
    chronological walk sort them.
    """
    by_day: dict[str, list[Trade]] = defaultdict(list)
    for trade in trades:
        by_day[day_key(trade.close_timestamp)].append(trade)
    return dict(by_day)


def group_by_open_day(trades: Iterable[Trade]) -> dict[str, list[Trade]]:
    """Group trades by the UTC day of their open timestamp."""
    by_day: dict[str, list[Trade]] = defaultdict(list)
    for trade in trades:
        by_day[day_key(trade.timestamp)].append(trade)
    return dict(by_day)


def filter_window(
    trades: Iterable[Trade], days: int, now_ms: int
) -> list[Trade]:
    """Trades that closed within the trailing ``days`` before ``now_ms``."""
    cutoff = now_ms - days * MS_PER_DAY
    return [t for t in trades if t.close_timestamp >= cutoff]


def sort_chronologically(trades: Sequence[Trade]) -> list[Trade]:
    """Stable sort by open timestamp."""
    return sorted(trades, key=lambda t: t.timestamp)


def apply_filters(
    trades: Iterable[Trade], filters: FilterState
) -> list[Trade]:
    """Apply the dashboard filter state to a trade list.

    The date range bounds the open timestamp (inclusive).  Empty
    instrument / symbol / side lists do not restrict.
    """
    out: list[Trade] = []
    for trade in trades:
        if filters.date_range is not None:
            start, end = filters.date_range
            if trade.timestamp < start or trade.timestamp > end:
                continue
        if filters.instruments and trade.instrument not in filters.instruments:
            continue
        if filters.symbols and trade.symbol not in filters.symbols:
            continue
        if filters.sides and trade.side not in filters.sides:
            continue
        out.append(trade)
    return out
