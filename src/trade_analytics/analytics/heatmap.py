"""Day-of-week x time-of-day P&L heatmap.

Rows are 4-hour UTC blocks (00-04 ... 20-24), columns are ISO weekdays
with Monday in column 0 and Sunday in column 6.  Trades are bucketed by
their *open* timestamp and contribute gross ``pnl``.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..core.models import Trade, ms_to_datetime
from .rounding import round2

N_TIME_BLOCKS = 6
N_DAYS = 7
HOURS_PER_BLOCK = 24 // N_TIME_BLOCKS

DAY_NAMES = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]
TIME_BLOCKS = [
    f"{b * HOURS_PER_BLOCK:02d}:00-{(b + 1) * HOURS_PER_BLOCK:02d}:00"
    for b in range(N_TIME_BLOCKS)
]


def weekday_index(ms: int) -> int:
    """Column for a timestamp: Monday=0 ... Sunday=6 (UTC)."""
    return ms_to_datetime(ms).weekday()


def time_block(ms: int) -> int:
    """Row for a timestamp: 4-hour UTC block 0..5."""
    return ms_to_datetime(ms).hour // HOURS_PER_BLOCK


def empty_heatmap() -> list[list[float]]:
    return [[0.0] * N_DAYS for _ in range(N_TIME_BLOCKS)]


def build_heatmap(trades: Iterable[Trade]) -> list[list[float]]:
    """Sum gross P&L into the 6x7 block/weekday grid."""
    heatmap = empty_heatmap()
    for trade in trades:
        heatmap[time_block(trade.timestamp)][weekday_index(trade.timestamp)] += trade.pnl
    return [[round2(cell) for cell in row] for row in heatmap]


def active_cell_ratio(heatmap: list[list[float]]) -> float:
    """Fraction of heatmap cells with non-zero P&L."""
    total = sum(len(row) for row in heatmap)
    active = sum(1 for row in heatmap for cell in row if cell != 0)
    return active / max(total, 1)
