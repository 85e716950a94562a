"""Adaptive thresholds: per-metric statistical zones.

Instead of fixed "good" / "bad" cut-offs, each metric is judged against
the trader's own distribution.  For every named series we compute the
mean, the sample standard deviation and five zone boundaries::

    excellent  mean + 1.5 sigma
    good       mean + 0.5 sigma
    average    mean
    below_avg  mean - 0.5 sigma
    poor       mean - 1.5 sigma

plus the 25th / 50th / 75th / 90th percentiles (linear interpolation).

Series built from small buckets are filtered before aggregation: a
bucket that fails its minimum sample size is left out of that series,
never replaced by a default.

Usage::

    thresholds = calculate_adaptive_thresholds(trades, metrics)
    zones = thresholds.zones["dailyPnl"]
    if today_pnl > zones.excellent:
        ...
"""

from __future__ import annotations

import hashlib
import logging
import math
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

from ..core.clock import IClock, WallClock
from ..core.config import Settings, ThresholdConfig
from ..core.enums import Trend
from ..core.models import Trade
from .heatmap import N_DAYS, N_TIME_BLOCKS, time_block, weekday_index
from .metrics import DashboardMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricZones:
    mean: float = 0.0
    std_dev: float = 0.0
    excellent: float = 0.0
    good: float = 0.0
    average: float = 0.0
    below_avg: float = 0.0
    poor: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0


@dataclass(frozen=True)
class AdaptiveThresholds:
    zones: dict[str, MetricZones] = field(default_factory=dict)
    last_calculated: int = 0  # ms since epoch

    def to_dict(self) -> dict[str, Any]:
        return {
            "zones": {name: asdict(z) for name, z in self.zones.items()},
            "last_calculated": self.last_calculated,
        }


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linearly interpolated percentile of an ascending series.

    The fractional index is ``p / 100 * (n - 1)``; 0.0 for no values.
    """
    if len(sorted_values) == 0:
        return 0.0
    return float(np.percentile(sorted_values, p))


def calc_zones(values: Sequence[float]) -> MetricZones:
    """Zones for one series.  Sample std with the denominator floored at 1."""
    if len(values) == 0:
        return MetricZones()
    n = len(values)
    mean = math.fsum(values) / n
    variance = math.fsum((v - mean) ** 2 for v in values) / max(n - 1, 1)
    std = math.sqrt(variance)
    ordered = sorted(values)
    return MetricZones(
        mean=mean,
        std_dev=std,
        excellent=mean + 1.5 * std,
        good=mean + 0.5 * std,
        average=mean,
        below_avg=mean - 0.5 * std,
        poor=mean - 1.5 * std,
        p25=percentile(ordered, 25),
        p50=percentile(ordered, 50),
        p75=percentile(ordered, 75),
        p90=percentile(ordered, 90),
    )


def _bucket_win_rates(buckets: list[list[int]], min_trades: int) -> list[float]:
    """Win rate percentage per bucket, skipping under-sampled buckets."""
    return [
        sum(outcomes) / len(outcomes) * 100
        for outcomes in buckets
        if len(outcomes) >= min_trades
    ]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def calculate_adaptive_thresholds(
    trades: Sequence[Trade],
    metrics: DashboardMetrics,
    *,
    settings: Settings | None = None,
    clock: IClock | None = None,
) -> AdaptiveThresholds:
    """Compute zones for every tracked metric series.

    Keys: ``instrumentWinRate``, ``symbolWinRate``, ``symbolPnl``,
    ``dailyTradeCount``, ``dailyPnl``, ``dailyWinRate``, ``tradePnl``,
    ``tradeDuration``, ``leverage``, ``dayOfWeekWinRate``,
    ``timeBlockWinRate``.
    """
    cfg = settings.thresholds if settings else ThresholdConfig()
    zones: dict[str, MetricZones] = {}

    instrument_win_rates = [
        m.win_rate
        for m in metrics.by_instrument.values()
        if m.trade_count >= cfg.min_bucket_trades
    ]
    zones["instrumentWinRate"] = calc_zones(instrument_win_rates)

    eligible_symbols = [
        m for m in metrics.by_symbol.values()
        if m.trade_count >= cfg.min_bucket_trades
    ]
    zones["symbolWinRate"] = calc_zones([m.win_rate for m in eligible_symbols])
    zones["symbolPnl"] = calc_zones([m.pnl for m in eligible_symbols])

    zones["dailyTradeCount"] = calc_zones([d.trade_count for d in metrics.daily_pnl])
    zones["dailyPnl"] = calc_zones([d.pnl for d in metrics.daily_pnl])
    zones["dailyWinRate"] = calc_zones([
        d.win_rate for d in metrics.daily_pnl
        if d.trade_count >= cfg.min_day_trades
    ])

    zones["tradePnl"] = calc_zones([t.pnl for t in trades])
    zones["tradeDuration"] = calc_zones([t.duration_minutes for t in trades])
    zones["leverage"] = calc_zones([t.leverage for t in trades])

    # Outcome buckets by open time (UTC)
    by_day: list[list[int]] = [[] for _ in range(N_DAYS)]
    by_block: list[list[int]] = [[] for _ in range(N_TIME_BLOCKS)]
    for trade in trades:
        won = 1 if trade.pnl > 0 else 0
        by_day[weekday_index(trade.timestamp)].append(won)
        by_block[time_block(trade.timestamp)].append(won)
    zones["dayOfWeekWinRate"] = calc_zones(
        _bucket_win_rates(by_day, cfg.min_time_bucket_trades)
    )
    zones["timeBlockWinRate"] = calc_zones(
        _bucket_win_rates(by_block, cfg.min_time_bucket_trades)
    )

    logger.debug("Computed adaptive thresholds over %d trades", len(trades))
    return AdaptiveThresholds(
        zones=zones,
        last_calculated=(clock or WallClock()).now_ms(),
    )


def detect_trend(recent: float, previous: float, sigma: float) -> Trend:
    """Classify the change between two periods relative to half a sigma."""
    if sigma == 0:
        return Trend.STABLE
    delta = recent - previous
    if delta > 0.5 * sigma:
        return Trend.IMPROVING
    if delta < -0.5 * sigma:
        return Trend.DECLINING
    return Trend.STABLE


def min_data_message(current: int, required: int, label: str) -> str | None:
    """Caveat text when a statistic rests on too few observations."""
    if current >= required:
        return None
    return f"Based on {current} {label}. Need {required}+ for reliable estimate."


# ---------------------------------------------------------------------------
# Memoisation
# ---------------------------------------------------------------------------

def trade_set_fingerprint(trades: Sequence[Trade]) -> str:
    """Stable digest of the fields the zones depend on."""
    h = hashlib.sha256()
    for t in trades:
        h.update(
            f"{t.id}|{t.timestamp}|{t.close_timestamp}|{t.symbol}|"
            f"{t.instrument.value}|{t.pnl!r}|{t.leverage!r}\n".encode()
        )
    return h.hexdigest()


class ThresholdCache:
    """Memoise ``calculate_adaptive_thresholds`` by trade-set fingerprint.

    Parameters
    ----------
    max_entries : int
        Number of distinct trade sets kept.  Default 8.
    """

    def __init__(self, *, max_entries: int = 8) -> None:
        self._max_entries = max(1, max_entries)
        self._entries: dict[str, AdaptiveThresholds] = {}
        self.hits = 0
        self.misses = 0

    def get(
        self,
        trades: Sequence[Trade],
        metrics: DashboardMetrics,
        *,
        settings: Settings | None = None,
        clock: IClock | None = None,
    ) -> AdaptiveThresholds:
        cfg = settings.thresholds if settings else ThresholdConfig()
        key = f"{trade_set_fingerprint(trades)}:{cfg.model_dump_json()}"
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = calculate_adaptive_thresholds(
            trades, metrics, settings=settings, clock=clock
        )
        self._entries[key] = result
        while len(self._entries) > self._max_entries:
            self._entries.pop(next(iter(self._entries)))
        return result

    def clear(self) -> None:
        self._entries.clear()
