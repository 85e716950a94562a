"""Trader profile: style classification and behavioural pattern detection.

Classifies the trading style from hold time and frequency, then runs a
set of independent behavioural detectors over aggregate statistics:

- Revenge trading (journal emotion tagged "revenge" more than 3 times)
- Overtrading (more than 5 days with over 2x the mean daily trade count)
- Cutting winners short (winners held < 0.7x as long as losers)
- Loss aversion (losers held > 1.5x as long as winners)
- Streak chasing (size up > 1.3x after two straight wins, more than 5 times)
- Time discipline (fewer than half the heatmap cells active)
- Consistent sizing (position-size coefficient of variation < 0.5)

The thresholds are empirical constants from ``BehaviorConfig``.  They
can be tuned, but the defaults are pinned by the test suite.

Usage::

    profile = generate_trader_profile(trades, metrics)
    print(profile.style, profile.style_confidence)
    for p in profile.patterns:
        if p.detected:
            print(p.label, p.severity)
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from ..core.config import BehaviorConfig, Settings
from ..core.enums import Emotion, PatternSeverity, TraderStyle
from ..core.models import Trade
from .grouping import day_key, sort_chronologically
from .heatmap import DAY_NAMES, TIME_BLOCKS, active_cell_ratio
from .metrics import DashboardMetrics

logger = logging.getLogger(__name__)

STYLE_DESCRIPTIONS = {
    TraderStyle.SCALPER: "You favor rapid-fire trades with tight targets. Speed and precision are your edge.",
    TraderStyle.DAY_TRADER: "You open and close within a session. You catch intraday moves and avoid overnight risk.",
    TraderStyle.SWING_TRADER: "You hold for days, riding multi-day moves. Patience and trend-reading are your tools.",
    TraderStyle.POSITION_TRADER: "You think in weeks or months. Macro views and conviction define your approach.",
}

EVOLUTION_PERIODS = ["Early", "Middle", "Recent"]

MAX_LISTED = 4


@dataclass(frozen=True)
class BehavioralPattern:
    """Outcome of one behavioural detector."""

    id: str
    label: str
    description: str
    detected: bool
    severity: PatternSeverity


@dataclass(frozen=True)
class EvolutionPeriod:
    period: str
    style: TraderStyle
    win_rate: float  # percentage
    pnl: float


@dataclass(frozen=True)
class TraderProfile:
    style: TraderStyle
    style_confidence: float
    style_description: str
    patterns: list[BehavioralPattern] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    optimal_conditions: list[str] = field(default_factory=list)
    evolution: list[EvolutionPeriod] = field(default_factory=list)

    def pattern(self, pattern_id: str) -> BehavioralPattern | None:
        return next((p for p in self.patterns if p.id == pattern_id), None)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _avg_duration_minutes(trades: Sequence[Trade]) -> float:
    if not trades:
        return 0.0
    return sum(t.duration_ms for t in trades) / len(trades) / 60_000


class TraderProfiler:
    """Style classification and behavioural detectors.

    Parameters
    ----------
    config : BehaviorConfig | None
        Detector thresholds.  Defaults to the golden constants.
    """

    def __init__(self, config: BehaviorConfig | None = None) -> None:
        self._cfg = config or BehaviorConfig()

    # ------------------------------------------------------------------ #
    # Style                                                                #
    # ------------------------------------------------------------------ #

    def classify_duration(self, avg_minutes: float) -> TraderStyle:
        """Style from hold time alone (used per evolution period)."""
        cfg = self._cfg
        if avg_minutes < cfg.scalper_max_minutes:
            return TraderStyle.SCALPER
        if avg_minutes < cfg.day_trader_max_minutes:
            return TraderStyle.DAY_TRADER
        if avg_minutes < cfg.swing_trader_max_minutes:
            return TraderStyle.SWING_TRADER
        return TraderStyle.POSITION_TRADER

    def detect_style(self, trades: Sequence[Trade]) -> tuple[TraderStyle, float]:
        """Style and a confidence in [0, 1].

        Frequency is measured against a fixed lookback, not the span the
        trades actually cover.
        """
        if not trades:
            return TraderStyle.DAY_TRADER, 0.0

        cfg = self._cfg
        avg_minutes = _avg_duration_minutes(trades)
        trades_per_day = len(trades) / cfg.style_lookback_days

        if (avg_minutes < cfg.scalper_max_minutes
                and trades_per_day > cfg.scalper_min_trades_per_day):
            return TraderStyle.SCALPER, min(trades_per_day / 10, 1.0)
        if avg_minutes < cfg.day_trader_max_minutes:
            return TraderStyle.DAY_TRADER, min(avg_minutes / 240, 1.0)
        if avg_minutes < cfg.swing_trader_max_minutes:
            return TraderStyle.SWING_TRADER, 0.8
        return TraderStyle.POSITION_TRADER, 0.7

    # ------------------------------------------------------------------ #
    # Behavioural patterns                                                 #
    # ------------------------------------------------------------------ #

    def detect_patterns(
        self,
        trades: Sequence[Trade],
        metrics: DashboardMetrics,
    ) -> list[BehavioralPattern]:
        """Run every detector; each yields exactly one pattern entry."""
        cfg = self._cfg
        patterns: list[BehavioralPattern] = []

        # 1. Revenge trading
        revenge = [
            t for t in trades
            if t.journal is not None and t.journal.emotion == Emotion.REVENGE
        ]
        revenge_hit = len(revenge) > cfg.revenge_trade_limit
        if revenge:
            avg_pnl = sum(t.pnl for t in revenge) / len(revenge)
            desc = f"Detected {len(revenge)} revenge trades averaging ${avg_pnl:.2f} PnL."
        else:
            desc = "No revenge trades detected. Good emotional discipline."
        patterns.append(BehavioralPattern(
            id="revenge_trading",
            label="Revenge Trading",
            description=desc,
            detected=revenge_hit,
            severity=PatternSeverity.WARNING if revenge_hit else PatternSeverity.POSITIVE,
        ))

        # 2. Overtrading: days far above the mean daily count (by open day)
        daily_counts = Counter(day_key(t.timestamp) for t in trades)
        avg_daily = len(trades) / max(len(daily_counts), 1)
        high_days = sum(
            1 for c in daily_counts.values()
            if c > avg_daily * cfg.overtrading_day_multiple
        )
        overtrading = high_days > cfg.overtrading_day_limit
        patterns.append(BehavioralPattern(
            id="overtrading",
            label="Overtrading",
            description=(
                f"{high_days} days with 2x+ normal volume. May indicate impulsive trading."
                if overtrading
                else "Trade frequency is consistent. No overtrading detected."
            ),
            detected=overtrading,
            severity=PatternSeverity.WARNING if overtrading else PatternSeverity.POSITIVE,
        ))

        # 3 & 4. Hold-time asymmetry between winners and losers
        wins = [t for t in trades if t.pnl > 0]
        losses = [t for t in trades if t.pnl <= 0]
        avg_win_dur = _avg_duration_minutes(wins)
        avg_loss_dur = _avg_duration_minutes(losses)

        cuts_winners = (
            avg_win_dur < avg_loss_dur * cfg.cut_winners_ratio
            and len(wins) > cfg.duration_min_samples
        )
        patterns.append(BehavioralPattern(
            id="cuts_winners",
            label="Cutting Winners Short",
            description=(
                "You close winning trades significantly faster than losing ones."
                if cuts_winners
                else "Winner hold times are appropriate relative to losers."
            ),
            detected=cuts_winners,
            severity=PatternSeverity.WARNING if cuts_winners else PatternSeverity.POSITIVE,
        ))

        holds_losers = (
            avg_loss_dur > avg_win_dur * cfg.hold_losers_ratio
            and len(losses) > cfg.duration_min_samples
        )
        patterns.append(BehavioralPattern(
            id="holds_losers",
            label="Loss Aversion",
            description=(
                "You hold losing positions significantly longer than winners."
                if holds_losers
                else "Good discipline closing losing positions."
            ),
            detected=holds_losers,
            severity=PatternSeverity.WARNING if holds_losers else PatternSeverity.POSITIVE,
        ))

        # 5. Streak chasing: size jump after two consecutive wins
        ordered = sort_chronologically(trades)
        streak_chase = 0
        for i in range(2, len(ordered)):
            if (ordered[i - 1].pnl > 0 and ordered[i - 2].pnl > 0
                    and ordered[i].size > ordered[i - 1].size * cfg.streak_size_multiple):
                streak_chase += 1
        chasing = streak_chase > cfg.streak_chase_limit
        patterns.append(BehavioralPattern(
            id="streak_chaser",
            label="Streak Chasing",
            description=(
                "You tend to increase position size after consecutive wins."
                if chasing
                else "Position sizing is consistent regardless of recent results."
            ),
            detected=chasing,
            severity=PatternSeverity.WARNING if chasing else PatternSeverity.POSITIVE,
        ))

        # 6. Time discipline
        focused = active_cell_ratio(metrics.heatmap_data) < cfg.time_concentration_max
        patterns.append(BehavioralPattern(
            id="time_discipline",
            label="Time Discipline",
            description=(
                "You trade during specific time windows. This shows discipline."
                if focused
                else "You trade across many time slots. Consider focusing on your best hours."
            ),
            detected=focused,
            severity=PatternSeverity.POSITIVE if focused else PatternSeverity.NEUTRAL,
        ))

        # 7. Consistent sizing: coefficient of variation of size
        sizes = [t.size for t in trades]
        avg_size = sum(sizes) / max(len(sizes), 1)
        size_std = math.sqrt(
            sum((s - avg_size) ** 2 for s in sizes) / max(len(sizes) - 1, 1)
        )
        consistent = size_std / max(avg_size, 0.01) < cfg.size_cv_max
        patterns.append(BehavioralPattern(
            id="consistent_sizing",
            label="Consistent Sizing",
            description=(
                "Position sizes are relatively uniform. Good risk management."
                if consistent
                else "Position sizes vary significantly. Consider standardizing."
            ),
            detected=consistent,
            severity=PatternSeverity.POSITIVE if consistent else PatternSeverity.NEUTRAL,
        ))

        return patterns

    # ------------------------------------------------------------------ #
    # Strengths, conditions, evolution                                     #
    # ------------------------------------------------------------------ #

    def rank_strengths(
        self,
        trades: Sequence[Trade],
        metrics: DashboardMetrics,
    ) -> tuple[list[str], list[str]]:
        strengths: list[str] = []
        weaknesses: list[str] = []

        if metrics.win_rate > 55:
            strengths.append("High win rate")
        elif metrics.win_rate < 40:
            weaknesses.append("Low win rate")

        if metrics.profit_factor > 1.5:
            strengths.append("Strong profit factor")
        elif metrics.profit_factor < 1.0:
            weaknesses.append("Negative profit factor")

        if metrics.max_drawdown_percent < 10:
            strengths.append("Conservative risk management")
        elif metrics.max_drawdown_percent > 25:
            weaknesses.append("High maximum drawdown")

        if metrics.sharpe_ratio > 1.0:
            strengths.append("Good risk-adjusted returns")
        elif metrics.sharpe_ratio < 0.5:
            weaknesses.append("Poor risk-adjusted returns")

        wins = [t for t in trades if t.pnl > 0]
        losses = [t for t in trades if t.pnl <= 0]
        avg_win_dur = _avg_duration_minutes(wins)
        avg_loss_dur = _avg_duration_minutes(losses)
        min_samples = self._cfg.duration_min_samples
        if avg_win_dur > avg_loss_dur * 1.3 and len(wins) > min_samples:
            strengths.append("Lets winners run")
        if (avg_loss_dur > avg_win_dur * self._cfg.hold_losers_ratio
                and len(losses) > min_samples):
            weaknesses.append("Holds losers too long")

        if metrics.consecutive_wins >= 5:
            strengths.append("Strong winning streaks")
        if metrics.consecutive_losses >= 5:
            weaknesses.append("Prone to losing streaks")

        return strengths[:MAX_LISTED], weaknesses[:MAX_LISTED]

    def optimal_conditions(self, metrics: DashboardMetrics) -> list[str]:
        """Best weekday, time block, instrument and symbol by gross P&L."""
        heatmap = metrics.heatmap_data
        conditions: list[str] = []

        day_totals = [sum(row[d] for row in heatmap) for d in range(len(DAY_NAMES))]
        best_day = max(range(len(day_totals)), key=lambda d: day_totals[d])
        conditions.append(f"Best day: {DAY_NAMES[best_day]}")

        block_totals = [sum(row) for row in heatmap]
        best_block = max(range(len(block_totals)), key=lambda b: block_totals[b])
        conditions.append(f"Peak hours: {TIME_BLOCKS[best_block]} UTC")

        if metrics.by_instrument:
            best_inst = max(metrics.by_instrument.items(), key=lambda kv: kv[1].pnl)
            conditions.append(f"Strongest instrument: {best_inst[0]}")

        eligible = {
            sym: m for sym, m in metrics.by_symbol.items()
            if m.trade_count >= self._cfg.top_symbol_min_trades
        }
        if eligible:
            best_sym = max(eligible.items(), key=lambda kv: kv[1].pnl)
            conditions.append(f"Top symbol: {best_sym[0]}")

        return conditions

    def evolution(self, trades: Sequence[Trade]) -> list[EvolutionPeriod]:
        """Style, win rate and P&L over three equal chronological chunks."""
        if len(trades) < self._cfg.evolution_min_trades:
            return []

        ordered = sort_chronologically(trades)
        chunk_size = math.ceil(len(ordered) / len(EVOLUTION_PERIODS))
        periods: list[EvolutionPeriod] = []
        for i, name in enumerate(EVOLUTION_PERIODS):
            chunk = ordered[i * chunk_size:(i + 1) * chunk_size]
            wins = sum(1 for t in chunk if t.pnl > 0)
            periods.append(EvolutionPeriod(
                period=name,
                style=self.classify_duration(_avg_duration_minutes(chunk)),
                win_rate=wins / max(len(chunk), 1) * 100,
                pnl=sum(t.pnl for t in chunk),
            ))
        return periods


def generate_trader_profile(
    trades: Sequence[Trade],
    metrics: DashboardMetrics,
    *,
    settings: Settings | None = None,
) -> TraderProfile:
    """Build the full trader profile from trades and their metrics."""
    profiler = TraderProfiler(settings.behavior if settings else None)
    style, confidence = profiler.detect_style(trades)
    strengths, weaknesses = profiler.rank_strengths(trades, metrics)

    profile = TraderProfile(
        style=style,
        style_confidence=confidence,
        style_description=STYLE_DESCRIPTIONS[style],
        patterns=profiler.detect_patterns(trades, metrics),
        strengths=strengths,
        weaknesses=weaknesses,
        optimal_conditions=profiler.optimal_conditions(metrics),
        evolution=profiler.evolution(trades),
    )
    detected = [p.id for p in profile.patterns if p.detected]
    logger.debug("Trader profile: style=%s patterns=%s", style.value, detected)
    return profile
