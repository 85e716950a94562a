"""Cross-symbol correlation of daily P&L.

Measures how the most-traded symbols co-move.  High positive
correlation between symbols means less diversification benefit; a
negative correlation is what a hedge looks like.

Each pair is correlated over the days on which *both* symbols closed at
least one trade.  Pairs with too few common days are reported as 0.0
rather than as a noisy estimate.

Usage::

    result = build_correlation_matrix(trades)
    print(result.symbols)     # ["SOL-PERP", "BTC-PERP", ...]
    print(result.matrix[0])   # [1.0, 0.42, ...]
"""

from __future__ import annotations

import logging
import math
from collections import Counter, defaultdict
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

from ..core.config import CorrelationConfig, Settings
from ..core.models import Trade
from .grouping import day_key
from .rounding import round2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrelationResult:
    symbols: list[str] = field(default_factory=list)
    matrix: list[list[float]] = field(default_factory=list)

    def value(self, symbol_a: str, symbol_b: str) -> float:
        """Correlation between two symbols in the result."""
        i = self.symbols.index(symbol_a)
        j = self.symbols.index(symbol_b)
        return self.matrix[i][j]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CorrelationMatrix:
    """Pairwise Pearson correlation of per-symbol daily P&L.

    Parameters
    ----------
    top_n : int
        Number of symbols kept, ranked by trade count.  Default 6.
    min_common_days : int
        Minimum days on which both symbols traded before a pair is
        correlated.  Default 5.
    """

    def __init__(self, *, top_n: int = 6, min_common_days: int = 5) -> None:
        self._top_n = max(1, top_n)
        self._min_common_days = max(2, min_common_days)

    def top_symbols(self, trades: Sequence[Trade]) -> list[str]:
        """Most-traded symbols; ties keep first-appearance order."""
        counts = Counter(t.symbol for t in trades)
        return [sym for sym, _ in counts.most_common(self._top_n)]

    def build(self, trades: Sequence[Trade]) -> CorrelationResult:
        symbols = self.top_symbols(trades)
        wanted = set(symbols)

        # {symbol: {date_str: gross_pnl}}
        daily: dict[str, dict[str, float]] = defaultdict(lambda: defaultdict(float))
        for trade in trades:
            if trade.symbol in wanted:
                daily[trade.symbol][day_key(trade.close_timestamp)] += trade.pnl

        n = len(symbols)
        matrix = [[0.0] * n for _ in range(n)]
        for i in range(n):
            matrix[i][i] = 1.0
            for j in range(i + 1, n):
                r = self._pearson(daily[symbols[i]], daily[symbols[j]])
                matrix[i][j] = matrix[j][i] = r

        logger.debug("Correlated %d symbols", n)
        return CorrelationResult(symbols=symbols, matrix=matrix)

    # ------------------------------------------------------------------ #
    # Private                                                              #
    # ------------------------------------------------------------------ #

    def _pearson(
        self,
        daily_a: dict[str, float],
        daily_b: dict[str, float],
    ) -> float:
        """Pearson r over the common days, rounded to 2 decimals."""
        common = sorted(daily_a.keys() & daily_b.keys())
        if len(common) < self._min_common_days:
            return 0.0

        a = np.array([daily_a[d] for d in common])
        b = np.array([daily_b[d] for d in common])
        da = a - a.mean()
        db = b - b.mean()

        denom = math.sqrt(float(da @ da) * float(db @ db))
        if denom == 0:
            return 0.0
        return round2(float(da @ db) / denom)


def build_correlation_matrix(
    trades: Sequence[Trade],
    *,
    settings: Settings | None = None,
) -> CorrelationResult:
    """Correlation matrix of the top symbols by trade count."""
    cfg = settings.correlation if settings else CorrelationConfig()
    return CorrelationMatrix(
        top_n=cfg.top_n, min_common_days=cfg.min_common_days
    ).build(trades)
