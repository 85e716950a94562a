"""Rounding helpers shared by every analytics output.

All currency values are rounded by scaling, rounding half away from
zero, and scaling back, so repeated summation artefacts (``0.1 + 0.2``)
never leak into reported numbers.  Percentages are rounded from the raw
ratio (``ratio * 10000``) rather than from an already-scaled percentage.
"""

from __future__ import annotations

import math


def _half_away_from_zero(x: float) -> float:
    return math.copysign(math.floor(abs(x) + 0.5), x)


def round2(value: float) -> float:
    """Round to 2 decimal places, half away from zero."""
    if not math.isfinite(value):
        return value
    # + 0.0 folds a negative zero into 0.0
    return _half_away_from_zero(value * 100) / 100 + 0.0


def round_pct(ratio: float) -> float:
    """Express a 0..1 ratio as a percentage with 2 decimals."""
    if not math.isfinite(ratio):
        return ratio
    return _half_away_from_zero(ratio * 10_000) / 100 + 0.0


def round_int(value: float) -> int:
    """Round to the nearest integer, half away from zero."""
    return int(_half_away_from_zero(value))
