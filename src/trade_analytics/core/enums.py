"""Enumerations used across the analytics library."""

from enum import Enum


class Instrument(str, Enum):
    SPOT = "spot"
    PERPETUAL = "perpetual"
    OPTIONS = "options"
    FUTURES = "futures"


class Side(str, Enum):
    LONG = "long"
    SHORT = "short"


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"
    STOP_LIMIT = "stop-limit"


class OptionType(str, Enum):
    CALL = "call"
    PUT = "put"


class Emotion(str, Enum):
    DISCIPLINED = "disciplined"
    FOMO = "fomo"
    REVENGE = "revenge"
    FEARFUL = "fearful"
    GREEDY = "greedy"
    NEUTRAL = "neutral"


class Setup(str, Enum):
    BREAKOUT = "breakout"
    MEAN_REVERSION = "mean-reversion"
    TREND = "trend"
    RANGE = "range"
    NEWS = "news"
    OTHER = "other"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class TraderStyle(str, Enum):
    SCALPER = "scalper"
    DAY_TRADER = "day_trader"
    SWING_TRADER = "swing_trader"
    POSITION_TRADER = "position_trader"


class PatternSeverity(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    WARNING = "warning"


class Trend(str, Enum):
    """Direction of a metric between two periods."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
