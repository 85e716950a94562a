"""Core domain models used across the analytics library.

These are the canonical input types.  A ``Trade`` is one closed position
exactly as delivered by the data source; it is frozen, and journal edits
produce a new value instead of mutating the old one.

All models accept both the snake_case field names and the camelCase wire
names (``closeTimestamp``, ``entryPrice`` ...), so JSON exported by the
dashboard front end loads without translation.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import (
    Emotion,
    Grade,
    Instrument,
    OptionType,
    OrderType,
    Setup,
    Side,
)

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


def ms_to_datetime(ms: int) -> datetime:
    """Milliseconds since epoch as an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Trade components
# ---------------------------------------------------------------------------

class TradeFees(BaseModel):
    """Fees paid on one trade, in quote currency.

    ``funding`` is signed (negative = rebate).  ``total`` is carried as
    delivered; the convention is ``entry + exit + |funding|``.
    """

    model_config = _MODEL_CONFIG

    entry: float = 0.0
    exit: float = 0.0
    funding: float = 0.0
    total: float = 0.0

    @classmethod
    def from_components(
        cls, entry: float, exit: float, funding: float = 0.0
    ) -> TradeFees:
        return cls(
            entry=entry,
            exit=exit,
            funding=funding,
            total=entry + exit + abs(funding),
        )


class Greeks(BaseModel):
    model_config = _MODEL_CONFIG

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0


class OptionsData(BaseModel):
    """Contract details, present only on options trades."""

    model_config = _MODEL_CONFIG

    option_type: OptionType = Field(alias="type")
    strike: float
    expiry: int  # ms since epoch
    iv: float
    greeks: Greeks = Field(default_factory=Greeks)


class TradeJournal(BaseModel):
    """User annotation attached to a trade."""

    model_config = _MODEL_CONFIG

    emotion: Emotion = Emotion.NEUTRAL
    setup: Setup = Setup.OTHER
    grade: Grade = Grade.C
    pre_trade_note: str = ""
    post_trade_note: str = ""


# ---------------------------------------------------------------------------
# Trade
# ---------------------------------------------------------------------------

class Trade(BaseModel):
    """Immutable record of one closed position."""

    model_config = _MODEL_CONFIG

    id: str
    timestamp: int  # open, ms since epoch
    close_timestamp: int  # close, ms since epoch
    instrument: Instrument
    symbol: str
    side: Side
    entry_price: float = Field(gt=0)
    exit_price: float
    size: float = Field(gt=0)
    leverage: float = Field(default=1.0, ge=1)
    pnl: float
    fees: TradeFees = Field(default_factory=TradeFees)
    order_type: OrderType = OrderType.MARKET
    journal: TradeJournal | None = None
    options_data: OptionsData | None = None

    @property
    def duration_ms(self) -> int:
        return self.close_timestamp - self.timestamp

    @property
    def duration_minutes(self) -> float:
        return self.duration_ms / 60_000

    @property
    def notional(self) -> float:
        """Entry notional, ``|size * entry_price|``."""
        return abs(self.size * self.entry_price)

    @property
    def net_pnl(self) -> float:
        """P&L after all fees."""
        return self.pnl - self.fees.total

    @property
    def is_win(self) -> bool:
        return self.pnl > 0


# ---------------------------------------------------------------------------
# Portfolio snapshot (external, read-only)
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """An open position in the current portfolio snapshot."""

    model_config = _MODEL_CONFIG

    instrument: Instrument
    symbol: str
    side: Side
    size: float
    entry_price: float
    current_price: float
    unrealized_pnl: float = 0.0
    leverage: float = 1.0
    liquidation_price: float = 0.0
    margin_used: float = 0.0


class PortfolioState(BaseModel):
    """Open-position snapshot supplied by the data source."""

    model_config = _MODEL_CONFIG

    total_equity: float = 0.0
    available_margin: float = 0.0
    used_margin: float = 0.0
    unrealized_pnl: float = 0.0
    positions: list[Position] = Field(default_factory=list)
    greeks_aggregate: Greeks = Field(default_factory=Greeks)

    @property
    def margin_utilization(self) -> float:
        """Used margin as a fraction of total margin (0 when none)."""
        total = self.used_margin + self.available_margin
        if total <= 0:
            return 0.0
        return self.used_margin / total


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

class FilterState(BaseModel):
    """Trade filter held by the application state.

    Empty lists mean "no restriction".  ``date_range`` bounds the open
    timestamp (inclusive, ms).
    """

    model_config = _MODEL_CONFIG

    date_range: tuple[int, int] | None = None
    instruments: list[Instrument] = Field(default_factory=list)
    symbols: list[str] = Field(default_factory=list)
    sides: list[Side] = Field(default_factory=list)
