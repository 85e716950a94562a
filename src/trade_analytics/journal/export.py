"""Trade export: CSV/JSON output for external analysis and archival.

The CSV layout is fixed: one header row and one row per trade, dates in
``YYYY-MM-DD HH:MM:SS`` (UTC).  Values containing commas are quoted.
The same layout is accepted back by ``data.loader.load_trades``, less
the sub-second part of each timestamp; ``to_json`` keeps them exact.

Usage::

    exporter = TradeExporter()
    csv_str = exporter.to_csv(trades)
    json_str = exporter.to_json(trades)
    name = export_filename("trades", date.today())   # trades-20240105.csv
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

from ..core.models import Trade, ms_to_datetime

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "ID",
    "Date",
    "Close Date",
    "Instrument",
    "Symbol",
    "Side",
    "Entry Price",
    "Exit Price",
    "Size",
    "Leverage",
    "PnL",
    "Entry Fee",
    "Exit Fee",
    "Funding Fee",
    "Total Fees",
    "Order Type",
    "Emotion",
    "Setup",
    "Grade",
    "Pre-Trade Note",
    "Post-Trade Note",
]

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(ms: int) -> str:
    return ms_to_datetime(ms).strftime(DATE_FORMAT)


def format_number(value: float) -> str:
    """Shortest text for a number; integral floats lose the ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_filename(prefix: str, today: date) -> str:
    """``{prefix}-YYYYMMDD.csv``"""
    return f"{prefix}-{today.strftime('%Y%m%d')}.csv"


class TradeExporter:
    """Export trades to CSV or JSON.

    Parameters
    ----------
    indent : int
        JSON indentation level.  Default 2.
    """

    def __init__(self, *, indent: int = 2) -> None:
        self._indent = indent

    # ------------------------------------------------------------------ #
    # CSV Export                                                           #
    # ------------------------------------------------------------------ #

    def to_csv(self, trades: Sequence[Trade]) -> str:
        """Export trades as a CSV string with header row."""
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for trade in trades:
            writer.writerow(self._trade_to_row(trade))
        logger.debug("Exported %d trades to CSV", len(trades))
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    # JSON Export                                                          #
    # ------------------------------------------------------------------ #

    def to_json(self, trades: Sequence[Trade]) -> str:
        """Export trades as a JSON array in the camelCase wire format."""
        rows = [t.model_dump(mode="json", by_alias=True) for t in trades]
        return json.dumps(rows, indent=self._indent)

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _trade_to_row(self, trade: Trade) -> list[Any]:
        j = trade.journal
        return [
            trade.id,
            format_timestamp(trade.timestamp),
            format_timestamp(trade.close_timestamp),
            trade.instrument.value,
            trade.symbol,
            trade.side.value,
            format_number(trade.entry_price),
            format_number(trade.exit_price),
            format_number(trade.size),
            format_number(trade.leverage),
            format_number(trade.pnl),
            format_number(trade.fees.entry),
            format_number(trade.fees.exit),
            format_number(trade.fees.funding),
            format_number(trade.fees.total),
            trade.order_type.value,
            j.emotion.value if j else "",
            j.setup.value if j else "",
            j.grade.value if j else "",
            j.pre_trade_note if j else "",
            j.post_trade_note if j else "",
        ]
