"""Trade and portfolio file loading.

Two trade formats are read:

* ``.json``: an array of trade objects, camelCase (wire) or snake_case
  keys.
* ``.csv``: the layout written by ``TradeExporter.to_csv``.  Journal
  columns left blank mean "no journal".  Options contract data is not
  part of the CSV layout.  Dates are stored to the second, so a CSV
  round trip truncates the millisecond part of ``timestamp`` and
  ``close_timestamp``; use JSON when exact timestamps matter.

Every row is validated by the ``Trade`` model; the first invalid row
raises ``TradeDataError`` naming its index.
"""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..core.errors import DataError, TradeDataError, UnsupportedFormatError
from ..core.models import PortfolioState, Trade
from ..journal.export import CSV_COLUMNS, DATE_FORMAT

logger = logging.getLogger(__name__)

_JOURNAL_COLUMNS = {
    "Emotion": "emotion",
    "Setup": "setup",
    "Grade": "grade",
    "Pre-Trade Note": "preTradeNote",
    "Post-Trade Note": "postTradeNote",
}


def parse_trades(rows: Iterable[dict[str, Any]]) -> list[Trade]:
    """Validate raw rows into ``Trade`` models.

    Raises
    ------
    TradeDataError
        For the first row that fails validation.
    """
    trades: list[Trade] = []
    for index, row in enumerate(rows):
        try:
            trades.append(Trade.model_validate(row))
        except ValidationError as exc:
            raise TradeDataError(index, _first_error(exc)) from exc
    return trades


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err["loc"])
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def _parse_csv_date(value: str) -> int:
    dt = datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def csv_row_to_dict(row: dict[str, str]) -> dict[str, Any]:
    """Convert one exported CSV row back into the trade wire format."""
    missing = [c for c in CSV_COLUMNS if c not in row]
    if missing:
        raise DataError(f"CSV is missing columns: {', '.join(missing)}")

    try:
        timestamp = _parse_csv_date(row["Date"])
        close_timestamp = _parse_csv_date(row["Close Date"])
    except ValueError as exc:
        raise DataError(f"Bad date in row {row['ID']!r}: {exc}") from exc

    data: dict[str, Any] = {
        "id": row["ID"],
        "timestamp": timestamp,
        "closeTimestamp": close_timestamp,
        "instrument": row["Instrument"],
        "symbol": row["Symbol"],
        "side": row["Side"],
        "entryPrice": row["Entry Price"],
        "exitPrice": row["Exit Price"],
        "size": row["Size"],
        "leverage": row["Leverage"],
        "pnl": row["PnL"],
        "fees": {
            "entry": row["Entry Fee"],
            "exit": row["Exit Fee"],
            "funding": row["Funding Fee"],
            "total": row["Total Fees"],
        },
        "orderType": row["Order Type"],
    }

    journal = {
        key: row[col] for col, key in _JOURNAL_COLUMNS.items() if row[col] != ""
    }
    if journal:
        data["journal"] = journal
    return data


def load_trades(path: str | Path) -> list[Trade]:
    """Load trades from a ``.json`` or ``.csv`` file."""
    path = Path(path)
    if not path.exists():
        raise DataError(f"Trade file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        try:
            rows = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise DataError(f"Malformed JSON in {path}: {exc}") from exc
        if not isinstance(rows, list):
            raise DataError(f"Expected a JSON array of trades in {path}")
    elif suffix == ".csv":
        with open(path, newline="") as f:
            rows = [csv_row_to_dict(r) for r in csv.DictReader(f)]
    else:
        raise UnsupportedFormatError(f"Unsupported trade file format: {path.suffix}")

    trades = parse_trades(rows)
    logger.info("Loaded %d trades from %s", len(trades), path.name)
    return trades


def load_portfolio(path: str | Path) -> PortfolioState:
    """Load a ``PortfolioState`` snapshot from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise DataError(f"Portfolio file not found: {path}")
    try:
        data = json.loads(path.read_text())
        return PortfolioState.model_validate(data)
    except json.JSONDecodeError as exc:
        raise DataError(f"Malformed JSON in {path}: {exc}") from exc
    except ValidationError as exc:
        raise DataError(f"Invalid portfolio in {path}: {_first_error(exc)}") from exc
