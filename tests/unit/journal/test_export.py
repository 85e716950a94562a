"""Tests for TradeExporter: CSV/JSON export."""

import csv
import io
import json
from datetime import date

import pytest

from trade_analytics.core.models import Trade
from trade_analytics.journal.export import (
    CSV_COLUMNS,
    TradeExporter,
    export_filename,
    format_number,
)

from tests.conftest import make_trade


@pytest.fixture
def exporter():
    return TradeExporter()


@pytest.fixture
def trades():
    return [
        make_trade(
            12.5, trade_id="t-1", day=0, hour=9, fees=(1.0, 1.5, -0.25),
            entry_price=42000.0, exit_price=42100.5, size=0.5, leverage=5,
            journal={"emotion": "disciplined", "setup": "trend", "grade": "A",
                     "pre_trade_note": "breakout, volume confirmed"},
        ),
        make_trade(-3.0, trade_id="t-2", day=1, side="short", order_type="stop-limit"),
    ]


class TestCSVExport:
    def test_header(self, exporter, trades):
        reader = csv.reader(io.StringIO(exporter.to_csv(trades)))
        assert next(reader) == CSV_COLUMNS
        assert len(CSV_COLUMNS) == 21

    def test_row_values(self, exporter, trades):
        rows = list(csv.DictReader(io.StringIO(exporter.to_csv(trades))))
        first = rows[0]
        assert first["ID"] == "t-1"
        assert first["Date"] == "2024-01-01 09:00:00"
        assert first["Close Date"] == "2024-01-01 10:00:00"
        assert first["Instrument"] == "perpetual"
        assert first["Entry Price"] == "42000"
        assert first["Exit Price"] == "42100.5"
        assert first["Leverage"] == "5"
        assert first["Funding Fee"] == "-0.25"
        assert first["Total Fees"] == "2.75"
        assert first["Grade"] == "A"

    def test_commas_are_quoted(self, exporter, trades):
        text = exporter.to_csv(trades)
        assert '"breakout, volume confirmed"' in text

    def test_missing_journal_is_blank(self, exporter, trades):
        rows = list(csv.DictReader(io.StringIO(exporter.to_csv(trades))))
        second = rows[1]
        assert second["Order Type"] == "stop-limit"
        assert second["Emotion"] == ""
        assert second["Post-Trade Note"] == ""

    def test_empty(self, exporter):
        assert exporter.to_csv([]) == ",".join(CSV_COLUMNS) + "\n"


class TestJSONExport:
    def test_camel_case_wire_format(self, exporter, trades):
        data = json.loads(exporter.to_json(trades))
        assert data[0]["closeTimestamp"] == trades[0].close_timestamp
        assert data[0]["journal"]["preTradeNote"] == "breakout, volume confirmed"
        assert data[1]["journal"] is None

    def test_reloads_into_trades(self, exporter, trades):
        data = json.loads(exporter.to_json(trades))
        assert [Trade.model_validate(row) for row in data] == trades


class TestHelpers:
    def test_filename(self):
        assert export_filename("trades", date(2024, 3, 5)) == "trades-20240305.csv"

    def test_format_number(self):
        assert format_number(50000.0) == "50000"
        assert format_number(0.1) == "0.1"
        assert format_number(-2.0) == "-2"
