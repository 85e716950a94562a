"""Tests for trade / portfolio file loading."""

import json

import pytest

from trade_analytics.core.errors import DataError, TradeDataError, UnsupportedFormatError
from trade_analytics.data.loader import (
    load_portfolio,
    load_trades,
    parse_trades,
)
from trade_analytics.journal.export import TradeExporter

from tests.conftest import make_trade

WIRE_TRADE = {
    "id": "w1",
    "timestamp": 1_704_067_200_000,
    "closeTimestamp": 1_704_070_800_000,
    "instrument": "options",
    "symbol": "SOL-28MAR-150-C",
    "side": "long",
    "entryPrice": 4.2,
    "exitPrice": 6.0,
    "size": 10,
    "leverage": 1,
    "pnl": 18.0,
    "fees": {"entry": 0.1, "exit": 0.1, "funding": 0, "total": 0.2},
    "orderType": "limit",
    "optionsData": {
        "type": "call",
        "strike": 150,
        "expiry": 1_711_584_000_000,
        "iv": 0.85,
        "greeks": {"delta": 0.4, "gamma": 0.02, "theta": -0.1, "vega": 0.3},
    },
}


class TestParseTrades:
    def test_camel_case(self):
        [trade] = parse_trades([WIRE_TRADE])
        assert trade.close_timestamp == 1_704_070_800_000
        assert trade.options_data.option_type.value == "call"
        assert trade.duration_minutes == 60

    def test_snake_case(self):
        row = {
            "id": "s1", "timestamp": 0, "close_timestamp": 60_000,
            "instrument": "spot", "symbol": "SOL", "side": "short",
            "entry_price": 100, "exit_price": 99, "size": 1, "pnl": 1,
        }
        [trade] = parse_trades([row])
        assert trade.leverage == 1.0
        assert trade.order_type.value == "market"
        assert trade.fees.total == 0.0

    def test_invalid_row_names_index(self):
        bad = dict(WIRE_TRADE, side="sideways")
        with pytest.raises(TradeDataError) as exc_info:
            parse_trades([WIRE_TRADE, bad])
        assert exc_info.value.index == 1
        assert "side" in str(exc_info.value)

    def test_non_positive_size_rejected(self):
        with pytest.raises(TradeDataError):
            parse_trades([dict(WIRE_TRADE, size=0)])


class TestLoadTrades:
    def test_json_file(self, tmp_path):
        path = tmp_path / "trades.json"
        path.write_text(json.dumps([WIRE_TRADE]))
        assert [t.id for t in load_trades(path)] == ["w1"]

    def test_csv_round_trip(self, tmp_path):
        trades = [
            make_trade(12.5, trade_id="c1", fees=(1.0, 1.0, 0.5),
                       journal={"emotion": "greedy", "post_trade_note": "late exit, chased"}),
            make_trade(-4.0, trade_id="c2", day=1, side="short"),
        ]
        path = tmp_path / "trades.csv"
        path.write_text(TradeExporter().to_csv(trades))
        loaded = load_trades(path)
        assert loaded == trades

    def test_csv_truncates_milliseconds(self, tmp_path):
        opened = 1_704_067_200_123
        trade = make_trade(1.0, open_ms=opened)
        path = tmp_path / "trades.csv"
        path.write_text(TradeExporter().to_csv([trade]))
        loaded = load_trades(path)[0]
        assert loaded.timestamp == 1_704_067_200_000
        assert loaded.close_timestamp == trade.close_timestamp - 123

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataError, match="not found"):
            load_trades(tmp_path / "nope.json")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "trades.xlsx"
        path.write_text("")
        with pytest.raises(UnsupportedFormatError):
            load_trades(path)

    def test_json_must_be_array(self, tmp_path):
        path = tmp_path / "trades.json"
        path.write_text(json.dumps(WIRE_TRADE))
        with pytest.raises(DataError, match="array"):
            load_trades(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "trades.json"
        path.write_text("[{")
        with pytest.raises(DataError, match="Malformed"):
            load_trades(path)

    def test_csv_missing_columns(self, tmp_path):
        path = tmp_path / "trades.csv"
        path.write_text("ID,Date\nx,2024-01-01 00:00:00\n")
        with pytest.raises(DataError, match="missing columns"):
            load_trades(path)


class TestLoadPortfolio:
    def test_portfolio(self, tmp_path):
        path = tmp_path / "portfolio.json"
        path.write_text(json.dumps({
            "totalEquity": 52_000,
            "availableMargin": 30_000,
            "usedMargin": 10_000,
            "unrealizedPnl": 150,
            "positions": [{
                "instrument": "perpetual", "symbol": "SOL-PERP", "side": "long",
                "size": 10, "entryPrice": 100, "currentPrice": 105,
                "unrealizedPnl": 50, "leverage": 3,
                "liquidationPrice": 70, "marginUsed": 333.3,
            }],
        }))
        state = load_portfolio(path)
        assert len(state.positions) == 1
        assert state.margin_utilization == 0.25

    def test_invalid_portfolio(self, tmp_path):
        path = tmp_path / "portfolio.json"
        path.write_text(json.dumps({"positions": [{"symbol": "x"}]}))
        with pytest.raises(DataError, match="Invalid portfolio"):
            load_portfolio(path)
