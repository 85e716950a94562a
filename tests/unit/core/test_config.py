"""Test Settings loading."""

import pytest

from trade_analytics.analytics.correlation import build_correlation_matrix
from trade_analytics.analytics.metrics import calculate_metrics
from trade_analytics.analytics.profile import generate_trader_profile
from trade_analytics.analytics.thresholds import calculate_adaptive_thresholds
from trade_analytics.core.config import Settings, load_settings
from trade_analytics.core.errors import ConfigError

from tests.conftest import make_trade


class TestSettingsDefaults:
    def test_metrics_defaults(self):
        settings = Settings()
        assert settings.metrics.initial_equity == 50_000.0
        assert settings.metrics.trading_days_per_year == 252
        assert settings.metrics.daily_risk_free_rate == pytest.approx(0.05 / 365)

    def test_threshold_defaults(self):
        settings = Settings()
        assert settings.thresholds.min_bucket_trades == 5
        assert settings.thresholds.min_day_trades == 2
        assert settings.thresholds.min_time_bucket_trades == 3

    def test_correlation_defaults(self):
        settings = Settings()
        assert settings.correlation.top_n == 6
        assert settings.correlation.min_common_days == 5

    def test_observability_defaults(self):
        assert Settings().observability.log_format == "console"


class TestLoadSettings:
    def test_no_file(self):
        assert load_settings().metrics.initial_equity == 50_000.0

    def test_toml_file(self, tmp_path):
        path = tmp_path / "analytics.toml"
        path.write_text(
            "[metrics]\n"
            "initial_equity = 100000\n"
            "\n"
            "[behavior]\n"
            "revenge_trade_limit = 5\n"
        )
        settings = load_settings(path)
        assert settings.metrics.initial_equity == 100_000.0
        assert settings.behavior.revenge_trade_limit == 5
        assert settings.behavior.hold_losers_ratio == 1.5

    def test_overrides_win(self, tmp_path):
        path = tmp_path / "analytics.toml"
        path.write_text("[correlation]\ntop_n = 4\n")
        settings = load_settings(path, overrides={"correlation": {"top_n": 3}})
        assert settings.correlation.top_n == 3

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TRADE_ANALYTICS_METRICS__INITIAL_EQUITY", "25000")
        assert load_settings().metrics.initial_equity == 25_000.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.toml")

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[metrics\n")
        with pytest.raises(ConfigError, match="Malformed"):
            load_settings(path)

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"metrics": {"initial_equity": -1}})


class TestEnvironmentBoundary:
    """Environment variables reach ``load_settings`` only, never default calls."""

    @pytest.fixture
    def noisy_env(self, monkeypatch):
        monkeypatch.setenv("TRADE_ANALYTICS_METRICS__INITIAL_EQUITY", "1000")
        monkeypatch.setenv("TRADE_ANALYTICS_CORRELATION__TOP_N", "1")
        monkeypatch.setenv("TRADE_ANALYTICS_THRESHOLDS__MIN_BUCKET_TRADES", "1")
        monkeypatch.setenv("TRADE_ANALYTICS_BEHAVIOR__TOP_SYMBOL_MIN_TRADES", "1")

    def test_metrics_ignore_env(self, noisy_env, sim_clock):
        m = calculate_metrics([make_trade(100.0)], clock=sim_clock)
        assert m.equity_curve[0].equity == 50_100.0
        assert m.total_pnl_percent == 0.2

    def test_correlation_ignores_env(self, noisy_env):
        trades = [make_trade(1.0, symbol="A"), make_trade(1.0, symbol="B")]
        assert build_correlation_matrix(trades).symbols == ["A", "B"]

    def test_thresholds_and_profile_ignore_env(self, noisy_env, sim_clock):
        trades = [make_trade(10.0)]
        m = calculate_metrics(trades, clock=sim_clock)
        thresholds = calculate_adaptive_thresholds(trades, m, clock=sim_clock)
        assert thresholds.zones["instrumentWinRate"].mean == 0
        profile = generate_trader_profile(trades, m)
        assert not any(c.startswith("Top symbol") for c in profile.optimal_conditions)

    def test_load_settings_still_reads_env(self, noisy_env):
        assert load_settings().metrics.initial_equity == 1000.0
