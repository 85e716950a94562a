"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.

The behavioural thresholds in ``BehaviorConfig`` are empirically chosen
constants.  They are exposed for tuning, but the defaults are golden
values that the trader-profile tests pin.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class MetricsConfig(BaseModel):
    initial_equity: float = Field(default=50_000.0, gt=0)
    risk_free_rate_annual: float = 0.05
    days_per_year: int = 365  # Simple daily division, not compounded
    trading_days_per_year: int = 252  # Annualisation factor sqrt(252)

    @property
    def daily_risk_free_rate(self) -> float:
        return self.risk_free_rate_annual / self.days_per_year


class ThresholdConfig(BaseModel):
    min_bucket_trades: int = 5  # Instrument / symbol series
    min_day_trades: int = 2  # Daily win-rate series
    min_time_bucket_trades: int = 3  # Day-of-week / time-block series


class CorrelationConfig(BaseModel):
    top_n: int = 6
    min_common_days: int = 5


class BehaviorConfig(BaseModel):
    # Style classification (minutes / trades per day)
    scalper_max_minutes: float = 30
    scalper_min_trades_per_day: float = 5
    day_trader_max_minutes: float = 480
    swing_trader_max_minutes: float = 10_080  # 7 days
    style_lookback_days: int = 90

    # Pattern detectors
    revenge_trade_limit: int = 3
    overtrading_day_multiple: float = 2.0
    overtrading_day_limit: int = 5
    cut_winners_ratio: float = 0.7
    hold_losers_ratio: float = 1.5
    duration_min_samples: int = 5
    streak_size_multiple: float = 1.3
    streak_chase_limit: int = 5
    time_concentration_max: float = 0.5
    size_cv_max: float = 0.5

    # Optimal conditions
    top_symbol_min_trades: int = 5

    # Evolution
    evolution_min_trades: int = 10


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level library settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    correlation: CorrelationConfig = Field(default_factory=CorrelationConfig)
    behavior: BehaviorConfig = Field(default_factory=BehaviorConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_ANALYTICS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Malformed config file {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
