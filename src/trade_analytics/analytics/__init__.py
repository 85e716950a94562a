"""Trading performance analytics.

Recomputed wholesale from a list of closed trades; nothing here keeps
state between calls except the opt-in ``ThresholdCache``.

Key components
--------------
**Core metrics**

calculate_metrics         Full dashboard aggregate (P&L, ratios, curves)
DashboardMetrics          The aggregate value
build_equity_curve        Fee-adjusted equity and drawdown by close day
build_heatmap             Day-of-week x time-block P&L grid

**Statistical context**

calculate_adaptive_thresholds   Per-metric zones from the trader's own data
ThresholdCache                  Memoised thresholds by trade-set fingerprint
build_correlation_matrix        Daily-P&L correlation of top symbols

**Behaviour**

generate_trader_profile   Style, behavioural patterns, strengths, evolution
"""

from .correlation import CorrelationMatrix, CorrelationResult, build_correlation_matrix
from .equity import build_daily_pnl, build_equity_curve
from .grouping import apply_filters
from .heatmap import build_heatmap
from .metrics import DashboardMetrics, calculate_metrics, empty_metrics
from .profile import TraderProfile, TraderProfiler, generate_trader_profile
from .thresholds import AdaptiveThresholds, ThresholdCache, calculate_adaptive_thresholds

__all__ = [
    "CorrelationMatrix",
    "CorrelationResult",
    "build_correlation_matrix",
    "build_daily_pnl",
    "build_equity_curve",
    "apply_filters",
    "build_heatmap",
    "DashboardMetrics",
    "calculate_metrics",
    "empty_metrics",
    "TraderProfile",
    "TraderProfiler",
    "generate_trader_profile",
    "AdaptiveThresholds",
    "ThresholdCache",
    "calculate_adaptive_thresholds",
]
