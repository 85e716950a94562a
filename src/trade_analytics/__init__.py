"""Trade analytics: performance metrics, adaptive thresholds and trader profiling."""

__version__ = "0.1.0"
