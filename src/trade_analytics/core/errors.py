"""Custom exception hierarchy for the analytics library."""


class AnalyticsError(Exception):
    """Base exception for all analytics library errors."""


# --- Configuration ---
class ConfigError(AnalyticsError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(AnalyticsError):
    """Trade data could not be read or understood."""


class TradeDataError(DataError):
    """A trade record failed schema validation."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid trade at row {index}: {reason}")


class UnsupportedFormatError(DataError):
    """Input file has an extension the loader does not handle."""


# --- Journal ---
class JournalError(AnalyticsError):
    """Journal annotation error."""


class JournalPatchError(JournalError):
    """Journal patch contains fields that are not part of a journal."""
