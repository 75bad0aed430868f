"""Custom exception hierarchy for the analytics engine."""


class AnalyticsError(Exception):
    """Base exception for all analytics errors."""


# --- Configuration ---
class ConfigError(AnalyticsError):
    """Invalid or missing configuration."""


class IntervalConfigError(ConfigError):
    """A time-of-day interval table entry is malformed."""

    def __init__(self, label: str, reason: str):
        self.label = label
        self.reason = reason
        super().__init__(f"Time interval [{label}]: {reason}")


# --- Input ---
class FilterError(AnalyticsError):
    """Filter parameters are inconsistent (e.g. inverted date range)."""


class TradeValidationError(AnalyticsError):
    """A trade record cannot be interpreted at all."""


# --- Trade Store ---
class TradeStoreError(AnalyticsError):
    """The trade source could not be read."""
