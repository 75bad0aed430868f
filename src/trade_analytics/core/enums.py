"""Enumerations used across the analytics engine."""

from enum import Enum


class TradeOutcome(str, Enum):
    WIN = "Win"
    LOSE = "Lose"


class Direction(str, Enum):
    LONG = "Long"
    SHORT = "Short"


class ExecutionFilter(str, Enum):
    """Which side of the plan/realized split to keep."""

    EXECUTED = "executed"
    NON_EXECUTED = "nonExecuted"
    ALL = "all"


class ViewMode(str, Enum):
    YEARLY = "yearly"
    DATE_RANGE = "dateRange"


class ProfitSource(str, Enum):
    """Where per-trade profit comes from for one engine call."""

    STORED = "stored"    # calculated_profit when present, else derived
    DERIVED = "derived"  # always risk% x balance (x RR on wins)


class RangePreset(str, Enum):
    YEAR = "year"
    DAYS_15 = "15days"
    DAYS_30 = "30days"
    MONTH = "month"


class StatSet(str, Enum):
    """Statistic sets a presentation consumer can request."""

    CATEGORIES = "categories"
    SCALAR = "scalar"
    MONTHLY = "monthly"
    MACRO = "macro"
    BREAKDOWNS = "breakdowns"


class Trend(str, Enum):
    TREND_FOLLOWING = "Trend-following"
    COUNTER_TREND = "Counter-trend"
