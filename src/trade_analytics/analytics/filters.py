"""Filter pipeline — selects the trade subset fed to every calculator.

Three independent predicates (execution state, market, inclusive date
range).  They commute, so the order they are applied in never changes
the result.  The input is never mutated; the output is a tuple so it
can be shared between calculators as an immutable snapshot.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, timedelta

from trade_analytics.core.enums import ExecutionFilter, RangePreset
from trade_analytics.core.errors import FilterError

from .record import Trade

ALL_MARKETS = "all"


@dataclass(frozen=True)
class TradeFilter:
    """Active analytics filter.

    ``date_from`` / ``date_to`` are inclusive; ``None`` means unbounded.
    """

    execution: ExecutionFilter = ExecutionFilter.ALL
    market: str = ALL_MARKETS
    date_from: date | None = None
    date_to: date | None = None

    def __post_init__(self) -> None:
        if (
            self.date_from is not None
            and self.date_to is not None
            and self.date_from > self.date_to
        ):
            raise FilterError(
                f"date_from {self.date_from} is after date_to {self.date_to}"
            )

    def with_range(self, date_from: date | None, date_to: date | None) -> TradeFilter:
        return replace(self, date_from=date_from, date_to=date_to)

    @property
    def is_bounded(self) -> bool:
        return self.date_from is not None or self.date_to is not None


def matches_execution(trade: Trade, execution: ExecutionFilter) -> bool:
    if execution is ExecutionFilter.EXECUTED:
        return trade.executed
    if execution is ExecutionFilter.NON_EXECUTED:
        return not trade.executed
    return True


def matches_market(trade: Trade, market: str) -> bool:
    return market == ALL_MARKETS or trade.market == market


def matches_date_range(trade: Trade, date_from: date | None, date_to: date | None) -> bool:
    if date_from is None and date_to is None:
        return True
    if trade.trade_date is None:
        return False
    if date_from is not None and trade.trade_date < date_from:
        return False
    if date_to is not None and trade.trade_date > date_to:
        return False
    return True


def apply_filters(trades: Iterable[Trade], flt: TradeFilter) -> tuple[Trade, ...]:
    """Return the trades passing every predicate of ``flt``, in input order."""
    return tuple(
        t
        for t in trades
        if matches_execution(t, flt.execution)
        and matches_market(t, flt.market)
        and matches_date_range(t, flt.date_from, flt.date_to)
    )


def trades_in_year(trades: Iterable[Trade], year: int) -> tuple[Trade, ...]:
    start, end = year_range(year)
    return tuple(t for t in trades if matches_date_range(t, start, end))


# ---------------------------------------------------------------------------
# Date range helpers
# ---------------------------------------------------------------------------

def year_range(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def month_range(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def preset_range(preset: RangePreset, today: date | None = None) -> tuple[date, date]:
    """Dashboard presets: current year, last 15/30 days, current month."""
    today = today or date.today()
    if preset is RangePreset.YEAR:
        return year_range(today.year)
    if preset is RangePreset.DAYS_15:
        return today - timedelta(days=14), today
    if preset is RangePreset.DAYS_30:
        return today - timedelta(days=29), today
    return month_range(today.year, today.month)


def is_custom_range(date_from: date, date_to: date, today: date | None = None) -> bool:
    """True when the range matches none of the presets for ``today``."""
    return all(
        (date_from, date_to) != preset_range(p, today) for p in RangePreset
    )
