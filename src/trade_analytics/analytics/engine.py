"""Analytics engine — one consistent view per request.

The engine resolves the active filter, computes the filtered subset
exactly once, and threads that same immutable tuple into every
calculator, so a win-rate card and a profit card can never be computed
from different subsets.  Monthly figures are the one exception: month
views cover the whole year, so they use the year-scoped trade set and
ignore the market and execution filters.

Usage::

    engine = AnalyticsEngine(load_settings("analytics.toml"))
    view = engine.compute(
        trades,
        account_balance=10_000,
        request=AnalyticsRequest(
            filter=TradeFilter(market="EURUSD"),
            view_mode=ViewMode.YEARLY,
            year=2024,
        ),
    )
    print(view.scalar.win_rate, view.macro.profit_factor)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from trade_analytics.core.config import AnalyticsSettings
from trade_analytics.core.enums import StatSet, ViewMode
from trade_analytics.observability.logger import get_logger, request_scope

from .breakdowns import Breakdowns, compute_breakdowns
from .categories import CategoryAggregator, CategoryBreakdown
from .filters import TradeFilter, apply_filters, trades_in_year, year_range
from .macro import MacroStats, compute_macro_stats
from .monthly import MonthlyResult, compute_monthly_stats
from .record import ProfitResolver, Trade
from .scalar import ScalarStats, compute_scalar_stats
from .store import TradeStore

logger = get_logger(__name__)

ALL_STAT_SETS = frozenset(StatSet)


@dataclass(frozen=True)
class AnalyticsRequest:
    """What a presentation consumer wants computed.

    In ``YEARLY`` view the filter's date range is replaced by the
    calendar ``year`` (current year when unset).  In ``DATE_RANGE`` view
    the filter's own range applies and ``year`` only scopes the monthly
    figures (defaulting to the year of ``date_to``).
    """

    filter: TradeFilter = field(default_factory=TradeFilter)
    view_mode: ViewMode = ViewMode.DATE_RANGE
    year: int | None = None
    stat_sets: frozenset[StatSet] = ALL_STAT_SETS

    def wants(self, stat_set: StatSet) -> bool:
        return stat_set in self.stat_sets


@dataclass(frozen=True)
class AnalyticsView:
    """All statistic sets for one request.  Sets not requested are ``None``."""

    request_id: str
    account_balance: float
    filter: TradeFilter
    year: int
    trades: tuple[Trade, ...] = ()
    categories: CategoryBreakdown | None = None
    scalar: ScalarStats | None = None
    macro: MacroStats | None = None
    monthly: MonthlyResult | None = None
    breakdowns: Breakdowns | None = None

    def to_dict(self) -> dict[str, Any]:
        flt = self.filter
        return {
            "request_id": self.request_id,
            "account_balance": self.account_balance,
            "year": self.year,
            "filter": {
                "execution": flt.execution.value,
                "market": flt.market,
                "date_from": flt.date_from.isoformat() if flt.date_from else None,
                "date_to": flt.date_to.isoformat() if flt.date_to else None,
            },
            "trade_count": len(self.trades),
            "categories": self.categories.to_dict() if self.categories else None,
            "scalar": self.scalar.to_dict() if self.scalar else None,
            "macro": self.macro.to_dict() if self.macro else None,
            "monthly": self.monthly.to_dict() if self.monthly else None,
            "breakdowns": self.breakdowns.to_dict() if self.breakdowns else None,
        }


def as_trades(rows: Iterable[Trade | Mapping[str, Any]]) -> tuple[Trade, ...]:
    """Snapshot ``rows`` as a tuple of :class:`Trade`, converting raw rows."""
    return tuple(r if isinstance(r, Trade) else Trade.from_mapping(r) for r in rows)


class AnalyticsEngine:
    """Pure aggregation over (trades, account balance, request).

    Parameters
    ----------
    settings : AnalyticsSettings | None
        Defaults, category configuration and profit source.
    today : date | None
        Reference date for the default year.  Defaults to ``date.today()``.
    """

    def __init__(
        self,
        settings: AnalyticsSettings | None = None,
        *,
        today: date | None = None,
    ) -> None:
        self._settings = settings or AnalyticsSettings()
        self._categories = CategoryAggregator(self._settings.categories)
        self._today = today

    @property
    def settings(self) -> AnalyticsSettings:
        return self._settings

    def _reference_year(self) -> int:
        return (self._today or date.today()).year

    def resolve(self, request: AnalyticsRequest) -> tuple[TradeFilter, int]:
        """Effective filter and monthly year for ``request``."""
        flt = request.filter
        if request.view_mode is ViewMode.YEARLY:
            year = request.year or self._reference_year()
            return flt.with_range(*year_range(year)), year
        if request.year is not None:
            return flt, request.year
        if flt.date_to is not None:
            return flt, flt.date_to.year
        return flt, self._reference_year()

    def compute(
        self,
        trades: Iterable[Trade | Mapping[str, Any]],
        account_balance: float | None,
        request: AnalyticsRequest | None = None,
    ) -> AnalyticsView:
        """Compute every requested statistic set from one filtered snapshot."""
        request = request or AnalyticsRequest()
        with request_scope() as request_id:
            return self._compute(request_id, trades, account_balance, request)

    def _compute(
        self,
        request_id: str,
        trades: Iterable[Trade | Mapping[str, Any]],
        account_balance: float | None,
        request: AnalyticsRequest,
    ) -> AnalyticsView:
        balance = float(account_balance or 0.0)
        snapshot = as_trades(trades)
        flt, year = self.resolve(request)
        subset = apply_filters(snapshot, flt)
        resolver = ProfitResolver.from_settings(balance, self._settings)

        categories = scalar = macro = monthly = breakdowns = None
        if request.wants(StatSet.CATEGORIES):
            categories = self._categories.compute(subset)
        if request.wants(StatSet.SCALAR):
            scalar = compute_scalar_stats(subset, balance, resolver)
        if request.wants(StatSet.MACRO):
            macro = compute_macro_stats(subset, balance, resolver)
        if request.wants(StatSet.BREAKDOWNS):
            breakdowns = compute_breakdowns(subset, resolver, self._settings.categories)
        if request.wants(StatSet.MONTHLY):
            monthly = compute_monthly_stats(
                trades_in_year(snapshot, year), year, balance, resolver
            )

        logger.info(
            "analytics_view_computed",
            input_trades=len(snapshot),
            filtered_trades=len(subset),
            year=year,
            stat_sets=sorted(s.value for s in request.stat_sets),
            profit_source=resolver.source.value,
        )

        return AnalyticsView(
            request_id=request_id,
            account_balance=balance,
            filter=flt,
            year=year,
            trades=subset,
            categories=categories,
            scalar=scalar,
            macro=macro,
            monthly=monthly,
            breakdowns=breakdowns,
        )

    def compute_from_store(
        self,
        store: TradeStore,
        account_id: str | None,
        account_balance: float | None,
        request: AnalyticsRequest | None = None,
    ) -> AnalyticsView:
        """Load the request's window from ``store`` and compute the view.

        Store errors propagate unchanged.
        """
        request = request or AnalyticsRequest()
        flt, year = self.resolve(request)
        date_from, date_to = flt.date_from, flt.date_to
        if request.wants(StatSet.MONTHLY):
            # monthly figures need the whole year even for a narrower view
            y_from, y_to = year_range(year)
            date_from = min(date_from, y_from) if date_from else None
            date_to = max(date_to, y_to) if date_to else None
        trades = store.load(account_id, date_from, date_to)
        return self.compute(trades, account_balance, request)
