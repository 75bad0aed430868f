"""Trade Analytics — journal dashboard statistics.

Turns a raw collection of trade records into win rates, profit,
drawdown, streaks, profit factor, consistency and category breakdowns.
Every calculator is a pure function of (trades, balance, config).

Key components
--------------
**Model & Filtering**

Trade                 Canonical trade record with field defaulting
ProfitResolver        Stored-vs-derived profit, fixed per engine call
TradeFilter           Execution / market / date-range predicates

**Calculators**

CategoryAggregator    Win/loss/win-rate per categorical group
compute_scalar_stats  Totals, profit, drawdown, trade spacing
compute_streaks       Current and maximum winning/losing runs
compute_monthly_stats Per-month stats with best and worst month
compute_macro_stats   Profit factor, consistency, Sharpe proxy, TQI
compute_breakdowns    Risk buckets, partials, SL size, per-market profit

**Orchestration & I/O**

AnalyticsEngine       One filtered snapshot per request, every stat set
JsonTradeStore        Trades from a JSON / JSON-Lines file
AnalyticsExporter     JSON reports and CSV category tables
"""

from .record import ProfitResolver, Trade
from .filters import TradeFilter, apply_filters
from .categories import CategoryAggregator, CategoryBreakdown, CategoryStat
from .scalar import ScalarStats, compute_scalar_stats
from .streaks import StreakStats, compute_streaks
from .monthly import MonthlyResult, MonthlyStats, compute_monthly_stats
from .macro import MacroStats, compute_macro_stats
from .breakdowns import Breakdowns, compute_breakdowns
from .store import InMemoryTradeStore, JsonTradeStore, TradeStore
from .engine import AnalyticsEngine, AnalyticsRequest, AnalyticsView
from .export import AnalyticsExporter

__all__ = [
    "Trade",
    "ProfitResolver",
    "TradeFilter",
    "apply_filters",
    "CategoryAggregator",
    "CategoryBreakdown",
    "CategoryStat",
    "ScalarStats",
    "compute_scalar_stats",
    "StreakStats",
    "compute_streaks",
    "MonthlyResult",
    "MonthlyStats",
    "compute_monthly_stats",
    "MacroStats",
    "compute_macro_stats",
    "Breakdowns",
    "compute_breakdowns",
    "TradeStore",
    "InMemoryTradeStore",
    "JsonTradeStore",
    "AnalyticsEngine",
    "AnalyticsRequest",
    "AnalyticsView",
    "AnalyticsExporter",
]
