"""Per-month performance for one calendar year.

Month views reflect the whole year regardless of the active analytics
filter, so callers pass the year-scoped trade set rather than the
filtered subset.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .categories import pct
from .record import ProfitResolver, Trade

MONTH_NAMES = tuple(calendar.month_name[1:])


@dataclass(frozen=True)
class MonthlyStats:
    wins: int = 0  # all wins, BE included
    losses: int = 0  # all losses, BE included
    be_wins: int = 0
    be_losses: int = 0
    profit: float = 0.0  # non-BE trades only
    win_rate: float = 0.0  # non-BE denominator
    win_rate_with_be: float = 0.0  # all-trades denominator
    total_trades: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "be_wins": self.be_wins,
            "be_losses": self.be_losses,
            "profit": round(self.profit, 2),
            "win_rate": round(self.win_rate, 4),
            "win_rate_with_be": round(self.win_rate_with_be, 4),
            "total_trades": self.total_trades,
        }


@dataclass(frozen=True)
class MonthSelection:
    month: str
    stats: MonthlyStats

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "stats": self.stats.to_dict()}


@dataclass(frozen=True)
class MonthlyResult:
    year: int
    monthly_data: dict[str, MonthlyStats] = field(default_factory=dict)
    best_month: MonthSelection | None = None
    worst_month: MonthSelection | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "monthly_data": {m: s.to_dict() for m, s in self.monthly_data.items()},
            "best_month": self.best_month.to_dict() if self.best_month else None,
            "worst_month": self.worst_month.to_dict() if self.worst_month else None,
        }


@dataclass
class _MonthAccumulator:
    trades: int = 0
    wins: int = 0
    losses: int = 0
    be_wins: int = 0
    be_losses: int = 0
    non_be_wins: int = 0
    non_be_losses: int = 0
    profit: float = 0.0

    def record(self, trade: Trade, resolver: ProfitResolver) -> None:
        self.trades += 1
        if trade.is_win:
            self.wins += 1
            if trade.break_even:
                self.be_wins += 1
        elif trade.is_loss:
            self.losses += 1
            if trade.break_even:
                self.be_losses += 1
        if not trade.break_even:
            self.non_be_wins += trade.is_win
            self.non_be_losses += trade.is_loss
            self.profit += resolver.profit(trade)

    def freeze(self) -> MonthlyStats:
        return MonthlyStats(
            wins=self.wins,
            losses=self.losses,
            be_wins=self.be_wins,
            be_losses=self.be_losses,
            profit=self.profit,
            win_rate=pct(self.non_be_wins, self.non_be_wins + self.non_be_losses),
            win_rate_with_be=pct(self.wins, self.trades),
            total_trades=self.trades,
        )


def compute_monthly_stats(
    trades: Iterable[Trade],
    year: int,
    account_balance: float,
    resolver: ProfitResolver | None = None,
) -> MonthlyResult:
    """Aggregate executed trades of ``year`` by calendar month.

    ``best_month`` / ``worst_month`` are the months with the highest /
    lowest profit among months that have trades (first month wins a
    tie); both are ``None`` when the year has no trades.
    """
    resolver = resolver or ProfitResolver(account_balance)
    by_month: dict[int, _MonthAccumulator] = {}
    for t in trades:
        if not t.executed or t.trade_date is None or t.trade_date.year != year:
            continue
        by_month.setdefault(t.trade_date.month, _MonthAccumulator()).record(t, resolver)

    monthly: dict[str, MonthlyStats] = {}
    best: MonthSelection | None = None
    worst: MonthSelection | None = None
    for month in sorted(by_month):
        name = MONTH_NAMES[month - 1]
        stats = by_month[month].freeze()
        monthly[name] = stats
        if stats.total_trades == 0:
            continue
        if best is None or stats.profit > best.stats.profit:
            best = MonthSelection(name, stats)
        if worst is None or stats.profit < worst.stats.profit:
            worst = MonthSelection(name, stats)

    return MonthlyResult(year=year, monthly_data=monthly, best_month=best, worst_month=worst)
