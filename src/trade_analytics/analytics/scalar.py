"""Scalar statistics — one aggregate snapshot over a trade subset.

Usage::

    stats = compute_scalar_stats(trades, account_balance=10_000)
    print(stats.win_rate, stats.total_profit, stats.max_drawdown)

Planned (non-executed) trades count toward ``total_trades`` and
``non_executed`` only; every outcome, profit, drawdown, streak and
spacing figure is computed over executed trades.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .categories import pct
from .record import ProfitResolver, Trade, chronological
from .streaks import StreakStats, compute_streaks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScalarStats:
    """Totals, profit figures, drawdown, streaks and trade spacing."""

    total_trades: int = 0
    non_executed: int = 0
    wins: int = 0  # non-BE
    losses: int = 0  # non-BE
    be_wins: int = 0
    be_losses: int = 0
    total_profit: float = 0.0
    average_profit: float = 0.0
    win_rate: float = 0.0
    win_rate_with_be: float = 0.0
    average_pnl_percentage: float = 0.0
    max_drawdown: float = 0.0  # percent of peak
    streaks: StreakStats = StreakStats()
    average_days_between_trades: float = 0.0

    @property
    def total_wins(self) -> int:
        return self.wins + self.be_wins

    @property
    def total_losses(self) -> int:
        return self.losses + self.be_losses

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_trades": self.total_trades,
            "non_executed": self.non_executed,
            "wins": self.wins,
            "losses": self.losses,
            "be_wins": self.be_wins,
            "be_losses": self.be_losses,
            "total_wins": self.total_wins,
            "total_losses": self.total_losses,
            "total_profit": round(self.total_profit, 2),
            "average_profit": round(self.average_profit, 2),
            "win_rate": round(self.win_rate, 4),
            "win_rate_with_be": round(self.win_rate_with_be, 4),
            "average_pnl_percentage": round(self.average_pnl_percentage, 4),
            "max_drawdown": round(self.max_drawdown, 4),
            **self.streaks.to_dict(),
            "average_days_between_trades": round(self.average_days_between_trades, 1),
        }


def max_drawdown(
    trades: Sequence[Trade],
    account_balance: float,
    resolver: ProfitResolver,
) -> float:
    """Largest peak-to-trough decline of the running balance, in percent.

    The balance starts at ``account_balance`` (which is also the initial
    peak) and adds each executed trade's profit in date order.  Trades
    sharing a date keep their input order, so the path (not only the
    final figure) is deterministic.
    """
    if account_balance <= 0:
        return 0.0
    running = peak = float(account_balance)
    worst = 0.0
    for trade in chronological([t for t in trades if t.executed]):
        running += resolver.profit(trade)
        if running > peak:
            peak = running
        if peak > 0:
            worst = max(worst, (peak - running) / peak * 100)
    return worst


def average_days_between_trades(trades: Sequence[Trade]) -> float:
    """Mean gap in days between consecutive executed, dated trades."""
    dates = [t.trade_date for t in chronological(trades) if t.executed and t.trade_date]
    if len(dates) < 2:
        return 0.0
    gaps = [(b - a).days for a, b in zip(dates, dates[1:])]
    return sum(gaps) / len(gaps)


def compute_scalar_stats(
    trades: Sequence[Trade],
    account_balance: float,
    resolver: ProfitResolver | None = None,
) -> ScalarStats:
    """Compute :class:`ScalarStats` over ``trades``.

    Parameters
    ----------
    trades : Sequence[Trade]
        The already-filtered subset for this view.
    account_balance : float
        Starting balance for drawdown and P&L%.  Non-positive balances
        yield 0 for every balance-normalized figure.
    resolver : ProfitResolver | None
        Profit source for this call.  Defaults to stored-first.
    """
    resolver = resolver or ProfitResolver(account_balance)
    total_trades = len(trades)
    if total_trades == 0:
        return ScalarStats()

    if account_balance <= 0:
        logger.debug("Balance %s is not positive; P&L%% and drawdown are 0", account_balance)

    executed = [t for t in trades if t.executed]
    wins = losses = be_wins = be_losses = 0
    total_profit = 0.0
    for t in executed:
        total_profit += resolver.profit(t)
        if t.break_even:
            be_wins += t.is_win
            be_losses += t.is_loss
        else:
            wins += t.is_win
            losses += t.is_loss

    return ScalarStats(
        total_trades=total_trades,
        non_executed=total_trades - len(executed),
        wins=wins,
        losses=losses,
        be_wins=be_wins,
        be_losses=be_losses,
        total_profit=total_profit,
        average_profit=total_profit / total_trades,
        win_rate=pct(wins, wins + losses),
        win_rate_with_be=pct(wins + be_wins, total_trades),
        average_pnl_percentage=(
            total_profit / account_balance * 100 if account_balance > 0 else 0.0
        ),
        max_drawdown=max_drawdown(trades, account_balance, resolver),
        streaks=compute_streaks(trades),
        average_days_between_trades=average_days_between_trades(trades),
    )
