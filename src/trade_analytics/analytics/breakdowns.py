"""Supplementary breakdowns shown next to the category cards.

Risk-per-trade buckets, partial-profit trades, stop-loss size per
market, profit per market and per named news event.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from trade_analytics.core.config import CategoryConfig
from trade_analytics.core.enums import TradeOutcome

from .categories import CategoryStat, aggregate, pct, summarize
from .record import ProfitResolver, Trade


# ---------------------------------------------------------------------------
# Risk per trade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RiskBucketStats:
    risk_level: float
    total: int = 0
    wins: int = 0
    losses: int = 0
    be_wins: int = 0
    be_losses: int = 0
    break_even: int = 0
    win_rate: float = 0.0  # wins / (total - break_even)
    win_rate_with_be: float = 0.0  # (wins + break_even) / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_level": self.risk_level,
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "be_wins": self.be_wins,
            "be_losses": self.be_losses,
            "break_even": self.break_even,
            "win_rate": round(self.win_rate, 4),
            "win_rate_with_be": round(self.win_rate_with_be, 4),
        }


def risk_per_trade_stats(
    trades: Sequence[Trade], risk_levels: Sequence[float]
) -> tuple[RiskBucketStats, ...]:
    """One bucket per configured risk level; other risk values are ignored."""
    out = []
    for level in risk_levels:
        bucket = [
            t for t in trades
            if t.risk_per_trade is not None and math.isclose(t.risk_per_trade, level)
        ]
        be = [t for t in bucket if t.break_even]
        wins = sum(1 for t in bucket if not t.break_even and t.is_win)
        losses = sum(1 for t in bucket if not t.break_even and t.is_loss)
        total = len(bucket)
        out.append(RiskBucketStats(
            risk_level=level,
            total=total,
            wins=wins,
            losses=losses,
            be_wins=sum(1 for t in be if t.is_win),
            be_losses=sum(1 for t in be if t.is_loss),
            break_even=len(be),
            win_rate=pct(wins, total - len(be)),
            win_rate_with_be=pct(wins + len(be), total),
        ))
    return tuple(out)


# ---------------------------------------------------------------------------
# Partials
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PartialTradesStats:
    wins: int = 0
    losses: int = 0
    be_wins: int = 0
    be_losses: int = 0
    neutral_be: int = 0  # BE partials without a final result
    win_rate: float = 0.0
    win_rate_with_be: float = 0.0

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.be_wins + self.be_losses + self.neutral_be

    @property
    def total_break_even(self) -> int:
        return self.be_wins + self.be_losses + self.neutral_be

    def to_dict(self) -> dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "be_wins": self.be_wins,
            "be_losses": self.be_losses,
            "neutral_be": self.neutral_be,
            "total": self.total,
            "total_break_even": self.total_break_even,
            "win_rate": round(self.win_rate, 4),
            "win_rate_with_be": round(self.win_rate_with_be, 4),
        }


def partial_trades_stats(trades: Sequence[Trade]) -> PartialTradesStats:
    """Outcomes of trades where partial profits were taken.

    A BE partial is classified by ``be_final_result`` when set, falling
    back to ``trade_outcome``.
    """
    wins = losses = be_wins = be_losses = neutral = 0
    for t in trades:
        if not t.partials_taken:
            continue
        if t.break_even:
            final = t.be_final_result or t.trade_outcome
            if final is None:
                neutral += 1
            elif final is TradeOutcome.WIN:
                be_wins += 1
            else:
                be_losses += 1
        elif t.is_win:
            wins += 1
        elif t.is_loss:
            losses += 1
    return PartialTradesStats(
        wins=wins,
        losses=losses,
        be_wins=be_wins,
        be_losses=be_losses,
        neutral_be=neutral,
        win_rate=pct(wins, wins + losses),
        win_rate_with_be=pct(wins + be_wins, wins + losses + be_wins + be_losses),
    )


# ---------------------------------------------------------------------------
# Per market
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SlSizeStat:
    market: str
    average_sl_size: float

    def to_dict(self) -> dict[str, Any]:
        return {"market": self.market, "average_sl_size": round(self.average_sl_size, 4)}


def sl_size_stats(trades: Sequence[Trade], default_label: str = "Unknown") -> tuple[SlSizeStat, ...]:
    """Average stop-loss size per market, largest first; zero averages dropped."""
    sizes: dict[str, list[float]] = defaultdict(list)
    for t in trades:
        if t.sl_size is not None:
            sizes[t.market or default_label].append(t.sl_size)
    stats = [SlSizeStat(m, sum(v) / len(v)) for m, v in sizes.items() if v]
    return tuple(sorted(
        (s for s in stats if s.average_sl_size > 0),
        key=lambda s: -s.average_sl_size,
    ))


@dataclass(frozen=True)
class MarketProfitStat:
    stat: CategoryStat
    profit: float = 0.0
    pnl_percentage: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.stat.to_dict(),
            "profit": round(self.profit, 2),
            "pnl_percentage": round(self.pnl_percentage, 4),
        }


def market_profit_stats(
    trades: Sequence[Trade],
    resolver: ProfitResolver,
    default_label: str = "Unknown",
) -> tuple[MarketProfitStat, ...]:
    """Category stats per market plus executed profit and P&L% of balance."""
    profit: dict[str, float] = defaultdict(float)
    for t in trades:
        if t.executed:
            profit[t.market or default_label] += resolver.profit(t)
    balance = resolver.account_balance
    return tuple(
        MarketProfitStat(
            stat=s,
            profit=profit[s.label],
            pnl_percentage=profit[s.label] / balance * 100 if balance > 0 else 0.0,
        )
        for s in aggregate(trades, lambda t: t.market, default_label)
    )


# ---------------------------------------------------------------------------
# News events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NewsNameStat:
    stat: CategoryStat
    average_intensity: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {**self.stat.to_dict(), "average_intensity": self.average_intensity}


def news_name_stats(
    trades: Sequence[Trade],
    *,
    include_unnamed: bool = False,
    unnamed_label: str = "News (no event)",
) -> tuple[NewsNameStat, ...]:
    """Per named news event, with average intensity (1-3, one decimal)."""
    news = [t for t in trades if t.news_related]
    named = [t for t in news if t.news_name]
    out: list[NewsNameStat] = []
    for stat in aggregate(named, lambda t: t.news_name):
        levels = [
            t.news_intensity for t in named
            if t.news_name == stat.label
            and t.news_intensity is not None
            and 1 <= t.news_intensity <= 3
        ]
        avg = round(sum(levels) / len(levels), 1) if levels else None
        out.append(NewsNameStat(stat=stat, average_intensity=avg))

    if include_unnamed:
        unnamed = [t for t in news if not t.news_name]
        if unnamed:
            out.append(NewsNameStat(stat=summarize(unnamed, unnamed_label)))
    return tuple(sorted(out, key=lambda s: -s.stat.total))


# ---------------------------------------------------------------------------
# All breakdowns
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Breakdowns:
    risk_per_trade: tuple[RiskBucketStats, ...] = ()
    partials: PartialTradesStats = field(default_factory=PartialTradesStats)
    sl_size: tuple[SlSizeStat, ...] = ()
    market_profit: tuple[MarketProfitStat, ...] = ()
    news_names: tuple[NewsNameStat, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_per_trade": [s.to_dict() for s in self.risk_per_trade],
            "partials": self.partials.to_dict(),
            "sl_size": [s.to_dict() for s in self.sl_size],
            "market_profit": [s.to_dict() for s in self.market_profit],
            "news_names": [s.to_dict() for s in self.news_names],
        }


def compute_breakdowns(
    trades: Sequence[Trade],
    resolver: ProfitResolver,
    config: CategoryConfig | None = None,
) -> Breakdowns:
    config = config or CategoryConfig()
    return Breakdowns(
        risk_per_trade=risk_per_trade_stats(trades, config.risk_levels),
        partials=partial_trades_stats(trades),
        sl_size=sl_size_stats(trades, config.default_label),
        market_profit=market_profit_stats(trades, resolver, config.default_label),
        news_names=news_name_stats(
            trades, include_unnamed=True, unnamed_label=config.news_unnamed_label
        ),
    )
