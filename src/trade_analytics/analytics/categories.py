"""Category aggregation — win/loss/win-rate per categorical group.

Every dimension (setup, liquidity, direction, day, market, MSS, news,
evaluation grade, time-of-day interval, local high/low, trend, re-entry,
break-even) goes through the same :func:`aggregate` primitive, so the
counting rules are defined exactly once:

* ``total`` counts every trade in the group, planned ones included
* break-even trades count as ``be_wins`` / ``be_losses`` by outcome
* other trades count as ``wins`` / ``losses`` by outcome
* trades with no definite outcome count toward ``total`` only

Usage::

    aggregator = CategoryAggregator(settings.categories)
    for stat in aggregator.by_setup(trades):
        print(stat.label, stat.win_rate)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from trade_analytics.core.config import CategoryConfig, TimeInterval

from .record import Trade

logger = logging.getLogger(__name__)

LIQUIDATED = "liquidated"
NOT_LIQUIDATED = "notLiquidated"
NEWS = "News"
NO_NEWS = "No News"
REENTRY = "ReEntry"
BREAK_EVEN = "Break Even"


def pct(numerator: float, denominator: float) -> float:
    """Percentage with a defined zero for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


@dataclass(frozen=True)
class CategoryStat:
    """Aggregate for one group of trades."""

    label: str
    total: int = 0
    wins: int = 0
    losses: int = 0
    be_wins: int = 0
    be_losses: int = 0
    win_rate: float = 0.0  # wins / (wins + losses)
    win_rate_with_be: float = 0.0  # (wins + be_wins) / total

    @property
    def break_even(self) -> int:
        return self.be_wins + self.be_losses

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "be_wins": self.be_wins,
            "be_losses": self.be_losses,
            "break_even": self.break_even,
            "win_rate": round(self.win_rate, 4),
            "win_rate_with_be": round(self.win_rate_with_be, 4),
        }


@dataclass
class _Bucket:
    """Accumulator for one category key."""

    total: int = 0
    wins: int = 0
    losses: int = 0
    be_wins: int = 0
    be_losses: int = 0

    def record(self, trade: Trade) -> None:
        self.total += 1
        if trade.break_even:
            if trade.is_win:
                self.be_wins += 1
            elif trade.is_loss:
                self.be_losses += 1
        elif trade.is_win:
            self.wins += 1
        elif trade.is_loss:
            self.losses += 1

    def freeze(self, label: str) -> CategoryStat:
        return CategoryStat(
            label=label,
            total=self.total,
            wins=self.wins,
            losses=self.losses,
            be_wins=self.be_wins,
            be_losses=self.be_losses,
            win_rate=pct(self.wins, self.wins + self.losses),
            win_rate_with_be=pct(self.wins + self.be_wins, self.total),
        )


def summarize(trades: Iterable[Trade], label: str) -> CategoryStat:
    """Single-bucket aggregate over all ``trades``."""
    bucket = _Bucket()
    for t in trades:
        bucket.record(t)
    return bucket.freeze(label)


def aggregate(
    trades: Iterable[Trade],
    key_fn: Callable[[Trade], str | None],
    default_label: str = "Unknown",
    domain: Sequence[str] | None = None,
) -> tuple[CategoryStat, ...]:
    """Group ``trades`` by ``key_fn`` and compute a :class:`CategoryStat` each.

    Without a ``domain`` the groups are ordered by descending total, ties
    by first occurrence.  With a ``domain`` the groups follow domain order
    and are zero-filled; keys outside the domain collect into a trailing
    ``default_label`` group, present only when it has trades.
    """
    buckets: dict[str, _Bucket] = {}
    allowed: frozenset[str] | None = None
    if domain is not None:
        buckets = {label: _Bucket() for label in domain}
        allowed = frozenset(domain)

    for t in trades:
        key = key_fn(t) or default_label
        if allowed is not None and key not in allowed:
            key = default_label
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _Bucket()
        bucket.record(t)

    items = list(buckets.items())
    if domain is None:
        # sorted() is stable: equal totals keep first-occurrence order
        items = sorted(items, key=lambda kv: -kv[1].total)
    return tuple(b.freeze(label) for label, b in items)


def interval_label(trade: Trade, intervals: Sequence[TimeInterval]) -> str | None:
    """Label of the first interval containing ``trade_time``, if any."""
    if trade.trade_time is None:
        return None
    minutes = trade.trade_time.hour * 60 + trade.trade_time.minute
    for interval in intervals:
        if interval.contains(minutes):
            return interval.label
    return None


@dataclass(frozen=True)
class CategoryBreakdown:
    """Every category dimension computed over one trade subset."""

    setup: tuple[CategoryStat, ...] = ()
    liquidity: tuple[CategoryStat, ...] = ()
    direction: tuple[CategoryStat, ...] = ()
    mss: tuple[CategoryStat, ...] = ()
    market: tuple[CategoryStat, ...] = ()
    news: tuple[CategoryStat, ...] = ()
    day: tuple[CategoryStat, ...] = ()
    evaluation: tuple[CategoryStat, ...] = ()
    time_interval: tuple[CategoryStat, ...] = ()
    local_high_low: tuple[CategoryStat, ...] = ()
    trend: tuple[CategoryStat, ...] = ()
    reentry: CategoryStat = CategoryStat(label=REENTRY)
    break_even: CategoryStat = CategoryStat(label=BREAK_EVEN)

    def dimensions(self) -> dict[str, tuple[CategoryStat, ...]]:
        """Map of dimension name to its stats, single-bucket ones wrapped."""
        return {
            "setup": self.setup,
            "liquidity": self.liquidity,
            "direction": self.direction,
            "mss": self.mss,
            "market": self.market,
            "news": self.news,
            "day": self.day,
            "evaluation": self.evaluation,
            "time_interval": self.time_interval,
            "local_high_low": self.local_high_low,
            "trend": self.trend,
            "reentry": (self.reentry,),
            "break_even": (self.break_even,),
        }

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            name: [s.to_dict() for s in stats]
            for name, stats in self.dimensions().items()
        }


class CategoryAggregator:
    """Category specializations over a shared :class:`CategoryConfig`.

    Parameters
    ----------
    config : CategoryConfig
        Default label, grade order, weekday domain, interval table and
        trend values.  Nothing here is a hidden module constant.
    """

    def __init__(self, config: CategoryConfig | None = None) -> None:
        self._config = config or CategoryConfig()

    @property
    def default_label(self) -> str:
        return self._config.default_label

    def _free(self, trades: Iterable[Trade], key_fn: Callable[[Trade], str | None]):
        return aggregate(trades, key_fn, self.default_label)

    # ------------------------------------------------------------------ #
    # Free-form dimensions                                                 #
    # ------------------------------------------------------------------ #

    def by_setup(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return self._free(trades, lambda t: t.setup_type)

    def by_liquidity(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return self._free(trades, lambda t: t.liquidity)

    def by_direction(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return self._free(trades, lambda t: t.direction)

    def by_mss(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return self._free(trades, lambda t: t.mss)

    def by_market(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return self._free(trades, lambda t: t.market)

    # ------------------------------------------------------------------ #
    # Fixed domains                                                        #
    # ------------------------------------------------------------------ #

    def by_news(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return aggregate(
            trades,
            lambda t: NEWS if t.news_related else NO_NEWS,
            self.default_label,
            domain=(NEWS, NO_NEWS),
        )

    def by_day(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        def key(t: Trade) -> str | None:
            name = t.weekday_name
            return name.strip().capitalize() if name else None

        return aggregate(trades, key, self.default_label, domain=self._config.weekdays)

    def by_time_interval(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        intervals = self._config.time_intervals
        return aggregate(
            trades,
            lambda t: interval_label(t, intervals),
            self.default_label,
            domain=[i.label for i in intervals],
        )

    def by_local_high_low(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        return aggregate(
            trades,
            lambda t: LIQUIDATED if t.local_high_low else NOT_LIQUIDATED,
            self.default_label,
            domain=(LIQUIDATED, NOT_LIQUIDATED),
        )

    def by_evaluation(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        """Known grades only, in grade order; grades without trades omitted."""
        grades = self._config.grades
        graded = [t for t in trades if t.evaluation in grades]
        stats = aggregate(graded, lambda t: t.evaluation, self.default_label, domain=grades)
        return tuple(s for s in stats if s.total > 0)

    def by_trend(self, trades: Iterable[Trade]) -> tuple[CategoryStat, ...]:
        values = self._config.trend_values
        trending = [t for t in trades if t.trend in values]
        stats = aggregate(trending, lambda t: t.trend, self.default_label, domain=values)
        return tuple(sorted((s for s in stats if s.total > 0), key=lambda s: -s.total))

    # ------------------------------------------------------------------ #
    # Single-bucket summaries                                              #
    # ------------------------------------------------------------------ #

    def reentry_summary(self, trades: Iterable[Trade]) -> CategoryStat:
        return summarize((t for t in trades if t.reentry), REENTRY)

    def break_even_summary(self, trades: Iterable[Trade]) -> CategoryStat:
        return summarize((t for t in trades if t.break_even), BREAK_EVEN)

    # ------------------------------------------------------------------ #
    # All dimensions                                                       #
    # ------------------------------------------------------------------ #

    def compute(self, trades: Sequence[Trade]) -> CategoryBreakdown:
        """Compute every dimension over the same ``trades`` snapshot."""
        breakdown = CategoryBreakdown(
            setup=self.by_setup(trades),
            liquidity=self.by_liquidity(trades),
            direction=self.by_direction(trades),
            mss=self.by_mss(trades),
            market=self.by_market(trades),
            news=self.by_news(trades),
            day=self.by_day(trades),
            evaluation=self.by_evaluation(trades),
            time_interval=self.by_time_interval(trades),
            local_high_low=self.by_local_high_low(trades),
            trend=self.by_trend(trades),
            reentry=self.reentry_summary(trades),
            break_even=self.break_even_summary(trades),
        )
        logger.debug("Category breakdown over %d trades", len(trades))
        return breakdown
