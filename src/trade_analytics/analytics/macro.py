"""Macro statistics — profit factor, consistency, Sharpe proxy, TQI.

All amounts here are risk-derived (``risk% x balance``, times RR for
wins), independent of the stored ``calculated_profit``, so the ratios
compare like with like across trades imported from different sources.

Break-even trades are excluded from the base figures.  In the with-BE
figures a BE trade realizes its amount only if partials were taken;
otherwise it contributes 0.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from .categories import pct
from .record import ProfitResolver, Trade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MacroStats:
    profit_factor: float = 0.0
    consistency_score: float = 0.0  # % of positive days, non-BE trades
    consistency_score_with_be: float = 0.0  # % of positive days, all trades
    sharpe_with_be: float = 0.0  # per-trade, not annualized
    trade_quality_index: float = 0.0  # 0..1
    total_r_multiple: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "profit_factor": round(self.profit_factor, 4),
            "consistency_score": round(self.consistency_score, 4),
            "consistency_score_with_be": round(self.consistency_score_with_be, 4),
            "sharpe_with_be": round(self.sharpe_with_be, 4),
            "trade_quality_index": round(self.trade_quality_index, 4),
            "total_r_multiple": round(self.total_r_multiple, 4),
        }


def sharpe_ratio(returns: Sequence[float]) -> float:
    """Mean over sample standard deviation (ddof=1); 0 if undefined."""
    if len(returns) < 2:
        return 0.0
    arr = np.asarray(returns, dtype=float)
    std = float(np.std(arr, ddof=1))
    if std <= 0:
        return 0.0
    return float(np.mean(arr)) / std


def r_value(trade: Trade) -> float | None:
    """R-multiple of one trade: +RR win, -1 loss, 0 break-even."""
    if trade.break_even:
        return 0.0
    if trade.is_win:
        return trade.risk_reward_ratio or 0.0
    if trade.is_loss:
        return -1.0
    return None


def trade_quality_index(trades: Sequence[Trade]) -> float:
    """Win share scaled by R stability: ``win% x 1 / (1 + sigma(R))``.

    BE trades count in the denominator but never as wins; sigma is the
    population standard deviation of the R-values.
    """
    r_values: list[float] = []
    wins = 0
    for t in trades:
        r = r_value(t)
        if r is None:
            continue
        r_values.append(r)
        if t.is_win and not t.break_even:
            wins += 1
    if not r_values:
        return 0.0
    stability = 1.0 / (1.0 + float(np.std(r_values)))
    return wins / len(r_values) * stability


def total_r_multiple(trades: Sequence[Trade]) -> float:
    return sum(r for r in (r_value(t) for t in trades) if r is not None)


def _positive_share(daily: dict[Any, float]) -> float:
    return pct(sum(1 for v in daily.values() if v > 0), len(daily))


def compute_macro_stats(
    trades: Sequence[Trade],
    account_balance: float,
    resolver: ProfitResolver | None = None,
) -> MacroStats:
    """Compute :class:`MacroStats` over the executed trades of ``trades``."""
    resolver = resolver or ProfitResolver(account_balance)
    executed = [t for t in trades if t.executed]

    gross_profit = gross_loss = 0.0
    daily_non_be: dict[Any, float] = defaultdict(float)
    daily_all: dict[Any, float] = defaultdict(float)
    returns_with_be: list[float] = []

    for t in executed:
        if not (t.is_win or t.is_loss):
            continue
        amount = resolver.outcome_amount(t)
        day = t.trade_date

        if not t.break_even:
            if t.is_win:
                gross_profit += amount
            else:
                gross_loss += -amount
            if day is not None:
                daily_non_be[day] += amount

        realized = amount if (not t.break_even or t.partials_taken) else 0.0
        if day is not None:
            daily_all[day] += realized
        returns_with_be.append(realized)

    logger.debug(
        "Macro stats: %d executed trades over %d trading days",
        len(executed), len(daily_all),
    )
    return MacroStats(
        profit_factor=gross_profit / gross_loss if gross_loss > 0 else 0.0,
        consistency_score=_positive_share(daily_non_be),
        consistency_score_with_be=_positive_share(daily_all),
        sharpe_with_be=sharpe_ratio(returns_with_be),
        trade_quality_index=trade_quality_index(executed),
        total_r_multiple=total_r_multiple(executed),
    )
