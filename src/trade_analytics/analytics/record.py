"""Canonical trade record — the core data model.

A :class:`Trade` is one executed or planned trade as supplied by the
trade store.  Store rows are loosely typed (booleans as strings, numbers
as strings, missing fields), so every defaulting rule lives in
:meth:`Trade.from_mapping` and nowhere else:

* empty categorical fields become ``None``; aggregators substitute the
  configured default label
* flags accept ``True``/``"true"``/``"1"``/``1``; anything else is False
* ``executed`` defaults to True; only an explicit false marks a plan
* malformed dates, times and numbers become ``None``

Profit has a single source of truth per engine call, chosen by
:class:`ProfitResolver`.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from typing import Any

from trade_analytics.core.config import AnalyticsSettings
from trade_analytics.core.enums import Direction, ProfitSource, TradeOutcome
from trade_analytics.core.errors import TradeValidationError

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "t", "y"})


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return str(value).strip().lower() in _TRUE_STRINGS


def to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (ValueError, OverflowError):
        logger.debug("Unparseable number %r", value)
        return None
    return number if math.isfinite(number) else None


def to_label(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logger.debug("Unparseable trade_date %r", value)
        return None


def to_time(value: Any) -> time | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    try:
        nums = [int(p) for p in parts]
        if len(nums) < 2 or len(nums) > 3:
            raise ValueError(value)
        return time(*nums)
    except ValueError:
        logger.debug("Unparseable trade_time %r", value)
        return None


def to_outcome(value: Any) -> TradeOutcome | None:
    if isinstance(value, TradeOutcome):
        return value
    text = to_label(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in ("win", "won"):
        return TradeOutcome.WIN
    if lowered in ("lose", "loss", "lost"):
        return TradeOutcome.LOSE
    return None


def _to_direction(value: Any) -> str | None:
    text = to_label(value)
    if text is None:
        return None
    for d in Direction:
        if text.lower() == d.value.lower():
            return d.value
    return text


# ---------------------------------------------------------------------------
# Trade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Trade:
    """One executed or planned trade.

    Instances are immutable; every calculator reads them, none writes.
    """

    # Identity
    id: str = ""
    account_id: str | None = None
    user_id: str | None = None
    strategy_id: str | None = None

    # Classification
    market: str | None = None
    direction: str | None = None  # "Long" / "Short"
    setup_type: str | None = None
    liquidity: str | None = None
    mss: str | None = None
    evaluation: str | None = None  # "A+", "A", "B", "C"
    day_of_week: str | None = None
    trend: str | None = None

    # Outcome
    trade_outcome: TradeOutcome | None = None
    break_even: bool = False
    be_final_result: TradeOutcome | None = None
    executed: bool = True

    # Risk / reward
    risk_per_trade: float | None = None  # % of balance
    risk_reward_ratio: float | None = None  # realized
    risk_reward_ratio_long: float | None = None  # potential
    sl_size: float | None = None

    # Stored financials
    calculated_profit: float | None = None
    pnl_percentage: float | None = None

    # Flags
    reentry: bool = False
    news_related: bool = False
    local_high_low: bool = False
    partials_taken: bool = False
    news_name: str | None = None
    news_intensity: float | None = None

    # Temporal
    trade_date: date | None = None
    trade_time: time | None = None

    notes: str | None = None

    @property
    def is_win(self) -> bool:
        return self.trade_outcome is TradeOutcome.WIN

    @property
    def is_loss(self) -> bool:
        return self.trade_outcome is TradeOutcome.LOSE

    @property
    def weekday_name(self) -> str | None:
        """``day_of_week`` if recorded, else derived from ``trade_date``."""
        if self.day_of_week:
            return self.day_of_week
        if self.trade_date is not None:
            return self.trade_date.strftime("%A")
        return None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Trade:
        """Build a trade from a loosely typed store row."""
        if not isinstance(data, Mapping):
            raise TradeValidationError(
                f"Trade row must be a mapping, got {type(data).__name__}"
            )
        return cls(
            id=str(data.get("id") or ""),
            account_id=to_label(data.get("account_id")),
            user_id=to_label(data.get("user_id")),
            strategy_id=to_label(data.get("strategy_id")),
            market=to_label(data.get("market")),
            direction=_to_direction(data.get("direction")),
            setup_type=to_label(data.get("setup_type")),
            liquidity=to_label(data.get("liquidity")),
            mss=to_label(data.get("mss")),
            evaluation=to_label(data.get("evaluation")),
            day_of_week=to_label(data.get("day_of_week")),
            trend=to_label(data.get("trend")),
            trade_outcome=to_outcome(data.get("trade_outcome")),
            break_even=to_bool(data.get("break_even")),
            be_final_result=to_outcome(data.get("be_final_result")),
            executed=to_bool(data.get("executed"), default=True),
            risk_per_trade=to_float(data.get("risk_per_trade")),
            risk_reward_ratio=to_float(data.get("risk_reward_ratio")),
            risk_reward_ratio_long=to_float(data.get("risk_reward_ratio_long")),
            sl_size=to_float(data.get("sl_size")),
            calculated_profit=to_float(data.get("calculated_profit")),
            pnl_percentage=to_float(data.get("pnl_percentage")),
            reentry=to_bool(data.get("reentry")),
            news_related=to_bool(data.get("news_related")),
            local_high_low=to_bool(data.get("local_high_low")),
            partials_taken=to_bool(data.get("partials_taken")),
            news_name=to_label(data.get("news_name")),
            news_intensity=to_float(data.get("news_intensity")),
            trade_date=to_date(data.get("trade_date")),
            trade_time=to_time(data.get("trade_time")),
            notes=to_label(data.get("notes")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export to a flat JSON-safe dictionary."""
        out = asdict(self)
        for key in ("trade_outcome", "be_final_result"):
            if out[key] is not None:
                out[key] = out[key].value
        out["trade_date"] = self.trade_date.isoformat() if self.trade_date else None
        out["trade_time"] = self.trade_time.strftime("%H:%M") if self.trade_time else None
        return out


def chronological(trades: tuple[Trade, ...] | list[Trade]) -> list[Trade]:
    """Stable sort by ``trade_date``; equal dates keep input order, undated last."""
    return sorted(
        trades,
        key=lambda t: (t.trade_date is None, t.trade_date or date.min),
    )


# ---------------------------------------------------------------------------
# Profit resolution
# ---------------------------------------------------------------------------

class ProfitResolver:
    """Single source of truth for per-trade profit within one call.

    Parameters
    ----------
    account_balance : float
        Balance the risk percentages apply to.  Non-positive balances
        derive every amount as 0.
    source : ProfitSource
        ``STORED`` prefers ``calculated_profit`` and derives only when it
        is absent; ``DERIVED`` ignores stored values.
    default_risk_pct, default_rr : float
        Used when a trade has no ``risk_per_trade`` / ``risk_reward_ratio``.
    """

    def __init__(
        self,
        account_balance: float,
        *,
        source: ProfitSource = ProfitSource.STORED,
        default_risk_pct: float = 0.5,
        default_rr: float = 2.0,
    ) -> None:
        self.account_balance = float(account_balance or 0.0)
        self.source = source
        self._default_risk_pct = default_risk_pct
        self._default_rr = default_rr

    @classmethod
    def from_settings(
        cls, account_balance: float, settings: AnalyticsSettings
    ) -> ProfitResolver:
        return cls(
            account_balance,
            source=settings.profit_source,
            default_risk_pct=settings.defaults.default_risk_pct,
            default_rr=settings.defaults.default_rr,
        )

    def risk_pct(self, trade: Trade) -> float:
        if trade.risk_per_trade is None:
            return self._default_risk_pct
        return trade.risk_per_trade

    def rr(self, trade: Trade) -> float:
        if trade.risk_reward_ratio is None:
            return self._default_rr
        return trade.risk_reward_ratio

    def risk_amount(self, trade: Trade) -> float:
        """Currency amount risked: ``risk% x balance``."""
        if self.account_balance <= 0:
            return 0.0
        return self.account_balance * self.risk_pct(trade) / 100

    def outcome_amount(self, trade: Trade) -> float:
        """Risk-derived amount by outcome, ignoring the break-even flag."""
        if trade.is_win:
            return self.risk_amount(trade) * self.rr(trade)
        if trade.is_loss:
            return -self.risk_amount(trade)
        return 0.0

    def derived_profit(self, trade: Trade) -> float:
        if trade.break_even:
            return 0.0
        return self.outcome_amount(trade)

    def derived_pnl_percentage(self, trade: Trade) -> float:
        if trade.break_even or self.account_balance <= 0:
            return 0.0
        if trade.is_win:
            return self.risk_pct(trade) * self.rr(trade)
        if trade.is_loss:
            return -self.risk_pct(trade)
        return 0.0

    def profit(self, trade: Trade) -> float:
        if self.source is ProfitSource.STORED and trade.calculated_profit is not None:
            return trade.calculated_profit
        return self.derived_profit(trade)

    def pnl_percentage(self, trade: Trade) -> float:
        if self.source is ProfitSource.STORED and trade.pnl_percentage is not None:
            return trade.pnl_percentage
        return self.derived_pnl_percentage(trade)
