"""Shared fixtures for analytics tests."""

from datetime import date, time

import pytest

from trade_analytics.analytics.categories import CategoryAggregator
from trade_analytics.analytics.engine import AnalyticsEngine
from trade_analytics.analytics.record import ProfitResolver, Trade
from trade_analytics.core.config import AnalyticsSettings
from trade_analytics.core.enums import ProfitSource, TradeOutcome


def _make_trade(
    outcome: str | None = "Win",
    *,
    trade_date: date | str | None = date(2024, 1, 2),
    trade_time: time | None = None,
    break_even: bool = False,
    executed: bool = True,
    profit: float | None = None,
    risk: float | None = None,
    rr: float | None = None,
    **fields,
) -> Trade:
    """Build a Trade with sensible defaults.

    ``outcome`` accepts ``"Win"``, ``"Lose"`` or ``None``.
    """
    if isinstance(trade_date, str):
        trade_date = date.fromisoformat(trade_date)
    return Trade(
        id=fields.pop("id", ""),
        trade_outcome=TradeOutcome(outcome) if outcome else None,
        trade_date=trade_date,
        trade_time=trade_time,
        break_even=break_even,
        executed=executed,
        calculated_profit=profit,
        risk_per_trade=risk,
        risk_reward_ratio=rr,
        **fields,
    )


@pytest.fixture
def make_trade():
    return _make_trade


@pytest.fixture
def settings():
    return AnalyticsSettings()


@pytest.fixture
def derived_settings():
    return AnalyticsSettings(profit_source=ProfitSource.DERIVED)


@pytest.fixture
def aggregator(settings):
    return CategoryAggregator(settings.categories)


@pytest.fixture
def engine(settings):
    return AnalyticsEngine(settings, today=date(2024, 6, 15))


@pytest.fixture
def resolver():
    """Stored-first resolver over a 10,000 balance."""
    return ProfitResolver(10_000)


@pytest.fixture
def mixed_trades():
    """A small journal spanning two months and two markets."""
    return [
        _make_trade("Win", trade_date="2024-01-02", market="EURUSD", setup_type="OB",
                    direction="Long", profit=200.0, risk=1.0, rr=2.0,
                    trade_time=time(9, 30), evaluation="A"),
        _make_trade("Lose", trade_date="2024-01-03", market="EURUSD", setup_type="FVG",
                    direction="Short", profit=-100.0, risk=1.0, rr=2.0,
                    trade_time=time(14, 0), evaluation="B", news_related=True),
        _make_trade("Win", trade_date="2024-01-03", market="GBPUSD", setup_type="OB",
                    direction="Long", break_even=True, profit=0.0, risk=0.5,
                    partials_taken=True, reentry=True),
        _make_trade("Win", trade_date="2024-02-05", market="GBPUSD", setup_type="OB",
                    direction="Long", profit=300.0, risk=1.0, rr=3.0,
                    local_high_low=True, trend="Trend-following"),
        _make_trade("Lose", trade_date="2024-02-06", market="EURUSD", setup_type="Sweep",
                    direction="Short", executed=False, risk=1.0),
    ]
