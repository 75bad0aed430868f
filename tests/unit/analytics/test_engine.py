"""Tests for AnalyticsEngine — one consistent view per request."""

from datetime import date

import pytest

from trade_analytics.analytics.engine import AnalyticsEngine, AnalyticsRequest, as_trades
from trade_analytics.analytics.filters import TradeFilter
from trade_analytics.analytics.store import InMemoryTradeStore
from trade_analytics.core.config import AnalyticsSettings
from trade_analytics.core.enums import ExecutionFilter, ProfitSource, StatSet, ViewMode


class TestCompute:
    def test_all_sets_by_default(self, engine, mixed_trades):
        view = engine.compute(mixed_trades, 10_000)
        assert view.categories is not None
        assert view.scalar is not None
        assert view.macro is not None
        assert view.monthly is not None
        assert view.breakdowns is not None
        assert view.request_id

    def test_unrequested_sets_are_none(self, engine, mixed_trades):
        request = AnalyticsRequest(stat_sets=frozenset({StatSet.SCALAR}))
        view = engine.compute(mixed_trades, 10_000, request)
        assert view.scalar is not None
        assert view.categories is None
        assert view.monthly is None
        assert view.macro is None
        assert view.breakdowns is None
        assert view.to_dict()["categories"] is None

    def test_every_calculator_sees_same_subset(self, engine, mixed_trades):
        request = AnalyticsRequest(filter=TradeFilter(market="EURUSD"))
        view = engine.compute(mixed_trades, 10_000, request)
        assert len(view.trades) == 3
        assert view.scalar.total_trades == 3
        assert sum(s.total for s in view.categories.setup) == 3
        assert [s.label for s in view.categories.market] == ["EURUSD"]

    def test_monthly_ignores_market_and_execution_filter(self, engine, mixed_trades):
        request = AnalyticsRequest(
            filter=TradeFilter(market="EURUSD", execution=ExecutionFilter.NON_EXECUTED),
            year=2024,
        )
        view = engine.compute(mixed_trades, 10_000, request)
        assert view.scalar.total_trades == 1
        assert set(view.monthly.monthly_data) == {"January", "February"}

    def test_yearly_view_scopes_dates(self, engine, make_trade):
        trades = [
            make_trade("Win", trade_date="2023-06-01"),
            make_trade("Win", trade_date="2024-06-01"),
        ]
        request = AnalyticsRequest(view_mode=ViewMode.YEARLY, year=2023)
        view = engine.compute(trades, 10_000, request)
        assert view.scalar.total_trades == 1
        assert view.filter.date_from == date(2023, 1, 1)
        assert view.filter.date_to == date(2023, 12, 31)
        assert view.year == 2023

    def test_yearly_defaults_to_reference_year(self, engine, make_trade):
        view = engine.compute([make_trade(trade_date="2024-03-01")], 1000,
                              AnalyticsRequest(view_mode=ViewMode.YEARLY))
        assert view.year == 2024
        assert view.scalar.total_trades == 1

    def test_date_range_year_follows_range_end(self, engine, mixed_trades):
        flt = TradeFilter(date_from=date(2023, 6, 1), date_to=date(2024, 1, 31))
        view = engine.compute(mixed_trades, 10_000, AnalyticsRequest(filter=flt))
        assert view.year == 2024

    def test_accepts_raw_rows(self, engine):
        rows = [{"trade_outcome": "Win", "trade_date": "2024-01-02", "calculated_profit": "50"}]
        view = engine.compute(rows, 1000)
        assert view.scalar.total_profit == pytest.approx(50.0)

    def test_profit_source_from_settings(self, make_trade):
        engine = AnalyticsEngine(AnalyticsSettings(profit_source=ProfitSource.DERIVED))
        view = engine.compute([make_trade("Win", profit=1.0, risk=1.0, rr=2.0)], 10_000)
        assert view.scalar.total_profit == pytest.approx(200.0)

    def test_none_balance_is_zero(self, engine, make_trade):
        view = engine.compute([make_trade("Win", profit=10.0)], None)
        assert view.account_balance == 0.0
        assert view.scalar.average_pnl_percentage == 0.0

    def test_empty_input_full_shape(self, engine):
        view = engine.compute([], 5000)
        doc = view.to_dict()
        assert doc["trade_count"] == 0
        assert doc["scalar"]["total_trades"] == 0
        assert doc["macro"]["profit_factor"] == 0
        assert doc["monthly"]["best_month"] is None
        assert doc["categories"]["setup"] == []

    def test_idempotent(self, engine, mixed_trades):
        first = engine.compute(mixed_trades, 10_000)
        second = engine.compute(mixed_trades, 10_000)
        a, b = first.to_dict(), second.to_dict()
        a.pop("request_id")
        b.pop("request_id")
        assert a == b
        assert first.request_id != second.request_id


class TestComputeFromStore:
    def test_loads_account_window(self, engine, make_trade):
        store = InMemoryTradeStore([
            make_trade("Win", trade_date="2024-02-01", account_id="acc-1"),
            make_trade("Lose", trade_date="2024-02-02", account_id="acc-2"),
            make_trade("Win", trade_date="2024-03-01", account_id="acc-1"),
        ])
        request = AnalyticsRequest(
            filter=TradeFilter(date_from=date(2024, 2, 1), date_to=date(2024, 2, 28)),
        )
        view = engine.compute_from_store(store, "acc-1", 1000, request)
        assert view.scalar.total_trades == 1
        # monthly still covers the whole year
        assert set(view.monthly.monthly_data) == {"February", "March"}


def test_as_trades_snapshot(make_trade):
    trade = make_trade()
    out = as_trades([trade, {"market": "EURUSD"}])
    assert isinstance(out, tuple)
    assert out[0] is trade
    assert out[1].market == "EURUSD"
