"""Property tests: aggregation invariants over arbitrary journals.

Uses hypothesis to generate trade lists and checks that category
aggregation partitions its input, win rates stay in [0, 100], filters
commute, and every calculator is idempotent.
"""

from datetime import date

from hypothesis import given, settings, strategies as st

from trade_analytics.analytics.categories import CategoryAggregator, aggregate
from trade_analytics.analytics.filters import (
    TradeFilter,
    apply_filters,
    matches_date_range,
    matches_execution,
    matches_market,
)
from trade_analytics.analytics.macro import compute_macro_stats
from trade_analytics.analytics.record import Trade
from trade_analytics.analytics.scalar import compute_scalar_stats
from trade_analytics.analytics.streaks import compute_streaks
from trade_analytics.core.enums import ExecutionFilter, TradeOutcome

MARKETS = ["EURUSD", "GBPUSD", "XAUUSD", None]
SETUPS = ["OB", "FVG", "Sweep", None, ""]

trade_strategy = st.builds(
    Trade,
    market=st.sampled_from(MARKETS),
    setup_type=st.sampled_from(SETUPS),
    trade_outcome=st.sampled_from([TradeOutcome.WIN, TradeOutcome.LOSE, None]),
    break_even=st.booleans(),
    executed=st.booleans(),
    news_related=st.booleans(),
    risk_per_trade=st.one_of(st.none(), st.floats(min_value=0.1, max_value=5)),
    risk_reward_ratio=st.one_of(st.none(), st.floats(min_value=0.1, max_value=10)),
    calculated_profit=st.one_of(st.none(), st.floats(min_value=-1e4, max_value=1e4)),
    trade_date=st.one_of(
        st.none(), st.dates(min_value=date(2023, 1, 1), max_value=date(2024, 12, 31))
    ),
)
journals = st.lists(trade_strategy, max_size=40)
balances = st.one_of(st.just(0.0), st.floats(min_value=1, max_value=1e6))

filter_strategy = st.builds(
    TradeFilter,
    execution=st.sampled_from(list(ExecutionFilter)),
    market=st.sampled_from(["all", "EURUSD", "XAUUSD"]),
    date_from=st.one_of(st.none(), st.just(date(2024, 1, 1))),
    date_to=st.one_of(st.none(), st.just(date(2024, 6, 30))),
)


@given(trades=journals)
@settings(max_examples=100)
def test_category_aggregation_partitions_input(trades):
    """Summing ``total`` over any dimension recovers the input size."""
    agg = CategoryAggregator()
    breakdown = agg.compute(trades)
    for stats in (breakdown.setup, breakdown.market, breakdown.news,
                  breakdown.day, breakdown.time_interval, breakdown.local_high_low):
        assert sum(s.total for s in stats) == len(trades)


@given(trades=journals)
@settings(max_examples=100)
def test_win_rates_bounded(trades):
    for stat in aggregate(trades, lambda t: t.setup_type):
        assert 0 <= stat.win_rate <= 100
        assert 0 <= stat.win_rate_with_be <= 100
        # the with-BE denominator is never smaller than the base one
        assert stat.total >= stat.wins + stat.losses


@given(trades=journals, balance=balances)
@settings(max_examples=100)
def test_scalar_count_bound(trades, balance):
    stats = compute_scalar_stats(trades, balance)
    assert stats.wins + stats.losses + stats.be_wins + stats.be_losses <= stats.total_trades
    assert 0 <= stats.win_rate <= 100
    assert 0 <= stats.win_rate_with_be <= 100
    assert stats.max_drawdown >= 0


@given(trades=journals, flt=filter_strategy)
@settings(max_examples=100)
def test_filter_predicates_commute(trades, flt):
    by_market = [t for t in trades if matches_market(t, flt.market)]
    by_date = [t for t in by_market if matches_date_range(t, flt.date_from, flt.date_to)]
    reordered = tuple(t for t in by_date if matches_execution(t, flt.execution))
    assert apply_filters(trades, flt) == reordered


@given(trades=journals, flt=filter_strategy)
@settings(max_examples=100)
def test_filter_does_not_mutate_input(trades, flt):
    before = list(trades)
    out = apply_filters(trades, flt)
    assert trades == before
    assert len(out) <= len(trades)


@given(trades=journals, balance=balances)
@settings(max_examples=50)
def test_calculators_idempotent(trades, balance):
    assert compute_scalar_stats(trades, balance) == compute_scalar_stats(trades, balance)
    assert compute_macro_stats(trades, balance) == compute_macro_stats(trades, balance)
    assert compute_streaks(trades) == compute_streaks(trades)
    agg = CategoryAggregator()
    assert agg.compute(trades) == agg.compute(trades)


@given(trades=journals)
@settings(max_examples=100)
def test_streak_maxima_bound_current(trades):
    stats = compute_streaks(trades)
    assert -stats.max_losing <= stats.current <= stats.max_winning
