"""Tests for the streak calculator."""

from trade_analytics.analytics.streaks import StreakStats, compute_streaks


def _dated(make_trade, outcomes, **kwargs):
    return [
        make_trade(o, trade_date=f"2024-01-{i + 1:02d}", **kwargs)
        for i, o in enumerate(outcomes)
    ]


class TestStreaks:
    def test_win_win_lose_win(self, make_trade):
        stats = compute_streaks(_dated(make_trade, ["Win", "Win", "Lose", "Win"]))
        assert stats == StreakStats(current=1, max_winning=2, max_losing=1)

    def test_current_losing_streak_is_negative(self, make_trade):
        stats = compute_streaks(_dated(make_trade, ["Win", "Lose", "Lose"]))
        assert stats.current == -2
        assert stats.max_losing == 2

    def test_sorted_chronologically_not_by_input(self, make_trade):
        trades = [
            make_trade("Lose", trade_date="2024-01-03"),
            make_trade("Win", trade_date="2024-01-01"),
            make_trade("Win", trade_date="2024-01-02"),
        ]
        stats = compute_streaks(trades)
        assert stats.max_winning == 2
        assert stats.current == -1

    def test_equal_dates_keep_input_order(self, make_trade):
        trades = [
            make_trade("Lose", trade_date="2024-01-01"),
            make_trade("Win", trade_date="2024-01-01"),
        ]
        assert compute_streaks(trades).current == 1

    def test_no_outcome_neither_extends_nor_resets(self, make_trade):
        stats = compute_streaks(_dated(make_trade, ["Win", None, "Win"]))
        assert stats.max_winning == 2
        assert stats.current == 2

    def test_break_even_skipped(self, make_trade):
        trades = _dated(make_trade, ["Win", "Win", "Win"])
        trades[1] = make_trade("Lose", trade_date="2024-01-02", break_even=True)
        stats = compute_streaks(trades)
        assert stats.max_winning == 2
        assert stats.max_losing == 0

    def test_planned_trades_ignored(self, make_trade):
        trades = _dated(make_trade, ["Win", "Lose", "Win"])
        trades[1] = make_trade("Lose", trade_date="2024-01-02", executed=False)
        assert compute_streaks(trades).max_winning == 2

    def test_empty(self):
        assert compute_streaks([]) == StreakStats()

    def test_only_undecided_trades(self, make_trade):
        assert compute_streaks(_dated(make_trade, [None, None])).current == 0

    def test_to_dict_keys(self):
        assert set(StreakStats().to_dict()) == {
            "current_streak", "max_winning_streak", "max_losing_streak",
        }
