"""Test AnalyticsSettings loading and interval validation."""

import pytest

from trade_analytics.analytics.engine import AnalyticsEngine
from trade_analytics.core.config import (
    AnalyticsSettings,
    TimeInterval,
    hhmm_to_minutes,
    load_settings,
)
from trade_analytics.core.enums import ProfitSource
from trade_analytics.core.errors import ConfigError, IntervalConfigError


class TestDefaults:
    def test_default_settings(self):
        settings = AnalyticsSettings()
        assert settings.profit_source is ProfitSource.STORED
        assert settings.defaults.default_risk_pct == 0.5
        assert settings.defaults.default_rr == 2.0
        assert settings.categories.default_label == "Unknown"
        assert settings.categories.grades == ["A+", "A", "B", "C"]
        assert len(settings.categories.weekdays) == 5

    def test_default_intervals_cover_day(self):
        intervals = AnalyticsSettings().categories.time_intervals
        assert intervals[0].start_minutes == 0
        assert intervals[-1].end_minutes == 24 * 60
        for prev, nxt in zip(intervals, intervals[1:]):
            assert prev.end_minutes == nxt.start_minutes

    def test_default_interval_labels_are_ascii(self):
        labels = [i.label for i in AnalyticsSettings().categories.time_intervals]
        assert labels[0] == "00:00 - 03:59"
        assert all(label.isascii() for label in labels)


class TestHHMM:
    def test_parse(self):
        assert hhmm_to_minutes("00:00") == 0
        assert hhmm_to_minutes("09:30") == 570
        assert hhmm_to_minutes("24:00") == 1440

    @pytest.mark.parametrize("value", ["930", "24:01", "12:60", "-1:00", "ab:cd"])
    def test_reject(self, value):
        with pytest.raises(ValueError):
            hhmm_to_minutes(value)

    def test_interval_contains_is_half_open(self):
        interval = TimeInterval(label="x", start="08:00", end="09:00")
        assert interval.contains(480)
        assert not interval.contains(540)


class TestLoadSettings:
    def test_load_toml(self, tmp_path):
        path = tmp_path / "analytics.toml"
        path.write_text(
            'profit_source = "derived"\n'
            "[defaults]\n"
            "default_risk_pct = 1.0\n"
            "[categories]\n"
            'weekdays = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]\n'
            "[[categories.time_intervals]]\n"
            'label = "London"\n'
            'start = "08:00"\n'
            'end = "12:00"\n'
        )
        settings = load_settings(path)
        assert settings.profit_source is ProfitSource.DERIVED
        assert settings.defaults.default_risk_pct == 1.0
        assert len(settings.categories.weekdays) == 7
        assert [i.label for i in settings.categories.time_intervals] == ["London"]

    def test_overrides(self):
        settings = load_settings(overrides={"profit_source": "derived"})
        assert settings.profit_source is ProfitSource.DERIVED

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TRADE_ANALYTICS_DEFAULTS__DEFAULT_RR", "3.5")
        assert load_settings().defaults.default_rr == 3.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("profit_source = \n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"profit_source": "guessed"})

    def test_inverted_interval(self):
        overrides = {"categories": {"time_intervals": [
            {"label": "bad", "start": "12:00", "end": "08:00"},
        ]}}
        with pytest.raises(IntervalConfigError) as exc_info:
            load_settings(overrides=overrides)
        assert exc_info.value.label == "bad"

    def test_malformed_interval(self):
        overrides = {"categories": {"time_intervals": [
            {"label": "bad", "start": "8", "end": "09:00"},
        ]}}
        with pytest.raises(ConfigError):
            load_settings(overrides=overrides)


class TestIntervalValidation:
    def test_direct_construction_rejects_malformed(self):
        with pytest.raises(IntervalConfigError) as exc_info:
            TimeInterval(label="x", start="9", end="10:00")
        assert exc_info.value.label == "x"

    def test_direct_construction_rejects_empty_bucket(self):
        with pytest.raises(IntervalConfigError, match="not before"):
            TimeInterval(label="x", start="10:00", end="10:00")

    def test_env_table_validated(self, monkeypatch):
        monkeypatch.setenv(
            "TRADE_ANALYTICS_CATEGORIES__TIME_INTERVALS",
            '[{"label": "x", "start": "9", "end": "10:00"}]',
        )
        with pytest.raises(IntervalConfigError):
            AnalyticsSettings()

    def test_engine_defaults_validated(self, monkeypatch):
        monkeypatch.setenv(
            "TRADE_ANALYTICS_CATEGORIES__TIME_INTERVALS",
            '[{"label": "x", "start": "12:00", "end": "08:00"}]',
        )
        with pytest.raises(IntervalConfigError):
            AnalyticsEngine()

    def test_valid_env_table(self, monkeypatch):
        monkeypatch.setenv(
            "TRADE_ANALYTICS_CATEGORIES__TIME_INTERVALS",
            '[{"label": "London", "start": "08:00", "end": "12:00"}]',
        )
        intervals = AnalyticsSettings().categories.time_intervals
        assert [(i.label, i.start_minutes, i.end_minutes) for i in intervals] == [
            ("London", 480, 720),
        ]
