"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from .enums import ProfitSource, Trend
from .errors import ConfigError, IntervalConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

def hhmm_to_minutes(value: str) -> int:
    """Convert ``"HH:MM"`` to minutes after midnight.  ``"24:00"`` is allowed."""
    hours, sep, minutes = value.strip().partition(":")
    if not sep:
        raise ValueError(f"expected HH:MM, got {value!r}")
    h, m = int(hours), int(minutes)
    if not (0 <= m < 60) or not (0 <= h <= 24) or (h == 24 and m != 0):
        raise ValueError(f"out of range: {value!r}")
    return h * 60 + m


class TimeInterval(BaseModel):
    """Half-open time-of-day bucket ``[start, end)``."""

    label: str
    start: str  # "HH:MM"
    end: str  # "HH:MM", exclusive

    @model_validator(mode="after")
    def bounds_must_be_ordered(self) -> TimeInterval:
        try:
            start, end = self.start_minutes, self.end_minutes
        except ValueError as exc:
            raise IntervalConfigError(self.label, str(exc)) from exc
        if start >= end:
            raise IntervalConfigError(
                self.label, f"start {self.start} is not before end {self.end}"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return hhmm_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return hhmm_to_minutes(self.end)

    def contains(self, minutes: int) -> bool:
        return self.start_minutes <= minutes < self.end_minutes


def _default_intervals() -> list[TimeInterval]:
    # Full-day 4-hour buckets
    return [
        TimeInterval(label=f"{h:02d}:00 - {h + 3:02d}:59", start=f"{h:02d}:00", end=f"{h + 4:02d}:00")
        for h in range(0, 24, 4)
    ]


WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
FULL_WEEK = WEEKDAYS + ["Saturday", "Sunday"]


class DefaultsConfig(BaseModel):
    default_risk_pct: float = 0.5  # risk_per_trade when unset
    default_rr: float = 2.0  # risk_reward_ratio when unset


class CategoryConfig(BaseModel):
    default_label: str = "Unknown"
    grades: list[str] = Field(default_factory=lambda: ["A+", "A", "B", "C"])
    weekdays: list[str] = Field(default_factory=lambda: list(WEEKDAYS))
    time_intervals: list[TimeInterval] = Field(default_factory=_default_intervals)
    trend_values: list[str] = Field(
        default_factory=lambda: [t.value for t in Trend]
    )
    risk_levels: list[float] = Field(
        default_factory=lambda: [0.25, 0.3, 0.35, 0.5, 0.7, 1.0]
    )
    news_unnamed_label: str = "News (no event)"


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class AnalyticsSettings(BaseSettings):
    """Top-level engine settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    profit_source: ProfitSource = ProfitSource.STORED

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    categories: CategoryConfig = Field(default_factory=CategoryConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_ANALYTICS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AnalyticsSettings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return AnalyticsSettings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
