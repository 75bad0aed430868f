"""Winning / losing streaks over chronologically ordered trades."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .record import Trade, chronological


@dataclass(frozen=True)
class StreakStats:
    current: int = 0  # +n winning run, -n losing run, 0 if no definite outcome
    max_winning: int = 0
    max_losing: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_streak": self.current,
            "max_winning_streak": self.max_winning,
            "max_losing_streak": self.max_losing,
        }


def compute_streaks(trades: Iterable[Trade]) -> StreakStats:
    """Walk executed trades in date order (stable on ties).

    A win extends the winning run and resets the losing run, and vice
    versa.  Break-even trades, planned trades and trades without an
    outcome neither extend nor reset a run.
    """
    winning = losing = 0
    max_winning = max_losing = 0
    last_won: bool | None = None

    for trade in chronological([t for t in trades if t.executed]):
        if trade.break_even:
            continue
        if trade.is_win:
            winning += 1
            losing = 0
            max_winning = max(max_winning, winning)
            last_won = True
        elif trade.is_loss:
            losing += 1
            winning = 0
            max_losing = max(max_losing, losing)
            last_won = False

    if last_won is None:
        current = 0
    else:
        current = winning if last_won else -losing
    return StreakStats(current=current, max_winning=max_winning, max_losing=max_losing)
