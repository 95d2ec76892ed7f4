"""
Daily win/loss streak detection.

Streaks are measured in trading days, not trades: a day is a win day when
its aggregate R is positive and a loss day when negative. This is a
different concept from a winning trade (Outcome.WIN), which is decided per
trade by the sign of its pnl.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from journal_analytics.core.constants import StreakType
from journal_analytics.engine.normalizer import TradeLike, normalize

logger = logging.getLogger("journal_analytics.engine.streaks")

DailyResults = Mapping[date, Optional[float]]


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass
class StreakState:
    """
    Current and record daily streaks.

    Attributes:
        current_streak: Length of the streak running at the last day
        current_streak_type: win / loss / none
        best_win_streak: Longest run of win days
        best_win_range: Dates of the first longest win run
        worst_loss_streak: Longest run of loss days
        worst_loss_range: Dates of the first longest loss run
    """
    current_streak: int = 0
    current_streak_type: StreakType = StreakType.NONE
    best_win_streak: int = 0
    best_win_range: Optional[DateRange] = None
    worst_loss_streak: int = 0
    worst_loss_range: Optional[DateRange] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_streak": self.current_streak,
            "current_streak_type": self.current_streak_type.value,
            "best_win_streak": self.best_win_streak,
            "best_win_range": self.best_win_range.to_dict() if self.best_win_range else None,
            "worst_loss_streak": self.worst_loss_streak,
            "worst_loss_range": self.worst_loss_range.to_dict() if self.worst_loss_range else None,
        }


def classify_day(total_r: Optional[float]) -> StreakType:
    """Win day, loss day, or none (no trades or a flat day)."""
    if total_r is None or total_r == 0:
        return StreakType.NONE
    return StreakType.WIN if total_r > 0 else StreakType.LOSS


def daily_results(
    trades: Iterable[TradeLike],
    fill_gaps: bool = False,
    timezone: str = "UTC",
) -> Dict[date, Optional[float]]:
    """
    Aggregate R per close date, ascending by date.

    Trades without R add nothing to their day's total but still mark it as
    traded. With fill_gaps, calendar days between the first and last trading
    day are included with None (no trades).
    """
    totals: Dict[date, float] = {}
    for trade in normalize(trades, timezone):
        if trade.close_date is None:
            continue
        totals[trade.close_date] = totals.get(trade.close_date, 0.0) + (trade.r or 0.0)

    if not totals:
        return {}

    days = sorted(totals)
    if not fill_gaps:
        return {d: totals[d] for d in days}

    result: Dict[date, Optional[float]] = {}
    day = days[0]
    while day <= days[-1]:
        result[day] = totals.get(day)
        day += timedelta(days=1)
    return result


def detect_streaks(
    daily: Union[DailyResults, Iterable[Tuple[date, Optional[float]]]],
) -> StreakState:
    """
    Single left-to-right pass over date-ordered daily results.

    A day whose type differs from the running streak starts a new streak of
    length 1. A day with no trades (None) or a flat total resets the current
    streak to 0/none without touching the records. Records update only on a
    strictly longer streak, so the earliest of equal-length streaks is kept.

    Args:
        daily: Mapping (or pairs) of date -> aggregate R, sorted ascending

    Returns:
        StreakState
    """
    items = daily.items() if isinstance(daily, Mapping) else daily

    state = StreakState()
    streak_start: Optional[date] = None

    for day, total_r in items:
        kind = classify_day(total_r)
        if kind is StreakType.NONE:
            state.current_streak = 0
            state.current_streak_type = StreakType.NONE
            streak_start = None
            continue

        if kind is state.current_streak_type:
            state.current_streak += 1
        else:
            state.current_streak = 1
            state.current_streak_type = kind
            streak_start = day

        if kind is StreakType.WIN and state.current_streak > state.best_win_streak:
            state.best_win_streak = state.current_streak
            state.best_win_range = DateRange(streak_start, day)
        elif kind is StreakType.LOSS and state.current_streak > state.worst_loss_streak:
            state.worst_loss_streak = state.current_streak
            state.worst_loss_range = DateRange(streak_start, day)

    logger.debug(
        f"Streaks: current={state.current_streak} {state.current_streak_type.value}, "
        f"best_win={state.best_win_streak}, worst_loss={state.worst_loss_streak}"
    )
    return state
