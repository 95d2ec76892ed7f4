"""Playbook grade correlation"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from journal_analytics.core.constants import GRADES
from journal_analytics.engine.normalizer import TradeLike, finite_or_none, normalize
from journal_analytics.engine.stats import RAccumulator, safe_div

logger = logging.getLogger("journal_analytics.engine.grades")


@dataclass
class PlaybookGradeMetrics:
    """
    Outcome statistics for one setup grade.

    expectancy_r is taken over the r_count trades with a defined R, so
    expectancy_r * r_count == net_r.
    """
    grade: str
    n: int = 0
    avg_score: float = 0.0  # mean setup score, 0.0 to 1.0
    expectancy_r: float = 0.0
    win_rate: float = 0.0
    r_count: int = 0
    net_r: float = 0.0

    @property
    def has_data(self) -> bool:
        return self.n > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grade": self.grade,
            "n": self.n,
            "avg_score": round(self.avg_score, 4) if self.has_data else None,
            "expectancy_r": round(self.expectancy_r, 4) if self.has_data else None,
            "win_rate": round(self.win_rate, 4) if self.has_data else None,
            "r_count": self.r_count,
            "net_r": round(self.net_r, 4) if self.has_data else None,
            "has_data": self.has_data,
        }


def grade_correlation(
    trades: Iterable[TradeLike],
    playbook_id: Optional[str] = None,
    timezone: str = "UTC",
) -> List[PlaybookGradeMetrics]:
    """
    Expectancy and mean setup score per grade letter.

    Grades are denormalized onto each trade when it is written; they are read
    here, not computed. All six grades are always returned, best first.
    Trades with an unknown or missing grade are ignored. The average score
    covers only trades that carry a finite score.

    Args:
        trades: Raw or normalized trades
        playbook_id: Restrict to trades of this playbook
        timezone: Reference timezone used when normalizing raw trades

    Returns:
        Six PlaybookGradeMetrics, A+ to F
    """
    accumulators = {grade: RAccumulator() for grade in GRADES}
    score_sums = {grade: 0.0 for grade in GRADES}
    score_counts = {grade: 0 for grade in GRADES}

    for trade in normalize(trades, timezone):
        if playbook_id is not None and trade.trade.playbook_id != playbook_id:
            continue
        grade = (trade.trade.setup_grade or "").strip().upper()
        acc = accumulators.get(grade)
        if acc is None:
            continue
        acc.add(trade)
        score = finite_or_none(trade.trade.setup_score)
        if score is not None:
            score_sums[grade] += score
            score_counts[grade] += 1

    return [
        PlaybookGradeMetrics(
            grade=grade,
            n=acc.n,
            avg_score=safe_div(score_sums[grade], score_counts[grade]),
            expectancy_r=acc.expectancy_r,
            win_rate=acc.win_rate,
            r_count=acc.r_count,
            net_r=acc.net_r,
        )
        for grade, acc in accumulators.items()
    ]
