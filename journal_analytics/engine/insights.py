"""
Natural-language insights over KPI and breakdown outputs.

Each rule only fires when the bucket it talks about has at least
min_sample trades. Rules below the threshold are suppressed rather than
shown with a low-confidence label.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from journal_analytics.core.constants import INSIGHT_MIN_SAMPLE
from journal_analytics.engine.breakdowns import Breakdowns
from journal_analytics.engine.grades import PlaybookGradeMetrics
from journal_analytics.engine.kpis import KPIComparison, KPIs

logger = logging.getLogger("journal_analytics.engine.insights")

TOP_GRADES = ("A+", "A")


def _best_session(breakdowns: Breakdowns, min_sample: int) -> Optional[str]:
    eligible = [s for s in breakdowns.by_session if s.has_data and s.n >= min_sample]
    if not eligible:
        return None
    best = max(eligible, key=lambda s: s.expectancy_r)
    if best.expectancy_r <= 0:
        return None
    return (
        f"{best.session} session shows strongest expectancy at "
        f"+{best.expectancy_r:.2f}R (n={best.n})"
    )


def _worst_day(breakdowns: Breakdowns, min_sample: int) -> Optional[str]:
    eligible = [d for d in breakdowns.by_dow if d.has_data and d.n >= min_sample]
    if not eligible:
        return None
    worst = min(eligible, key=lambda d: d.expectancy_r)
    if worst.expectancy_r >= 0:
        return None
    return f"Avoid {worst.key} ({worst.expectancy_r:.2f}R expectancy, n={worst.n})"


def _best_day(breakdowns: Breakdowns, min_sample: int) -> Optional[str]:
    eligible = [d for d in breakdowns.by_dow if d.has_data and d.n >= min_sample]
    if not eligible:
        return None
    best = max(eligible, key=lambda d: d.expectancy_r)
    if best.expectancy_r <= 0:
        return None
    return f"{best.key} is your best day at +{best.expectancy_r:.2f}R expectancy (n={best.n})"


def _best_symbol(breakdowns: Breakdowns, min_sample: int) -> Optional[str]:
    eligible = [s for s in breakdowns.by_symbol if s.has_data and s.n >= min_sample]
    if not eligible:
        return None
    best = max(eligible, key=lambda s: s.expectancy_r)
    if best.expectancy_r <= 0:
        return None
    return (
        f"{best.symbol} shows strongest edge: "
        f"+{best.expectancy_r:.2f}R expectancy (n={best.n})"
    )


def _top_grades(grades: Sequence[PlaybookGradeMetrics], min_sample: int) -> Optional[str]:
    top = [g for g in grades if g.grade in TOP_GRADES and g.has_data]
    n = sum(g.n for g in top)
    r_count = sum(g.r_count for g in top)
    if n < min_sample or r_count == 0:
        return None
    expectancy = sum(g.net_r for g in top) / r_count
    if expectancy <= 0:
        return None
    return (
        f"A+/A grade setups deliver +{expectancy:.2f}R expectancy (n={n}); "
        f"stick to high-quality setups"
    )


def _overall(kpis: KPIs, min_sample: int) -> Optional[str]:
    if kpis.n < min_sample or kpis.expectancy_r >= 0:
        return None
    return (
        f"Overall expectancy is {kpis.expectancy_r:.2f}R over {kpis.n} trades; "
        f"review your losing setups"
    )


def generate_insights(
    kpis: Union[KPIs, KPIComparison],
    breakdowns: Breakdowns,
    min_sample: int = INSIGHT_MIN_SAMPLE,
    grades: Optional[Sequence[PlaybookGradeMetrics]] = None,
    max_insights: int = 3,
) -> List[str]:
    """
    Evaluate the insight rules in priority order.

    Rules: best session, worst day, best day, best symbol, top-grade
    expectancy (when grades are given), negative overall expectancy.

    Args:
        kpis: Current KPIs (or a KPIComparison, whose current side is used)
        breakdowns: Breakdowns of the same trade set
        min_sample: Minimum bucket size for a rule to fire
        grades: Optional grade correlation of the same trade set
        max_insights: Maximum number of statements returned

    Returns:
        Insight strings, most important first
    """
    current = kpis.current if isinstance(kpis, KPIComparison) else kpis

    candidates = [
        _best_session(breakdowns, min_sample),
        _worst_day(breakdowns, min_sample),
        _best_day(breakdowns, min_sample),
        _best_symbol(breakdowns, min_sample),
        _top_grades(grades, min_sample) if grades else None,
        _overall(current, min_sample),
    ]
    insights = [c for c in candidates if c]
    logger.debug(f"Insights: {len(insights)} rules fired (min_sample={min_sample})")
    return insights[:max_insights]
