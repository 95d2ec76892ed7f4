"""
Backtest performance analytics.

Realised-result counterpart of the recommendation engine: KPIs, session /
symbol / grade buckets, a cumulative-R curve and insights over the
result_r of each backtest. Backtests without a finite result_r are left
out of everything here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from journal_analytics.core.constants import (
    BACKTEST_GRADE_MIN_SAMPLE,
    BACKTEST_INSIGHT_MIN_SAMPLE,
    GRADES,
    UNKNOWN_SESSION,
)
from journal_analytics.core.types import Backtest, Ratio
from journal_analytics.engine.insights import TOP_GRADES
from journal_analytics.engine.normalizer import classify_outcome, finite_or_none
from journal_analytics.engine.stats import RAccumulator, max_drawdown, safe_div, sharpe_ratio

logger = logging.getLogger("journal_analytics.engine.backtest_performance")


@dataclass
class BacktestKPIs:
    """
    Summary statistics over backtest results.

    Attributes:
        n: Backtests with a result
        wins / losses / ties: Outcome counts by result sign
        win_rate: wins / n
        avg_win_r / avg_loss_r: Mean winning R and mean losing R magnitude
        pf_r: Sum of winning R / |sum of losing R|
        expectancy_r: Expected R per backtest (expectancy_r * n == net_r)
        net_r: Sum of results
        max_dd_r: Largest decline of cumulative R in entry-date order
        sharpe_r: Mean R / population std of R
        recovery: net_r / max_dd_r
    """
    n: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    win_rate: float = 0.0
    avg_win_r: float = 0.0
    avg_loss_r: float = 0.0
    pf_r: Ratio = Ratio()
    expectancy_r: float = 0.0
    net_r: float = 0.0
    max_dd_r: float = 0.0
    sharpe_r: float = 0.0
    recovery: Ratio = Ratio()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n": self.n,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "win_rate": round(self.win_rate, 4),
            "avg_win_r": round(self.avg_win_r, 4),
            "avg_loss_r": round(-self.avg_loss_r, 4),
            "pf_r": round(self.pf_r.as_number(), 4),
            "pf_r_unbounded": self.pf_r.unbounded,
            "expectancy_r": round(self.expectancy_r, 4),
            "net_r": round(self.net_r, 4),
            "max_dd_r": round(self.max_dd_r, 4),
            "sharpe_r": round(self.sharpe_r, 4),
            "recovery": round(self.recovery.as_number(), 4),
            "recovery_unbounded": self.recovery.unbounded,
        }


@dataclass
class BacktestBucket:
    """Backtest results grouped by session, symbol or grade"""
    key: str
    n: int = 0
    win_rate: float = 0.0
    expectancy_r: float = 0.0
    net_r: float = 0.0
    avg_score: Optional[float] = None  # mean setup score of scored backtests

    @property
    def has_data(self) -> bool:
        return self.n > 0

    @property
    def avg_r(self) -> float:
        return safe_div(self.net_r, self.n)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "n": self.n,
            "win_rate": round(self.win_rate, 4) if self.has_data else None,
            "expectancy_r": round(self.expectancy_r, 4) if self.has_data else None,
            "net_r": round(self.net_r, 4) if self.has_data else None,
            "avg_r": round(self.avg_r, 4) if self.has_data else None,
            "avg_score": round(self.avg_score, 4) if self.avg_score is not None else None,
            "has_data": self.has_data,
        }


@dataclass
class BacktestEquityPoint:
    """Cumulative R after one backtest"""
    date: Optional[date]
    backtest_id: str
    cumulative_r: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat() if self.date else None,
            "backtest_id": self.backtest_id,
            "cumulative_r": round(self.cumulative_r, 4),
        }


def _with_result(backtests: Iterable[Backtest]) -> List[Backtest]:
    """Backtests with a finite result, stable-sorted by entry date (undated last)."""
    valid = [b for b in backtests if finite_or_none(b.result_r) is not None]
    dated = sorted((b for b in valid if b.entry_date is not None), key=lambda b: b.entry_date)
    return dated + [b for b in valid if b.entry_date is None]


def _accumulate(backtests: Iterable[Backtest]) -> RAccumulator:
    acc = RAccumulator()
    for b in backtests:
        r = float(b.result_r)
        acc.add_result(classify_outcome(None, r), r)
    return acc


def backtest_kpis(backtests: Iterable[Backtest]) -> BacktestKPIs:
    """
    Reduce backtest results to KPIs.

    Args:
        backtests: Backtests, any order

    Returns:
        BacktestKPIs (all zero when no backtest has a result)
    """
    ordered = _with_result(backtests)
    if not ordered:
        return BacktestKPIs()

    acc = _accumulate(ordered)
    results = [float(b.result_r) for b in ordered]
    running = 0.0
    cumulative = []
    for r in results:
        running += r
        cumulative.append(running)
    max_dd = max_drawdown(cumulative)

    return BacktestKPIs(
        n=acc.n,
        wins=acc.wins,
        losses=acc.losses,
        ties=acc.ties,
        win_rate=acc.win_rate,
        avg_win_r=acc.avg_win_r,
        avg_loss_r=acc.avg_loss_r,
        pf_r=acc.profit_factor,
        expectancy_r=acc.expectancy_r,
        net_r=acc.net_r,
        max_dd_r=max_dd,
        sharpe_r=sharpe_ratio(results),
        recovery=Ratio.of(acc.net_r, max_dd),
    )


def _group(
    backtests: Iterable[Backtest],
    key: Callable[[Backtest], Optional[str]],
    keys: Optional[Iterable[str]] = None,
) -> List[BacktestBucket]:
    """
    Bucket backtests by key.

    With keys given, exactly those buckets are returned in that order and
    backtests with any other key are dropped. Otherwise buckets follow
    first appearance.
    """
    groups: Dict[str, List[Backtest]] = {k: [] for k in keys} if keys is not None else {}
    for b in _with_result(backtests):
        k = key(b)
        if k is None:
            continue
        if k not in groups:
            if keys is not None:
                continue
            groups[k] = []
        groups[k].append(b)

    buckets = []
    for k, members in groups.items():
        acc = _accumulate(members)
        scores = [s for s in (finite_or_none(b.setup_score) for b in members) if s is not None]
        buckets.append(
            BacktestBucket(
                key=k,
                n=acc.n,
                win_rate=acc.win_rate,
                expectancy_r=acc.expectancy_r,
                net_r=acc.net_r,
                avg_score=sum(scores) / len(scores) if scores else None,
            )
        )
    return buckets


def backtests_by_session(backtests: Iterable[Backtest]) -> List[BacktestBucket]:
    """Buckets per session label; unlabelled backtests go to "Unknown"."""
    return _group(backtests, lambda b: (b.session or "").strip() or UNKNOWN_SESSION)


def backtests_by_symbol(backtests: Iterable[Backtest]) -> List[BacktestBucket]:
    return _group(backtests, lambda b: b.symbol or None)


def backtests_by_grade(backtests: Iterable[Backtest]) -> List[BacktestBucket]:
    """All six grade buckets, A+ to F; ungraded backtests are ignored."""
    return _group(backtests, lambda b: (b.setup_grade or "").strip().upper() or None, GRADES)


def backtest_equity_curve(backtests: Iterable[Backtest]) -> List[BacktestEquityPoint]:
    """
    Cumulative R, one point per backtest in entry-date order.

    The last point equals backtest_kpis(...).net_r for the same input.
    """
    points = []
    cumulative = 0.0
    for b in _with_result(backtests):
        cumulative += float(b.result_r)
        points.append(BacktestEquityPoint(date=b.entry_date, backtest_id=b.backtest_id, cumulative_r=cumulative))
    return points


def backtest_insights(
    backtests: Iterable[Backtest],
    min_sample: int = BACKTEST_INSIGHT_MIN_SAMPLE,
    grade_min_sample: int = BACKTEST_GRADE_MIN_SAMPLE,
    max_insights: int = 3,
) -> List[str]:
    """
    Insight statements over backtest results.

    Rules, in order: best session, best symbol (each needs n >= min_sample
    and positive expectancy), then A+/A grades (each grade needs
    n >= grade_min_sample; pooled expectancy must be positive).
    """
    backtests = list(backtests)
    insights: List[str] = []

    sessions = [
        s for s in backtests_by_session(backtests)
        if s.n >= min_sample and s.key != UNKNOWN_SESSION
    ]
    if sessions:
        best = max(sessions, key=lambda s: s.expectancy_r)
        if best.expectancy_r > 0:
            insights.append(
                f"{best.key} session produced +{best.expectancy_r:.2f}R expectancy "
                f"with {best.win_rate:.0%} win rate (n={best.n})"
            )

    symbols = [s for s in backtests_by_symbol(backtests) if s.n >= min_sample]
    if symbols:
        best = max(symbols, key=lambda s: s.expectancy_r)
        if best.expectancy_r > 0:
            insights.append(
                f"{best.key} shows strongest edge: +{best.expectancy_r:.2f}R expectancy (n={best.n})"
            )

    top = [
        g for g in backtests_by_grade(backtests)
        if g.key in TOP_GRADES and g.n >= grade_min_sample
    ]
    n_top = sum(g.n for g in top)
    if n_top:
        expectancy = sum(g.net_r for g in top) / n_top
        if expectancy > 0:
            insights.append(
                f"A+/A grade setups deliver +{expectancy:.2f}R expectancy in backtests (n={n_top}); "
                f"stick to high-quality setups"
            )

    logger.debug(f"Backtest insights: {len(insights)} rules fired over {len(backtests)} backtests")
    return insights[:max_insights]
