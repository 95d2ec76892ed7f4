"""
Time-bucket breakdown engine.

Groups trades by day-of-week, by (session, hour), by session and by symbol.
Each grouping is one pass that feeds an RAccumulator per bucket key,
followed by one pass converting accumulators to metrics.

Buckets below the exploratory sample size are still returned with real
numbers; the flag is display metadata only. Empty buckets carry neutral
zero fields, has_data=False, and serialize their metrics as None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

from journal_analytics.core.constants import (
    EXPLORATORY_MIN_SAMPLE,
    HOURS_PER_DAY,
    SESSIONS,
    WEEKDAYS,
)
from journal_analytics.engine.normalizer import TradeLike, normalize
from journal_analytics.engine.stats import RAccumulator

logger = logging.getLogger("journal_analytics.engine.breakdowns")


@dataclass
class BucketMetrics:
    """
    Per-bucket reduction.

    Attributes:
        n: Trades in the bucket
        win_rate: wins / n
        expectancy_r: Expected R per trade
        net_r: Sum of R
        has_data: False when n == 0
        exploratory: True when n is below the exploratory sample size
    """
    n: int = 0
    win_rate: float = 0.0
    expectancy_r: float = 0.0
    net_r: float = 0.0
    has_data: bool = False
    exploratory: bool = True

    def _metrics_dict(self) -> Dict[str, Any]:
        if not self.has_data:
            return {
                "n": 0,
                "win_rate": None,
                "expectancy_r": None,
                "net_r": None,
                "has_data": False,
                "exploratory": self.exploratory,
            }
        return {
            "n": self.n,
            "win_rate": round(self.win_rate, 4),
            "expectancy_r": round(self.expectancy_r, 4),
            "net_r": round(self.net_r, 4),
            "has_data": True,
            "exploratory": self.exploratory,
        }


@dataclass
class DOWMetrics(BucketMetrics):
    key: str = ""
    weekday: int = 0  # 0 = Sunday

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "weekday": self.weekday, **self._metrics_dict()}


@dataclass
class HourMetrics(BucketMetrics):
    session: str = ""
    hour: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"session": self.session, "hour": self.hour, **self._metrics_dict()}


@dataclass
class SessionMetrics(BucketMetrics):
    session: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"session": self.session, **self._metrics_dict()}


@dataclass
class SymbolMetrics(BucketMetrics):
    symbol: str = ""
    avg_r: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = {"symbol": self.symbol, **self._metrics_dict()}
        data["avg_r"] = round(self.avg_r, 4) if self.has_data else None
        return data


def _bucket_fields(acc: RAccumulator, min_sample: int) -> Dict[str, Any]:
    return {
        "n": acc.n,
        "win_rate": acc.win_rate,
        "expectancy_r": acc.expectancy_r,
        "net_r": acc.net_r,
        "has_data": acc.has_data,
        "exploratory": acc.n < min_sample,
    }


def breakdown_by_dow(
    trades: Iterable[TradeLike],
    min_sample: int = EXPLORATORY_MIN_SAMPLE,
    timezone: str = "UTC",
) -> List[DOWMetrics]:
    """
    Seven day-of-week buckets, Sunday first, keyed by close date.

    Trades without a close time are left out.
    """
    accumulators = [RAccumulator() for _ in WEEKDAYS]
    for trade in normalize(trades, timezone):
        if trade.weekday is None:
            continue
        accumulators[trade.weekday].add(trade)

    return [
        DOWMetrics(key=WEEKDAYS[i], weekday=i, **_bucket_fields(acc, min_sample))
        for i, acc in enumerate(accumulators)
    ]


def breakdown_by_hour_session(
    trades: Iterable[TradeLike],
    sessions: Sequence[str] = SESSIONS,
    min_sample: int = EXPLORATORY_MIN_SAMPLE,
    timezone: str = "UTC",
) -> Dict[str, List[HourMetrics]]:
    """
    Session x hour matrix: 24 entry-hour buckets per session.

    Trades without a session, without an entry time, or in a session not
    listed are left out.
    """
    matrix = {s: [RAccumulator() for _ in range(HOURS_PER_DAY)] for s in sessions}
    skipped = 0
    for trade in normalize(trades, timezone):
        row = matrix.get(trade.session) if trade.session else None
        if row is None or trade.hour is None:
            skipped += 1
            continue
        row[trade.hour].add(trade)

    if skipped:
        logger.debug(f"Hour x session matrix skipped {skipped} trades without session/hour")

    return {
        session: [
            HourMetrics(session=session, hour=hour, **_bucket_fields(acc, min_sample))
            for hour, acc in enumerate(row)
        ]
        for session, row in matrix.items()
    }


def breakdown_by_session(
    trades: Iterable[TradeLike],
    sessions: Sequence[str] = SESSIONS,
    min_sample: int = EXPLORATORY_MIN_SAMPLE,
    timezone: str = "UTC",
) -> List[SessionMetrics]:
    """One bucket per listed session, in the order given."""
    accumulators = {s: RAccumulator() for s in sessions}
    for trade in normalize(trades, timezone):
        acc = accumulators.get(trade.session) if trade.session else None
        if acc is not None:
            acc.add(trade)

    return [
        SessionMetrics(session=session, **_bucket_fields(acc, min_sample))
        for session, acc in accumulators.items()
    ]


def breakdown_by_symbol(
    trades: Iterable[TradeLike],
    min_sample: int = EXPLORATORY_MIN_SAMPLE,
    timezone: str = "UTC",
) -> List[SymbolMetrics]:
    """One bucket per traded symbol, sorted by net R descending."""
    accumulators: Dict[str, RAccumulator] = {}
    for trade in normalize(trades, timezone):
        if not trade.symbol:
            continue
        accumulators.setdefault(trade.symbol, RAccumulator()).add(trade)

    metrics = [
        SymbolMetrics(
            symbol=symbol,
            avg_r=acc.net_r / acc.r_count if acc.r_count else 0.0,
            **_bucket_fields(acc, min_sample),
        )
        for symbol, acc in accumulators.items()
    ]
    metrics.sort(key=lambda m: m.net_r, reverse=True)
    return metrics


@dataclass
class Breakdowns:
    """All time/symbol breakdowns for one trade set"""
    by_dow: List[DOWMetrics] = field(default_factory=list)
    by_hour_session: Dict[str, List[HourMetrics]] = field(default_factory=dict)
    by_session: List[SessionMetrics] = field(default_factory=list)
    by_symbol: List[SymbolMetrics] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "by_dow": [m.to_dict() for m in self.by_dow],
            "by_hour_session": {
                session: [m.to_dict() for m in row]
                for session, row in self.by_hour_session.items()
            },
            "by_session": [m.to_dict() for m in self.by_session],
            "by_symbol": [m.to_dict() for m in self.by_symbol],
        }


def compute_breakdowns(
    trades: Iterable[TradeLike],
    sessions: Sequence[str] = SESSIONS,
    min_sample: int = EXPLORATORY_MIN_SAMPLE,
    timezone: str = "UTC",
) -> Breakdowns:
    """Run every breakdown over the same normalized trade set."""
    normalized = normalize(trades, timezone)
    return Breakdowns(
        by_dow=breakdown_by_dow(normalized, min_sample),
        by_hour_session=breakdown_by_hour_session(normalized, sessions, min_sample),
        by_session=breakdown_by_session(normalized, sessions, min_sample),
        by_symbol=breakdown_by_symbol(normalized, min_sample),
    )
