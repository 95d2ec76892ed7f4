"""
Equity and drawdown curve builder.

Input trades must already be sorted ascending by close date. The builder
does not re-sort; unsorted input gives an undefined curve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from journal_analytics.engine.normalizer import TradeLike, normalize
from journal_analytics.engine.stats import max_drawdown

logger = logging.getLogger("journal_analytics.engine.equity")


@dataclass
class EquityPoint:
    """End-of-day equity state"""
    date: date
    cumulative_r: float
    equity: float
    drawdown: float  # peak equity minus equity, currency
    drawdown_percent: float
    trade_count: int  # trades closed up to and including this date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "cumulative_r": round(self.cumulative_r, 4),
            "equity": round(self.equity, 4),
            "drawdown": round(self.drawdown, 4),
            "drawdown_percent": round(self.drawdown_percent, 4),
            "trade_count": self.trade_count,
        }


@dataclass
class DrawdownPeriod:
    """Peak-to-recovery drawdown episode on the equity curve"""
    start: date
    end: date
    depth: float
    depth_percent: float
    duration_days: int
    recovered: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "depth": round(self.depth, 4),
            "depth_percent": round(self.depth_percent, 4),
            "duration_days": self.duration_days,
            "recovered": self.recovered,
        }


def build_equity_curve(
    trades: Iterable[TradeLike],
    starting_balance: float,
    starting_r: float = 0.0,
    timezone: str = "UTC",
) -> List[EquityPoint]:
    """
    Walk date-sorted trades once, emitting one point per distinct close date.

    Trades on the same date merge into one end-of-day point. Trades without
    a close time are skipped; trades without R add to equity but not to
    cumulative R. drawdown_percent is measured from the running equity peak
    (starting at starting_balance) and is never negative.

    Args:
        trades: Trades sorted ascending by close date
        starting_balance: Account balance before the first trade
        starting_r: Cumulative-R baseline
        timezone: Reference timezone for close dates

    Returns:
        List of EquityPoint, strictly increasing in date
    """
    points: List[EquityPoint] = []
    cumulative_r = starting_r
    equity = starting_balance
    peak = starting_balance
    count = 0
    current_date: Optional[date] = None

    def _emit() -> None:
        drawdown = max(0.0, peak - equity)
        pct = drawdown / peak * 100.0 if peak > 0 else 0.0
        points.append(
            EquityPoint(
                date=current_date,
                cumulative_r=cumulative_r,
                equity=equity,
                drawdown=drawdown,
                drawdown_percent=max(0.0, pct),
                trade_count=count,
            )
        )

    for trade in normalize(trades, timezone):
        if trade.close_date is None:
            continue
        if current_date is not None and trade.close_date != current_date:
            _emit()
        current_date = trade.close_date
        if trade.r is not None:
            cumulative_r += trade.r
        equity += trade.pnl
        count += 1
        if equity > peak:
            peak = equity

    if current_date is not None:
        _emit()

    logger.debug(f"Equity curve built: {len(points)} points from {count} trades")
    return points


def max_drawdown_r(
    trades: Iterable[TradeLike],
    starting_r: float = 0.0,
    timezone: str = "UTC",
) -> float:
    """
    Max drawdown of cumulative R, per trade, in the given (date-sorted) order.

    Single pass with a running peak; only the depth is tracked, not where
    it happened.
    """
    def _series():
        running = starting_r
        for trade in normalize(trades, timezone):
            if trade.r is None:
                continue
            running += trade.r
            yield running

    return max_drawdown(_series(), baseline=starting_r)


def drawdown_periods(points: List[EquityPoint]) -> List[DrawdownPeriod]:
    """
    Identify drawdown episodes on an equity curve.

    An episode opens on the first point below the running peak and closes on
    the first point back at the peak. An episode still open at the end of the
    curve is reported with recovered=False.
    """
    periods: List[DrawdownPeriod] = []
    start: Optional[EquityPoint] = None
    depth = 0.0
    depth_pct = 0.0

    for point in points:
        if point.drawdown > 0:
            if start is None:
                start = point
                depth, depth_pct = point.drawdown, point.drawdown_percent
            elif point.drawdown > depth:
                depth, depth_pct = point.drawdown, point.drawdown_percent
        elif start is not None:
            periods.append(
                DrawdownPeriod(
                    start=start.date,
                    end=point.date,
                    depth=depth,
                    depth_percent=depth_pct,
                    duration_days=(point.date - start.date).days,
                    recovered=True,
                )
            )
            start = None

    if start is not None and points:
        last = points[-1]
        periods.append(
            DrawdownPeriod(
                start=start.date,
                end=last.date,
                depth=depth,
                depth_percent=depth_pct,
                duration_days=(last.date - start.date).days,
                recovered=False,
            )
        )
    return periods
