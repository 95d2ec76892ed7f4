"""
Risk-adjusted performance and monthly breakdown.

Complements the KPI aggregator with the account-level view: Sharpe,
Sortino and Calmar ratios over daily equity returns, extreme trades,
hold-time averages and per-month results. Only closed trades count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from journal_analytics.core.constants import Outcome
from journal_analytics.core.types import NormalizedTrade, Ratio
from journal_analytics.engine.equity import EquityPoint, build_equity_curve
from journal_analytics.engine.normalizer import TradeLike, normalize, sort_by_close_time
from journal_analytics.engine.stats import RAccumulator, safe_div, sharpe_ratio, std

logger = logging.getLogger("journal_analytics.engine.performance")


@dataclass
class MonthlyPerformance:
    """Results of the trades closed in one calendar month"""
    month: str  # YYYY-MM
    n: int = 0
    win_rate: float = 0.0
    net_r: float = 0.0
    net_pnl: float = 0.0
    pf_r: Ratio = Ratio()
    avg_r: float = 0.0  # net_r over trades with a defined R

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "n": self.n,
            "win_rate": round(self.win_rate, 4),
            "net_r": round(self.net_r, 4),
            "net_pnl": round(self.net_pnl, 4),
            "pf_r": round(self.pf_r.as_number(), 4),
            "pf_r_unbounded": self.pf_r.unbounded,
            "avg_r": round(self.avg_r, 4),
        }


@dataclass
class PerformanceSummary:
    """
    Account-level performance statistics.

    Attributes:
        sharpe: Mean / std of daily equity returns (percent)
        sortino: Mean daily return / std of the negative daily returns
        calmar: Total return percent / max drawdown percent
        total_return_pct: Final equity vs starting balance, percent
        max_drawdown_pct: Deepest equity drawdown, percent
        largest_win_r / largest_loss_r: Best and worst single-trade R
        avg_hold_minutes: Mean hold of trades with both timestamps
            (avg_win_hold_minutes / avg_loss_hold_minutes split by outcome)
        avg_trades_per_day: Closed trades per calendar day spanned
        months: Per-month results, oldest first
    """
    sharpe: float = 0.0
    sortino: float = 0.0
    calmar: float = 0.0
    total_return_pct: float = 0.0
    max_drawdown_pct: float = 0.0
    largest_win_r: float = 0.0
    largest_loss_r: float = 0.0
    avg_hold_minutes: Optional[float] = None
    avg_win_hold_minutes: Optional[float] = None
    avg_loss_hold_minutes: Optional[float] = None
    avg_trades_per_day: float = 0.0
    months: List[MonthlyPerformance] = field(default_factory=list)

    @property
    def profitable_months(self) -> int:
        return sum(1 for m in self.months if m.net_r > 0)

    @property
    def best_month_r(self) -> float:
        return max((m.net_r for m in self.months), default=0.0)

    @property
    def worst_month_r(self) -> float:
        return min((m.net_r for m in self.months), default=0.0)

    @property
    def avg_month_r(self) -> float:
        return safe_div(sum(m.net_r for m in self.months), len(self.months))

    @property
    def month_r_std(self) -> float:
        return std([m.net_r for m in self.months])

    def to_dict(self) -> Dict[str, Any]:
        def _opt(value: Optional[float]) -> Optional[float]:
            return round(value, 4) if value is not None else None

        return {
            "sharpe": round(self.sharpe, 4),
            "sortino": round(self.sortino, 4),
            "calmar": round(self.calmar, 4),
            "total_return_pct": round(self.total_return_pct, 4),
            "max_drawdown_pct": round(self.max_drawdown_pct, 4),
            "largest_win_r": round(self.largest_win_r, 4),
            "largest_loss_r": round(self.largest_loss_r, 4),
            "avg_hold_minutes": _opt(self.avg_hold_minutes),
            "avg_win_hold_minutes": _opt(self.avg_win_hold_minutes),
            "avg_loss_hold_minutes": _opt(self.avg_loss_hold_minutes),
            "avg_trades_per_day": round(self.avg_trades_per_day, 4),
            "profitable_months": self.profitable_months,
            "total_months": len(self.months),
            "best_month_r": round(self.best_month_r, 4),
            "worst_month_r": round(self.worst_month_r, 4),
            "avg_month_r": round(self.avg_month_r, 4),
            "month_r_std": round(self.month_r_std, 4),
            "months": [m.to_dict() for m in self.months],
        }


def _closed(trades: Iterable[TradeLike], timezone: str) -> List[NormalizedTrade]:
    return [t for t in normalize(trades, timezone) if t.close_date is not None]


def _mean_hold(trades: Sequence[NormalizedTrade]) -> Optional[float]:
    holds = [t.hold_minutes for t in trades if t.hold_minutes is not None]
    return sum(holds) / len(holds) if holds else None


def monthly_performance(trades: Iterable[TradeLike], timezone: str = "UTC") -> List[MonthlyPerformance]:
    """
    Group closed trades by close month.

    Args:
        trades: Raw or normalized trades, any order
        timezone: Reference timezone for close dates

    Returns:
        MonthlyPerformance per month with trades, oldest first
    """
    accumulators: Dict[str, RAccumulator] = {}
    for trade in _closed(trades, timezone):
        month = trade.close_date.strftime("%Y-%m")
        accumulators.setdefault(month, RAccumulator()).add(trade)

    return [
        MonthlyPerformance(
            month=month,
            n=acc.n,
            win_rate=acc.win_rate,
            net_r=acc.net_r,
            net_pnl=acc.pnl_total,
            pf_r=acc.profit_factor,
            avg_r=safe_div(acc.net_r, acc.r_count),
        )
        for month, acc in sorted(accumulators.items())
    ]


def daily_returns(curve: Sequence[EquityPoint], starting_balance: float) -> List[float]:
    """Percent change of end-of-day equity versus the previous point."""
    returns = []
    previous = starting_balance
    for point in curve:
        returns.append((point.equity - previous) / previous * 100.0 if previous > 0 else 0.0)
        previous = point.equity
    return returns


def performance_summary(
    trades: Iterable[TradeLike],
    starting_balance: float,
    timezone: str = "UTC",
) -> PerformanceSummary:
    """
    Risk-adjusted and distributional performance of closed trades.

    Args:
        trades: Raw or normalized trades, any order
        starting_balance: Account balance before the first trade
        timezone: Reference timezone for close dates

    Returns:
        PerformanceSummary (all zero / None for no closed trades)
    """
    ordered = sort_by_close_time(_closed(trades, timezone))
    if not ordered:
        return PerformanceSummary()

    curve = build_equity_curve(ordered, starting_balance)
    returns = daily_returns(curve, starting_balance)
    downside = std([r for r in returns if r < 0])
    mean_return = safe_div(sum(returns), len(returns))

    max_dd_pct = max(p.drawdown_percent for p in curve)
    total_return_pct = safe_div(curve[-1].equity - starting_balance, starting_balance) * 100.0

    r_values = [t.r for t in ordered if t.r is not None]
    span_days = (ordered[-1].close_date - ordered[0].close_date).days

    summary = PerformanceSummary(
        sharpe=sharpe_ratio(returns),
        sortino=mean_return / downside if downside > 1e-12 else 0.0,
        calmar=safe_div(total_return_pct, max_dd_pct),
        total_return_pct=total_return_pct,
        max_drawdown_pct=max_dd_pct,
        largest_win_r=max((r for r in r_values if r > 0), default=0.0),
        largest_loss_r=min((r for r in r_values if r < 0), default=0.0),
        avg_hold_minutes=_mean_hold(ordered),
        avg_win_hold_minutes=_mean_hold([t for t in ordered if t.outcome is Outcome.WIN]),
        avg_loss_hold_minutes=_mean_hold([t for t in ordered if t.outcome is Outcome.LOSS]),
        avg_trades_per_day=len(ordered) / max(1, span_days),
        months=monthly_performance(ordered),
    )
    logger.debug(
        f"Performance summary: sharpe={summary.sharpe:.2f}, "
        f"calmar={summary.calmar:.2f}, {len(summary.months)} months"
    )
    return summary
