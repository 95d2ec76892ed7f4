"""
KPI aggregator.

Reduces a trade set to a single KPI record. Period slicing is the caller's
job: pass the current and prior trade sets and get one record for each.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple

from journal_analytics.core.types import Ratio
from journal_analytics.engine.equity import max_drawdown_r
from journal_analytics.engine.normalizer import TradeLike, normalize, sort_by_close_time
from journal_analytics.engine.stats import RAccumulator

logger = logging.getLogger("journal_analytics.engine.kpis")


@dataclass
class KPIs:
    """
    Summary statistics for a trade set.

    Attributes:
        n: Number of trades
        wins / losses / ties: Outcome counts by pnl sign (wins + losses + ties == n)
        win_rate: wins / n (0.0 to 1.0)
        avg_win_r: Mean R of winning trades
        avg_loss_r: Mean R of losing trades as a positive magnitude
        pf_r: Sum of positive R / |sum of negative R|
        expectancy_r: Expected R per trade
        net_r: Sum of all defined R
        max_dd_r: Largest peak-to-trough decline of cumulative R (>= 0)
        recovery: net_r / max_dd_r
        r_count: Trades with a defined R
        net_pnl: Sum of pnl in account currency
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
    recovery: Ratio = Ratio()
    r_count: int = 0
    net_pnl: float = 0.0

    @property
    def avg_loss_r_signed(self) -> float:
        return -self.avg_loss_r

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain dict (JSON-safe)."""
        return {
            "n": self.n,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "win_rate": round(self.win_rate, 4),
            "avg_win_r": round(self.avg_win_r, 4),
            "avg_loss_r": round(self.avg_loss_r_signed, 4),
            "pf_r": round(self.pf_r.as_number(), 4),
            "pf_r_unbounded": self.pf_r.unbounded,
            "expectancy_r": round(self.expectancy_r, 4),
            "net_r": round(self.net_r, 4),
            "max_dd_r": round(self.max_dd_r, 4),
            "recovery": round(self.recovery.as_number(), 4),
            "recovery_unbounded": self.recovery.unbounded,
            "r_count": self.r_count,
            "net_pnl": round(self.net_pnl, 4),
        }


@dataclass
class KPIComparison:
    """Current-period KPIs with optional prior-period KPIs for delta display"""
    current: KPIs
    prior: Optional[KPIs] = None

    @property
    def deltas(self) -> Dict[str, float]:
        if self.prior is None:
            return {}
        return kpi_deltas(self.current, self.prior)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current.to_dict(),
            "prior": self.prior.to_dict() if self.prior else None,
            "deltas": {k: round(v, 4) for k, v in self.deltas.items()},
        }


def kpis_r(trades: Iterable[TradeLike], timezone: str = "UTC") -> KPIs:
    """
    Reduce a trade set to KPIs.

    Order-independent: trades are put in close-time order internally for the
    drawdown walk. Never raises for empty input and never emits NaN.

    Args:
        trades: Raw or normalized trades, any order
        timezone: Reference timezone used when normalizing raw trades

    Returns:
        KPIs record (all zero for an empty set)
    """
    normalized = normalize(trades, timezone)
    if not normalized:
        return KPIs()

    acc = RAccumulator().extend(normalized)
    max_dd = max_drawdown_r(sort_by_close_time(normalized))

    return KPIs(
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
        recovery=Ratio.of(acc.net_r, max_dd),
        r_count=acc.r_count,
        net_pnl=acc.pnl_total,
    )


def compute_kpis(
    trades: Iterable[TradeLike],
    prior_trades: Optional[Iterable[TradeLike]] = None,
    timezone: str = "UTC",
) -> KPIComparison:
    """
    KPIs for the current trade set and, if given, the prior trade set.

    Args:
        trades: Current-period trades
        prior_trades: Prior-period trades (optional)
        timezone: Reference timezone used when normalizing raw trades

    Returns:
        KPIComparison
    """
    current = kpis_r(trades, timezone)
    prior = kpis_r(prior_trades, timezone) if prior_trades is not None else None
    logger.debug(
        f"KPIs computed: n={current.n}, net_r={current.net_r:.2f}, "
        f"prior={'yes' if prior is not None else 'no'}"
    )
    return KPIComparison(current=current, prior=prior)


def kpi_deltas(current: KPIs, prior: KPIs) -> Dict[str, float]:
    """
    Current-minus-prior deltas for display.

    Ratios are only compared when both sides are finite.
    """
    deltas = {
        "n": float(current.n - prior.n),
        "win_rate": current.win_rate - prior.win_rate,
        "expectancy_r": current.expectancy_r - prior.expectancy_r,
        "net_r": current.net_r - prior.net_r,
        "max_dd_r": current.max_dd_r - prior.max_dd_r,
        "net_pnl": current.net_pnl - prior.net_pnl,
    }
    if not current.pf_r.unbounded and not prior.pf_r.unbounded:
        deltas["pf_r"] = current.pf_r.value - prior.pf_r.value
    if not current.recovery.unbounded and not prior.recovery.unbounded:
        deltas["recovery"] = current.recovery.value - prior.recovery.value
    return deltas


def prior_period_range(start: date, end: date) -> Tuple[date, date]:
    """
    Same-length window ending the day before start.

    >>> prior_period_range(date(2024, 3, 11), date(2024, 3, 17))
    (datetime.date(2024, 3, 4), datetime.date(2024, 3, 10))
    """
    duration = end - start
    prior_end = start - timedelta(days=1)
    return prior_end - duration, prior_end
