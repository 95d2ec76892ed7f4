"""
Shared statistics helpers.

RAccumulator is the single-pass running state behind every R-based
reduction: the KPI aggregator, each time bucket and each grade bucket feed
trades into one accumulator and convert it to metrics at the end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from journal_analytics.core.constants import Outcome
from journal_analytics.core.types import NormalizedTrade, Ratio


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default instead of raising or producing NaN."""
    if denominator == 0:
        return default
    result = numerator / denominator
    if result != result:  # NaN
        return default
    return result


def median(values: Sequence[float]) -> Optional[float]:
    """
    Median of a sequence; None for an empty one.

    Odd count takes the middle element, even count averages the two middle
    elements.
    """
    if len(values) == 0:
        return None
    return float(np.median(np.asarray(values, dtype=float)))


def std(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def sharpe_ratio(values: Sequence[float]) -> float:
    """Mean over population standard deviation; 0.0 when undefined."""
    if len(values) == 0:
        return 0.0
    sd = std(values)
    if sd < 1e-12:  # constant series
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float))) / sd


def max_drawdown(series: Iterable[float], baseline: float = 0.0) -> float:
    """
    Largest peak-to-trough decline of a running series.

    The peak starts at baseline, so a series that opens below it already
    counts as a drawdown. Always >= 0.
    """
    peak = baseline
    max_dd = 0.0
    for value in series:
        if value > peak:
            peak = value
        dd = peak - value
        if dd > max_dd:
            max_dd = dd
    return max_dd


@dataclass
class RAccumulator:
    """Running totals for one group of trades"""
    n: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    pnl_total: float = 0.0

    # R-defined subset
    r_count: int = 0
    r_wins: int = 0
    r_losses: int = 0
    sum_win_r: float = 0.0
    sum_loss_r: float = 0.0  # positive magnitude
    net_r: float = 0.0

    def add(self, trade: NormalizedTrade) -> None:
        self.add_result(trade.outcome, trade.r, trade.pnl)

    def add_result(self, outcome: Outcome, r: Optional[float], pnl: float = 0.0) -> None:
        """Add one result; r=None counts toward n and outcomes only."""
        self.n += 1
        self.pnl_total += pnl
        if outcome is Outcome.WIN:
            self.wins += 1
        elif outcome is Outcome.LOSS:
            self.losses += 1
        else:
            self.ties += 1

        if r is None:
            return
        self.r_count += 1
        self.net_r += r
        if r > 0:
            self.r_wins += 1
            self.sum_win_r += r
        elif r < 0:
            self.r_losses += 1
            self.sum_loss_r += -r

    def extend(self, trades: Iterable[NormalizedTrade]) -> "RAccumulator":
        for trade in trades:
            self.add(trade)
        return self

    @property
    def has_data(self) -> bool:
        return self.n > 0

    @property
    def win_rate(self) -> float:
        return safe_div(self.wins, self.n)

    @property
    def avg_win_r(self) -> float:
        return safe_div(self.sum_win_r, self.r_wins)

    @property
    def avg_loss_r(self) -> float:
        """Mean losing R as a positive magnitude"""
        return safe_div(self.sum_loss_r, self.r_losses)

    @property
    def expectancy_r(self) -> float:
        """
        win_rate * avg_win_r - loss_rate * avg_loss_r over the R-defined subset.

        Breakeven R trades count in neither rate, so expectancy * r_count
        equals net_r exactly.
        """
        if self.r_count == 0:
            return 0.0
        win_rate_r = self.r_wins / self.r_count
        loss_rate_r = self.r_losses / self.r_count
        return win_rate_r * self.avg_win_r - loss_rate_r * self.avg_loss_r

    @property
    def profit_factor(self) -> Ratio:
        return Ratio.of(self.sum_win_r, self.sum_loss_r)
