"""Core data types for the analytics engine"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from journal_analytics.core.constants import (
    RATIO_CAP,
    UNBOUNDED_RATIO_VALUE,
    Direction,
    Outcome,
)


@dataclass(frozen=True)
class Trade:
    """
    Closed (or open) trade record as supplied by the trade-retrieval service.

    pnl is in a single account currency (converted upstream). risk is the
    amount risked in the same currency and is the R-multiple denominator.
    Naive timestamps are treated as UTC.
    """
    trade_id: str
    symbol: str
    direction: Direction = Direction.LONG
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    pnl: Optional[float] = None
    risk: Optional[float] = None
    r_multiple: Optional[float] = None
    playbook_id: Optional[str] = None
    setup_score: Optional[float] = None  # 0.0 to 1.0
    setup_grade: Optional[str] = None  # A+, A, B, C, D, F
    session: Optional[str] = None  # Asia / London / NY
    session_hour: Optional[str] = None  # e.g. "L2", "NY1"
    size: Optional[float] = None
    account_id: Optional[str] = None
    mae_r: Optional[float] = None  # max adverse excursion, in R
    mfe_r: Optional[float] = None  # max favourable excursion, in R


@dataclass(frozen=True)
class NormalizedTrade:
    """Trade enriched with the derived fields every calculation needs"""
    trade: Trade
    r: Optional[float]  # None => excluded from R-based stats
    outcome: Outcome
    hold_minutes: Optional[int]
    hour: Optional[int]  # entry hour in the reference timezone
    weekday: Optional[int]  # close weekday, 0 = Sunday
    close_date: Optional[date]
    session: Optional[str]

    @property
    def has_r(self) -> bool:
        return self.r is not None

    @property
    def trade_id(self) -> str:
        return self.trade.trade_id

    @property
    def symbol(self) -> str:
        return self.trade.symbol

    @property
    def pnl(self) -> float:
        """Trade pnl; missing or non-finite reads as 0.0"""
        pnl = self.trade.pnl
        if pnl is None or not math.isfinite(pnl):
            return 0.0
        return float(pnl)


@dataclass(frozen=True)
class Backtest:
    """
    Backtest record: planned trade parameters plus the realised result.

    result_r is the outcome in R; backtests without it only feed the
    stop/target recommendation.
    """
    backtest_id: str = ""
    symbol: str = ""
    direction: Direction = Direction.LONG
    playbook_id: Optional[str] = None
    session: Optional[str] = None
    entry_date: Optional[date] = None
    planned_sl_pips: Optional[float] = None
    planned_tp_pips: Optional[float] = None
    planned_rr: Optional[float] = None
    result_r: Optional[float] = None
    setup_score: Optional[float] = None
    setup_grade: Optional[str] = None


@dataclass(frozen=True)
class Ratio:
    """
    Ratio that may be unbounded (profit factor, recovery factor).

    Unbounded values never leak as float('inf'): as_number() maps them to
    UNBOUNDED_RATIO_VALUE, which sits above the display cap.
    """
    value: float = 0.0
    unbounded: bool = False

    @classmethod
    def finite(cls, value: float) -> "Ratio":
        return cls(value=float(value), unbounded=False)

    @classmethod
    def infinite(cls) -> "Ratio":
        return cls(value=UNBOUNDED_RATIO_VALUE, unbounded=True)

    @classmethod
    def of(cls, numerator: float, denominator: float) -> "Ratio":
        """
        Divide, mapping a zero denominator to the unbounded sentinel.

        0 / 0 (and negative / 0) is 0, not unbounded.
        """
        if denominator > 0:
            return cls.finite(numerator / denominator)
        if numerator > 0:
            return cls.infinite()
        return cls.finite(0.0)

    def as_number(self) -> float:
        return UNBOUNDED_RATIO_VALUE if self.unbounded else self.value

    def display(self, cap: float = RATIO_CAP, decimals: int = 2) -> str:
        if self.unbounded or self.value > cap:
            return "∞"
        return f"{self.value:.{decimals}f}"
