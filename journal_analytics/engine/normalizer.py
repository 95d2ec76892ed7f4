"""
Trade record normalizer.

Derives the per-trade scalar fields (R multiple, outcome, hold time, entry
hour, close weekday, session) that every downstream calculation relies on.
Returns new NormalizedTrade records; source trades are never mutated.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

from journal_analytics.core.constants import Outcome
from journal_analytics.core.types import NormalizedTrade, Trade

logger = logging.getLogger("journal_analytics.engine.normalizer")

TradeLike = Union[Trade, NormalizedTrade]

_SESSION_ALIASES = {
    "asia": "Asia",
    "asian": "Asia",
    "london": "London",
    "ny": "NY",
    "new york": "NY",
    "newyork": "NY",
}


def _resolve_tz(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return dt_timezone.utc
    return ZoneInfo(name)


def _localize(ts: Optional[datetime], tz: tzinfo) -> Optional[datetime]:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=dt_timezone.utc)
    return ts.astimezone(tz)


def finite_or_none(value: Optional[float]) -> Optional[float]:
    """float(value), or None for a missing, NaN or infinite value."""
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def r_multiple(trade: Trade) -> Optional[float]:
    """
    R multiple of a trade.

    Uses the stored value when present, else pnl / risk when risk > 0.
    Non-finite inputs count as missing. Returns None when R is undefined.
    """
    if trade.r_multiple is not None:
        return finite_or_none(trade.r_multiple)
    pnl = finite_or_none(trade.pnl)
    risk = finite_or_none(trade.risk)
    if pnl is None or risk is None or risk <= 0:
        return None
    return pnl / risk


def classify_outcome(pnl: Optional[float], r: Optional[float] = None) -> Outcome:
    """Outcome from the sign of pnl, falling back to the sign of R."""
    pnl = finite_or_none(pnl)
    value = pnl if pnl is not None else finite_or_none(r)
    if value is None or value == 0:
        return Outcome.TIE
    return Outcome.WIN if value > 0 else Outcome.LOSS


def hold_minutes(trade: Trade) -> Optional[int]:
    """Whole minutes between entry and exit; None if unknown or negative."""
    if trade.entry_time is None or trade.exit_time is None:
        return None
    entry = _localize(trade.entry_time, dt_timezone.utc)
    exit_ = _localize(trade.exit_time, dt_timezone.utc)
    minutes = math.floor((exit_ - entry).total_seconds() / 60)
    return minutes if minutes >= 0 else None


def close_timestamp(trade: Trade) -> Optional[datetime]:
    """Exit time (entry time for open trades) as an aware UTC datetime."""
    return _localize(trade.exit_time or trade.entry_time, dt_timezone.utc)


def resolve_session(trade: Trade) -> Optional[str]:
    """
    Session label of a trade.

    Explicit label first, then the session-hour code prefix
    (A1-A4 -> Asia, L1-L3 -> London, NY1-NY3 -> NY).
    """
    if trade.session:
        label = trade.session.strip()
        return _SESSION_ALIASES.get(label.lower(), label)
    code = (trade.session_hour or "").strip().upper()
    if code.startswith("NY"):
        return "NY"
    if code.startswith("L"):
        return "London"
    if code.startswith("A"):
        return "Asia"
    return None


def normalize_trade(trade: Trade, timezone: str = "UTC") -> NormalizedTrade:
    """Normalize a single trade."""
    tz = _resolve_tz(timezone)
    r = r_multiple(trade)
    entry = _localize(trade.entry_time, tz)
    exit_ = _localize(trade.exit_time, tz)
    return NormalizedTrade(
        trade=trade,
        r=r,
        outcome=classify_outcome(trade.pnl, r),
        hold_minutes=hold_minutes(trade),
        hour=entry.hour if entry else None,
        weekday=exit_.isoweekday() % 7 if exit_ else None,
        close_date=exit_.date() if exit_ else None,
        session=resolve_session(trade),
    )


def normalize(trades: Iterable[TradeLike], timezone: str = "UTC") -> List[NormalizedTrade]:
    """
    Normalize a trade collection.

    Already-normalized records pass through unchanged, so every engine entry
    point can call this on its input.

    Args:
        trades: Raw or normalized trades
        timezone: Reference timezone for hour-of-day and close date

    Returns:
        New list of NormalizedTrade, in input order
    """
    result: List[NormalizedTrade] = []
    undefined_r = 0
    for trade in trades:
        if isinstance(trade, NormalizedTrade):
            result.append(trade)
            continue
        normalized = normalize_trade(trade, timezone)
        if normalized.r is None:
            undefined_r += 1
        result.append(normalized)
    if undefined_r:
        logger.debug(f"Normalized {len(result)} trades ({undefined_r} without a defined R)")
    return result


def sort_by_close_time(trades: Iterable[NormalizedTrade]) -> List[NormalizedTrade]:
    """
    Stable sort by close time.

    Trades without any timestamp follow the timed ones, in input order.
    """
    timed = []
    untimed = []
    for index, trade in enumerate(trades):
        ts = close_timestamp(trade.trade)
        if ts is None:
            untimed.append(trade)
        else:
            timed.append((ts, index, trade))
    timed.sort(key=lambda item: (item[0], item[1]))
    return [trade for _, _, trade in timed] + untimed
