"""Trade and backtest builders for analytics tests"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from journal_analytics.core.constants import Direction
from journal_analytics.core.types import Backtest, Trade

# Monday 2024-03-11 00:00 UTC
BASE_DAY = datetime(2024, 3, 11, tzinfo=timezone.utc)

_ids = itertools.count(1)


def make_trade(
    r: Optional[float] = 1.0,
    risk: Optional[float] = 100.0,
    day: int = 0,
    hour: int = 9,
    hold: Optional[int] = 30,
    symbol: str = "EURUSD",
    session: Optional[str] = "London",
    **overrides,
) -> Trade:
    """
    Build a closed trade.

    pnl is r * risk so R can be derived from pnl / risk. Entry is at
    BASE_DAY + day days + hour hours; exit follows after hold minutes
    (hold=None leaves the exit time unset).
    """
    entry = BASE_DAY + timedelta(days=day, hours=hour)
    exit_ = entry + timedelta(minutes=hold) if hold is not None else None
    pnl = r * risk if (r is not None and risk is not None) else None
    fields = dict(
        trade_id=f"T{next(_ids)}",
        symbol=symbol,
        direction=Direction.LONG,
        entry_time=entry,
        exit_time=exit_,
        pnl=pnl,
        risk=risk,
        session=session,
    )
    fields.update(overrides)
    return Trade(**fields)


def make_series(r_values: Sequence[float], start_day: int = 0, **kwargs) -> List[Trade]:
    """One trade per consecutive calendar day with the given R values."""
    return [make_trade(r=r, day=start_day + i, **kwargs) for i, r in enumerate(r_values)]


def make_backtest(
    sl: Optional[float] = 10.0,
    tp: Optional[float] = 20.0,
    rr: Optional[float] = 2.0,
    **overrides,
) -> Backtest:
    fields = dict(
        backtest_id=f"B{next(_ids)}",
        symbol="EURUSD",
        planned_sl_pips=sl,
        planned_tp_pips=tp,
        planned_rr=rr,
    )
    fields.update(overrides)
    return Backtest(**fields)
