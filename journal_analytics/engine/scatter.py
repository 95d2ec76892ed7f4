"""Hold-time vs R scatter projection"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from journal_analytics.engine.normalizer import TradeLike, normalize


@dataclass
class ScatterPoint:
    r: float
    hold_minutes: int
    date: Optional[date]
    symbol: str
    playbook_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "r": round(self.r, 4),
            "hold_minutes": self.hold_minutes,
            "date": self.date.isoformat() if self.date else None,
            "symbol": self.symbol,
            "playbook_name": self.playbook_name,
        }


def scatter_points(
    trades: Iterable[TradeLike],
    playbook_names: Optional[Mapping[str, str]] = None,
    timezone: str = "UTC",
) -> List[ScatterPoint]:
    """
    Project trades into (hold time, R) points with tooltip metadata.

    Trades missing either a hold time or an R multiple are left out.

    Args:
        trades: Raw or normalized trades
        playbook_names: Optional playbook id -> display name lookup
        timezone: Reference timezone for the point date
    """
    names = playbook_names or {}
    return [
        ScatterPoint(
            r=t.r,
            hold_minutes=t.hold_minutes,
            date=t.close_date,
            symbol=t.symbol,
            playbook_name=names.get(t.trade.playbook_id) if t.trade.playbook_id else None,
        )
        for t in normalize(trades, timezone)
        if t.r is not None and t.hold_minutes is not None
    ]
