"""Trade scope filters"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence

from journal_analytics.core.types import Backtest, NormalizedTrade
from journal_analytics.engine.normalizer import TradeLike, normalize

logger = logging.getLogger("journal_analytics.engine.filters")


@dataclass
class TradeFilters:
    """
    Scope of an analytics run.

    Empty / None fields do not filter. Date bounds are inclusive and apply to
    the close date in the reference timezone.
    """
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    account_id: Optional[str] = None
    symbols: Sequence[str] = field(default_factory=list)
    sessions: Sequence[str] = field(default_factory=list)
    playbook_id: Optional[str] = None

    def matches(self, trade: NormalizedTrade) -> bool:
        if trade.close_date is None:
            return False
        if self.date_from is not None and trade.close_date < self.date_from:
            return False
        if self.date_to is not None and trade.close_date > self.date_to:
            return False
        if self.account_id is not None and trade.trade.account_id != self.account_id:
            return False
        if self.symbols and trade.symbol not in self.symbols:
            return False
        if self.sessions and trade.session not in self.sessions:
            return False
        if self.playbook_id is not None and trade.trade.playbook_id != self.playbook_id:
            return False
        return True

    def matches_backtest(self, backtest: Backtest) -> bool:
        """Playbook and symbol scope for backtests; dates, accounts and sessions do not apply."""
        if self.symbols and backtest.symbol not in self.symbols:
            return False
        if self.playbook_id is not None and backtest.playbook_id != self.playbook_id:
            return False
        return True


def select_trades_in_scope(
    trades: Iterable[TradeLike],
    filters: Optional[TradeFilters] = None,
    timezone: str = "UTC",
) -> List[NormalizedTrade]:
    """
    Normalize and keep the trades inside the filter scope, in input order.

    Trades without a close time are always out of scope.
    """
    filters = filters or TradeFilters()
    normalized = normalize(trades, timezone)
    selected = [t for t in normalized if filters.matches(t)]
    logger.debug(f"Scope filter kept {len(selected)} of {len(normalized)} trades")
    return selected
