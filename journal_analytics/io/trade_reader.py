"""JSONL / CSV reader for trade and backtest exports"""

import json
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Iterator, List, Optional, Tuple, TypeVar

import pandas as pd

from journal_analytics.core.constants import Direction
from journal_analytics.core.exceptions import TradeReadError
from journal_analytics.core.types import Backtest, Trade

module_logger = logging.getLogger("journal_analytics.io.trade_reader")

T = TypeVar("T")

# Alternate column names seen in journal exports
_TRADE_ALIASES = {
    "id": "trade_id",
    "opened_at": "entry_time",
    "closed_at": "exit_time",
    "r": "r_multiple",
    "playbook": "playbook_id",
    "score": "setup_score",
    "grade": "setup_grade",
    "side": "direction",
}


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _opt_float(value: Any) -> Optional[float]:
    """Parse an optional number; blanks and NaN become None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    result = float(value)
    return result if math.isfinite(result) else None


def _opt_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp with pandas.

    A trailing Z is read as UTC. Fractional seconds of any length are
    accepted (database exports often carry 5 digits); precision beyond
    microseconds is dropped.
    """
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        ts = pd.Timestamp(text)
    except (ValueError, TypeError):
        raise ValueError(f"Cannot parse timestamp: {value!r}")
    if pd.isna(ts):
        return None
    return ts.floor("us").to_pydatetime()


def _opt_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def parse_trade(data: Dict[str, Any]) -> Trade:
    """
    Build a Trade from an export row.

    Raises:
        KeyError: If trade_id or symbol is missing
        ValueError: If a field cannot be parsed
    """
    row = {_TRADE_ALIASES.get(k, k): v for k, v in data.items()}

    trade_id = _opt_str(row["trade_id"])
    symbol = _opt_str(row["symbol"])
    if trade_id is None or symbol is None:
        raise ValueError("trade_id and symbol must not be blank")

    direction = _opt_str(row.get("direction"))
    return Trade(
        trade_id=trade_id,
        symbol=symbol.upper(),
        direction=Direction(direction.lower()) if direction else Direction.LONG,
        entry_time=_opt_datetime(row.get("entry_time")),
        exit_time=_opt_datetime(row.get("exit_time")),
        pnl=_opt_float(row.get("pnl")),
        risk=_opt_float(row.get("risk")),
        r_multiple=_opt_float(row.get("r_multiple")),
        playbook_id=_opt_str(row.get("playbook_id")),
        setup_score=_opt_float(row.get("setup_score")),
        setup_grade=_opt_str(row.get("setup_grade")),
        session=_opt_str(row.get("session")),
        session_hour=_opt_str(row.get("session_hour")),
        size=_opt_float(row.get("size")),
        account_id=_opt_str(row.get("account_id")),
        mae_r=_opt_float(row.get("mae_r")),
        mfe_r=_opt_float(row.get("mfe_r")),
    )


def parse_backtest(data: Dict[str, Any]) -> Backtest:
    """
    Build a Backtest from an export row.

    Raises:
        ValueError: If a field cannot be parsed
    """
    row = {_TRADE_ALIASES.get(k, k): v for k, v in data.items()}
    direction = _opt_str(row.get("direction"))
    return Backtest(
        backtest_id=_opt_str(row.get("backtest_id") or row.get("trade_id")) or "",
        symbol=(_opt_str(row.get("symbol")) or "").upper(),
        direction=Direction(direction.lower()) if direction else Direction.LONG,
        playbook_id=_opt_str(row.get("playbook_id")),
        session=_opt_str(row.get("session")),
        entry_date=_opt_date(row.get("entry_date")),
        planned_sl_pips=_opt_float(row.get("planned_sl_pips")),
        planned_tp_pips=_opt_float(row.get("planned_tp_pips")),
        planned_rr=_opt_float(row.get("planned_rr")),
        result_r=_opt_float(row.get("result_r")),
        setup_score=_opt_float(row.get("setup_score")),
        setup_grade=_opt_str(row.get("setup_grade")),
    )


class TradeReader:
    """
    Loads Trade and Backtest records from journal export files.

    The format follows the file suffix: .csv is read with pandas, anything
    else as JSON Lines (one object per line).

    Usage:
        reader = TradeReader()
        trades = reader.read_trades("exports/trades.jsonl")
        backtests = reader.read_backtests("exports/backtests.csv", skip_errors=False)
    """

    def read_trades(self, path: str, skip_errors: bool = True) -> List[Trade]:
        """
        Read trades from a JSONL or CSV file.

        Args:
            path: File path
            skip_errors: If True, log and skip bad rows; else raise TradeReadError

        Returns:
            Trades in file order
        """
        trades = list(self._iter_records(Path(path), parse_trade, skip_errors))
        module_logger.info(f"Loaded {len(trades)} trades from {path}")
        return trades

    def read_backtests(self, path: str, skip_errors: bool = True) -> List[Backtest]:
        """
        Read backtests from a JSONL or CSV file.

        Args:
            path: File path
            skip_errors: If True, log and skip bad rows; else raise TradeReadError

        Returns:
            Backtests in file order
        """
        backtests = list(self._iter_records(Path(path), parse_backtest, skip_errors))
        module_logger.info(f"Loaded {len(backtests)} backtests from {path}")
        return backtests

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _iter_records(
        self,
        path: Path,
        parse: Callable[[Dict[str, Any]], T],
        skip_errors: bool,
    ) -> Generator[T, None, None]:
        """
        Iterate over parsed records in a single export file.

        Raises:
            TradeReadError: If skip_errors=False and a row cannot be parsed
        """
        if not path.exists():
            module_logger.warning(f"Export file not found: {path}")
            return

        rows = self._iter_csv(path) if path.suffix.lower() == ".csv" else self._iter_jsonl(path)
        for line_num, raw in rows:
            try:
                data = json.loads(raw) if isinstance(raw, str) else raw
                if not isinstance(data, dict):
                    raise ValueError(f"Expected an object, got {type(data).__name__}")
                yield parse(data)
            except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                msg = f"Parse error in {path}:{line_num}: {e!r}"
                if skip_errors:
                    module_logger.warning(msg)
                else:
                    raise TradeReadError(msg) from e

    def _iter_jsonl(self, path: Path) -> Iterator[Tuple[int, str]]:
        """Yield (line number, raw line) for non-blank lines."""
        with open(path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if line:
                    yield line_num, line

    def _iter_csv(self, path: Path) -> Iterator[Tuple[int, Dict[str, Any]]]:
        """Yield (line number, row dict); every cell is read as a string."""
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return
        except pd.errors.ParserError as e:
            raise TradeReadError(f"Cannot parse CSV {path}: {e}") from e

        # Header is line 1
        for offset, row in enumerate(df.to_dict(orient="records")):
            yield offset + 2, row
