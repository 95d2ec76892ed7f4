"""
CLI entry point for the analytics engine.

Usage:
    python -m journal_analytics \\
        --trades exports/trades.jsonl \\
        --backtests exports/backtests.csv \\
        --config config/config.json \\
        --start 2024-03-11 --end 2024-03-17 \\
        --balance 10000 --trim

Options:
    --trades     Trade export (JSONL or CSV), required
    --backtests  Backtest export (JSONL or CSV)
    --config     Path to config JSON file (default: built-in defaults)
    --start      First close date YYYY-MM-DD; with --end also compares to the prior period
    --end        Last close date YYYY-MM-DD
    --symbols    Space-separated symbols to keep
    --balance    Starting balance (default: report.starting_balance from config)
    --trim       Trim R-multiple outliers before computing
    --output     Optional path to write the JSON report
    --verbose    Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from journal_analytics.config.loader import load_config
from journal_analytics.core.exceptions import AnalyticsError
from journal_analytics.engine.filters import TradeFilters, select_trades_in_scope
from journal_analytics.engine.kpis import prior_period_range
from journal_analytics.io.trade_reader import TradeReader
from journal_analytics.reporting.report import ReportGenerator
from journal_analytics.utils.logger import setup_logging


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value} (expected YYYY-MM-DD)")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m journal_analytics",
        description="Compute trade performance analytics from journal exports",
    )
    parser.add_argument(
        "--trades",
        required=True,
        help="Trade export file (.jsonl or .csv)",
    )
    parser.add_argument(
        "--backtests",
        default=None,
        help="Backtest export file (.jsonl or .csv)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config JSON (default: built-in defaults)",
    )
    parser.add_argument(
        "--start",
        type=_parse_date,
        default=None,
        help="First close date YYYY-MM-DD (inclusive)",
    )
    parser.add_argument(
        "--end",
        type=_parse_date,
        default=None,
        help="Last close date YYYY-MM-DD (inclusive)",
    )
    parser.add_argument(
        "--symbols",
        nargs="+",
        default=None,
        help="Symbols to include e.g. EURUSD GBPUSD",
    )
    parser.add_argument(
        "--balance",
        type=float,
        default=None,
        help="Starting balance (default: from config)",
    )
    parser.add_argument(
        "--trim",
        action="store_true",
        help="Trim R-multiple outliers from both tails",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Optional file path to save JSON report",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable DEBUG logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    # ── Load config ────────────────────────────────────────────────────
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] Config load failed: {e}", file=sys.stderr)
        return 1

    log_config = config.logging
    if args.verbose:
        log_config = log_config.model_copy(update={"log_level": "DEBUG"})
    setup_logging(log_config)
    logger = logging.getLogger("journal_analytics.cli")

    if args.start and args.end and args.end < args.start:
        print("[ERROR] --end must not be before --start", file=sys.stderr)
        return 1

    # ── Load records ───────────────────────────────────────────────────
    trades_path = Path(args.trades)
    if not trades_path.exists():
        print(f"[ERROR] Trades file not found: {trades_path}", file=sys.stderr)
        return 1

    reader = TradeReader()
    try:
        trades = reader.read_trades(str(trades_path))
        backtests = reader.read_backtests(args.backtests) if args.backtests else None
    except AnalyticsError as e:
        print(f"[ERROR] Failed to read exports: {e}", file=sys.stderr)
        return 1

    # ── Scope ──────────────────────────────────────────────────────────
    tz = config.engine.timezone
    filters = None
    prior_trades = None
    if args.start or args.end or args.symbols:
        filters = TradeFilters(
            date_from=args.start,
            date_to=args.end,
            symbols=args.symbols or [],
        )
    if args.start and args.end:
        prior_start, prior_end = prior_period_range(args.start, args.end)
        prior_trades = select_trades_in_scope(
            trades,
            TradeFilters(date_from=prior_start, date_to=prior_end, symbols=args.symbols or []),
            tz,
        )
        logger.info(
            f"Prior period {prior_start.isoformat()} to {prior_end.isoformat()}: "
            f"{len(prior_trades)} trades"
        )

    # ── Build and print report ─────────────────────────────────────────
    generator = ReportGenerator(config)
    report = generator.build(
        trades,
        backtests=backtests,
        prior_trades=prior_trades,
        filters=filters,
        starting_balance=args.balance,
        trim=True if args.trim else None,
    )
    print(generator.format_text(report))

    # ── Optional JSON output ───────────────────────────────────────────
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        logger.info(f"Report saved to {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
