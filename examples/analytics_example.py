#!/usr/bin/env python3
"""
Example script demonstrating the analytics engine on synthetic trades.

This is a standalone example showing how to:
1. Build a trade set
2. Compute KPIs, breakdowns and streaks
3. Produce the full report

NOTE: This is for demonstration only. In production, trades come from the
journal export (see `python -m journal_analytics --help`).
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from journal_analytics.config.loader import load_config
from journal_analytics.core.types import Backtest, Trade
from journal_analytics.engine.breakdowns import compute_breakdowns
from journal_analytics.engine.kpis import kpis_r
from journal_analytics.engine.streaks import daily_results, detect_streaks
from journal_analytics.reporting.report import ReportGenerator
from journal_analytics.utils.logger import setup_logging


def synthetic_trades(n: int = 120, seed: int = 42):
    """Random trades over ~8 weeks with a small positive edge"""
    rng = np.random.default_rng(seed)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    sessions = [("Asia", 1), ("London", 8), ("NY", 14)]
    symbols = ["EURUSD", "GBPUSD", "XAUUSD"]
    grades = ["A+", "A", "B", "C"]

    trades = []
    for i in range(n):
        session, base_hour = sessions[rng.integers(len(sessions))]
        entry = start + timedelta(days=int(i // 2.2), hours=base_hour + int(rng.integers(3)))
        hold = int(rng.integers(3, 300))
        r = float(rng.choice([-1.0, 2.0], p=[0.6, 0.4]) + rng.normal(0, 0.1))
        trades.append(
            Trade(
                trade_id=f"T{i + 1}",
                symbol=symbols[rng.integers(len(symbols))],
                entry_time=entry,
                exit_time=entry + timedelta(minutes=hold),
                pnl=round(r * 100.0, 2),
                risk=100.0,
                session=session,
                setup_grade=grades[rng.integers(len(grades))],
                setup_score=float(rng.uniform(0.3, 1.0)),
            )
        )
    return trades


def main():
    """Run analytics example"""

    print("=" * 60)
    print("Analytics Engine Example")
    print("=" * 60)
    print()

    config = load_config()
    setup_logging(config.logging)

    print("[1/3] Generating trades...")
    trades = synthetic_trades()
    print(f"      {len(trades)} trades")
    print()

    print("[2/3] Computing components...")
    kpis = kpis_r(trades)
    print(f"      Win rate:    {kpis.win_rate:.1%}")
    print(f"      Expectancy:  {kpis.expectancy_r:+.3f} R")
    print(f"      Profit factor: {kpis.pf_r.display()}")

    breakdowns = compute_breakdowns(trades)
    best = max((b for b in breakdowns.by_session if b.has_data), key=lambda b: b.expectancy_r)
    print(f"      Best session: {best.session} ({best.expectancy_r:+.2f} R, n={best.n})")

    streaks = detect_streaks(daily_results(sorted(trades, key=lambda t: t.exit_time)))
    print(f"      Best win streak: {streaks.best_win_streak} days")
    print()

    print("[3/3] Building report...")
    backtests = [
        Backtest(backtest_id=f"B{i}", planned_sl_pips=sl, planned_tp_pips=sl * 2, planned_rr=2.0)
        for i, sl in enumerate([10, 12, 12, 15, 18])
    ]
    generator = ReportGenerator(config)
    report = generator.build(trades, backtests=backtests)
    print()
    print(generator.format_text(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
