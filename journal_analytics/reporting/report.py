"""
Analytics Report Generator

Runs every engine component over one trade set and bundles the results
into a single AnalyticsReport.

The report is available as:
- AnalyticsReport dataclass (machine-readable, JSON-safe via to_dict())
- Formatted text string for console output

Usage::

    from journal_analytics.reporting.report import ReportGenerator

    gen = ReportGenerator(config)
    report = gen.build(trades, backtests=backtests)
    print(gen.format_text(report))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from journal_analytics.config.models import AnalyticsConfig
from journal_analytics.core.types import Backtest, Trade
from journal_analytics.engine.backtest_performance import (
    BacktestBucket,
    BacktestEquityPoint,
    BacktestKPIs,
    backtest_equity_curve,
    backtest_insights,
    backtest_kpis,
    backtests_by_grade,
    backtests_by_session,
    backtests_by_symbol,
)
from journal_analytics.engine.backtests import RecommendedMetrics, recommend_from_backtests
from journal_analytics.engine.breakdowns import Breakdowns, compute_breakdowns
from journal_analytics.engine.distributions import (
    HistogramBucket,
    histogram_mae,
    histogram_mfe,
    histogram_r,
    hold_time_bands,
)
from journal_analytics.engine.equity import (
    DrawdownPeriod,
    EquityPoint,
    build_equity_curve,
    drawdown_periods,
)
from journal_analytics.engine.filters import TradeFilters, select_trades_in_scope
from journal_analytics.engine.grades import PlaybookGradeMetrics, grade_correlation
from journal_analytics.engine.insights import generate_insights
from journal_analytics.engine.kpis import KPIComparison, compute_kpis
from journal_analytics.engine.normalizer import normalize, sort_by_close_time
from journal_analytics.engine.outliers import TrimResult, trim_outliers
from journal_analytics.engine.performance import PerformanceSummary, performance_summary
from journal_analytics.engine.scatter import ScatterPoint, scatter_points
from journal_analytics.engine.streaks import StreakState, daily_results, detect_streaks


module_logger = logging.getLogger("journal_analytics.reporting.report")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class AnalyticsReport:
    """
    Complete analytics output for one trade set.

    Attributes:
        generated_at: Timestamp when the report was generated (ISO-8601)
        period_start: First close date in scope (None if no trades)
        period_end: Last close date in scope
        currency: Account currency of pnl and equity values
        starting_balance: Equity before the first trade
        kpis: Current KPIs with optional prior-period comparison
        breakdowns: Day-of-week, hour x session, session and symbol buckets
        equity_curve: End-of-day equity points
        drawdowns: Drawdown episodes on the equity curve
        streaks: Daily win/loss streaks
        grades: Outcome statistics per setup grade
        histogram: R-multiple histogram
        hold_bands: Trade counts per hold-time band
        mae_histogram / mfe_histogram: Excursion magnitude histograms
        performance: Risk-adjusted ratios and monthly results
        scatter: Hold time vs R points
        recommendation: Backtest-derived stop/target/R:R (None without backtests)
        backtest_kpis: KPIs over backtest results (None without backtests)
        backtest_by_session / backtest_by_symbol / backtest_by_grade: Backtest buckets
        backtest_curve: Cumulative backtest R
        backtest_insights: Insight strings over backtest results
        insights: Natural-language insight strings
        trim: Outlier trimming counts (None when trimming is off)
    """

    generated_at: str
    period_start: Optional[date]
    period_end: Optional[date]
    currency: str
    starting_balance: float
    kpis: KPIComparison
    breakdowns: Breakdowns
    equity_curve: List[EquityPoint] = field(default_factory=list)
    drawdowns: List[DrawdownPeriod] = field(default_factory=list)
    streaks: StreakState = field(default_factory=StreakState)
    grades: List[PlaybookGradeMetrics] = field(default_factory=list)
    histogram: List[HistogramBucket] = field(default_factory=list)
    hold_bands: List[HistogramBucket] = field(default_factory=list)
    mae_histogram: List[HistogramBucket] = field(default_factory=list)
    mfe_histogram: List[HistogramBucket] = field(default_factory=list)
    performance: PerformanceSummary = field(default_factory=PerformanceSummary)
    scatter: List[ScatterPoint] = field(default_factory=list)
    recommendation: Optional[RecommendedMetrics] = None
    backtest_kpis: Optional[BacktestKPIs] = None
    backtest_by_session: List[BacktestBucket] = field(default_factory=list)
    backtest_by_symbol: List[BacktestBucket] = field(default_factory=list)
    backtest_by_grade: List[BacktestBucket] = field(default_factory=list)
    backtest_curve: List[BacktestEquityPoint] = field(default_factory=list)
    backtest_insights: List[str] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    trim: Optional[TrimResult] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain dict (JSON-safe)."""
        return {
            "generated_at": self.generated_at,
            "period_start": self.period_start.isoformat() if self.period_start else None,
            "period_end": self.period_end.isoformat() if self.period_end else None,
            "currency": self.currency,
            "starting_balance": round(self.starting_balance, 4),
            "kpis": self.kpis.to_dict(),
            "breakdowns": self.breakdowns.to_dict(),
            "equity_curve": [p.to_dict() for p in self.equity_curve],
            "drawdowns": [d.to_dict() for d in self.drawdowns],
            "streaks": self.streaks.to_dict(),
            "grades": [g.to_dict() for g in self.grades],
            "histogram": [b.to_dict() for b in self.histogram],
            "hold_bands": [b.to_dict() for b in self.hold_bands],
            "mae_histogram": [b.to_dict() for b in self.mae_histogram],
            "mfe_histogram": [b.to_dict() for b in self.mfe_histogram],
            "performance": self.performance.to_dict(),
            "scatter": [p.to_dict() for p in self.scatter],
            "recommendation": self.recommendation.to_dict() if self.recommendation else None,
            "backtests": self._backtests_dict(),
            "insights": list(self.insights),
            "trim": self.trim.to_dict() if self.trim else None,
        }

    def _backtests_dict(self) -> Optional[Dict[str, Any]]:
        if self.backtest_kpis is None:
            return None
        return {
            "kpis": self.backtest_kpis.to_dict(),
            "by_session": [b.to_dict() for b in self.backtest_by_session],
            "by_symbol": [b.to_dict() for b in self.backtest_by_symbol],
            "by_grade": [b.to_dict() for b in self.backtest_by_grade],
            "equity_curve": [p.to_dict() for p in self.backtest_curve],
            "insights": list(self.backtest_insights),
        }


# ---------------------------------------------------------------------------
# Report Generator
# ---------------------------------------------------------------------------


class ReportGenerator:
    """
    Builds AnalyticsReport instances from trade and backtest records.

    Usage::

        gen = ReportGenerator(load_config("config/config.json"))
        report = gen.build(
            trades,
            prior_trades=last_week,
            filters=TradeFilters(symbols=["EURUSD"]),
        )
        text = gen.format_text(report)
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None) -> None:
        """
        Initialise ReportGenerator.

        Args:
            config: AnalyticsConfig instance (if None, uses defaults)
        """
        self._config = config or AnalyticsConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        trades: Iterable[Trade],
        backtests: Optional[Iterable[Backtest]] = None,
        prior_trades: Optional[Iterable[Trade]] = None,
        filters: Optional[TradeFilters] = None,
        starting_balance: Optional[float] = None,
        trim: Optional[bool] = None,
        playbook_names: Optional[Mapping[str, str]] = None,
    ) -> AnalyticsReport:
        """
        Build an AnalyticsReport.

        Trades are scoped by filters, reduced to closed trades (no exit
        time, no place on the curve), optionally outlier-trimmed, then
        sorted by close time so the curve builder and streak detector get
        the ordering they require. Every section therefore covers the same
        trade set.

        Args:
            trades: Current-period trades, any order
            backtests: Backtests for the stop/target recommendation and backtest
                performance (scoped by the playbook and symbol filters)
            prior_trades: Prior-period trades for KPI deltas
            filters: Scope filters applied to trades (not to prior_trades)
            starting_balance: Overrides report.starting_balance from config
            trim: Overrides report.trim_outliers from config
            playbook_names: Playbook id -> name lookup for scatter tooltips

        Returns:
            AnalyticsReport dataclass
        """
        engine_cfg = self._config.engine
        report_cfg = self._config.report
        tz = engine_cfg.timezone
        balance = report_cfg.starting_balance if starting_balance is None else starting_balance
        do_trim = report_cfg.trim_outliers if trim is None else trim

        if filters is not None:
            scoped = select_trades_in_scope(trades, filters, tz)
        else:
            scoped = normalize(trades, tz)
        closed = [t for t in scoped if t.close_date is not None]
        if len(closed) < len(scoped):
            module_logger.info(f"Skipping {len(scoped) - len(closed)} open trades (no exit time)")
        scoped = closed

        trim_result: Optional[TrimResult] = None
        if do_trim:
            trim_result = trim_outliers(scoped, engine_cfg.trim_fraction)
            scoped = trim_result.trades

        ordered = sort_by_close_time(scoped)
        module_logger.info(
            f"Building analytics report: {len(ordered)} trades"
            + (f" ({trim_result.trimmed_count} trimmed)" if trim_result else "")
        )

        prior = None
        if prior_trades is not None:
            prior = [t for t in normalize(prior_trades, tz) if t.close_date is not None]
        kpis = compute_kpis(ordered, prior)
        breakdowns = compute_breakdowns(
            ordered,
            sessions=engine_cfg.sessions,
            min_sample=engine_cfg.exploratory_min_sample,
        )
        grades = grade_correlation(ordered)
        curve = build_equity_curve(ordered, balance)

        close_dates = [t.close_date for t in ordered if t.close_date is not None]
        backtest_list = list(backtests) if backtests is not None else None
        if backtest_list is not None and filters is not None:
            backtest_list = [b for b in backtest_list if filters.matches_backtest(b)]

        report = AnalyticsReport(
            generated_at=datetime.now(timezone.utc).isoformat(),
            period_start=min(close_dates) if close_dates else None,
            period_end=max(close_dates) if close_dates else None,
            currency=report_cfg.currency,
            starting_balance=balance,
            kpis=kpis,
            breakdowns=breakdowns,
            equity_curve=curve,
            drawdowns=drawdown_periods(curve),
            streaks=detect_streaks(daily_results(ordered)),
            grades=grades,
            histogram=histogram_r(ordered, bins=report_cfg.histogram_bins),
            hold_bands=hold_time_bands(ordered),
            mae_histogram=histogram_mae(ordered),
            mfe_histogram=histogram_mfe(ordered),
            performance=performance_summary(ordered, balance),
            scatter=scatter_points(ordered, playbook_names),
            recommendation=recommend_from_backtests(backtest_list) if backtest_list is not None else None,
            insights=generate_insights(
                kpis,
                breakdowns,
                min_sample=engine_cfg.insight_min_sample,
                grades=grades,
                max_insights=engine_cfg.max_insights,
            ),
            trim=trim_result,
        )
        if backtest_list is not None:
            report.backtest_kpis = backtest_kpis(backtest_list)
            report.backtest_by_session = backtests_by_session(backtest_list)
            report.backtest_by_symbol = backtests_by_symbol(backtest_list)
            report.backtest_by_grade = backtests_by_grade(backtest_list)
            report.backtest_curve = backtest_equity_curve(backtest_list)
            report.backtest_insights = backtest_insights(
                backtest_list, max_insights=engine_cfg.max_insights
            )

        module_logger.info(
            f"Analytics report built: n={kpis.current.n}, "
            f"net_r={kpis.current.net_r:+.2f}, "
            f"win_rate={kpis.current.win_rate:.1%}, "
            f"{len(report.insights)} insights"
        )
        return report

    def format_text(self, report: AnalyticsReport) -> str:
        """
        Format an AnalyticsReport as a plain-text summary.

        Args:
            report: AnalyticsReport to format

        Returns:
            Formatted multi-line string
        """
        cap = self._config.engine.ratio_cap
        k = report.kpis.current
        ccy = report.currency
        lines: List[str] = []

        period = "no trades"
        if report.period_start and report.period_end:
            period = f"{report.period_start.isoformat()} to {report.period_end.isoformat()}"
        lines.append(f"=== Analytics Report ({period}) ===")
        lines.append("")

        lines.append("--- KPIs ---")
        lines.append(f"Trades:          {k.n:>10d}")
        lines.append(f"Win / Loss / BE: {k.wins:>4d} / {k.losses:<4d} / {k.ties:<4d}")
        if k.n > 0:
            lines.append(f"Win Rate:        {k.win_rate:>10.1%}")
            lines.append(f"Avg Win R:       {k.avg_win_r:>+10.2f} R")
            lines.append(f"Avg Loss R:      {k.avg_loss_r_signed:>+10.2f} R")
            lines.append(f"Expectancy R:    {k.expectancy_r:>+10.3f} R")
            lines.append(f"Net R:           {k.net_r:>+10.2f} R")
            lines.append(f"Profit Factor:   {k.pf_r.display(cap):>10s}")
            lines.append(f"Max DD:          {k.max_dd_r:>10.2f} R")
            lines.append(f"Recovery:        {k.recovery.display(cap):>10s}")
            lines.append(f"Net PnL:         {k.net_pnl:>+10.2f} {ccy}")
        if report.trim:
            lines.append(
                f"Outliers:        {report.trim.trimmed_count} of "
                f"{report.trim.total_count} trimmed"
            )
        lines.append("")

        deltas = report.kpis.deltas
        if deltas:
            lines.append("--- vs Prior Period ---")
            lines.append(f"Trades:          {deltas['n']:>+10.0f}")
            lines.append(f"Win Rate:        {deltas['win_rate'] * 100:>+9.1f}pp")
            lines.append(f"Expectancy R:    {deltas['expectancy_r']:>+10.3f} R")
            lines.append(f"Net R:           {deltas['net_r']:>+10.2f} R")
            lines.append("")

        if report.equity_curve:
            last = report.equity_curve[-1]
            worst = max(report.equity_curve, key=lambda p: p.drawdown_percent)
            lines.append("--- Equity ---")
            lines.append(f"Start:           {report.starting_balance:>10.2f} {ccy}")
            lines.append(f"End:             {last.equity:>10.2f} {ccy}")
            lines.append(f"Max DD:          {worst.drawdown_percent:>9.2f}%")
            lines.append("")

        perf = report.performance
        if k.n > 0:
            lines.append("--- Risk-Adjusted ---")
            lines.append(f"Sharpe:          {perf.sharpe:>10.2f}")
            lines.append(f"Sortino:         {perf.sortino:>10.2f}")
            lines.append(f"Calmar:          {perf.calmar:>10.2f}")
            lines.append(f"Largest Win:     {perf.largest_win_r:>+10.2f} R")
            lines.append(f"Largest Loss:    {perf.largest_loss_r:>+10.2f} R")
            if perf.avg_hold_minutes is not None:
                lines.append(f"Avg Hold:        {perf.avg_hold_minutes:>10.1f} min")
            lines.append("")

        if perf.months:
            lines.append("--- Monthly ---")
            for m in perf.months:
                lines.append(
                    f"  {m.month}  {m.n:>4d}T  WR={m.win_rate:.0%}"
                    f"  R={m.net_r:+.2f}  PnL={m.net_pnl:+.2f} {ccy}"
                )
            lines.append(
                f"  Profitable months: {perf.profitable_months} of {len(perf.months)}"
            )
            lines.append("")

        s = report.streaks
        lines.append("--- Streaks (days) ---")
        lines.append(f"Current:         {s.current_streak:>4d} {s.current_streak_type.value}")
        lines.append(f"Best Win:        {s.best_win_streak:>4d}")
        lines.append(f"Worst Loss:      {s.worst_loss_streak:>4d}")
        lines.append("")

        active_sessions = [m for m in report.breakdowns.by_session if m.has_data]
        if active_sessions:
            lines.append("--- Sessions ---")
            for m in active_sessions:
                flag = " *" if m.exploratory else ""
                lines.append(
                    f"  {m.session:<10s} {m.n:>4d}T  WR={m.win_rate:.0%}"
                    f"  E[R]={m.expectancy_r:+.2f}{flag}"
                )
            lines.append("")

        active_days = [m for m in report.breakdowns.by_dow if m.has_data]
        if active_days:
            lines.append("--- Day of Week ---")
            for m in active_days:
                flag = " *" if m.exploratory else ""
                lines.append(
                    f"  {m.key:<10s} {m.n:>4d}T  WR={m.win_rate:.0%}"
                    f"  E[R]={m.expectancy_r:+.2f}{flag}"
                )
            lines.append("")

        graded = [g for g in report.grades if g.has_data]
        if graded:
            lines.append("--- Setup Grades ---")
            for g in graded:
                lines.append(
                    f"  {g.grade:<4s} {g.n:>4d}T  WR={g.win_rate:.0%}"
                    f"  E[R]={g.expectancy_r:+.2f}  score={g.avg_score:.2f}"
                )
            lines.append("")

        rec = report.recommendation
        if rec:
            lines.append("--- Backtest Recommendation ---")
            lines.append(
                f"SL {rec.sl_pips:.1f} pips / TP {rec.tp_pips:.1f} pips / "
                f"R:R {rec.rr:.2f} (n={rec.sample_size}, {rec.confidence.value} confidence)"
            )
            lines.append("")

        bk = report.backtest_kpis
        if bk is not None and bk.n > 0:
            lines.append("--- Backtest Performance ---")
            lines.append(f"Backtests:       {bk.n:>10d}")
            lines.append(f"Win Rate:        {bk.win_rate:>10.1%}")
            lines.append(f"Expectancy R:    {bk.expectancy_r:>+10.3f} R")
            lines.append(f"Net R:           {bk.net_r:>+10.2f} R")
            lines.append(f"Profit Factor:   {bk.pf_r.display(cap):>10s}")
            lines.append(f"Max DD:          {bk.max_dd_r:>10.2f} R")
            lines.append(f"Sharpe R:        {bk.sharpe_r:>10.2f}")
            for insight in report.backtest_insights:
                lines.append(f"  - {insight}")
            lines.append("")

        if report.insights:
            lines.append("--- Insights ---")
            for insight in report.insights:
                lines.append(f"  - {insight}")
            lines.append("")

        lines.append("* exploratory sample")
        lines.append(f"Generated: {report.generated_at}")
        return "\n".join(lines)
