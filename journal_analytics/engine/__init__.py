"""Analytics engine module"""

from journal_analytics.engine.normalizer import normalize, normalize_trade, r_multiple, sort_by_close_time
from journal_analytics.engine.outliers import TrimResult, trim_outliers
from journal_analytics.engine.kpis import (
    KPIs,
    KPIComparison,
    compute_kpis,
    kpis_r,
    kpi_deltas,
    prior_period_range
)
from journal_analytics.engine.breakdowns import (
    Breakdowns,
    DOWMetrics,
    HourMetrics,
    SessionMetrics,
    SymbolMetrics,
    breakdown_by_dow,
    breakdown_by_hour_session,
    breakdown_by_session,
    breakdown_by_symbol,
    compute_breakdowns
)
from journal_analytics.engine.equity import (
    DrawdownPeriod,
    EquityPoint,
    build_equity_curve,
    drawdown_periods,
    max_drawdown_r
)
from journal_analytics.engine.streaks import StreakState, daily_results, detect_streaks
from journal_analytics.engine.grades import PlaybookGradeMetrics, grade_correlation
from journal_analytics.engine.backtests import RecommendedMetrics, recommend_from_backtests
from journal_analytics.engine.scatter import ScatterPoint, scatter_points
from journal_analytics.engine.insights import generate_insights
from journal_analytics.engine.distributions import (
    HistogramBucket,
    histogram_mae,
    histogram_mfe,
    histogram_r,
    hold_time_bands
)
from journal_analytics.engine.performance import (
    MonthlyPerformance,
    PerformanceSummary,
    monthly_performance,
    performance_summary
)
from journal_analytics.engine.backtest_performance import (
    BacktestBucket,
    BacktestEquityPoint,
    BacktestKPIs,
    backtest_equity_curve,
    backtest_insights,
    backtest_kpis,
    backtests_by_grade,
    backtests_by_session,
    backtests_by_symbol
)
from journal_analytics.engine.filters import TradeFilters, select_trades_in_scope
from journal_analytics.engine.currency import convert_amount

__all__ = [
    # Normalization
    "normalize",
    "normalize_trade",
    "r_multiple",
    "sort_by_close_time",
    # Outliers
    "TrimResult",
    "trim_outliers",
    # KPIs
    "KPIs",
    "KPIComparison",
    "compute_kpis",
    "kpis_r",
    "kpi_deltas",
    "prior_period_range",
    # Breakdowns
    "Breakdowns",
    "DOWMetrics",
    "HourMetrics",
    "SessionMetrics",
    "SymbolMetrics",
    "breakdown_by_dow",
    "breakdown_by_hour_session",
    "breakdown_by_session",
    "breakdown_by_symbol",
    "compute_breakdowns",
    # Equity
    "DrawdownPeriod",
    "EquityPoint",
    "build_equity_curve",
    "drawdown_periods",
    "max_drawdown_r",
    # Streaks
    "StreakState",
    "daily_results",
    "detect_streaks",
    # Grades and backtests
    "PlaybookGradeMetrics",
    "grade_correlation",
    "RecommendedMetrics",
    "recommend_from_backtests",
    # Projections
    "ScatterPoint",
    "scatter_points",
    "HistogramBucket",
    "histogram_r",
    "histogram_mae",
    "histogram_mfe",
    "hold_time_bands",
    # Performance
    "MonthlyPerformance",
    "PerformanceSummary",
    "monthly_performance",
    "performance_summary",
    # Backtest performance
    "BacktestBucket",
    "BacktestEquityPoint",
    "BacktestKPIs",
    "backtest_equity_curve",
    "backtest_insights",
    "backtest_kpis",
    "backtests_by_grade",
    "backtests_by_session",
    "backtests_by_symbol",
    # Insights
    "generate_insights",
    # Scope and currency
    "TradeFilters",
    "select_trades_in_scope",
    "convert_amount",
]
