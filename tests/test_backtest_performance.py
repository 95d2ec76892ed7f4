"""
Tests for backtest performance analytics

Covers:
- backtest_kpis() values, entry-date ordering and empty input
- Session / symbol / grade buckets
- Cumulative backtest R curve
- backtest_insights() thresholds and wording
"""

import json
import math
from datetime import date

import pytest

from journal_analytics.engine.backtest_performance import (
    backtest_equity_curve,
    backtest_insights,
    backtest_kpis,
    backtests_by_grade,
    backtests_by_session,
    backtests_by_symbol,
)
from tests.fixtures.trade_factory import make_backtest


# ---------------------------------------------------------------------------
# Helpers / fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def four_results():
    """Four dated results supplied out of entry-date order, plus two without a result"""
    d1 = make_backtest(result_r=2.0, entry_date=date(2024, 3, 11), session="London",
                       setup_grade="A+", setup_score=0.9)
    d2 = make_backtest(result_r=-1.0, entry_date=date(2024, 3, 12), session="London",
                       setup_grade="a", setup_score=0.7)
    d3 = make_backtest(result_r=-1.0, entry_date=date(2024, 3, 13), session="NY",
                       symbol="GBPUSD", setup_grade="B")
    d4 = make_backtest(result_r=1.0, entry_date=date(2024, 3, 14), session=None,
                       symbol="GBPUSD")
    pending = make_backtest(result_r=None, entry_date=date(2024, 3, 10))
    broken = make_backtest(result_r=math.nan, entry_date=date(2024, 3, 10))
    return [d3, pending, d1, d4, broken, d2]


def winning_backtests(count, **overrides):
    fields = dict(result_r=1.0, session="London", setup_grade="A+")
    fields.update(overrides)
    return [make_backtest(entry_date=date(2024, 3, 1 + i), **fields) for i in range(count)]


class TestBacktestKPIs:
    """backtest_kpis()"""

    def test_values(self, four_results):
        k = backtest_kpis(four_results)

        assert k.n == 4
        assert (k.wins, k.losses, k.ties) == (2, 2, 0)
        assert k.win_rate == pytest.approx(0.5)
        assert k.avg_win_r == pytest.approx(1.5)
        assert k.avg_loss_r == pytest.approx(1.0)
        assert k.pf_r.as_number() == pytest.approx(1.5)
        assert k.net_r == pytest.approx(1.0)
        assert k.expectancy_r * k.n == pytest.approx(k.net_r)

    def test_drawdown_follows_entry_date(self, four_results):
        # Entry-date order +2, -1, -1, +1 peaks at 2 and bottoms at 0;
        # input order would only give a 1R drawdown
        k = backtest_kpis(four_results)

        assert k.max_dd_r == pytest.approx(2.0)
        assert k.recovery.as_number() == pytest.approx(0.5)

    def test_sharpe(self, four_results):
        results = [2.0, -1.0, -1.0, 1.0]
        mean = sum(results) / 4
        sd = math.sqrt(sum((r - mean) ** 2 for r in results) / 4)

        assert backtest_kpis(four_results).sharpe_r == pytest.approx(mean / sd)

    def test_zero_result_is_a_tie(self):
        k = backtest_kpis([make_backtest(result_r=0.0), make_backtest(result_r=1.0)])

        assert k.ties == 1
        assert k.losses == 0
        assert k.win_rate == pytest.approx(0.5)

    def test_no_drawdown_is_unbounded_recovery(self):
        k = backtest_kpis(winning_backtests(3))

        assert k.max_dd_r == 0.0
        assert k.recovery.unbounded
        assert k.to_dict()["recovery"] == 999.0

    def test_empty(self):
        k = backtest_kpis([make_backtest(result_r=None)])

        assert k.n == 0
        assert k.net_r == 0.0
        assert k.sharpe_r == 0.0

    def test_json_safe(self, four_results):
        data = backtest_kpis(four_results).to_dict()

        json.dumps(data, allow_nan=False)
        assert data["avg_loss_r"] == pytest.approx(-1.0)


class TestBacktestBuckets:
    """Session / symbol / grade grouping"""

    def test_by_session(self, four_results):
        buckets = backtests_by_session(four_results)

        assert [b.key for b in buckets] == ["London", "NY", "Unknown"]
        london = buckets[0]
        assert london.n == 2
        assert london.win_rate == pytest.approx(0.5)
        assert london.net_r == pytest.approx(1.0)
        assert london.avg_r == pytest.approx(0.5)
        assert london.avg_score == pytest.approx(0.8)
        assert buckets[1].avg_score is None

    def test_by_symbol(self, four_results):
        buckets = {b.key: b for b in backtests_by_symbol(four_results)}

        assert set(buckets) == {"EURUSD", "GBPUSD"}
        assert buckets["EURUSD"].net_r == pytest.approx(1.0)
        assert buckets["GBPUSD"].net_r == pytest.approx(0.0)

    def test_by_grade_always_six(self, four_results):
        buckets = backtests_by_grade(four_results)

        assert [b.key for b in buckets] == ["A+", "A", "B", "C", "D", "F"]
        assert [b.n for b in buckets] == [1, 1, 1, 0, 0, 0]
        assert buckets[1].net_r == pytest.approx(-1.0)

        empty = buckets[-1].to_dict()
        assert empty["has_data"] is False
        assert empty["expectancy_r"] is None


class TestBacktestEquityCurve:
    """backtest_equity_curve()"""

    def test_curve(self, four_results):
        points = backtest_equity_curve(four_results)

        assert [p.date.day for p in points] == [11, 12, 13, 14]
        assert [p.cumulative_r for p in points] == pytest.approx([2.0, 1.0, 0.0, 1.0])
        assert points[-1].cumulative_r == pytest.approx(backtest_kpis(four_results).net_r)

    def test_undated_backtests_come_last(self):
        undated = make_backtest(result_r=3.0)
        dated = make_backtest(result_r=-1.0, entry_date=date(2024, 3, 11))
        points = backtest_equity_curve([undated, dated])

        assert [p.backtest_id for p in points] == [dated.backtest_id, undated.backtest_id]
        assert points[-1].to_dict()["date"] is None

    def test_empty(self):
        assert backtest_equity_curve([]) == []


class TestBacktestInsights:
    """backtest_insights()"""

    def test_all_rules(self):
        insights = backtest_insights(winning_backtests(10))

        assert insights == [
            "London session produced +1.00R expectancy with 100% win rate (n=10)",
            "EURUSD shows strongest edge: +1.00R expectancy (n=10)",
            "A+/A grade setups deliver +1.00R expectancy in backtests (n=10); "
            "stick to high-quality setups",
        ]

    def test_below_sample_only_grade_rule_fires(self):
        insights = backtest_insights(winning_backtests(9))

        assert len(insights) == 1
        assert insights[0].startswith("A+/A grade setups")

    def test_unknown_session_is_not_reported(self):
        insights = backtest_insights(winning_backtests(10, session=None))
        assert not any("session" in i for i in insights)

    def test_small_grade_is_left_out(self):
        backtests = winning_backtests(5) + winning_backtests(4, setup_grade="A", result_r=-3.0)
        insights = backtest_insights(backtests, min_sample=100)

        # A has n=4 < 5, so only A+ is pooled
        assert insights == [
            "A+/A grade setups deliver +1.00R expectancy in backtests (n=5); "
            "stick to high-quality setups"
        ]

    def test_negative_expectancy_is_silent(self):
        assert backtest_insights(winning_backtests(10, result_r=-1.0)) == []

    def test_max_insights(self):
        assert len(backtest_insights(winning_backtests(10), max_insights=1)) == 1
