"""Unit tests for the scatter projection and insight generator"""

from datetime import date

import pytest

from journal_analytics.engine.breakdowns import compute_breakdowns
from journal_analytics.engine.grades import grade_correlation
from journal_analytics.engine.insights import generate_insights
from journal_analytics.engine.kpis import compute_kpis, kpis_r
from journal_analytics.engine.scatter import scatter_points
from tests.fixtures.trade_factory import make_trade


class TestScatterPoints:
    """Hold time vs R projection"""

    def test_points(self):
        trades = [
            make_trade(r=1.5, hold=45, symbol="GBPUSD", playbook_id="pb-1"),
            make_trade(r=-1.0, hold=10),
        ]
        points = scatter_points(trades, playbook_names={"pb-1": "London Breakout"})

        assert len(points) == 2
        assert points[0].r == pytest.approx(1.5)
        assert points[0].hold_minutes == 45
        assert points[0].date == date(2024, 3, 11)
        assert points[0].symbol == "GBPUSD"
        assert points[0].playbook_name == "London Breakout"
        assert points[1].playbook_name is None

    def test_excludes_missing_r_or_hold(self):
        trades = [
            make_trade(r=None),
            make_trade(hold=None),
            make_trade(r=0.5, hold=5),
        ]
        points = scatter_points(trades)

        assert len(points) == 1
        assert points[0].to_dict()["hold_minutes"] == 5


def _insight_inputs(trades):
    return compute_kpis(trades), compute_breakdowns(trades)


class TestGenerateInsights:
    """Threshold-gated natural-language insights"""

    def test_best_session_day_and_symbol(self):
        trades = [make_trade(r=1.0, day=0, session="London") for _ in range(15)]
        kpis, breakdowns = _insight_inputs(trades)

        insights = generate_insights(kpis, breakdowns)

        assert insights == [
            "London session shows strongest expectancy at +1.00R (n=15)",
            "Mon is your best day at +1.00R expectancy (n=15)",
            "EURUSD shows strongest edge: +1.00R expectancy (n=15)",
        ]

    def test_below_threshold_is_suppressed(self):
        trades = [make_trade(r=1.0, day=0) for _ in range(14)]
        kpis, breakdowns = _insight_inputs(trades)
        assert generate_insights(kpis, breakdowns) == []

    def test_worst_day(self):
        trades = [make_trade(r=-0.5, day=1, session=None) for _ in range(20)]
        kpis, breakdowns = _insight_inputs(trades)

        insights = generate_insights(kpis, breakdowns, max_insights=5)

        assert insights[0] == "Avoid Tue (-0.50R expectancy, n=20)"
        assert insights[-1] == "Overall expectancy is -0.50R over 20 trades; review your losing setups"

    def test_max_insights_cap(self):
        trades = [make_trade(r=1.0, day=0) for _ in range(15)]
        kpis, breakdowns = _insight_inputs(trades)

        assert len(generate_insights(kpis, breakdowns, max_insights=1)) == 1
        assert generate_insights(kpis, breakdowns, max_insights=0) == []

    def test_custom_min_sample(self):
        trades = [make_trade(r=1.0, day=0) for _ in range(5)]
        kpis, breakdowns = _insight_inputs(trades)
        assert len(generate_insights(kpis, breakdowns, min_sample=5)) == 3

    def test_top_grades(self):
        trades = [make_trade(r=2.0, setup_grade="A+", session=None, symbol="") for _ in range(8)]
        trades += [make_trade(r=1.0, setup_grade="A", session=None, symbol="") for _ in range(8)]
        breakdowns = compute_breakdowns(trades)

        insights = generate_insights(
            kpis_r(trades),
            breakdowns,
            grades=grade_correlation(trades),
            max_insights=5,
        )

        assert (
            "A+/A grade setups deliver +1.50R expectancy (n=16); "
            "stick to high-quality setups"
        ) in insights

    def test_top_grades_weighted_by_r_defined_trades(self):
        # 4 of the 8 A+ trades have no risk, so no R
        trades = [make_trade(r=2.0, setup_grade="A+", session=None, symbol="") for _ in range(4)]
        trades += [
            make_trade(r=None, risk=None, pnl=50.0, setup_grade="A+", session=None, symbol="")
            for _ in range(4)
        ]
        trades += [make_trade(r=1.0, setup_grade="A", session=None, symbol="") for _ in range(8)]
        grades = grade_correlation(trades)

        a_plus = next(g for g in grades if g.grade == "A+")
        assert a_plus.n == 8
        assert a_plus.r_count == 4
        assert a_plus.net_r == pytest.approx(8.0)
        assert a_plus.expectancy_r * a_plus.r_count == pytest.approx(a_plus.net_r)

        insights = generate_insights(
            kpis_r(trades), compute_breakdowns(trades), grades=grades, max_insights=5
        )

        # (8R + 8R) / 12 R-defined trades, not (2R * 8 + 1R * 8) / 16
        assert (
            "A+/A grade setups deliver +1.33R expectancy (n=16); "
            "stick to high-quality setups"
        ) in insights
