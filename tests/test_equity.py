"""Unit tests for the equity and drawdown curve builder"""

from datetime import date

import pytest

from journal_analytics.engine.equity import (
    EquityPoint,
    build_equity_curve,
    drawdown_periods,
    max_drawdown_r,
)
from journal_analytics.engine.kpis import kpis_r
from tests.fixtures.trade_factory import make_series, make_trade


def _point(day: int, equity: float, drawdown: float = 0.0) -> EquityPoint:
    return EquityPoint(
        date=date(2024, 3, 1 + day),
        cumulative_r=0.0,
        equity=equity,
        drawdown=drawdown,
        drawdown_percent=drawdown / 100.0,
        trade_count=day + 1,
    )


class TestBuildEquityCurve:
    """Equity curve construction"""

    def test_one_point_per_close_date(self):
        trades = [
            make_trade(r=1.0, day=0, hour=9),
            make_trade(r=-0.5, day=0, hour=14),
            make_trade(r=2.0, day=2),
        ]
        curve = build_equity_curve(trades, starting_balance=10_000)

        assert [p.date for p in curve] == [date(2024, 3, 11), date(2024, 3, 13)]
        assert curve[0].cumulative_r == pytest.approx(0.5)
        assert curve[0].equity == pytest.approx(10_050)
        assert curve[0].trade_count == 2
        assert curve[1].trade_count == 3

    def test_final_cumulative_r_matches_net_r(self):
        trades = make_series([1.0, -2.0, 0.5, 3.0, -1.0])
        curve = build_equity_curve(trades, starting_balance=5_000)
        assert curve[-1].cumulative_r == pytest.approx(kpis_r(trades).net_r)

    def test_drawdown_from_running_peak(self):
        trades = make_series([2.0, -1.0])
        curve = build_equity_curve(trades, starting_balance=10_000)

        assert curve[0].drawdown == 0.0
        assert curve[1].equity == pytest.approx(10_100)
        assert curve[1].drawdown == pytest.approx(100)
        assert curve[1].drawdown_percent == pytest.approx(100 / 10_200 * 100)

    def test_starting_r_offset(self):
        curve = build_equity_curve(make_series([1.0]), starting_balance=0, starting_r=5.0)
        assert curve[0].cumulative_r == pytest.approx(6.0)
        assert curve[0].drawdown_percent == 0.0

    def test_trades_without_r_move_equity_only(self):
        trades = [make_trade(r=1.0, day=0), make_trade(r=None, day=1, pnl=40.0)]
        curve = build_equity_curve(trades, starting_balance=1_000)

        assert curve[1].cumulative_r == pytest.approx(1.0)
        assert curve[1].equity == pytest.approx(1_140)

    def test_empty(self):
        assert build_equity_curve([], starting_balance=10_000) == []

    def test_to_dict(self):
        point = build_equity_curve(make_series([1.0]), starting_balance=100)[0].to_dict()
        assert point["date"] == "2024-03-11"
        assert point["equity"] == pytest.approx(200.0)


class TestMaxDrawdownR:
    """Cumulative-R drawdown"""

    def test_peak_to_trough(self):
        assert max_drawdown_r(make_series([1.0, 2.0, -1.5, -1.0, 4.0])) == pytest.approx(2.5)

    def test_opening_loss_counts(self):
        assert max_drawdown_r(make_series([-2.0, 1.0])) == pytest.approx(2.0)

    def test_no_drawdown(self):
        assert max_drawdown_r(make_series([1.0, 1.0])) == 0.0


class TestDrawdownPeriods:
    """Drawdown episode detection"""

    def test_recovered_and_open_episodes(self):
        points = [
            _point(0, 100),
            _point(1, 90, 10),
            _point(2, 80, 20),
            _point(3, 100),
            _point(4, 95, 5),
        ]
        periods = drawdown_periods(points)

        assert len(periods) == 2
        first, second = periods
        assert first.start == date(2024, 3, 2)
        assert first.end == date(2024, 3, 4)
        assert first.depth == pytest.approx(20)
        assert first.duration_days == 2
        assert first.recovered
        assert second.start == date(2024, 3, 5)
        assert not second.recovered
        assert second.duration_days == 0

    def test_no_drawdown(self):
        assert drawdown_periods([_point(0, 100), _point(1, 110)]) == []
        assert drawdown_periods([]) == []
