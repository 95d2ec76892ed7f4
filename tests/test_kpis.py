"""Unit tests for the KPI aggregator"""

import json
import math
import random
from datetime import date

import pytest

from journal_analytics.core.constants import UNBOUNDED_RATIO_VALUE
from journal_analytics.core.types import Trade
from journal_analytics.engine.kpis import (
    KPIs,
    compute_kpis,
    kpi_deltas,
    kpis_r,
    prior_period_range,
)
from tests.fixtures.trade_factory import make_series, make_trade


@pytest.fixture
def mixed_trades():
    """+2R, -1R, +1R on consecutive days"""
    return make_series([2.0, -1.0, 1.0])


class TestKpisR:
    """KPI reduction"""

    def test_mixed_trades(self, mixed_trades):
        k = kpis_r(mixed_trades)

        assert k.n == 3
        assert k.wins == 2
        assert k.losses == 1
        assert k.ties == 0
        assert k.win_rate == pytest.approx(2 / 3)
        assert k.net_r == pytest.approx(2.0)
        assert k.avg_win_r == pytest.approx(1.5)
        assert k.avg_loss_r == pytest.approx(1.0)
        assert k.avg_loss_r_signed == pytest.approx(-1.0)
        assert k.pf_r.value == pytest.approx(3.0)
        assert not k.pf_r.unbounded
        assert k.expectancy_r == pytest.approx(2 / 3)
        assert k.max_dd_r == pytest.approx(1.0)
        assert k.recovery.value == pytest.approx(2.0)
        assert k.net_pnl == pytest.approx(200.0)

    def test_expectancy_times_count_equals_net_r(self):
        trades = make_series([2.0, -1.0, 0.0, 0.5, -0.25, 3.0, -1.0])
        k = kpis_r(trades)
        assert k.expectancy_r * k.r_count == pytest.approx(k.net_r)

    def test_outcome_counts_sum_to_n(self):
        trades = make_series([1.0, 0.0, -1.0, 0.0, 2.0])
        k = kpis_r(trades)
        assert k.ties == 2
        assert k.wins + k.losses + k.ties == k.n

    def test_all_wins_is_unbounded(self):
        k = kpis_r(make_series([1.0, 2.0, 0.5]))

        assert k.pf_r.unbounded
        assert k.pf_r.as_number() == UNBOUNDED_RATIO_VALUE
        assert k.max_dd_r == 0.0
        assert k.recovery.unbounded

        data = k.to_dict()
        assert data["pf_r"] == UNBOUNDED_RATIO_VALUE
        assert data["pf_r_unbounded"] is True
        assert data["recovery_unbounded"] is True

    def test_all_losses(self):
        k = kpis_r(make_series([-1.0, -1.0]))

        assert k.pf_r.value == 0.0
        assert not k.pf_r.unbounded
        assert k.max_dd_r == pytest.approx(2.0)
        assert k.recovery.value == pytest.approx(-1.0)

    def test_empty_input(self):
        k = kpis_r([])
        assert k == KPIs()
        # JSON-safe: no NaN or inf
        json.dumps(k.to_dict(), allow_nan=False)

    def test_trade_without_risk_counts_in_n_only(self):
        trades = make_series([1.0, -1.0]) + [
            Trade(trade_id="x", symbol="EURUSD", pnl=50.0)
        ]
        k = kpis_r(trades)

        assert k.n == 3
        assert k.wins == 2
        assert k.r_count == 2
        assert k.net_r == pytest.approx(0.0)

    def test_nan_pnl_never_reaches_totals(self):
        trades = make_series([1.0]) + [make_trade(r=None, pnl=math.nan, risk=100.0, day=1)]
        k = kpis_r(trades)

        assert k.n == 2
        assert k.losses == 0
        assert k.ties == 1
        assert k.r_count == 1
        assert k.net_r == pytest.approx(1.0)
        assert k.net_pnl == pytest.approx(100.0)
        json.dumps(k.to_dict(), allow_nan=False)

    def test_drawdown_starts_from_zero_baseline(self):
        k = kpis_r(make_series([-1.0, 3.0]))
        assert k.max_dd_r == pytest.approx(1.0)

    def test_order_independent(self):
        trades = make_series([1.0, -2.0, 0.5, -1.0, 3.0, -0.5, 2.0])
        shuffled = list(trades)
        random.Random(7).shuffle(shuffled)

        assert kpis_r(shuffled) == kpis_r(trades)


class TestComputeKpis:
    """Current vs prior comparison"""

    def test_without_prior(self, mixed_trades):
        result = compute_kpis(mixed_trades)
        assert result.prior is None
        assert result.deltas == {}
        assert result.to_dict()["prior"] is None

    def test_with_prior(self, mixed_trades):
        prior = make_series([-1.0, 1.0], start_day=-7)
        result = compute_kpis(mixed_trades, prior_trades=prior)

        assert result.prior.n == 2
        assert result.deltas["net_r"] == pytest.approx(2.0)
        assert result.deltas["n"] == pytest.approx(1.0)

    def test_unbounded_ratios_are_not_diffed(self):
        current = kpis_r(make_series([1.0, 1.0]))
        prior = kpis_r(make_series([1.0, -1.0]))
        deltas = kpi_deltas(current, prior)

        assert "pf_r" not in deltas
        assert deltas["win_rate"] == pytest.approx(0.5)


class TestPriorPeriodRange:
    """Same-length preceding window"""

    def test_week(self):
        assert prior_period_range(date(2024, 3, 11), date(2024, 3, 17)) == (
            date(2024, 3, 4),
            date(2024, 3, 10),
        )

    def test_single_day(self):
        assert prior_period_range(date(2024, 3, 1), date(2024, 3, 1)) == (
            date(2024, 2, 29),
            date(2024, 2, 29),
        )
