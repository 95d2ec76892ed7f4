"""Unit tests for outlier trimming"""

import pytest

from journal_analytics.engine.outliers import trim_outliers
from tests.fixtures.trade_factory import make_series, make_trade


@pytest.fixture
def forty_trades():
    """40 R-defined trades with one extreme on each tail"""
    values = [-20.0] + [float(i % 5) - 1.0 for i in range(38)] + [50.0]
    return make_series(values)


class TestTrimOutliers:
    """Tail trimming on R multiple"""

    def test_zero_fraction_returns_input(self, forty_trades):
        result = trim_outliers(forty_trades, fraction=0.0)

        assert result.trimmed_count == 0
        assert result.total_count == 40
        assert [t.trade for t in result.trades] == forty_trades

    def test_drops_ceil_per_tail(self, forty_trades):
        # ceil(40 * 0.025) = 1 per tail
        result = trim_outliers(forty_trades, fraction=0.025)

        assert result.trimmed_count == 2
        rs = [t.r for t in result.trades]
        assert -20.0 not in rs
        assert 50.0 not in rs
        assert len(rs) == 38

    def test_retained_trades_keep_input_order(self, forty_trades):
        result = trim_outliers(forty_trades, fraction=0.025)
        assert [t.trade for t in result.trades] == forty_trades[1:-1]

    def test_zero_fraction_after_trim_is_idempotent(self, forty_trades):
        first = trim_outliers(forty_trades, fraction=0.025)
        again = trim_outliers(first.trades, fraction=0.0)

        assert again.trades == first.trades
        assert again.trimmed_count == 0
        assert again.total_count == 38

    def test_small_fraction_still_trims_one(self):
        # ceil(10 * 0.01) = 1
        trades = make_series([float(i) for i in range(10)])
        result = trim_outliers(trades, fraction=0.01)
        assert result.trimmed_count == 2

    def test_trades_without_r_are_kept(self):
        trades = make_series([-5.0, 0.5, 1.0, 5.0]) + [make_trade(r=None)]
        result = trim_outliers(trades, fraction=0.25)

        assert result.trimmed_count == 2
        assert any(t.r is None for t in result.trades)
        assert sorted(t.r for t in result.trades if t.r is not None) == [0.5, 1.0]

    def test_always_keeps_one_r_trade(self):
        single = trim_outliers(make_series([3.0]), fraction=0.4)
        assert single.trimmed_count == 0
        assert len(single.trades) == 1

        # ceil(3 * 0.4) = 2 per tail would empty the set; capped at 1
        triple = trim_outliers(make_series([-1.0, 0.2, 4.0]), fraction=0.4)
        assert [t.r for t in triple.trades] == [pytest.approx(0.2)]

    def test_empty_input(self):
        result = trim_outliers([], fraction=0.1)
        assert result.trades == []
        assert result.to_dict() == {"trimmed_count": 0, "total_count": 0, "retained_count": 0}

    @pytest.mark.parametrize("fraction", [-0.1, 0.5, 0.9])
    def test_invalid_fraction_raises(self, fraction):
        with pytest.raises(ValueError):
            trim_outliers(make_series([1.0]), fraction=fraction)
