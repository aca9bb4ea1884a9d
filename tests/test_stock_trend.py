from __future__ import annotations

import math
from datetime import date, timedelta

import pytest

from app.core.forecasting.domain import StockPoint
from app.services import stock_trend
from app.services.stock_trend import fit_stock_trend


DAY0 = date(2025, 1, 1)


def _points(values, xs=None):
    xs = list(range(len(values))) if xs is None else xs
    return [
        StockPoint(day=DAY0 + timedelta(days=x), days_since_start=x, stock_level=float(y))
        for x, y in zip(xs, values)
    ]


def _assert_degenerate(result):
    assert result.coefficients == (0.0, 0.0, 0.0)
    assert result.r_squared == 0.0
    assert result.projected_series == []
    assert result.horizon_value == 0.0
    assert result.days_until_stockout is None
    assert result.is_degenerate


@pytest.mark.parametrize("values", [[], [100], [100, 90]])
def test_fewer_than_three_points_is_degenerate_without_solving(monkeypatch, values):
    def _fail(*args, **kwargs):
        raise AssertionError("solver must not be called")

    monkeypatch.setattr(stock_trend, "_solve_normal_equations", _fail)

    _assert_degenerate(fit_stock_trend(_points(values), horizon_days=30))


@pytest.mark.parametrize("horizon_days", [0, -5])
def test_non_positive_horizon_is_rejected(horizon_days):
    with pytest.raises(ValueError):
        fit_stock_trend(_points([10, 9, 8]), horizon_days=horizon_days)


def test_exact_quadratic_is_recovered():
    xs = list(range(6))
    values = [2 + 3 * x + 0.5 * x * x for x in xs]

    result = fit_stock_trend(_points(values, xs), horizon_days=10)

    c0, c1, c2 = result.coefficients
    assert c0 == pytest.approx(2.0, abs=1e-6)
    assert c1 == pytest.approx(3.0, abs=1e-6)
    assert c2 == pytest.approx(0.5, abs=1e-6)
    assert result.r_squared == pytest.approx(1.0)
    assert result.horizon_value == pytest.approx(159.5)
    assert result.average_daily_trend == pytest.approx((159.5 - 29.5) / 10)
    assert result.days_until_stockout is None


def test_projected_series_covers_history_plus_horizon():
    xs = [0, 2, 5, 9]
    result = fit_stock_trend(_points([40, 38, 30, 25], xs), horizon_days=7)

    projected_xs = [p.days_since_start for p in result.projected_series]
    assert projected_xs == list(range(0, 9 + 7 + 1))
    assert all(p.stock_level >= 0 for p in result.projected_series)


def test_linear_decline_reports_stockout():
    values = [95 - 10 * x for x in range(10)]

    result = fit_stock_trend(_points(values), horizon_days=5)

    assert result.days_until_stockout == 10
    assert result.horizon_value == 0.0
    assert result.average_daily_trend == pytest.approx(-1.0)
    assert result.average_daily_trend < 0
    assert result.r_squared == pytest.approx(1.0)


def test_stockout_is_first_zero_of_projection():
    values = [60, 52, 41, 33, 20, 14]

    result = fit_stock_trend(_points(values), horizon_days=20)

    stockout = result.days_until_stockout
    assert stockout is not None
    by_x = {p.days_since_start: p.stock_level for p in result.projected_series}
    assert by_x[stockout] == 0.0
    assert all(by_x[x] > 0 for x in range(0, stockout))


def test_flat_history_has_zero_r_squared():
    result = fit_stock_trend(_points([50, 50, 50, 50, 50]), horizon_days=10)

    assert result.r_squared == 0.0
    assert result.horizon_value == pytest.approx(50.0)
    assert result.days_until_stockout is None
    assert result.average_daily_trend == pytest.approx(0.0, abs=1e-9)


def test_r_squared_stays_in_bounds_for_noisy_data():
    values = [80, 95, 60, 88, 40, 72, 65, 30, 55]

    result = fit_stock_trend(_points(values), horizon_days=14)

    assert not math.isnan(result.r_squared)
    assert 0.0 <= result.r_squared <= 1.0


def test_singular_system_falls_back_to_degenerate(caplog):
    points = _points([10, 20, 30], xs=[0, 0, 0])

    result = fit_stock_trend(points, horizon_days=5)

    _assert_degenerate(result)
    assert "Singular normal equations" in caplog.text


def test_growing_stock_has_positive_trend():
    values = [10, 14, 19, 22, 27, 31]

    result = fit_stock_trend(_points(values), horizon_days=30)

    assert result.average_daily_trend > 0
    assert result.days_until_stockout is None
