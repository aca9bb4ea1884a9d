from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from app.core.forecasting.domain import PredictionResult, ProjectedPoint, StockPoint


logger = logging.getLogger(__name__)


POLYNOMIAL_DEGREE = 2
MIN_POINTS = POLYNOMIAL_DEGREE + 1


def degenerate_result() -> PredictionResult:
    return PredictionResult(
        coefficients=(0.0, 0.0, 0.0),
        r_squared=0.0,
        projected_series=[],
        horizon_value=0.0,
        days_until_stockout=None,
        average_daily_trend=0.0,
    )


def _evaluate(coefficients: np.ndarray, x: np.ndarray) -> np.ndarray:
    c0, c1, c2 = coefficients
    return c0 + c1 * x + c2 * x * x


def _solve_normal_equations(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    design = np.column_stack([np.ones_like(x), x, x * x])
    xtx = design.T @ design
    xty = design.T @ y
    return np.linalg.solve(xtx, xty)


def _r_squared(y: np.ndarray, fitted: np.ndarray) -> float:
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    if ss_tot == 0:
        return 0.0
    ss_res = float(np.sum((y - fitted) ** 2))
    value = 1.0 - ss_res / ss_tot
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def fit_stock_trend(points: Sequence[StockPoint], horizon_days: int) -> PredictionResult:
    """Fit a degree-2 least-squares trend and project it horizon_days past the last point.

    Fewer than three points give the degenerate result without touching the solver.
    """

    if horizon_days < 1:
        raise ValueError("horizon_days must be a positive integer")

    if len(points) < MIN_POINTS:
        return degenerate_result()

    ordered = sorted(points, key=lambda p: p.days_since_start)
    x = np.array([p.days_since_start for p in ordered], dtype=np.float64)
    y = np.array([p.stock_level for p in ordered], dtype=np.float64)

    try:
        coefficients = _solve_normal_equations(x, y)
    except np.linalg.LinAlgError:
        logger.warning(
            "Singular normal equations for %d points; returning degenerate trend",
            len(ordered),
        )
        return degenerate_result()

    if not np.all(np.isfinite(coefficients)):
        logger.warning("Non-finite trend coefficients %s; returning degenerate trend", coefficients)
        return degenerate_result()

    max_x = int(x.max())
    last_x = max_x + horizon_days
    projected_x = np.arange(0, last_x + 1, dtype=np.float64)
    projected_y = np.maximum(_evaluate(coefficients, projected_x), 0.0)

    projected_series = [
        ProjectedPoint(days_since_start=int(px), stock_level=float(py))
        for px, py in zip(projected_x, projected_y)
    ]

    days_until_stockout = None
    for point in projected_series:
        if point.stock_level == 0.0:
            days_until_stockout = point.days_since_start
            break

    horizon_value = projected_series[-1].stock_level
    last_observed = float(y[-1])

    return PredictionResult(
        coefficients=(float(coefficients[0]), float(coefficients[1]), float(coefficients[2])),
        r_squared=_r_squared(y, _evaluate(coefficients, x)),
        projected_series=projected_series,
        horizon_value=horizon_value,
        days_until_stockout=days_until_stockout,
        average_daily_trend=(horizon_value - last_observed) / horizon_days,
    )
