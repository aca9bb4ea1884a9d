from __future__ import annotations

from datetime import date
from typing import Iterable

from app.core.forecasting.domain import (
    MovementRecord,
    PredictionReport,
    PredictionResult,
    StockPrediction,
)
from app.services.stock_reconstruction import reconstruct_stock_history
from app.services.stock_trend import fit_stock_trend


TREND_GROWING = "growing"
TREND_SHRINKING = "shrinking"
TREND_STABLE = "stable"

NO_STOCKOUT_MESSAGE = "No stockout projected"


def trend_label(average_daily_trend: float) -> str:
    if average_daily_trend > 0:
        return TREND_GROWING
    if average_daily_trend < 0:
        return TREND_SHRINKING
    return TREND_STABLE


def stockout_message(days_until_stockout: int | None) -> str:
    if days_until_stockout is None:
        return NO_STOCKOUT_MESSAGE
    return f"Stockout in {days_until_stockout} days"


def build_prediction_report(result: PredictionResult) -> PredictionReport:
    return PredictionReport(
        trend_label=trend_label(result.average_daily_trend),
        precision_percent=round(result.r_squared * 100, 1),
        stockout_message=stockout_message(result.days_until_stockout),
        has_enough_data=not result.is_degenerate,
    )


def predict_stock(
    movements: Iterable[MovementRecord],
    live_stock: float,
    horizon_days: int,
    today: date | None = None,
) -> StockPrediction:
    """Reconstruct, fit and report in one pass. Holds no state between calls."""

    history = reconstruct_stock_history(movements, live_stock=live_stock, today=today)
    result = fit_stock_trend(history, horizon_days=horizon_days)
    return StockPrediction(
        history=history,
        result=result,
        report=build_prediction_report(result),
        horizon_days=horizon_days,
    )
