from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class StockHistoryPoint(BaseModel):
    day: date
    days_since_start: int
    stock_level: float


class StockHistoryResponse(BaseModel):
    product_id: int
    product_code: str
    live_stock: float
    points: list[StockHistoryPoint]


class TrendCoefficients(BaseModel):
    intercept: float
    linear: float
    quadratic: float


class StockPredictionResponse(BaseModel):
    product_id: int
    product_code: str
    product_name: str | None = None

    live_stock: float
    critical_quantity: float
    below_critical: bool

    horizon_days: int
    start_date: date | None = None

    coefficients: TrendCoefficients
    r_squared: float
    horizon_value: float
    days_until_stockout: int | None = None
    stockout_date: date | None = None
    average_daily_trend: float

    trend_label: str
    precision_percent: float
    stockout_message: str
    has_enough_data: bool

    history: list[StockHistoryPoint]
    projected_series: list[StockHistoryPoint]


class StockoutRiskItem(BaseModel):
    product_id: int
    product_code: str
    product_name: str | None = None
    live_stock: float
    days_until_stockout: int
    stockout_date: date
    precision_percent: float


class StockoutRiskResponse(BaseModel):
    horizon_days: int
    items: list[StockoutRiskItem]
