from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.core.forecasting.domain import StockPrediction
from app.models.models import Product
from app.schemas.stock_forecast import (
    StockHistoryPoint,
    StockHistoryResponse,
    StockoutRiskItem,
    StockPredictionResponse,
    TrendCoefficients,
)
from app.services.movement_ledger import get_product, list_product_movements
from app.services.stock_prediction import predict_stock
from app.services.stock_reconstruction import reconstruct_stock_history


def _offset_date(start: date | None, days: int | None) -> date | None:
    if start is None or days is None:
        return None
    return start + timedelta(days=days)


def build_product_stock_history(
    db: Session,
    product_id: int,
    today: date | None = None,
) -> StockHistoryResponse:
    product = get_product(db, product_id)
    movements = list_product_movements(db, product_id)
    history = reconstruct_stock_history(movements, live_stock=product.quantity, today=today)

    return StockHistoryResponse(
        product_id=product.id,
        product_code=product.code,
        live_stock=product.quantity,
        points=[
            StockHistoryPoint(
                day=p.day,
                days_since_start=p.days_since_start,
                stock_level=p.stock_level,
            )
            for p in history
        ],
    )


def _predict_for_product(
    db: Session,
    product: Product,
    horizon_days: int,
    today: date | None,
) -> StockPrediction:
    movements = list_product_movements(db, product.id)
    return predict_stock(
        movements,
        live_stock=product.quantity,
        horizon_days=horizon_days,
        today=today,
    )


def build_product_stock_prediction(
    db: Session,
    product_id: int,
    horizon_days: int,
    today: date | None = None,
) -> StockPredictionResponse:
    """Project a product's stock level horizon_days past its last recorded day."""

    product = get_product(db, product_id)
    prediction = _predict_for_product(db, product, horizon_days, today)
    result = prediction.result
    report = prediction.report
    start = prediction.start_date
    c0, c1, c2 = result.coefficients

    return StockPredictionResponse(
        product_id=product.id,
        product_code=product.code,
        product_name=product.name,
        live_stock=product.quantity,
        critical_quantity=product.critical_quantity,
        below_critical=product.quantity <= product.critical_quantity,
        horizon_days=horizon_days,
        start_date=start,
        coefficients=TrendCoefficients(intercept=c0, linear=c1, quadratic=c2),
        r_squared=result.r_squared,
        horizon_value=result.horizon_value,
        days_until_stockout=result.days_until_stockout,
        stockout_date=_offset_date(start, result.days_until_stockout),
        average_daily_trend=result.average_daily_trend,
        trend_label=report.trend_label,
        precision_percent=report.precision_percent,
        stockout_message=report.stockout_message,
        has_enough_data=report.has_enough_data,
        history=[
            StockHistoryPoint(
                day=p.day,
                days_since_start=p.days_since_start,
                stock_level=p.stock_level,
            )
            for p in prediction.history
        ],
        projected_series=[
            StockHistoryPoint(
                day=start + timedelta(days=p.days_since_start),
                days_since_start=p.days_since_start,
                stock_level=p.stock_level,
            )
            for p in result.projected_series
        ]
        if start is not None
        else [],
    )


def scan_stockout_risks(
    db: Session,
    horizon_days: int,
    limit: int | None = None,
    today: date | None = None,
) -> list[StockoutRiskItem]:
    """Return products whose projected stock reaches zero, soonest first.

    Stockout dates before today are skipped: a product that ran dry earlier and
    has since been restocked is not at risk.
    """

    if today is None:
        today = datetime.now(timezone.utc).date()

    products = db.query(Product).order_by(Product.id).all()

    items: list[StockoutRiskItem] = []
    for product in products:
        prediction = _predict_for_product(db, product, horizon_days, today)
        days = prediction.result.days_until_stockout
        stockout_date = _offset_date(prediction.start_date, days)
        if days is None or stockout_date is None or stockout_date < today:
            continue
        items.append(
            StockoutRiskItem(
                product_id=product.id,
                product_code=product.code,
                product_name=product.name,
                live_stock=product.quantity,
                days_until_stockout=days,
                stockout_date=stockout_date,
                precision_percent=prediction.report.precision_percent,
            )
        )

    items.sort(key=lambda item: (item.stockout_date, item.product_id))
    if limit is not None:
        items = items[:limit]
    return items
