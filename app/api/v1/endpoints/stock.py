from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.movement_timeline import MovementTimelineResponse
from app.schemas.stock_forecast import (
    StockHistoryResponse,
    StockoutRiskResponse,
    StockPredictionResponse,
)
from app.services.movement_ledger import ProductNotFoundError
from app.services.movement_timeline import build_movement_timeline
from app.services.stock_forecast import (
    build_product_stock_history,
    build_product_stock_prediction,
    scan_stockout_risks,
)


router = APIRouter()


def _product_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")


@router.get(
    "/products/{product_id}/history",
    response_model=StockHistoryResponse,
)
def get_product_stock_history(
    product_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> StockHistoryResponse:
    try:
        return build_product_stock_history(db=db, product_id=product_id)
    except ProductNotFoundError:
        raise _product_not_found()


@router.get(
    "/products/{product_id}/prediction",
    response_model=StockPredictionResponse,
)
def get_product_stock_prediction(
    product_id: int = Path(..., ge=1),
    horizon_days: int = Query(default=30, ge=1, le=365),
    db: Session = Depends(get_db),
) -> StockPredictionResponse:
    """Return the degree-2 stock projection for a product.

    Products with fewer than three history days get has_enough_data = false and
    an empty projected series.
    """

    try:
        return build_product_stock_prediction(
            db=db,
            product_id=product_id,
            horizon_days=horizon_days,
        )
    except ProductNotFoundError:
        raise _product_not_found()


@router.get(
    "/movements/timeline",
    response_model=MovementTimelineResponse,
)
def get_movement_timeline(
    product_id: int | None = Query(
        default=None,
        description="Optional product id. If omitted, the timeline covers every ledger row.",
    ),
    db: Session = Depends(get_db),
) -> MovementTimelineResponse:
    try:
        return build_movement_timeline(db=db, product_id=product_id)
    except ProductNotFoundError:
        raise _product_not_found()


@router.get(
    "/stockout-risks",
    response_model=StockoutRiskResponse,
)
def get_stockout_risks(
    horizon_days: int = Query(default=30, ge=1, le=365),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> StockoutRiskResponse:
    items = scan_stockout_risks(db=db, horizon_days=horizon_days, limit=limit)
    return StockoutRiskResponse(horizon_days=horizon_days, items=items)
