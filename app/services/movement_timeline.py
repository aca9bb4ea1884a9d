from __future__ import annotations

from collections import defaultdict
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.forecasting.domain import MovementSemantics, MovementType
from app.models.models import Product, StockMovement
from app.schemas.movement_timeline import (
    MovementTimelineDay,
    MovementTimelineResponse,
    MovementTimelineTotals,
)
from app.services.movement_ledger import get_product, to_movement_record
from app.services.stock_reconstruction import to_utc


FIELD_BY_TYPE: dict[MovementType, str] = {
    MovementType.ADD: "additions",
    MovementType.SALE: "sales",
    MovementType.MANUAL_WITHDRAWAL: "withdrawals",
    MovementType.DELETION: "deletions",
}


def build_movement_timeline(
    db: Session,
    product_id: int | None = None,
) -> MovementTimelineResponse:
    """Aggregate ledger quantities per day and movement type.

    Without product_id the timeline covers the whole ledger, including rows
    whose product has been deleted.
    """

    query = db.query(StockMovement)
    if product_id is not None:
        product = get_product(db, product_id)
        query = query.filter(StockMovement.product_id == product_id)
        current_stock = float(product.quantity)
    else:
        current_stock = float(
            db.query(func.coalesce(func.sum(Product.quantity), 0)).scalar() or 0
        )

    rows = query.order_by(StockMovement.created_at.asc(), StockMovement.id.asc()).all()

    per_day: dict[date, dict[str, float]] = defaultdict(lambda: defaultdict(float))
    totals: dict[str, float] = defaultdict(float)
    initial_stock_total = 0.0

    for row in rows:
        record = to_movement_record(row)
        field = FIELD_BY_TYPE[record.movement_type]
        day = to_utc(record.timestamp).date()
        per_day[day][field] += record.quantity
        totals[field] += record.quantity
        if (
            record.movement_type is MovementType.ADD
            and record.semantics is MovementSemantics.EXPLICIT_CREATION
        ):
            initial_stock_total += record.quantity

    days = [
        MovementTimelineDay(day=day, **per_day[day])
        for day in sorted(per_day)
    ]

    return MovementTimelineResponse(
        product_id=product_id,
        days=days,
        totals=MovementTimelineTotals(**totals),
        initial_stock_total=initial_stock_total,
        current_stock=current_stock,
    )
