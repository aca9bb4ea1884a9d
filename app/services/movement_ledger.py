from __future__ import annotations

from sqlalchemy.orm import Session

from app.core.forecasting.domain import MovementRecord
from app.core.forecasting.notes import build_movement_record
from app.models.models import Product, StockMovement


class ProductNotFoundError(LookupError):
    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def to_movement_record(row: StockMovement) -> MovementRecord:
    return build_movement_record(
        product_id=row.product_id,
        movement_type=row.movement_type,
        quantity=row.quantity,
        timestamp=row.created_at,
        note=row.note,
    )


def list_product_movements(db: Session, product_id: int) -> list[MovementRecord]:
    """Return every ledger movement of a product, oldest first."""

    rows = (
        db.query(StockMovement)
        .filter(StockMovement.product_id == product_id)
        .order_by(StockMovement.created_at.asc(), StockMovement.id.asc())
        .all()
    )
    return [to_movement_record(row) for row in rows]
