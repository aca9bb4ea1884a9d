from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.models import Product, StockMovement


CREATION_NOTE = "Création du nouveau produit"


def at(day: date, hour: int = 9) -> datetime:
    return datetime.combine(day, time(hour=hour), tzinfo=timezone.utc)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def days_ago(n: int) -> date:
    return utc_today() - timedelta(days=n)


def create_product(
    session: Session,
    code: str,
    quantity: float,
    **kwargs,
) -> Product:
    product = Product(
        code=code,
        name=kwargs.get("name", code),
        quantity=quantity,
        critical_quantity=kwargs.get("critical_quantity", 0),
    )
    session.add(product)
    session.flush()
    return product


def add_movement(
    session: Session,
    product: Product | None,
    movement_type: str,
    quantity: float,
    created_at: datetime,
    note: str | None = None,
    user_id: str | None = None,
) -> StockMovement:
    row = StockMovement(
        product_id=product.id if product is not None else None,
        user_id=user_id,
        movement_type=movement_type,
        quantity=quantity,
        note=note,
        created_at=created_at,
    )
    session.add(row)
    session.flush()
    return row


def add_declining_history(
    session: Session,
    product: Product,
    initial: float,
    daily_sale: float,
    days: int,
) -> None:
    """Creation `days` days ago followed by one sale per day up to today."""

    add_movement(session, product, "ADD", initial, at(days_ago(days)), note=CREATION_NOTE)
    for n in range(days - 1, -1, -1):
        add_movement(session, product, "SALE", daily_sale, at(days_ago(n)))
