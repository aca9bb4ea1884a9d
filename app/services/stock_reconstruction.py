from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from itertools import groupby
from typing import Iterable

from app.core.forecasting.domain import (
    MovementRecord,
    MovementSemantics,
    MovementType,
    StockPoint,
)


logger = logging.getLogger(__name__)


LIVE_STOCK_TOLERANCE = 0.1

DECREASING_TYPES = frozenset(
    {MovementType.SALE, MovementType.MANUAL_WITHDRAWAL, MovementType.DELETION}
)


def to_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _sort_key(movement: MovementRecord) -> tuple:
    # Ties on timestamp are broken on content so the replay does not depend
    # on the order in which the ledger returned the rows.
    return (
        to_utc(movement.timestamp),
        movement.movement_type.value,
        movement.quantity,
        movement.note or "",
    )


def apply_movement(running: float, movement: MovementRecord) -> float:
    if movement.semantics is MovementSemantics.EXPLICIT_CREATION:
        return movement.quantity
    if (
        movement.semantics is MovementSemantics.EXPLICIT_OVERRIDE
        and movement.override_target is not None
    ):
        return movement.override_target
    if movement.movement_type is MovementType.ADD:
        return running + movement.quantity
    if movement.movement_type in DECREASING_TYPES:
        return running - movement.quantity
    return running


def reconstruct_stock_history(
    movements: Iterable[MovementRecord],
    live_stock: float,
    today: date | None = None,
) -> list[StockPoint]:
    """Replay a product's movement ledger into end-of-day stock levels.

    The last point always ends on the live stock: when the replay disagrees
    with it by more than LIVE_STOCK_TOLERANCE, the last movement day and today
    are overwritten with the live value and a warning is logged.
    """

    ordered = sorted(movements, key=_sort_key)
    if not ordered:
        return []

    if today is None:
        today = datetime.now(timezone.utc).date()

    levels_by_day: dict[date, float] = {}
    running = 0.0
    for day, day_movements in groupby(ordered, key=lambda m: to_utc(m.timestamp).date()):
        for movement in day_movements:
            running = apply_movement(running, movement)
        running = max(running, 0.0)
        levels_by_day[day] = running

    last_movement_day = max(levels_by_day)
    if today not in levels_by_day:
        levels_by_day[today] = float(live_stock)

    if abs(running - float(live_stock)) > LIVE_STOCK_TOLERANCE:
        logger.warning(
            "Reconstructed stock %.3f differs from live stock %.3f (product_id=%s); "
            "forcing last point to live value",
            running,
            float(live_stock),
            ordered[-1].product_id,
        )
        levels_by_day[last_movement_day] = float(live_stock)
        levels_by_day[today] = float(live_stock)

    start = min(levels_by_day)
    return [
        StockPoint(
            day=day,
            days_since_start=(day - start).days,
            stock_level=max(levels_by_day[day], 0.0),
        )
        for day in sorted(levels_by_day)
    ]
