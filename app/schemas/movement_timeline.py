from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class MovementTimelineDay(BaseModel):
    day: date
    additions: float = 0.0
    sales: float = 0.0
    withdrawals: float = 0.0
    deletions: float = 0.0


class MovementTimelineTotals(BaseModel):
    additions: float = 0.0
    sales: float = 0.0
    withdrawals: float = 0.0
    deletions: float = 0.0


class MovementTimelineResponse(BaseModel):
    product_id: int | None = None
    days: list[MovementTimelineDay]
    totals: MovementTimelineTotals
    initial_stock_total: float
    current_stock: float
