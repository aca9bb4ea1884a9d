from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class MovementType(str, Enum):
    ADD = "ADD"
    SALE = "SALE"
    MANUAL_WITHDRAWAL = "MANUAL_WITHDRAWAL"
    DELETION = "DELETION"


class MovementSemantics(str, Enum):
    """How a movement affects the running stock during replay.

    Decoded once from the free-text note when a ledger row enters the core.
    """

    STANDARD_DELTA = "standard_delta"
    EXPLICIT_CREATION = "explicit_creation"
    EXPLICIT_OVERRIDE = "explicit_override"


@dataclass(frozen=True)
class MovementRecord:
    """A single stock movement read from the ledger."""

    product_id: int | None
    """Affected product, or None when the product has since been deleted."""

    movement_type: MovementType

    quantity: float
    """Non-negative magnitude; the sign follows from movement_type."""

    timestamp: datetime
    """Recording time. Naive values are interpreted as UTC."""

    note: str | None = None

    semantics: MovementSemantics = MovementSemantics.STANDARD_DELTA

    override_target: float | None = None
    """Stock level set by an EXPLICIT_OVERRIDE movement."""


@dataclass(frozen=True)
class StockPoint:
    """Reconstructed stock level at the end of one calendar day."""

    day: date
    days_since_start: int
    stock_level: float


@dataclass(frozen=True)
class ProjectedPoint:
    days_since_start: int
    stock_level: float


@dataclass(frozen=True)
class PredictionResult:
    """Outcome of fitting a degree-2 trend to a stock history."""

    coefficients: tuple[float, float, float]
    """(intercept, linear, quadratic) terms of the fitted polynomial."""

    r_squared: float
    projected_series: list[ProjectedPoint] = field(default_factory=list)
    horizon_value: float = 0.0
    days_until_stockout: int | None = None
    average_daily_trend: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return not self.projected_series


@dataclass(frozen=True)
class PredictionReport:
    """Presentation-ready fields derived from a PredictionResult."""

    trend_label: str
    """One of "growing", "shrinking" or "stable"."""

    precision_percent: float
    stockout_message: str
    has_enough_data: bool


@dataclass(frozen=True)
class StockPrediction:
    history: list[StockPoint]
    result: PredictionResult
    report: PredictionReport
    horizon_days: int

    @property
    def start_date(self) -> date | None:
        return self.history[0].day if self.history else None
