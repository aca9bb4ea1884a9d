from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.core import config
from app.core.db import SessionLocal
from app.schemas.stock_forecast import StockoutRiskItem
from app.services.stock_forecast import scan_stockout_risks


logger = logging.getLogger(__name__)


class StockForecastScheduler:
    """Background job that periodically re-runs stock predictions for all products.

    Products with a projected stockout are reported through the log. Started and
    stopped from the FastAPI startup/shutdown events.
    """

    def __init__(
        self,
        interval_minutes: int | None = None,
        horizon_days: int | None = None,
    ) -> None:
        self._interval_minutes = interval_minutes or config.scheduler_interval_minutes()
        self._horizon_days = horizon_days or config.default_horizon_days()
        self._scheduler: BackgroundScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if not config.scheduler_enabled():
            logger.warning(
                "StockForecastScheduler disabled via STOCK_FORECAST_SCHEDULER_ENABLED"
            )
            return

        if self.running:
            logger.warning("StockForecastScheduler already running, skipping start")
            return

        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.add_job(
            self._run_refresh_job,
            trigger=IntervalTrigger(minutes=self._interval_minutes),
            id="stock_forecast_refresh_job",
            replace_existing=True,
            max_instances=1,
            next_run_time=datetime.now(timezone.utc),
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.warning(
            "StockForecastScheduler started with interval %s minutes, horizon %s days",
            self._interval_minutes,
            self._horizon_days,
        )

    def shutdown(self) -> None:
        if self._scheduler is not None:
            try:
                self._scheduler.shutdown(wait=False)
                logger.warning("StockForecastScheduler stopped")
            finally:
                self._scheduler = None

    def _run_refresh_job(self) -> list[StockoutRiskItem]:
        """Scan all products once. Errors are logged and never propagate."""

        db: Session = SessionLocal()
        try:
            return run_stockout_scan(db, self._horizon_days)
        except Exception:
            logger.exception("Error while running stock forecast refresh job")
            return []
        finally:
            db.close()


def run_stockout_scan(db: Session, horizon_days: int) -> list[StockoutRiskItem]:
    risks = scan_stockout_risks(db=db, horizon_days=horizon_days)
    for item in risks:
        logger.warning(
            "Projected stockout for product %s (%s) on %s (precision %.1f%%)",
            item.product_id,
            item.product_code,
            item.stockout_date.isoformat(),
            item.precision_percent,
        )
    logger.warning(
        "Stock forecast refresh completed: %d product(s) at risk within %d days",
        len(risks),
        horizon_days,
    )
    return risks
