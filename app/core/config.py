from __future__ import annotations

import os


TRUTHY_VALUES = ("1", "true", "yes", "on")


def scheduler_enabled() -> bool:
    raw = os.getenv("STOCK_FORECAST_SCHEDULER_ENABLED", "false").lower()
    return raw in TRUTHY_VALUES


def scheduler_interval_minutes() -> int:
    return int(os.getenv("STOCK_FORECAST_SCHEDULER_INTERVAL_MINUTES", "60"))


def default_horizon_days() -> int:
    return int(os.getenv("STOCK_FORECAST_DEFAULT_HORIZON_DAYS", "30"))
