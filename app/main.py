from fastapi import FastAPI

from app.api.v1.router import api_router
from app.services.stock_forecast_scheduler import StockForecastScheduler


app = FastAPI(title="Stock Forecast")
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def _startup_event() -> None:
    scheduler = StockForecastScheduler()
    scheduler.start()
    app.state.stock_forecast_scheduler = scheduler


@app.on_event("shutdown")
def _shutdown_event() -> None:
    scheduler = getattr(app.state, "stock_forecast_scheduler", None)
    if scheduler is not None:
        scheduler.shutdown()


@app.get("/")
def root():
    return {"status": "ok", "message": "Stock forecast backend running"}
