"""
Stock Dashboard API Endpoints

One aggregation cycle per request: quote, chart data and indicators.
"""

from fastapi import APIRouter, Depends, Query

from stockdash.core.config import settings
from stockdash.schemas.market import AggregateResult, StockDataRequest, Timeframe
from stockdash.services.aggregator import get_stock_data_service

router = APIRouter()


def stock_data_request(
    symbol: str = Query(default=settings.default_symbol, min_length=1, max_length=20),
    timeframe: Timeframe = Query(default=Timeframe(settings.default_timeframe)),
    dema_short_period: int = Query(default=9, ge=1, alias="demaShortPeriod"),
    dema_long_period: int = Query(default=21, ge=1, alias="demaLongPeriod"),
    sr_sensitivity: float = Query(default=3.0, ge=0, alias="srSensitivity"),
    sr_lookback_period: int = Query(default=50, ge=1, alias="srLookbackPeriod"),
) -> StockDataRequest:
    """Build the dashboard parameter tuple from query parameters."""
    return StockDataRequest(
        symbol=symbol.upper(),
        timeframe=timeframe.value,
        dema_short_period=dema_short_period,
        dema_long_period=dema_long_period,
        sr_sensitivity=sr_sensitivity,
        sr_lookback_period=sr_lookback_period,
    )


@router.get("/snapshot", response_model=AggregateResult)
async def get_stock_snapshot(params: StockDataRequest = Depends(stock_data_request)):
    """
    Fetch quote + series and compute DEMA and support/resistance levels.

    Provider failures are absorbed (mock data); only unexpected failures
    surface, via the `error` field.
    """
    service = get_stock_data_service()
    return await service.execute(params)
