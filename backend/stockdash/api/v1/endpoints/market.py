"""
Market Data API Endpoints

Raw Provider Client output. These never fail on provider errors: mock data
is returned instead.
"""

from fastapi import APIRouter, Query

from stockdash.schemas.market import Bar, Candles, Quote, Timeframe
from stockdash.services.data_ingestion import get_stock_data_provider

router = APIRouter()


@router.get("/quote/{symbol}", response_model=Quote)
async def get_quote(symbol: str):
    """Current quote for a symbol."""
    provider = get_stock_data_provider()
    return await provider.fetch_quote(symbol.upper())


@router.get("/series/{symbol}", response_model=list[Bar])
async def get_series(
    symbol: str,
    timeframe: Timeframe = Query(default=Timeframe.M1, description="Chart timeframe"),
):
    """Historical bars, ascending by date."""
    provider = get_stock_data_provider()
    return await provider.fetch_series(symbol.upper(), timeframe.value)


@router.get("/candles/{symbol}", response_model=Candles)
async def get_candles(
    symbol: str,
    start: int = Query(..., ge=0, description="Range start (epoch seconds)"),
    end: int = Query(..., ge=0, description="Range end (epoch seconds)"),
    resolution: str = Query(default="D", description="1, 5, 15, 30, 60, D, W, M"),
):
    """Raw candles for a time range."""
    provider = get_stock_data_provider()
    return await provider.fetch_candles(symbol.upper(), resolution, start, end)
