"""
Provider Client

CONTRACT:
    fetch_quote(symbol)             -> Quote
    fetch_series(symbol, timeframe) -> list[Bar] (ascending by date)

RESPONSIBILITIES:
    - Fetch quotes and candles from Finnhub
    - Fetch time series from Alpha Vantage
    - Normalize provider payloads to standard schemas
    - Substitute shape-consistent mock data on any failure

Callers never see a network error.
"""

from stockdash.services.data_ingestion.interface import (
    FetchResult,
    ProviderClientInterface,
)
from stockdash.services.data_ingestion.service import (
    StockDataProvider,
    close_stock_data_provider,
    get_stock_data_provider,
)

__all__ = [
    "FetchResult",
    "ProviderClientInterface",
    "StockDataProvider",
    "close_stock_data_provider",
    "get_stock_data_provider",
]
