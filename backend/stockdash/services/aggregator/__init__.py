"""
Data Aggregator

CONTRACT:
    Input:  StockDataRequest (symbol, timeframe, DEMA periods, S/R settings)
    Output: AggregateResult (loading / error / quote / chartData)

RESPONSIBILITIES:
    - Fetch quote and series concurrently from the Provider Client
    - Run the Indicator Engine over close prices
    - Poll on a fixed interval while subscribed
    - Discard results from superseded parameter sets
"""

from stockdash.services.aggregator.service import (
    FETCH_ERROR_MESSAGE,
    StockDataService,
    aggregate,
    build_chart_data,
    derive_quote,
    get_stock_data_service,
)
from stockdash.services.aggregator.subscription import (
    AggregatorState,
    StockDataAggregator,
)

__all__ = [
    "FETCH_ERROR_MESSAGE",
    "StockDataService",
    "aggregate",
    "build_chart_data",
    "derive_quote",
    "get_stock_data_service",
    "AggregatorState",
    "StockDataAggregator",
]
