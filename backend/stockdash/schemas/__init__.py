"""
StockDash Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from stockdash.schemas.market import (
    Timeframe,
    Quote,
    Bar,
    Candles,
    StockDataRequest,
    DerivedQuote,
    DemaLines,
    ChartData,
    AggregateResult,
)
from stockdash.schemas.indicators import (
    IndicatorRequest,
    IndicatorSet,
    SupportResistanceLevels,
)

__all__ = [
    # Market
    "Timeframe",
    "Quote",
    "Bar",
    "Candles",
    "StockDataRequest",
    "DerivedQuote",
    "DemaLines",
    "ChartData",
    "AggregateResult",
    # Indicators
    "IndicatorRequest",
    "IndicatorSet",
    "SupportResistanceLevels",
]
