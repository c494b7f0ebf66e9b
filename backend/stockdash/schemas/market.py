"""
CONTRACT 1: Market Data

Output of the Provider Client: Quote, Series (list[Bar]) and Candles.

Field names on Quote and Candles follow the Finnhub wire format so provider
payloads validate directly into these models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    D1 = "1D"
    W1 = "1W"
    M1 = "1M"
    M3 = "3M"
    M6 = "6M"
    Y1 = "1Y"
    Y5 = "5Y"


# =============================================================================
# QUOTE
# =============================================================================


class Quote(BaseModel):
    """Current-price snapshot for a single symbol."""

    c: float = Field(..., description="Current price")
    h: float = Field(..., description="High price of the day")
    l: float = Field(..., description="Low price of the day")
    o: float = Field(..., description="Open price of the day")
    pc: float = Field(..., description="Previous close price")
    t: int = Field(..., description="Timestamp (seconds since epoch)")

    class Config:
        frozen = True

    @property
    def price(self) -> float:
        return self.c

    @property
    def previous_close(self) -> float:
        return self.pc


# =============================================================================
# SERIES
# =============================================================================


class Bar(BaseModel):
    """One trading-period observation."""

    date: str
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    volume: int = Field(..., ge=0)

    @property
    def is_up(self) -> bool:
        return self.close >= self.open


class Candles(BaseModel):
    """Finnhub candle payload: parallel arrays plus a status flag."""

    c: list[float] = Field(default_factory=list, description="Close prices")
    h: list[float] = Field(default_factory=list, description="High prices")
    l: list[float] = Field(default_factory=list, description="Low prices")
    o: list[float] = Field(default_factory=list, description="Open prices")
    s: str = Field(..., description="Status")
    t: list[int] = Field(default_factory=list, description="Timestamps")
    v: list[float] = Field(default_factory=list, description="Volumes")

    def to_bars(self) -> list[Bar]:
        """Convert to an ascending Series with calendar-date labels."""
        bars = [
            Bar(
                date=datetime.fromtimestamp(ts).strftime("%Y-%m-%d"),
                open=o,
                high=h,
                low=l,
                close=c,
                volume=int(v),
            )
            for ts, o, h, l, c, v in sorted(
                zip(self.t, self.o, self.h, self.l, self.c, self.v)
            )
        ]
        return bars


def sort_series(bars: list[Bar]) -> list[Bar]:
    """Re-establish ascending date order."""
    return sorted(bars, key=lambda bar: bar.date)


# =============================================================================
# INPUT: StockDataRequest
# =============================================================================


class StockDataRequest(BaseModel):
    """
    Parameter tuple for one dashboard view.
    Sent by: Presentation layer
    Received by: Data Aggregator
    """

    symbol: str = Field(default="AAPL", min_length=1, max_length=20)
    timeframe: str = Field(default=Timeframe.M1.value)
    dema_short_period: int = Field(default=9, ge=1, alias="demaShortPeriod")
    dema_long_period: int = Field(default=21, ge=1, alias="demaLongPeriod")
    sr_sensitivity: float = Field(default=3.0, ge=0, alias="srSensitivity")
    sr_lookback_period: int = Field(default=50, ge=1, alias="srLookbackPeriod")

    class Config:
        frozen = True
        populate_by_name = True


# =============================================================================
# OUTPUT: AggregateResult
# =============================================================================


class DerivedQuote(BaseModel):
    price: float
    change: float
    change_percent: float = Field(..., alias="changePercent")

    class Config:
        populate_by_name = True


class DemaLines(BaseModel):
    short: list[float]
    long: list[float]


class ChartData(BaseModel):
    """Everything the chart needs, index-aligned with `dates`."""

    dates: list[str]
    prices: list[float]
    volumes: list[int]
    is_up: list[bool] = Field(..., alias="isUp")
    dema: DemaLines
    support_levels: list[float] = Field(..., alias="supportLevels")
    resistance_levels: list[float] = Field(..., alias="resistanceLevels")

    class Config:
        populate_by_name = True


class AggregateResult(BaseModel):
    """
    Snapshot consumed by the presentation layer.
    Replaced wholesale on every state transition.
    """

    loading: bool = True
    error: Optional[str] = None
    quote: Optional[DerivedQuote] = None
    chart_data: Optional[ChartData] = Field(default=None, alias="chartData")

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "loading": False,
                "error": None,
                "quote": {"price": 173.45, "change": 2.25, "changePercent": 1.31},
                "chartData": {
                    "dates": ["2024-02-01", "2024-02-02"],
                    "prices": [171.2, 173.45],
                    "volumes": [52000000, 48000000],
                    "isUp": [False, True],
                    "dema": {"short": [0.0, 0.0], "long": [0.0, 0.0]},
                    "supportLevels": [],
                    "resistanceLevels": [],
                },
            }
        }
