import asyncio
import random
from datetime import datetime

import pytest

from stockdash.schemas.market import Bar, Quote
from stockdash.services.data_ingestion import StockDataProvider

FIXED_NOW = datetime(2024, 3, 15, 12, 30)


def make_bars(closes: list[float], start_day: int = 1) -> list[Bar]:
    """Daily bars in March 2024 with open one below close."""
    return [
        Bar(
            date=f"2024-03-{start_day + i:02d}",
            open=close - 1,
            high=close + 1,
            low=close - 2,
            close=close,
            volume=1_000_000 + i,
        )
        for i, close in enumerate(closes)
    ]


def make_quote(price: float = 110.0, previous_close: float = 100.0) -> Quote:
    return Quote(c=price, h=price + 1, l=price - 1, o=previous_close, pc=previous_close, t=1_710_000_000)


class FakeProvider:
    """In-memory provider with per-symbol delays and switchable failures."""

    def __init__(
        self,
        quotes: dict = None,
        series: list[Bar] = None,
        delays: dict = None,
        error: Exception = None,
    ):
        self.quotes = quotes or {}
        self.series = series if series is not None else make_bars([100.0 + i for i in range(30)])
        self.delays = delays or {}
        self.error = error
        self.quote_calls: list[str] = []
        self.series_calls: list[tuple[str, str]] = []

    async def fetch_quote(self, symbol: str) -> Quote:
        self.quote_calls.append(symbol)
        await asyncio.sleep(self.delays.get(symbol, 0))
        if self.error is not None:
            raise self.error
        return self.quotes.get(symbol, make_quote())

    async def fetch_series(self, symbol: str, timeframe: str) -> list[Bar]:
        self.series_calls.append((symbol, timeframe))
        await asyncio.sleep(self.delays.get(symbol, 0))
        if self.error is not None:
            raise self.error
        return self.series

    async def fetch_candles(self, symbol, resolution, start, end):
        raise NotImplementedError

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


@pytest.fixture
def offline_provider() -> StockDataProvider:
    """Provider with no credentials: every call falls back to mock data."""
    return StockDataProvider(
        finnhub_api_key="",
        alpha_vantage_api_key="",
        rng=random.Random(42),
        clock=lambda: FIXED_NOW,
    )
