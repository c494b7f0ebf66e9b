"""
Stock Data Service

One fetch + compute cycle: quote and series from the Provider Client,
indicators from the Indicator Engine, assembled into an AggregateResult.
"""

import asyncio
import logging
from typing import Optional

from stockdash.schemas.indicators import IndicatorSet
from stockdash.schemas.market import (
    AggregateResult,
    Bar,
    ChartData,
    DemaLines,
    DerivedQuote,
    Quote,
    StockDataRequest,
)
from stockdash.services.base import BaseService
from stockdash.services.data_ingestion import (
    ProviderClientInterface,
    get_stock_data_provider,
)
from stockdash.services.indicators import IndicatorService, get_indicator_service

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch stock data. Please try again later."


def derive_quote(quote: Quote) -> DerivedQuote:
    """Price with absolute and percent change against the previous close."""
    change = quote.c - quote.pc
    change_percent = change / quote.pc * 100 if quote.pc > 0 else 0.0
    return DerivedQuote(price=quote.c, change=change, change_percent=change_percent)


def build_chart_data(series: list[Bar], indicators: IndicatorSet) -> ChartData:
    """Index-aligned chart arrays for a series and its indicators."""
    return ChartData(
        dates=[bar.date for bar in series],
        prices=[bar.close for bar in series],
        volumes=[bar.volume for bar in series],
        is_up=[bar.is_up for bar in series],
        dema=DemaLines(short=indicators.dema_short, long=indicators.dema_long),
        support_levels=indicators.support_levels,
        resistance_levels=indicators.resistance_levels,
    )


async def aggregate(
    params: StockDataRequest,
    provider: ProviderClientInterface,
    indicator_service: IndicatorService,
) -> AggregateResult:
    """
    Run one cycle. Quote and series are fetched concurrently; indicators are
    computed only after both have resolved.

    Raises whatever escapes the provider or the calculations.
    """
    quote, series = await asyncio.gather(
        provider.fetch_quote(params.symbol),
        provider.fetch_series(params.symbol, params.timeframe),
    )

    indicators = indicator_service.calculate(
        [bar.close for bar in series],
        params.dema_short_period,
        params.dema_long_period,
        params.sr_sensitivity,
        params.sr_lookback_period,
    )

    return AggregateResult(
        loading=False,
        error=None,
        quote=derive_quote(quote),
        chart_data=build_chart_data(series, indicators),
    )


class StockDataService(BaseService[StockDataRequest, AggregateResult]):
    """
    One-shot aggregation for request/response callers.

    Unexpected failures become an AggregateResult carrying the generic error
    message instead of an exception.
    """

    def __init__(
        self,
        provider: Optional[ProviderClientInterface] = None,
        indicator_service: Optional[IndicatorService] = None,
    ):
        self._provider = provider or get_stock_data_provider()
        self._indicators = indicator_service or get_indicator_service()

    @property
    def name(self) -> str:
        return "StockDataService"

    async def execute(self, input_data: StockDataRequest) -> AggregateResult:
        try:
            return await aggregate(input_data, self._provider, self._indicators)
        except Exception as e:
            logger.error(f"Error aggregating stock data for {input_data.symbol}: {e}")
            return AggregateResult(loading=False, error=FETCH_ERROR_MESSAGE)

    async def health_check(self) -> bool:
        return await self._provider.health_check()


# Singleton instance
_service_instance: Optional[StockDataService] = None


def get_stock_data_service() -> StockDataService:
    """Get or create stock data service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = StockDataService()
    return _service_instance
