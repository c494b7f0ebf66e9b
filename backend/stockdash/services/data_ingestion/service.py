"""
Provider Client Implementation

Fetches quotes and historical data from external providers.
Quotes/Candles: Finnhub
Time series: Alpha Vantage
Fallback: Mock data (whenever a request fails for any reason)
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Any, Callable, Optional, Union

import aiohttp
from pydantic import ValidationError

from stockdash.core.config import settings
from stockdash.schemas.market import Bar, Candles, Quote, Timeframe, sort_series
from stockdash.services.base import FetchError, FetchErrorKind
from stockdash.services.data_ingestion.interface import (
    FetchResult,
    ProviderClientInterface,
)
from stockdash.services.data_ingestion.mock_data import (
    generate_mock_candles,
    generate_mock_quote,
    generate_mock_series,
    timeframe_value,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "StockDataProvider"

# Alpha Vantage function per timeframe; everything else is weekly
INTRADAY_TIMEFRAMES = {Timeframe.D1.value, Timeframe.W1.value}
DAILY_TIMEFRAMES = {Timeframe.M1.value, Timeframe.M3.value}

# Alpha Vantage bar fields
AV_FIELDS = {
    "open": "1. open",
    "high": "2. high",
    "low": "3. low",
    "close": "4. close",
    "volume": "5. volume",
}


def time_series_function(timeframe: Union[Timeframe, str]) -> str:
    """Map a dashboard timeframe to an Alpha Vantage function name."""
    timeframe = timeframe_value(timeframe)
    if timeframe in INTRADAY_TIMEFRAMES:
        return "TIME_SERIES_INTRADAY"
    if timeframe in DAILY_TIMEFRAMES:
        return "TIME_SERIES_DAILY"
    return "TIME_SERIES_WEEKLY"


def intraday_interval(timeframe: Union[Timeframe, str]) -> str:
    """Bar interval requested for intraday data."""
    return "5min" if timeframe_value(timeframe) == Timeframe.D1.value else "60min"


def parse_time_series(payload: dict) -> list[Bar]:
    """
    Parse an Alpha Vantage time-series payload into an ascending Series.

    Raises:
        KeyError: No "Time Series" key, or a bar is missing a field
        ValueError: A field is not numeric
    """
    series_key = next((key for key in payload if "Time Series" in key), None)
    if series_key is None:
        raise KeyError("Time Series")

    bars = []
    for date, entry in payload[series_key].items():
        bars.append(
            Bar(
                date=date,
                open=float(entry[AV_FIELDS["open"]]),
                high=float(entry[AV_FIELDS["high"]]),
                low=float(entry[AV_FIELDS["low"]]),
                close=float(entry[AV_FIELDS["close"]]),
                volume=int(entry[AV_FIELDS["volume"]]),
            )
        )

    return sort_series(bars)


def _describe_payload(payload: Any) -> str:
    """Short reason for a structurally unexpected provider payload."""
    if isinstance(payload, dict):
        for key in ("Error Message", "Note", "Information", "error"):
            if key in payload:
                return f"{key}: {payload[key]}"
        return f"keys={sorted(payload)[:5]}"
    return f"type={type(payload).__name__}"


class StockDataProvider(ProviderClientInterface):
    """
    Provider Client.

    Every public fetch goes through an explicit FetchResult; an error variant
    is replaced by mock data, so callers always receive a valid value.
    """

    def __init__(
        self,
        finnhub_api_key: Optional[str] = None,
        alpha_vantage_api_key: Optional[str] = None,
        finnhub_base_url: Optional[str] = None,
        alpha_vantage_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._finnhub_api_key = (
            finnhub_api_key if finnhub_api_key is not None else settings.finnhub_api_key
        )
        self._alpha_vantage_api_key = (
            alpha_vantage_api_key
            if alpha_vantage_api_key is not None
            else settings.alpha_vantage_api_key
        )
        self._finnhub_base_url = finnhub_base_url or settings.finnhub_base_url
        self._alpha_vantage_base_url = (
            alpha_vantage_base_url or settings.alpha_vantage_base_url
        )
        self._timeout = timeout or settings.request_timeout_seconds
        self._session = session
        self._rng = rng or random.Random()
        self._clock = clock

    @property
    def name(self) -> str:
        return SERVICE_NAME

    # -------------------------------------------------------------------------
    # Public API (never raises)
    # -------------------------------------------------------------------------

    async def fetch_quote(self, symbol: str) -> Quote:
        """Current quote, or the fixed mock quote on failure."""
        result = await self._request_quote(symbol)
        if result.ok:
            return result.value

        logger.warning(f"Using mock quote for {symbol}: {result.error.message}")
        return generate_mock_quote(now=self._clock())

    async def fetch_series(
        self, symbol: str, timeframe: Union[Timeframe, str]
    ) -> list[Bar]:
        """Ascending historical bars, or a synthetic series on failure."""
        result = await self._request_series(symbol, timeframe)
        if result.ok:
            return result.value

        logger.warning(
            f"Using mock series for {symbol} ({timeframe_value(timeframe)}): "
            f"{result.error.message}"
        )
        return generate_mock_series(timeframe, rng=self._rng, now=self._clock())

    async def fetch_candles(
        self, symbol: str, resolution: str, start: int, end: int
    ) -> Candles:
        """Finnhub candles, or 30 synthetic daily candles on failure."""
        result = await self._request_candles(symbol, resolution, start, end)
        if result.ok:
            return result.value

        logger.warning(f"Using mock candles for {symbol}: {result.error.message}")
        return generate_mock_candles(rng=self._rng, now=self._clock())

    async def health_check(self) -> bool:
        """Providers are usable only with credentials configured."""
        return bool(self._finnhub_api_key) and bool(self._alpha_vantage_api_key)

    # -------------------------------------------------------------------------
    # Provider requests (return FetchResult)
    # -------------------------------------------------------------------------

    async def _request_quote(self, symbol: str) -> FetchResult[Quote]:
        if not self._finnhub_api_key:
            return self._missing_credential("Finnhub")

        result = await self._get_json(
            f"{self._finnhub_base_url}/quote",
            {"symbol": symbol, "token": self._finnhub_api_key},
        )
        if not result.ok:
            return result

        try:
            return FetchResult.success(Quote.model_validate(result.value))
        except ValidationError as e:
            return self._parse_error(
                f"Invalid quote payload for {symbol}: {_describe_payload(result.value)}",
                e,
            )

    async def _request_series(
        self, symbol: str, timeframe: Union[Timeframe, str]
    ) -> FetchResult[list[Bar]]:
        if not self._alpha_vantage_api_key:
            return self._missing_credential("Alpha Vantage")

        result = await self._get_json(
            self._alpha_vantage_base_url,
            {
                "function": time_series_function(timeframe),
                "symbol": symbol,
                "interval": intraday_interval(timeframe),
                "outputsize": "compact",
                "apikey": self._alpha_vantage_api_key,
            },
        )
        if not result.ok:
            return result

        try:
            return FetchResult.success(parse_time_series(result.value))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            return self._parse_error(
                f"Invalid time series payload for {symbol}: "
                f"{_describe_payload(result.value)}",
                e,
            )

    async def _request_candles(
        self, symbol: str, resolution: str, start: int, end: int
    ) -> FetchResult[Candles]:
        if not self._finnhub_api_key:
            return self._missing_credential("Finnhub")

        result = await self._get_json(
            f"{self._finnhub_base_url}/stock/candle",
            {
                "symbol": symbol,
                "resolution": resolution,
                "from": start,
                "to": end,
                "token": self._finnhub_api_key,
            },
        )
        if not result.ok:
            return result

        try:
            candles = Candles.model_validate(result.value)
        except ValidationError as e:
            return self._parse_error(
                f"Invalid candle payload for {symbol}: {_describe_payload(result.value)}",
                e,
            )

        if candles.s != "ok":
            return self._parse_error(f"Candle status for {symbol} is '{candles.s}'")

        return FetchResult.success(candles)

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, url: str, params: dict) -> FetchResult[Any]:
        """GET a JSON document; transport and decode errors become FetchErrors."""
        try:
            session = await self._ensure_session()
            async with session.get(url, params=params) as resp:
                resp.raise_for_status()
                payload = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return FetchResult.failure(
                FetchError(
                    SERVICE_NAME,
                    FetchErrorKind.TRANSPORT,
                    f"Request to {url} failed: {e!r}",
                )
            )
        except ValueError as e:
            return self._parse_error(f"Response from {url} is not JSON", e)

        return FetchResult.success(payload)

    @staticmethod
    def _missing_credential(provider: str) -> FetchResult:
        return FetchResult.failure(
            FetchError(
                SERVICE_NAME,
                FetchErrorKind.MISSING_CREDENTIAL,
                f"{provider} API key is missing",
            )
        )

    @staticmethod
    def _parse_error(message: str, cause: Optional[Exception] = None) -> FetchResult:
        details = {"cause": repr(cause)} if cause is not None else {}
        return FetchResult.failure(
            FetchError(SERVICE_NAME, FetchErrorKind.PARSE, message, details)
        )


# Singleton instance
_provider_instance: Optional[StockDataProvider] = None


def get_stock_data_provider() -> StockDataProvider:
    """Get or create provider instance."""
    global _provider_instance
    if _provider_instance is None:
        _provider_instance = StockDataProvider()
    return _provider_instance


async def close_stock_data_provider() -> None:
    """Close the shared provider session."""
    global _provider_instance
    if _provider_instance is not None:
        await _provider_instance.close()
        _provider_instance = None
