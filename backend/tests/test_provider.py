import asyncio
import random

import aiohttp
import pytest

from stockdash.services.base import FetchErrorKind
from stockdash.services.data_ingestion import StockDataProvider
from stockdash.services.data_ingestion.service import (
    intraday_interval,
    parse_time_series,
    time_series_function,
)

from conftest import FIXED_NOW


class FakeResponse:
    def __init__(self, payload, status: int = 200) -> None:
        self.payload = payload
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientError(f"HTTP {self.status}")

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc) -> bool:
        return False


class FakeSession:
    def __init__(self, payload=None, status: int = 200, error: Exception = None) -> None:
        self.payload = payload
        self.status = status
        self.error = error
        self.closed = False
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, params: dict = None) -> FakeResponse:
        self.calls.append((url, params))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.payload, self.status)

    async def close(self) -> None:
        self.closed = True


def make_provider(session: FakeSession, **kwargs) -> StockDataProvider:
    defaults = {
        "finnhub_api_key": "fh-key",
        "alpha_vantage_api_key": "av-key",
        "finnhub_base_url": "https://finnhub.test/api/v1",
        "alpha_vantage_base_url": "https://av.test/query",
        "session": session,
        "rng": random.Random(5),
        "clock": lambda: FIXED_NOW,
    }
    defaults.update(kwargs)
    return StockDataProvider(**defaults)


def av_entry(open_: str, close: str, volume: str = "1000") -> dict:
    return {
        "1. open": open_,
        "2. high": str(max(float(open_), float(close)) + 1),
        "3. low": str(min(float(open_), float(close)) - 1),
        "4. close": close,
        "5. volume": volume,
    }


@pytest.mark.parametrize(
    ("timeframe", "function"),
    [
        ("1D", "TIME_SERIES_INTRADAY"),
        ("1W", "TIME_SERIES_INTRADAY"),
        ("1M", "TIME_SERIES_DAILY"),
        ("3M", "TIME_SERIES_DAILY"),
        ("6M", "TIME_SERIES_WEEKLY"),
        ("1Y", "TIME_SERIES_WEEKLY"),
        ("5Y", "TIME_SERIES_WEEKLY"),
    ],
)
def test_timeframe_maps_to_provider_function(timeframe: str, function: str) -> None:
    assert time_series_function(timeframe) == function


def test_intraday_interval_is_five_minutes_only_for_one_day() -> None:
    assert intraday_interval("1D") == "5min"
    assert intraday_interval("1W") == "60min"


def test_parse_time_series_sorts_unordered_date_keys() -> None:
    payload = {
        "Meta Data": {"2. Symbol": "AAPL"},
        "Time Series (Daily)": {
            "2024-03-13": av_entry("171.0", "172.5", "5000"),
            "2024-03-11": av_entry("170.0", "169.0"),
            "2024-03-12": av_entry("169.0", "171.0"),
        },
    }

    bars = parse_time_series(payload)

    assert [bar.date for bar in bars] == ["2024-03-11", "2024-03-12", "2024-03-13"]
    assert bars[-1].close == 172.5
    assert bars[-1].volume == 5000
    assert bars[0].is_up is False


def test_parse_time_series_requires_series_key() -> None:
    with pytest.raises(KeyError):
        parse_time_series({"Note": "Thank you for using Alpha Vantage!"})


def test_fetch_series_returns_sorted_provider_data() -> None:
    session = FakeSession(
        {
            "Time Series (60min)": {
                "2024-03-15 11:00:00": av_entry("101", "102"),
                "2024-03-15 10:00:00": av_entry("100", "101"),
            }
        }
    )
    provider = make_provider(session)

    bars = asyncio.run(provider.fetch_series("AAPL", "1W"))

    assert [bar.date for bar in bars] == ["2024-03-15 10:00:00", "2024-03-15 11:00:00"]
    url, params = session.calls[0]
    assert url == "https://av.test/query"
    assert params == {
        "function": "TIME_SERIES_INTRADAY",
        "symbol": "AAPL",
        "interval": "60min",
        "outputsize": "compact",
        "apikey": "av-key",
    }


def test_fetch_series_falls_back_when_series_key_missing() -> None:
    session = FakeSession({"Information": "rate limit"})
    provider = make_provider(session)

    bars = asyncio.run(provider.fetch_series("AAPL", "1M"))

    assert len(bars) == 31
    assert bars[-1].date == "2024-03-15"


def test_fetch_series_falls_back_on_transport_error() -> None:
    session = FakeSession(error=aiohttp.ClientConnectionError("connection refused"))
    provider = make_provider(session)

    bars = asyncio.run(provider.fetch_series("AAPL", "3M"))

    assert len(bars) == 91


def test_fetch_series_falls_back_on_http_error_status() -> None:
    session = FakeSession({"Time Series (Daily)": {}}, status=503)
    provider = make_provider(session)

    bars = asyncio.run(provider.fetch_series("AAPL", "1W"))

    assert len(bars) == 8


def test_fetch_series_without_credential_never_calls_provider() -> None:
    session = FakeSession({})
    provider = make_provider(session, alpha_vantage_api_key="")

    bars = asyncio.run(provider.fetch_series("AAPL", "1M"))

    assert session.calls == []
    assert len(bars) == 31
    assert [bar.date for bar in bars] == sorted(bar.date for bar in bars)
    for bar in bars:
        assert bar.low <= min(bar.open, bar.close)
        assert bar.high >= max(bar.open, bar.close)


def test_fetch_series_fallback_is_reproducible_with_same_seed() -> None:
    first = asyncio.run(make_provider(FakeSession(), alpha_vantage_api_key="").fetch_series("AAPL", "1M"))
    second = asyncio.run(make_provider(FakeSession(), alpha_vantage_api_key="").fetch_series("AAPL", "1M"))

    assert first == second


def test_fetch_quote_parses_finnhub_payload() -> None:
    session = FakeSession({"c": 180.5, "h": 181.0, "l": 178.2, "o": 179.0, "pc": 178.9, "t": 1710500000})
    provider = make_provider(session)

    quote = asyncio.run(provider.fetch_quote("MSFT"))

    assert quote.c == 180.5
    assert quote.pc == 178.9
    url, params = session.calls[0]
    assert url == "https://finnhub.test/api/v1/quote"
    assert params == {"symbol": "MSFT", "token": "fh-key"}


def test_fetch_quote_falls_back_on_invalid_payload() -> None:
    session = FakeSession({"error": "Invalid API key"})
    provider = make_provider(session)

    quote = asyncio.run(provider.fetch_quote("MSFT"))

    assert quote.c == 173.45
    assert quote.t == int(FIXED_NOW.timestamp())


def test_fetch_quote_falls_back_on_non_json_body() -> None:
    session = FakeSession(ValueError("Expecting value"))
    provider = make_provider(session)

    quote = asyncio.run(provider.fetch_quote("MSFT"))

    assert quote.pc == 171.2


def test_request_quote_reports_missing_credential() -> None:
    provider = make_provider(FakeSession(), finnhub_api_key="")

    result = asyncio.run(provider._request_quote("AAPL"))

    assert not result.ok
    assert result.error.kind == FetchErrorKind.MISSING_CREDENTIAL


def test_request_series_reports_parse_error_kind() -> None:
    provider = make_provider(FakeSession({"Error Message": "Invalid API call"}))

    result = asyncio.run(provider._request_series("AAPL", "1M"))

    assert result.error.kind == FetchErrorKind.PARSE
    assert "Invalid API call" in result.error.message


def test_fetch_candles_success_and_no_data_fallback() -> None:
    payload = {
        "c": [10.5, 11.0],
        "h": [11.0, 11.5],
        "l": [9.5, 10.0],
        "o": [10.0, 10.5],
        "s": "ok",
        "t": [1710288000, 1710374400],
        "v": [1200, 1300],
    }
    session = FakeSession(payload)
    provider = make_provider(session)

    candles = asyncio.run(provider.fetch_candles("AAPL", "D", 1710288000, 1710374400))

    assert candles.c == [10.5, 11.0]
    _, params = session.calls[0]
    assert params["from"] == 1710288000
    assert params["to"] == 1710374400
    assert params["resolution"] == "D"

    provider = make_provider(FakeSession({"s": "no_data"}))
    candles = asyncio.run(provider.fetch_candles("AAPL", "D", 0, 1))

    assert candles.s == "ok"
    assert len(candles.c) == 30


def test_health_check_requires_both_credentials() -> None:
    assert asyncio.run(make_provider(FakeSession()).health_check()) is True
    assert asyncio.run(make_provider(FakeSession(), finnhub_api_key="").health_check()) is False


def test_close_closes_session() -> None:
    session = FakeSession()
    provider = make_provider(session)

    asyncio.run(provider.close())

    assert session.closed is True
