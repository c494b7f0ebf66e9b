"""
Provider Client Interface

Defines the contract for the market data layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from stockdash.schemas.market import Bar, Candles, Quote, Timeframe
from stockdash.services.base import FetchError

T = TypeVar("T")


@dataclass
class FetchResult(Generic[T]):
    """Either a parsed provider value or the reason it could not be produced."""

    value: Optional[T] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: FetchError) -> "FetchResult[T]":
        return cls(error=error)


class ProviderClientInterface(ABC):
    """
    Provider Client Contract.

    Public fetch methods never raise: on any failure they return synthetic
    data with the same shape as a successful response.
    """

    @property
    def name(self) -> str:
        return "StockDataProvider"

    @abstractmethod
    async def fetch_quote(self, symbol: str) -> Quote:
        """Current quote for a symbol."""
        pass

    @abstractmethod
    async def fetch_series(
        self, symbol: str, timeframe: Union[Timeframe, str]
    ) -> list[Bar]:
        """Historical bars, ascending by date."""
        pass

    @abstractmethod
    async def fetch_candles(
        self, symbol: str, resolution: str, start: int, end: int
    ) -> Candles:
        """Raw candles for a time range (epoch seconds)."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether live provider data can be requested."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        pass
