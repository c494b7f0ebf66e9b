"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Sequence

from stockdash.services.base import BaseService
from stockdash.schemas.indicators import IndicatorRequest, IndicatorSet


class IndicatorServiceInterface(BaseService[IndicatorRequest, IndicatorSet]):
    """
    Indicator Engine Service Contract.

    INPUT: IndicatorRequest
        - prices: close prices, ascending by date
        - DEMA short/long periods
        - support/resistance sensitivity (%) and lookback

    OUTPUT: IndicatorSet
        - dema_short, dema_long: same length as prices
        - levels: up to 5 support and 5 resistance prices
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    def calculate(
        self,
        prices: Sequence[float],
        dema_short_period: int,
        dema_long_period: int,
        sr_sensitivity: float,
        sr_lookback_period: int,
    ) -> IndicatorSet:
        """Synchronous calculation over a close-price series."""
        pass

    @abstractmethod
    async def execute(self, input_data: IndicatorRequest) -> IndicatorSet:
        """Calculate indicators for a request."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
