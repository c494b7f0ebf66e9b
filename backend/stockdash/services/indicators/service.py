"""
Indicator Engine Service Implementation

Calculates DEMA lines and support/resistance levels from close prices.
Pure Python/NumPy calculations.
"""

from typing import Optional, Sequence

import numpy as np

from stockdash.schemas.indicators import (
    IndicatorRequest,
    IndicatorSet,
    SupportResistanceLevels,
)
from stockdash.services.indicators.interface import IndicatorServiceInterface
from stockdash.services.indicators.calculations import (
    dema,
    identify_support_resistance,
)


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    All calculations are deterministic and reproducible.
    """

    def calculate(
        self,
        prices: Sequence[float],
        dema_short_period: int,
        dema_long_period: int,
        sr_sensitivity: float,
        sr_lookback_period: int,
    ) -> IndicatorSet:
        closes = np.asarray(prices, dtype=float)

        support, resistance = identify_support_resistance(
            closes, sr_sensitivity, sr_lookback_period
        )

        return IndicatorSet(
            dema_short=dema(closes, dema_short_period).tolist(),
            dema_long=dema(closes, dema_long_period).tolist(),
            levels=SupportResistanceLevels(support=support, resistance=resistance),
        )

    async def execute(self, input_data: IndicatorRequest) -> IndicatorSet:
        return self.calculate(
            input_data.prices,
            input_data.dema_short_period,
            input_data.dema_long_period,
            input_data.sr_sensitivity,
            input_data.sr_lookback_period,
        )

    async def health_check(self) -> bool:
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
