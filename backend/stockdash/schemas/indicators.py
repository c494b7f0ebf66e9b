"""
CONTRACT 2: Indicator Engine

Input: close-price series + indicator parameters
Output: IndicatorSet

Pure Python/NumPy - deterministic and reproducible.
"""

from pydantic import BaseModel, Field


MAX_LEVELS = 5


class SupportResistanceLevels(BaseModel):
    """Deduplicated price levels in scan order."""

    support: list[float] = Field(default_factory=list, max_length=MAX_LEVELS)
    resistance: list[float] = Field(default_factory=list, max_length=MAX_LEVELS)


class IndicatorSet(BaseModel):
    """
    Derived view over a Series for one parameterization.

    Both DEMA lines have the same length as the input series; leading
    positions without enough history are 0.0.
    """

    dema_short: list[float]
    dema_long: list[float]
    levels: SupportResistanceLevels

    @property
    def support_levels(self) -> list[float]:
        return self.levels.support

    @property
    def resistance_levels(self) -> list[float]:
        return self.levels.resistance


class IndicatorRequest(BaseModel):
    """
    Request for indicator calculation over a close-price series.
    Sent by: API / Data Aggregator
    Received by: Indicator Service
    """

    prices: list[float]
    dema_short_period: int = Field(default=9, ge=1, alias="demaShortPeriod")
    dema_long_period: int = Field(default=21, ge=1, alias="demaLongPeriod")
    sr_sensitivity: float = Field(default=3.0, ge=0, alias="srSensitivity")
    sr_lookback_period: int = Field(default=50, ge=1, alias="srLookbackPeriod")

    class Config:
        populate_by_name = True
