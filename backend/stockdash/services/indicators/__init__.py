"""
Indicator Engine Service

CONTRACT:
    Input:  IndicatorRequest (close prices + parameters)
    Output: IndicatorSet

RESPONSIBILITIES:
    - Double Exponential Moving Averages (short and long period)
    - Support/resistance levels from symmetric-window extrema

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from stockdash.services.indicators.interface import IndicatorServiceInterface
from stockdash.services.indicators.service import IndicatorService, get_indicator_service
from stockdash.services.indicators.calculations import dema, identify_support_resistance

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
    "dema",
    "identify_support_resistance",
]
