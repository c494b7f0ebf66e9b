"""
Indicator API Endpoints

Indicator calculation over a caller-supplied close-price series.
"""

from fastapi import APIRouter

from stockdash.schemas.indicators import IndicatorRequest, IndicatorSet
from stockdash.services.indicators import get_indicator_service

router = APIRouter()


@router.post("/calculate", response_model=IndicatorSet)
async def calculate_indicators(request: IndicatorRequest):
    """DEMA lines and support/resistance levels for the given prices."""
    service = get_indicator_service()
    return await service.execute(request)
