"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the dashboard indicators.
All math is deterministic.

Moving averages keep index parity with their input: positions without
enough history hold 0.0 so chart series stay aligned with dates.
"""

import math

import numpy as np

from stockdash.schemas.indicators import MAX_LEVELS


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average, zero-padded to the input length.

    Seeded with the simple average of the first `period` values at index
    period - 1. Shorter input yields all zeros.
    """
    if period < 1:
        raise ValueError(f"EMA period must be >= 1, got {period}")

    data = np.asarray(data, dtype=float)
    result = np.zeros(len(data))
    if len(data) < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    result[period - 1] = sum(data[:period]) / period

    for i in range(period, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


def dema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Double Exponential Moving Average: 2 * EMA - EMA(EMA).

    The inner EMA is taken over the zero-padded first EMA, padding included.
    """
    data = np.asarray(data, dtype=float)
    if len(data) < period:
        return np.zeros(len(data))

    ema1 = ema(data, period)
    ema2 = ema(ema1, period)

    return 2 * ema1 - ema2


# =============================================================================
# SUPPORT/RESISTANCE
# =============================================================================


def _relative_distance(level: float, candidate: float) -> float:
    if candidate == 0:
        return 0.0 if level == 0 else math.inf
    return abs(level - candidate) / candidate


def _add_level(levels: list[float], candidate: float, threshold: float) -> None:
    """Append candidate unless it lies within threshold of an accepted level."""
    for level in levels:
        if _relative_distance(level, candidate) < threshold:
            return
    levels.append(float(candidate))


def identify_support_resistance(
    prices: np.ndarray, sensitivity: float, lookback: int
) -> tuple[list[float], list[float]]:
    """
    Find support and resistance levels using symmetric-window extrema.

    A point is a local minimum (support) when nothing within `lookback`
    bars on either side is strictly lower, and a local maximum (resistance)
    when nothing is strictly higher. Levels closer than `sensitivity`
    percent to an earlier level are dropped; the first 5 of each survive.

    Returns: (support_levels, resistance_levels)
    """
    if lookback < 1:
        raise ValueError(f"Lookback must be >= 1, got {lookback}")

    prices = np.asarray(prices, dtype=float)
    if len(prices) < lookback:
        return [], []

    threshold = sensitivity / 100
    support: list[float] = []
    resistance: list[float] = []

    for i in range(lookback, len(prices) - lookback):
        window = prices[i - lookback : i + lookback + 1]
        price = prices[i]

        if not np.any(window < price):
            _add_level(support, price, threshold)

        if not np.any(window > price):
            _add_level(resistance, price, threshold)

    return support[:MAX_LEVELS], resistance[:MAX_LEVELS]
