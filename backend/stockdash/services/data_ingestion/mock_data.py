"""
Mock Data Generator

Shape-consistent substitute data returned when a provider request fails.
Randomness and the clock are injectable so tests can pin exact output.
"""

import random
from datetime import datetime, timedelta
from typing import Optional, Union

from stockdash.schemas.market import Bar, Candles, Quote, Timeframe


# Fixed quote constellation: small positive daily move
MOCK_QUOTE = {
    "c": 173.45,
    "h": 175.1,
    "l": 172.3,
    "o": 172.5,
    "pc": 171.2,
}

# Points per timeframe (5Y is approx. trading weeks)
MOCK_SERIES_POINTS = {
    Timeframe.D1.value: 24,
    Timeframe.W1.value: 7,
    Timeframe.M1.value: 30,
    Timeframe.M3.value: 90,
    Timeframe.M6.value: 180,
    Timeframe.Y1.value: 365,
    Timeframe.Y5.value: 260,
}
DEFAULT_SERIES_POINTS = 30

BASE_PRICE = 150.0
PRICE_FLOOR_RATIO = 0.7
MOCK_CANDLE_POINTS = 30


def timeframe_value(timeframe: Union[Timeframe, str]) -> str:
    """Plain string form of a timeframe (enum or raw value)."""
    if isinstance(timeframe, Timeframe):
        return timeframe.value
    return str(timeframe)


def series_length(timeframe: Union[Timeframe, str]) -> int:
    """Number of synthetic bars generated for a timeframe."""
    return MOCK_SERIES_POINTS.get(timeframe_value(timeframe), DEFAULT_SERIES_POINTS) + 1


def _random_volume(rng: random.Random) -> int:
    return int(rng.random() * 10_000_000) + 1_000_000


def generate_mock_quote(now: Optional[datetime] = None) -> Quote:
    """Generate the fixed fallback quote stamped with the current time."""
    if now is None:
        now = datetime.now()
    return Quote(**MOCK_QUOTE, t=int(now.timestamp()))


def generate_mock_series(
    timeframe: Union[Timeframe, str],
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> list[Bar]:
    """
    Generate a biased random-walk series ending at `now`.

    The walk covers points..0 inclusive, so the series has points + 1 bars.
    1D steps back hourly, everything else daily.
    """
    rng = rng or random.Random()
    if now is None:
        now = datetime.now()

    timeframe = timeframe_value(timeframe)
    points = MOCK_SERIES_POINTS.get(timeframe, DEFAULT_SERIES_POINTS)
    intraday = timeframe == Timeframe.D1.value
    floor = BASE_PRICE * PRICE_FLOOR_RATIO

    bars = []
    current_price = BASE_PRICE

    for i in range(points, -1, -1):
        if intraday:
            label = (now - timedelta(hours=i)).strftime("%Y-%m-%d %H:00")
        else:
            label = (now - timedelta(days=i)).strftime("%Y-%m-%d")

        # Random walk
        current_price += (rng.random() - 0.5) * 5
        current_price = max(current_price, floor)

        open_price = current_price
        close_price = open_price + (rng.random() - 0.5) * 3
        high_price = max(open_price, close_price) + rng.random() * 2
        low_price = min(open_price, close_price) - rng.random() * 2

        bars.append(
            Bar(
                date=label,
                open=open_price,
                high=high_price,
                low=low_price,
                close=close_price,
                volume=_random_volume(rng),
            )
        )

    return bars


def generate_mock_candles(
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Candles:
    """Generate 30 daily candles ending one day before `now`."""
    rng = rng or random.Random()
    if now is None:
        now = datetime.now()

    candles = Candles(s="ok")

    for i in range(MOCK_CANDLE_POINTS):
        timestamp = now - timedelta(days=MOCK_CANDLE_POINTS - i)
        open_price = BASE_PRICE + rng.random() * 10
        close_price = open_price + (rng.random() * 10 - 5)
        high_price = max(open_price, close_price) + rng.random() * 5
        low_price = min(open_price, close_price) - rng.random() * 5

        candles.t.append(int(timestamp.timestamp()))
        candles.o.append(open_price)
        candles.c.append(close_price)
        candles.h.append(high_price)
        candles.l.append(low_price)
        candles.v.append(_random_volume(rng))

    return candles
