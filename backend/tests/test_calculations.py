import numpy as np
import pytest

from stockdash.services.indicators.calculations import (
    dema,
    ema,
    identify_support_resistance,
)


def test_ema_keeps_input_length_and_zero_pads_warmup() -> None:
    prices = [float(i) for i in range(1, 11)]

    result = ema(prices, 3)

    assert len(result) == len(prices)
    assert list(result[:2]) == [0.0, 0.0]
    # Seed is the simple average of the first three values
    assert result[2] == pytest.approx(2.0)
    assert result[3] == pytest.approx(3.0)
    assert result[-1] == pytest.approx(9.0)


@pytest.mark.parametrize("period", [1, 5, 10])
def test_ema_length_matches_input_for_any_period(period: int) -> None:
    prices = np.linspace(100, 120, 10)

    result = ema(prices, period)

    assert len(result) == 10
    assert np.all(result[: period - 1] == 0)
    assert result[period - 1] != 0


def test_ema_period_one_is_identity() -> None:
    prices = [3.0, 1.0, 4.0, 1.0, 5.0]

    assert list(ema(prices, 1)) == prices


def test_ema_shorter_than_period_is_all_zeros() -> None:
    assert list(ema([1.0, 2.0], 5)) == [0.0, 0.0]
    assert len(ema([], 3)) == 0


def test_ema_rejects_non_positive_period() -> None:
    with pytest.raises(ValueError):
        ema([1.0, 2.0, 3.0], 0)


def test_dema_shorter_than_period_is_all_zeros() -> None:
    result = dema([10.0, 11.0, 12.0], 9)

    assert list(result) == [0.0, 0.0, 0.0]


def test_dema_smooths_over_zero_padded_inner_ema() -> None:
    # EMA1 = [0, 1.5, 2.5, 3.5, 4.5]; EMA2 is seeded with mean(0, 1.5)
    result = dema([1.0, 2.0, 3.0, 4.0, 5.0], 2)

    assert list(result) == pytest.approx([0.0, 2.25, 37 / 12, 145 / 36, 541 / 108])


def test_dema_warmup_padding_for_default_periods() -> None:
    prices = [100.0 + (i % 7) for i in range(30)]

    short = dema(prices, 9)
    long = dema(prices, 21)

    assert len(short) == 30
    assert len(long) == 30
    assert np.all(short[:8] == 0)
    assert short[8] != 0
    assert np.all(long[:20] == 0)
    assert long[20] != 0


def test_support_resistance_on_monotone_series_is_empty() -> None:
    prices = [float(i) for i in range(1, 21)]

    support, resistance = identify_support_resistance(prices, 3, 3)

    assert support == []
    assert resistance == []


def test_support_resistance_finds_window_extrema_in_scan_order() -> None:
    prices = [5, 4, 3, 4, 5, 6, 7, 6, 5, 6, 7]

    support, resistance = identify_support_resistance(prices, 3, 2)

    assert support == [3.0, 5.0]
    assert resistance == [7.0]


def test_support_resistance_drops_levels_within_sensitivity() -> None:
    prices = [10, 9, 8, 9, 10, 9, 8.1, 9, 10]

    support, _ = identify_support_resistance(prices, 3, 2)
    assert support == [8.0]

    # 8.1 is ~1.2% away from 8.0: kept when sensitivity is 1%
    support, _ = identify_support_resistance(prices, 1, 2)
    assert support == [8.0, 8.1]


def test_support_resistance_caps_each_side_at_five_levels() -> None:
    prices = []
    for k in range(12):
        prices.append(100.0 + 10 * k)
        prices.append(10.0 + 10 * k)

    support, resistance = identify_support_resistance(prices, 3, 1)

    assert support == [10.0, 20.0, 30.0, 40.0, 50.0]
    assert resistance == [110.0, 120.0, 130.0, 140.0, 150.0]


def test_support_resistance_flat_window_is_both_min_and_max() -> None:
    support, resistance = identify_support_resistance([5.0] * 5, 3, 1)

    assert support == [5.0]
    assert resistance == [5.0]


def test_support_resistance_insufficient_data() -> None:
    assert identify_support_resistance([1.0, 2.0], 3, 5) == ([], [])
    # Enough for the precondition but no index has a full window
    assert identify_support_resistance([1.0, 0.5, 2.0], 3, 2) == ([], [])


def test_support_resistance_rejects_non_positive_lookback() -> None:
    with pytest.raises(ValueError):
        identify_support_resistance([1.0, 2.0, 3.0], 3, 0)
