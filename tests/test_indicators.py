from __future__ import annotations

import numpy as np
import pytest

from cryptodash.core.errors import InsufficientDataError, InvalidDataError
from cryptodash.core.indicators import (
    compute_bollinger_bands,
    compute_macd,
    compute_moving_averages,
    compute_rsi,
    ema,
    sma,
)


MACD_PRICES = [
    44.0, 44.5, 43.5, 44.2, 44.8, 45.1, 45.6, 45.2, 44.9, 45.8,
    46.3, 46.1, 46.8, 47.2, 46.9, 47.5, 48.1, 47.7, 48.4, 48.9,
    48.6, 49.2, 49.8, 49.1, 48.7, 49.5, 50.2, 50.8, 50.1, 51.0,
    51.6, 51.2, 50.7, 51.9, 52.4, 52.0, 52.8, 53.3, 52.9, 53.6,
]


def _walk(n: int, seed: int = 7) -> list:
    rng = np.random.default_rng(seed)
    return list(100.0 * np.cumprod(1.0 + rng.normal(0.0, 0.02, n)))


def _ref_ema(values, period):
    k = 2.0 / (period + 1)
    out = [sum(values[:period]) / period]
    for v in values[period:]:
        out.append(v * k + out[-1] * (1 - k))
    return out


def _ref_rsi(prices, period):
    deltas = [b - a for a, b in zip(prices, prices[1:])]
    gains = [max(d, 0.0) for d in deltas]
    losses = [max(-d, 0.0) for d in deltas]
    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    def value(g, l):
        return 100.0 if l == 0 else 100.0 - 100.0 / (1.0 + g / l)

    out = [value(avg_gain, avg_loss)]
    for g, l in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + g) / period
        avg_loss = (avg_loss * (period - 1) + l) / period
        out.append(value(avg_gain, avg_loss))
    return out


def test_rsi_bounded_and_aligned() -> None:
    prices = _walk(120)
    rsi = compute_rsi(prices)
    assert len(rsi) == len(prices) - 14
    assert all(0.0 <= v <= 100.0 for v in rsi)


def test_rsi_matches_wilder_reference() -> None:
    prices = _walk(60, seed=3)
    assert list(compute_rsi(prices, period=14)) == pytest.approx(_ref_rsi(prices, 14), rel=1e-9)


def test_rsi_all_gains_is_100_and_all_losses_is_0() -> None:
    rising = [float(p) for p in range(1, 31)]
    assert all(v == 100.0 for v in compute_rsi(rising))
    falling = list(reversed(rising))
    assert all(v == pytest.approx(0.0) for v in compute_rsi(falling))


def test_rsi_minimum_length() -> None:
    with pytest.raises(InsufficientDataError):
        compute_rsi([float(p) for p in range(1, 15)])
    assert len(compute_rsi([float(p) for p in range(1, 16)])) == 1


def test_rejects_invalid_prices() -> None:
    with pytest.raises(InvalidDataError):
        compute_rsi([1.0] * 10 + ["abc"] + [1.0] * 10)
    with pytest.raises(InvalidDataError):
        compute_bollinger_bands([10.0] * 19 + [-1.0])
    with pytest.raises(InvalidDataError):
        compute_macd([10.0] * 30 + [float("nan")])


def test_macd_matches_reference_ema() -> None:
    result = compute_macd(MACD_PRICES)

    fast = _ref_ema(MACD_PRICES, 12)[26 - 12:]
    slow = _ref_ema(MACD_PRICES, 26)
    line = [f - s for f, s in zip(fast, slow)]
    signal = _ref_ema(line, 9)

    assert len(result.macd_line) == len(MACD_PRICES) - 26 - 9 + 2
    assert list(result.macd_line) == pytest.approx(line[8:], rel=1e-9, abs=1e-12)
    assert list(result.signal_line) == pytest.approx(signal, rel=1e-9, abs=1e-12)


def test_macd_histogram_is_exact_difference() -> None:
    result = compute_macd(_walk(90))
    for line, sig, hist in zip(result.macd_line, result.signal_line, result.histogram):
        assert hist == line - sig


def test_macd_warmup() -> None:
    with pytest.raises(InsufficientDataError):
        compute_macd(MACD_PRICES[:25])
    short = compute_macd(MACD_PRICES[:30])
    assert short.macd_line == () and short.signal_line == () and short.histogram == ()
    assert len(compute_macd(MACD_PRICES[:34]).histogram) == 1


def test_bollinger_ordering_and_values() -> None:
    prices = _walk(80, seed=11)
    bands = compute_bollinger_bands(prices)
    assert len(bands.middle) == len(prices) - 19
    for up, mid, low in zip(bands.upper, bands.middle, bands.lower):
        assert up >= mid >= low

    window = np.array(prices[-20:])
    assert bands.middle[-1] == pytest.approx(window.mean())
    assert bands.upper[-1] == pytest.approx(window.mean() + 2 * window.std())
    assert bands.lower[-1] == pytest.approx(window.mean() - 2 * window.std())


def test_bollinger_flat_series_collapses() -> None:
    bands = compute_bollinger_bands([50.0] * 25)
    assert bands.upper[-1] == pytest.approx(50.0)
    assert bands.lower[-1] == pytest.approx(50.0)
    with pytest.raises(InsufficientDataError):
        compute_bollinger_bands([50.0] * 19)


def test_moving_averages_degrade_to_zero() -> None:
    prices = [float(p) for p in range(1, 61)]
    mas = compute_moving_averages(prices)
    assert mas.ma20 == pytest.approx(sum(prices[-20:]) / 20)
    assert mas.ma50 == pytest.approx(sum(prices[-50:]) / 50)
    assert mas.ma200 == 0.0

    empty = compute_moving_averages([])
    assert (empty.ma20, empty.ma50, empty.ma200) == (0.0, 0.0, 0.0)


def test_sma_and_ema_helpers() -> None:
    assert sma([1.0, 2.0, 3.0, 4.0], 2) == pytest.approx((1.5, 2.5, 3.5))
    assert list(ema(MACD_PRICES, 12)) == pytest.approx(_ref_ema(MACD_PRICES, 12), rel=1e-9)
    with pytest.raises(InsufficientDataError):
        ema([1.0, 2.0], 3)


def test_indicators_are_deterministic() -> None:
    prices = tuple(_walk(100, seed=5))
    assert compute_rsi(prices) == compute_rsi(prices)
    assert compute_macd(prices) == compute_macd(prices)
    assert compute_bollinger_bands(prices) == compute_bollinger_bands(prices)
