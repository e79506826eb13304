from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from cryptodash.core.errors import InsufficientDataError, InvalidDataError
from cryptodash.core.types import BollingerBands, MACDResult, MovingAverages


MA_WINDOWS = (20, 50, 200)


def _as_prices(prices: Sequence[float]) -> np.ndarray:
    series = pd.to_numeric(pd.Series(list(prices), dtype="object"), errors="coerce")
    values = series.to_numpy(dtype=float)
    if values.size and not (np.isfinite(values).all() and (values > 0).all()):
        raise InvalidDataError("Invalid price data: all prices must be finite positive numbers")
    return values


def _require(values: np.ndarray, required: int, what: str) -> None:
    if len(values) < required:
        raise InsufficientDataError(required=required, available=len(values), what=what)


def _check_period(period: int, name: str = "period") -> int:
    period = int(period)
    if period < 1:
        raise ValueError(f"{name} must be >= 1")
    return period


def _seeded_ewm(values: np.ndarray, period: int, alpha: float) -> np.ndarray:
    """Recursive smoothing seeded with the simple mean of the first `period` values.

    Output element 0 corresponds to input index period - 1.
    """
    seed = values[:period].mean()
    seq = pd.Series(np.concatenate(([seed], values[period:])))
    return seq.ewm(alpha=alpha, adjust=False).mean().to_numpy()


def _ema(values: np.ndarray, period: int) -> np.ndarray:
    return _seeded_ewm(values, period, 2.0 / (period + 1))


def sma(prices: Sequence[float], period: int) -> Tuple[float, ...]:
    """Simple moving average over each trailing window of `period` values."""
    period = _check_period(period)
    values = _as_prices(prices)
    _require(values, period, "SMA calculation")
    return tuple(pd.Series(values).rolling(window=period).mean().iloc[period - 1:].tolist())


def ema(prices: Sequence[float], period: int) -> Tuple[float, ...]:
    """Exponential moving average seeded with the SMA of the first `period` values."""
    period = _check_period(period)
    values = _as_prices(prices)
    _require(values, period, "EMA calculation")
    return tuple(_ema(values, period).tolist())


def compute_rsi(prices: Sequence[float], period: int = 14) -> Tuple[float, ...]:
    """Relative Strength Index with Wilder smoothing.

    Average gain/loss are seeded with the plain mean of the first `period`
    deltas and smoothed recursively afterwards. A window without losses reads
    100. Returns len(prices) - period values.
    """
    period = _check_period(period)
    values = _as_prices(prices)
    _require(values, period + 1, "RSI calculation")

    delta = np.diff(values)
    gain = np.clip(delta, 0.0, None)
    loss = np.clip(-delta, 0.0, None)
    avg_gain = _seeded_ewm(gain, period, 1.0 / period)
    avg_loss = _seeded_ewm(loss, period, 1.0 / period)

    rsi = np.full(avg_gain.shape, 100.0)
    has_loss = avg_loss > 0
    rs = avg_gain[has_loss] / avg_loss[has_loss]
    rsi[has_loss] = 100.0 - (100.0 / (1.0 + rs))
    return tuple(rsi.tolist())


def compute_macd(
    prices: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """MACD line, signal line and histogram.

    All three outputs are aligned to the signal line, so they are empty until
    slow + signal - 1 prices are available.
    """
    fast = _check_period(fast, "fast")
    slow = _check_period(slow, "slow")
    signal = _check_period(signal, "signal")
    if fast >= slow:
        raise ValueError("fast period must be shorter than slow period")
    values = _as_prices(prices)
    _require(values, slow, "MACD calculation")

    ema_fast = _ema(values, fast)[slow - fast:]
    ema_slow = _ema(values, slow)
    line = ema_fast - ema_slow

    if len(line) < signal:
        return MACDResult(macd_line=(), signal_line=(), histogram=())

    signal_line = _ema(line, signal)
    line = line[signal - 1:]
    histogram = line - signal_line
    return MACDResult(
        macd_line=tuple(line.tolist()),
        signal_line=tuple(signal_line.tolist()),
        histogram=tuple(histogram.tolist()),
    )


def compute_bollinger_bands(prices: Sequence[float], period: int = 20, std_dev: float = 2.0) -> BollingerBands:
    """SMA middle band with bands at +/- std_dev population standard deviations."""
    period = _check_period(period)
    if std_dev < 0:
        raise ValueError("std_dev must be non-negative")
    values = _as_prices(prices)
    _require(values, period, "Bollinger Bands calculation")

    close = pd.Series(values)
    middle = close.rolling(window=period).mean().iloc[period - 1:]
    std = close.rolling(window=period).std(ddof=0).iloc[period - 1:]
    upper = middle + (std * std_dev)
    lower = middle - (std * std_dev)
    return BollingerBands(
        upper=tuple(upper.tolist()),
        middle=tuple(middle.tolist()),
        lower=tuple(lower.tolist()),
    )


def compute_moving_averages(prices: Sequence[float]) -> MovingAverages:
    """SMA of the last 20/50/200 prices; 0.0 for any window longer than the series."""
    values = _as_prices(prices)

    def _tail_mean(window: int) -> float:
        if len(values) < window:
            return 0.0
        return float(values[-window:].mean())

    ma20, ma50, ma200 = (_tail_mean(w) for w in MA_WINDOWS)
    return MovingAverages(ma20=ma20, ma50=ma50, ma200=ma200)
