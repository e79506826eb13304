from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from loguru import logger as log

from cryptodash.core.config import IndicatorConfig
from cryptodash.core.errors import InsufficientDataError
from cryptodash.core.indicators import (
    compute_bollinger_bands,
    compute_macd,
    compute_moving_averages,
    compute_rsi,
)
from cryptodash.core.types import BandValue, IndicatorSnapshot, MACDValue, PricePoint, PriceSeries
from cryptodash.data.providers import PriceHistoryProvider
from cryptodash.data.validation import closes, validate


def analyze(
    series: Union[Sequence[PricePoint], Iterable[Any]],
    config: Optional[IndicatorConfig] = None,
    *,
    timestamps_in_ms: bool = True,
) -> IndicatorSnapshot:
    """Latest value of every indicator for a price history.

    `series` is either an already validated PriceSeries or raw
    (timestamp, price) pairs, which are validated first.
    """
    cfg = config or IndicatorConfig()
    series = list(series)
    if not series or not all(isinstance(p, PricePoint) for p in series):
        series = validate(series, cfg.min_history, timestamps_in_ms=timestamps_in_ms)
    prices = closes(series)
    if len(prices) < cfg.min_history:
        raise InsufficientDataError(required=cfg.min_history, available=len(prices), what="indicator snapshot")

    rsi = compute_rsi(prices, period=cfg.rsi_period)
    macd = compute_macd(prices, fast=cfg.macd_fast, slow=cfg.macd_slow, signal=cfg.macd_signal)
    bands = compute_bollinger_bands(prices, period=cfg.bollinger_period, std_dev=cfg.bollinger_std_dev)
    mas = compute_moving_averages(prices)

    snapshot = IndicatorSnapshot(
        rsi=rsi[-1],
        macd=MACDValue(line=macd.macd_line[-1], signal=macd.signal_line[-1], histogram=macd.histogram[-1]),
        bollinger=BandValue(upper=bands.upper[-1], middle=bands.middle[-1], lower=bands.lower[-1]),
        moving_averages=mas,
    )
    log.debug(
        f"analyze: {len(prices)} points | rsi {snapshot.rsi:.2f} | macd {snapshot.macd.line:.2f}/"
        f"{snapshot.macd.signal:.2f} | bb {snapshot.bollinger.lower:.2f}-{snapshot.bollinger.upper:.2f}"
    )
    return snapshot


def analyze_history(
    provider: PriceHistoryProvider,
    asset_id: str,
    days: int = 90,
    config: Optional[IndicatorConfig] = None,
    *,
    timestamps_in_ms: bool = True,
) -> Tuple[PriceSeries, IndicatorSnapshot]:
    """Pull `days` of daily history from a provider, validate it and snapshot it.

    Returns the validated series too, so callers can read the latest close.
    """
    cfg = config or IndicatorConfig()
    series = validate(provider.history(asset_id, days), cfg.min_history, timestamps_in_ms=timestamps_in_ms)
    return series, analyze(series, cfg)
