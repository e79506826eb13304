from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Set, Tuple

from loguru import logger as log

from cryptodash.core.errors import InsufficientDataError, InvalidDataError
from cryptodash.core.types import PricePoint, PriceSeries


def _to_price(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def _to_time(raw: Any, timestamps_in_ms: bool) -> Optional[int]:
    if not raw or isinstance(raw, bool):
        return None
    try:
        ts = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ts):
        return None
    return int(ts // 1000) if timestamps_in_ms else int(ts)


def validate(
    raw_series: Iterable[Any],
    min_length: int,
    *,
    timestamps_in_ms: bool = True,
) -> PriceSeries:
    """Clean a raw feed of (timestamp, price) pairs into a time-ordered PriceSeries.

    Pairs with a falsy or non-numeric timestamp, a price that is not a finite
    positive number, or a timestamp already seen are dropped. Millisecond
    timestamps (CoinGecko market_chart) are floored to epoch seconds.

    Raises InvalidDataError when no usable point remains and
    InsufficientDataError when fewer than `min_length` points remain.
    """
    points: List[PricePoint] = []
    seen: Set[int] = set()
    dropped = 0
    for item in raw_series:
        try:
            raw_ts, raw_price = item
        except (TypeError, ValueError):
            dropped += 1
            continue
        ts = _to_time(raw_ts, timestamps_in_ms)
        price = _to_price(raw_price)
        if ts is None or price is None or ts in seen:
            dropped += 1
            continue
        seen.add(ts)
        points.append(PricePoint(time=ts, value=price))

    if dropped:
        log.debug(f"validate: dropped {dropped} malformed price points")
    if not points:
        raise InvalidDataError("No valid price data points")
    if len(points) < min_length:
        raise InsufficientDataError(required=min_length, available=len(points), what="price series")

    points.sort(key=lambda p: p.time)
    return tuple(points)


def closes(series: PriceSeries) -> Tuple[float, ...]:
    return tuple(p.value for p in series)
