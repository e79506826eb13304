from __future__ import annotations

from typing import Dict, List, Mapping, Protocol, Tuple


class PriceHistoryProvider(Protocol):
    """Daily (timestamp_ms, price) pairs for an asset, e.g. CoinGecko market_chart.

    Retry and rate-limit backoff are the provider's concern.
    """

    def history(self, asset_id: str, days: int) -> List[Tuple[int, float]]:
        ...


class QuoteProvider(Protocol):
    def quote(self, asset_id: str) -> float:
        ...


class StaticQuotes:
    """In-memory quote book; prices are set by the caller."""

    def __init__(self, prices: Mapping[str, float] | None = None) -> None:
        self._prices: Dict[str, float] = {k: float(v) for k, v in (prices or {}).items()}

    def set(self, asset_id: str, price: float) -> None:
        self._prices[asset_id] = float(price)

    def quote(self, asset_id: str) -> float:
        try:
            return self._prices[asset_id]
        except KeyError:
            raise KeyError(f"No quote for {asset_id}") from None

    def snapshot(self) -> Dict[str, float]:
        return dict(self._prices)
