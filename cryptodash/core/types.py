from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple


@dataclass(frozen=True)
class PricePoint:
    time: int  # epoch seconds
    value: float


PriceSeries = Tuple[PricePoint, ...]


@dataclass(frozen=True)
class MACDResult:
    macd_line: Tuple[float, ...]
    signal_line: Tuple[float, ...]
    histogram: Tuple[float, ...]


@dataclass(frozen=True)
class BollingerBands:
    upper: Tuple[float, ...]
    middle: Tuple[float, ...]
    lower: Tuple[float, ...]


@dataclass(frozen=True)
class MovingAverages:
    ma20: float
    ma50: float
    ma200: float


@dataclass(frozen=True)
class MACDValue:
    line: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BandValue:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class IndicatorSnapshot:
    rsi: float
    macd: MACDValue
    bollinger: BandValue
    moving_averages: MovingAverages


Action = Literal["buy", "sell"]
PositionSide = Literal["long", "short"]
OrderType = Literal["market", "limit"]
PositionState = Literal["OPEN", "PARTIALLY_CLOSED"]
RiskTolerance = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class Order:
    action: Action
    asset_id: str
    quantity: float
    price: float  # execution price
    side: PositionSide = "long"
    order_type: OrderType = "market"


@dataclass(frozen=True)
class Position:
    id: str
    asset_id: str
    quantity: float
    entry_price: float
    opened_at: float  # epoch seconds
    side: PositionSide
    state: PositionState = "OPEN"


@dataclass(frozen=True)
class Trade:
    id: str
    asset_id: str
    quantity: float
    price: float
    timestamp: float
    action: Action
    side: PositionSide
    realized_pnl: Optional[float] = None  # sells only


@dataclass(frozen=True)
class Portfolio:
    balance: float
    positions: Tuple[Position, ...] = ()  # oldest first
    history: Tuple[Trade, ...] = ()  # newest first


@dataclass(frozen=True)
class Valuation:
    position_value: float
    unrealized_pnl: float
    cost_basis: float
    equity: float


@dataclass(frozen=True)
class RiskParams:
    stop_loss_price: float
    take_profit_price: float
    stop_loss_pct: float
    take_profit_pct: float
