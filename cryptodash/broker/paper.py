from __future__ import annotations

import math
import time
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Optional

from cryptodash.core.errors import (
    CryptodashError,
    InsufficientFundsError,
    InsufficientPositionError,
    InvalidDataError,
)
from cryptodash.core.logging import get_order_logger
from cryptodash.core.types import Order, Portfolio, Position, Trade, Valuation
from cryptodash.data.providers import QuoteProvider


DEFAULT_STARTING_CASH = 10000.0

# Float residue below this is treated as zero quantity
QTY_EPSILON = 1e-9


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _positive(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise InvalidDataError(f"Order {name} must be a finite positive number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidDataError(f"Order {name} must be a finite positive number, got {value!r}") from None
    if not math.isfinite(number) or number <= 0:
        raise InvalidDataError(f"Order {name} must be a finite positive number, got {value!r}")
    return number


def _check_order(order: Order) -> Order:
    """Validate an order and return it with float quantity and price."""
    if order.action not in ("buy", "sell"):
        raise ValueError(f"Unknown order action: {order.action!r}")
    if order.side not in ("long", "short"):
        raise ValueError(f"Unknown position side: {order.side!r}")
    return replace(
        order,
        quantity=_positive("quantity", order.quantity),
        price=_positive("price", order.price),
    )


def _apply_buy(portfolio: Portfolio, order: Order, now: float) -> Portfolio:
    funds = order.quantity * order.price
    if funds > portfolio.balance:
        raise InsufficientFundsError(required=funds, available=portfolio.balance)

    position = Position(
        id=_new_id("pos"),
        asset_id=order.asset_id,
        quantity=float(order.quantity),
        entry_price=float(order.price),
        opened_at=now,
        side=order.side,
    )
    trade = Trade(
        id=_new_id("trade"),
        asset_id=order.asset_id,
        quantity=float(order.quantity),
        price=float(order.price),
        timestamp=now,
        action="buy",
        side=order.side,
    )
    return Portfolio(
        balance=portfolio.balance - funds,
        positions=portfolio.positions + (position,),
        history=(trade,) + portfolio.history,
    )


def _apply_sell(portfolio: Portfolio, order: Order, now: float) -> Portfolio:
    lots = sorted(
        (p for p in portfolio.positions if p.asset_id == order.asset_id and p.side == order.side),
        key=lambda p: p.opened_at,
    )
    available = sum(p.quantity for p in lots)
    if available + QTY_EPSILON < order.quantity:
        raise InsufficientPositionError(
            asset_id=order.asset_id, side=order.side, requested=order.quantity, available=available
        )

    # Dry run over the FIFO lots; nothing is committed until every check passed
    remaining = float(order.quantity)
    updated: Dict[str, Optional[Position]] = {}
    trades: List[Trade] = []
    credit = 0.0
    for lot in lots:
        if remaining <= QTY_EPSILON:
            break
        if lot.quantity <= remaining + QTY_EPSILON:
            consumed = lot.quantity
            updated[lot.id] = None
        else:
            consumed = remaining
            updated[lot.id] = replace(lot, quantity=lot.quantity - consumed, state="PARTIALLY_CLOSED")
        remaining -= consumed

        sale_value = consumed * order.price
        cost_basis = consumed * lot.entry_price
        if lot.side == "long":
            pnl = sale_value - cost_basis
            credit += sale_value
        else:
            pnl = cost_basis - sale_value
            credit += cost_basis + pnl
        trades.append(Trade(
            id=_new_id("trade"),
            asset_id=order.asset_id,
            quantity=consumed,
            price=float(order.price),
            timestamp=now,
            action="sell",
            side=lot.side,
            realized_pnl=pnl,
        ))

    balance = portfolio.balance + credit
    if balance < 0:
        # A short covered far above its entry owes more than the account holds
        raise InsufficientFundsError(required=-credit, available=portfolio.balance)

    positions = []
    for p in portfolio.positions:
        if p.id in updated:
            if updated[p.id] is not None:
                positions.append(updated[p.id])
        else:
            positions.append(p)
    return Portfolio(
        balance=balance,
        positions=tuple(positions),
        history=tuple(trades) + portfolio.history,
    )


def submit_order(portfolio: Portfolio, order: Order, now: Optional[float] = None) -> Portfolio:
    """Apply one order to a portfolio snapshot and return the resulting snapshot.

    The input snapshot is never modified. A rejected order raises before any
    new state is produced, so callers either get the fully applied order or
    the exception.
    """
    order = _check_order(order)
    ts = time.time() if now is None else float(now)
    if order.action == "buy":
        return _apply_buy(portfolio, order, ts)
    return _apply_sell(portfolio, order, ts)


def valuation(portfolio: Portfolio, prices_by_asset: Mapping[str, float]) -> Valuation:
    position_value = 0.0
    unrealized = 0.0
    cost_basis = 0.0
    for pos in portfolio.positions:
        price = float(prices_by_asset.get(pos.asset_id, pos.entry_price))
        current = pos.quantity * price
        initial = pos.quantity * pos.entry_price
        position_value += current
        cost_basis += initial
        unrealized += (current - initial) if pos.side == "long" else (initial - current)
    return Valuation(
        position_value=position_value,
        unrealized_pnl=unrealized,
        cost_basis=cost_basis,
        equity=portfolio.balance + cost_basis + unrealized,
    )


class PaperPortfolio:
    """Virtual trading account. Owns the current Portfolio snapshot and its audit trail."""

    def __init__(
        self,
        starting_cash: float = DEFAULT_STARTING_CASH,
        quotes: Optional[QuoteProvider] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.starting_cash = float(starting_cash)
        self.quotes = quotes
        self._clock = clock
        self.portfolio = Portfolio(balance=self.starting_cash)
        self.audit_log: List[Portfolio] = [self.portfolio]
        self._undo: List[Portfolio] = []

    @property
    def balance(self) -> float:
        return self.portfolio.balance

    def submit_order(self, order: Order) -> Portfolio:
        olog = get_order_logger("order", action=str(order.action), side=str(order.side), asset_id=str(order.asset_id))
        try:
            new_state = submit_order(self.portfolio, order, now=self._clock())
        except (CryptodashError, ValueError) as e:
            olog.bind(event="rejected").warning(f"qty={order.quantity!r} price={order.price!r}: {e}")
            raise
        self._undo.append(self.portfolio)
        self.portfolio = new_state
        self.audit_log.append(new_state)
        olog.bind(event="filled").info(
            f"qty={float(order.quantity):g} @ {float(order.price):.2f} | balance {new_state.balance:.2f}"
        )
        return new_state

    def market_order(self, action: str, asset_id: str, quantity: float, side: str = "long") -> Portfolio:
        if self.quotes is None:
            raise RuntimeError("market orders need a quote provider")
        price = self.quotes.quote(asset_id)
        order = Order(action=action, asset_id=asset_id, quantity=quantity, price=price, side=side, order_type="market")
        return self.submit_order(order)

    def undo(self) -> Portfolio:
        if not self._undo:
            raise RuntimeError("nothing to undo")
        self.portfolio = self._undo.pop()
        self.audit_log.append(self.portfolio)
        get_order_logger("undo").info(f"balance restored to {self.portfolio.balance:.2f}")
        return self.portfolio

    def reset(self) -> None:
        self.portfolio = Portfolio(balance=self.starting_cash)
        self._undo.clear()
        self.audit_log.append(self.portfolio)
        get_order_logger("reset").info(f"balance {self.starting_cash:.2f}")

    def get_valuation(self, prices_by_asset: Mapping[str, float]) -> Valuation:
        return valuation(self.portfolio, prices_by_asset)

    def max_buy(self, price: float) -> float:
        if price <= 0:
            return 0.0
        return math.floor((self.portfolio.balance / price) * 100) / 100

    def max_sell(self, asset_id: str, side: str = "long") -> float:
        return sum(p.quantity for p in self.portfolio.positions if p.asset_id == asset_id and p.side == side)
