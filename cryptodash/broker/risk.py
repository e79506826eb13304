from __future__ import annotations

import math
from typing import Dict

from cryptodash.core.errors import InvalidDataError
from cryptodash.core.types import RiskParams


STOP_LOSS_MULTIPLIER: Dict[str, float] = {"low": 0.8, "medium": 1.0, "high": 1.5}
TAKE_PROFIT_MULTIPLIER: Dict[str, float] = {"low": 2.0, "medium": 2.5, "high": 3.0}
CAPITAL_AT_RISK: Dict[str, float] = {"low": 0.01, "medium": 0.03, "high": 0.05}

MIN_VOLATILITY_PCT = 2.0
MAX_VOLATILITY_PCT = 15.0


def _tolerance(risk_tolerance: str) -> str:
    key = str(risk_tolerance).lower()
    if key not in STOP_LOSS_MULTIPLIER:
        raise ValueError(f"Unknown risk tolerance: {risk_tolerance!r} (expected low, medium or high)")
    return key


def normalized_volatility(volatility_score: float) -> float:
    """Map a 0-100 volatility score onto a 2%-15% stop distance."""
    score = float(volatility_score)
    if not (0.0 <= score <= 100.0):
        raise ValueError("volatility_score must be within [0, 100]")
    return MIN_VOLATILITY_PCT + (score / 100.0) * (MAX_VOLATILITY_PCT - MIN_VOLATILITY_PCT)


def compute_risk_parameters(current_price: float, risk_tolerance: str, volatility_score: float) -> RiskParams:
    """
    Stop-loss and take-profit levels for a position opened at current_price.

    stop_loss_pct = normalized volatility x tolerance multiplier (0.8/1.0/1.5)
    take_profit_pct = stop_loss_pct x reward multiplier (2.0/2.5/3.0)
    """
    price = float(current_price)
    if not math.isfinite(price) or price <= 0:
        raise InvalidDataError("current_price must be a finite positive number")
    key = _tolerance(risk_tolerance)

    stop_loss_pct = normalized_volatility(volatility_score) * STOP_LOSS_MULTIPLIER[key]
    take_profit_pct = stop_loss_pct * TAKE_PROFIT_MULTIPLIER[key]
    return RiskParams(
        stop_loss_price=price * (1 - stop_loss_pct / 100.0),
        take_profit_price=price * (1 + take_profit_pct / 100.0),
        stop_loss_pct=stop_loss_pct,
        take_profit_pct=take_profit_pct,
    )


def recommended_risk(capital: float, risk_tolerance: str) -> float:
    """Amount of capital to put at risk on a single trade."""
    return float(capital) * CAPITAL_AT_RISK[_tolerance(risk_tolerance)]


def volatility_score(price_change_pct_24h: float) -> float:
    # Dashboard gauge: twice the absolute 24h move, capped at 100
    return max(0.0, min(100.0, abs(float(price_change_pct_24h)) * 2.0))


def trend_strength(price_change_pct_7d: float) -> float:
    # Three times the absolute 7d move, capped at 100
    return min(abs(float(price_change_pct_7d)) * 3.0, 100.0)


def risk_level(score: float) -> str:
    if score < 30:
        return "low"
    if score < 70:
        return "moderate"
    return "high"
