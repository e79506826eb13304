from __future__ import annotations

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cryptodash.core.types import IndicatorSnapshot, Portfolio, RiskParams, Valuation


console = Console()


def _fmt_time(ts: float) -> str:
    try:
        return datetime.fromtimestamp(float(ts)).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return "-"


def _fmt_pnl(value: Optional[float]) -> str:
    if value is None:
        return "-"
    color = "green" if value >= 0 else "red"
    return f"[{color}]{value:+,.2f}[/{color}]"


def render_indicators(asset_id: str, snap: IndicatorSnapshot) -> None:
    table = Table(title=f"Technical Indicators: {asset_id}")
    table.add_column("Indicator")
    table.add_column("Value", justify="right")
    table.add_row("RSI", f"{snap.rsi:.2f}")
    table.add_row("MACD line", f"{snap.macd.line:.4f}")
    table.add_row("MACD signal", f"{snap.macd.signal:.4f}")
    table.add_row("MACD histogram", f"{snap.macd.histogram:.4f}")
    table.add_row("Bollinger upper", f"{snap.bollinger.upper:,.2f}")
    table.add_row("Bollinger middle", f"{snap.bollinger.middle:,.2f}")
    table.add_row("Bollinger lower", f"{snap.bollinger.lower:,.2f}")
    for name, value in (("MA20", snap.moving_averages.ma20), ("MA50", snap.moving_averages.ma50),
                        ("MA200", snap.moving_averages.ma200)):
        table.add_row(name, f"{value:,.2f}" if value else "n/a")
    console.print(table)


def render_risk(params: RiskParams, tolerance: str, position_risk: float) -> None:
    table = Table(title=f"Risk Parameters ({tolerance})")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Stop loss", f"${params.stop_loss_price:,.2f} (-{params.stop_loss_pct:.2f}%)")
    table.add_row("Take profit", f"${params.take_profit_price:,.2f} (+{params.take_profit_pct:.2f}%)")
    table.add_row("Capital at risk", f"${position_risk:,.2f}")
    console.print(table)


def render_portfolio(portfolio: Portfolio, val: Valuation) -> None:
    table = Table(title="Portfolio Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Balance", f"${portfolio.balance:,.2f}")
    table.add_row("Position value", f"${val.position_value:,.2f}")
    table.add_row("Unrealized PnL", _fmt_pnl(val.unrealized_pnl))
    table.add_row("Equity", f"${val.equity:,.2f}")
    console.print(table)


def render_positions(portfolio: Portfolio) -> None:
    if not portfolio.positions:
        console.print(Panel("No open positions", title="Positions"))
        return
    table = Table(title="Open Positions")
    table.add_column("Opened")
    table.add_column("Asset")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("State")
    for p in portfolio.positions:
        table.add_row(_fmt_time(p.opened_at), p.asset_id, p.side.upper(), f"{p.quantity:.6f}",
                      f"{p.entry_price:,.2f}", p.state)
    console.print(table)


def render_history(portfolio: Portfolio, limit: int = 20) -> None:
    table = Table(title="Trade History")
    table.add_column("Time")
    table.add_column("Asset")
    table.add_column("Action")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Realized PnL", justify="right")
    for t in portfolio.history[:limit]:
        table.add_row(_fmt_time(t.timestamp), t.asset_id, t.action.upper(), t.side, f"{t.quantity:.6f}",
                      f"{t.price:,.2f}", _fmt_pnl(t.realized_pnl))
    console.print(table)


def render_rejection(message: str) -> None:
    console.print(f"[red]Rejected:[/red] {message}")
