from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from cryptodash.broker.paper import PaperPortfolio
from cryptodash.broker.risk import compute_risk_parameters, recommended_risk
from cryptodash.cli import display
from cryptodash.core.analysis import analyze_history
from cryptodash.core.config import AppConfig
from cryptodash.core.env import load_local_environment
from cryptodash.core.errors import CryptodashError
from cryptodash.core.logging import get_logger, setup_logging
from cryptodash.core.types import Order
from cryptodash.data.csv_history import CsvPriceHistory
from cryptodash.data.providers import StaticQuotes
from cryptodash.data.validation import closes

# Per-action failures that are reported as rejections instead of aborting the run
REJECTIONS = (CryptodashError, ValueError, KeyError, TypeError, RuntimeError)


def _load_config(path: Optional[str]) -> AppConfig:
    return AppConfig.load(path) if path else AppConfig()


def cmd_analyze(args: argparse.Namespace, cfg: AppConfig) -> int:
    log = get_logger()
    source = Path(args.csv)
    asset_id = args.asset or source.stem
    tolerance = args.risk or cfg.risk.tolerance
    days = args.days or cfg.data.history_days
    try:
        series, snapshot = analyze_history(
            CsvPriceHistory(source), asset_id, days, cfg.indicators,
            timestamps_in_ms=cfg.data.timestamps_in_ms,
        )
        params = compute_risk_parameters(closes(series)[-1], tolerance, args.volatility)
    except (CryptodashError, ValueError, OSError) as e:
        log.warning(f"Analysis of {asset_id} failed: {e}")
        display.render_rejection(str(e))
        return 1

    display.render_indicators(asset_id, snapshot)
    display.render_risk(params, tolerance, recommended_risk(cfg.simulator.initial_balance, tolerance))
    return 0


def _order_from_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    missing = [k for k in ("action", "asset_id", "quantity") if k not in entry]
    if missing:
        raise ValueError(f"order entry missing {', '.join(missing)}: {entry!r}")
    return {
        "action": str(entry["action"]).lower(),
        "asset_id": str(entry["asset_id"]),
        "quantity": entry["quantity"],
        "side": str(entry.get("side", "long")).lower(),
    }


def _apply_entry(sim: PaperPortfolio, quotes: StaticQuotes, entry: Any) -> None:
    if not isinstance(entry, dict):
        raise ValueError(f"order entry must be a mapping, got {entry!r}")
    if "quote" in entry:
        for asset_id, price in dict(entry["quote"]).items():
            quotes.set(asset_id, price)
        return
    if entry.get("reset"):
        sim.reset()
        return
    if entry.get("undo"):
        sim.undo()
        return
    fields = _order_from_entry(entry)
    if entry.get("price") is not None:
        sim.submit_order(Order(price=entry["price"], order_type="limit", **fields))
    else:
        sim.market_order(**fields)


def cmd_simulate(args: argparse.Namespace, cfg: AppConfig) -> int:
    log = get_logger()
    with open(args.orders, "r", encoding="utf-8") as f:
        script = yaml.safe_load(f) or {}

    quotes = StaticQuotes(script.get("quotes") or {})
    sim = PaperPortfolio(starting_cash=cfg.simulator.initial_balance, quotes=quotes)
    entries: List[Any] = list(script.get("orders") or [])

    rejected = 0
    for entry in entries:
        try:
            _apply_entry(sim, quotes, entry)
        except REJECTIONS as e:
            rejected += 1
            display.render_rejection(str(e))

    display.render_positions(sim.portfolio)
    display.render_history(sim.portfolio)
    display.render_portfolio(sim.portfolio, sim.get_valuation(quotes.snapshot()))
    log.info(f"Replayed {len(entries)} entries, {rejected} rejected")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="cryptodash analysis and paper trading")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    p_an = sub.add_parser("analyze", help="Indicators and risk levels for a price history CSV")
    p_an.add_argument("--csv", type=str, required=True, help="CSV with timestamp,price columns")
    p_an.add_argument("--asset", type=str, default=None)
    p_an.add_argument("--risk", choices=["low", "medium", "high"], default=None)
    p_an.add_argument("--volatility", type=float, default=50.0, help="Volatility score 0-100")
    p_an.add_argument("--days", type=int, default=None, help="Trailing rows to analyze (default data.history_days)")

    p_sim = sub.add_parser("simulate", help="Replay a YAML order script through the paper portfolio")
    p_sim.add_argument("--orders", type=str, required=True)

    args = parser.parse_args(argv)

    load_local_environment()
    cfg = _load_config(args.config)
    setup_logging(log_dir=cfg.logging.log_dir, level=cfg.logging.level)

    if args.command == "analyze":
        return cmd_analyze(args, cfg)
    return cmd_simulate(args, cfg)


if __name__ == "__main__":
    raise SystemExit(main())
