from __future__ import annotations

import os
from pathlib import Path

from loguru import logger as _logger


ORDER_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {extra[event]: <8} | "
    "{extra[action]} {extra[side]} {extra[asset_id]} | {message}"
)


def _is_order_record(record: dict) -> bool:
    return record["extra"].get("component") == "orders"


def setup_logging(log_dir: str = "logs", level: str = "INFO") -> None:
    """Console + cryptodash.log for everything, orders.log for the order audit trail.

    CRYPTODASH_LOG_LEVEL overrides `level`; CRYPTODASH_DISABLE_CONSOLE_LOG=1
    silences the console sink.
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    level = str(os.getenv("CRYPTODASH_LOG_LEVEL", level)).upper()

    _logger.remove()
    if str(os.getenv("CRYPTODASH_DISABLE_CONSOLE_LOG", "0")).lower() not in {"1", "true", "yes"}:
        _logger.add(
            sink=lambda msg: print(msg, end=""),
            level=level,
            colorize=True,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}",
            backtrace=False,
            diagnose=False,
        )
    _logger.add(
        Path(log_dir) / "cryptodash.log",
        rotation="10 MB",
        retention=10,
        level=level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
    )
    # Fills, rejections, undo and reset only; kept at INFO regardless of the console level
    _logger.add(
        Path(log_dir) / "orders.log",
        rotation="1 day",
        retention=30,
        level="INFO",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        filter=_is_order_record,
        format=ORDER_LOG_FORMAT,
    )


def get_logger() -> _logger.__class__:
    return _logger


def get_order_logger(event: str, action: str = "-", side: str = "-", asset_id: str = "-") -> _logger.__class__:
    """Logger bound for the order audit trail (orders.log)."""
    return _logger.bind(component="orders", event=event, action=action, side=side, asset_id=asset_id)
