from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import pandas as pd


def load_price_csv(path: str | Path, time_col: str = "timestamp", price_col: str = "price") -> List[Tuple[object, object]]:
    """Read a `timestamp,price` CSV export into raw pairs for `validate`.

    Values are passed through untouched; bad rows are the validator's job.
    """
    df = pd.read_csv(path)
    missing = [c for c in (time_col, price_col) if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing column(s) {', '.join(missing)}")
    return list(zip(df[time_col].tolist(), df[price_col].tolist()))


class CsvPriceHistory:
    """PriceHistoryProvider over one CSV export per asset: <directory>/<asset_id>.csv.

    A single file can be served for any asset id by passing its path directly.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _file_for(self, asset_id: str) -> Path:
        return self.path if self.path.is_file() else self.path / f"{asset_id}.csv"

    def history(self, asset_id: str, days: int) -> List[Tuple[object, object]]:
        rows = load_price_csv(self._file_for(asset_id))
        return rows[-int(days):] if days > 0 else []
