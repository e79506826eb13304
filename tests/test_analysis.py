from __future__ import annotations

import numpy as np
import pytest

from cryptodash.core.analysis import analyze, analyze_history
from cryptodash.core.config import IndicatorConfig
from cryptodash.core.errors import InsufficientDataError, InvalidDataError
from cryptodash.core.indicators import compute_bollinger_bands, compute_macd, compute_rsi
from cryptodash.data.csv_history import CsvPriceHistory
from cryptodash.data.validation import closes, validate

DAY_MS = 86_400_000


def _raw(n: int) -> list:
    rng = np.random.default_rng(21)
    prices = 30000.0 * np.cumprod(1.0 + rng.normal(0.0, 0.03, n))
    return [(1_690_000_000_000 + i * DAY_MS, float(p)) for i, p in enumerate(prices)]


def test_snapshot_is_latest_indicator_values() -> None:
    raw = _raw(90)
    snap = analyze(raw)
    prices = closes(validate(raw, 1))

    assert snap.rsi == compute_rsi(prices)[-1]
    macd = compute_macd(prices)
    assert snap.macd.line == macd.macd_line[-1]
    assert snap.macd.histogram == macd.histogram[-1]
    assert snap.bollinger.upper == compute_bollinger_bands(prices).upper[-1]
    assert snap.moving_averages.ma20 == pytest.approx(sum(prices[-20:]) / 20)
    assert snap.moving_averages.ma200 == 0.0
    assert snap.bollinger.upper >= snap.bollinger.middle >= snap.bollinger.lower


def test_snapshot_accepts_validated_series() -> None:
    series = validate(_raw(40), 34)
    assert analyze(series) == analyze(_raw(40))


def test_snapshot_needs_signal_warmup() -> None:
    assert IndicatorConfig().min_history == 34
    with pytest.raises(InsufficientDataError):
        analyze(_raw(30))
    with pytest.raises(InsufficientDataError):
        analyze(validate(_raw(30), 1))
    with pytest.raises(InvalidDataError):
        analyze([])


class _History:
    def __init__(self, raw: list) -> None:
        self.raw = raw
        self.calls: list = []

    def history(self, asset_id: str, days: int) -> list:
        self.calls.append((asset_id, days))
        return self.raw[-days:]


def test_analyze_history_pulls_from_provider() -> None:
    raw = _raw(120)
    provider = _History(raw)
    series, snap = analyze_history(provider, "bitcoin", days=90)

    assert provider.calls == [("bitcoin", 90)]
    assert len(series) == 90
    assert closes(series)[-1] == raw[-1][1]
    assert snap == analyze(raw[-90:])

    with pytest.raises(InsufficientDataError):
        analyze_history(provider, "bitcoin", days=20)


def test_csv_history_serves_file_or_directory(tmp_path) -> None:
    raw = _raw(50)
    text = "timestamp,price\n" + "".join(f"{t},{p}\n" for t, p in raw)
    (tmp_path / "solana.csv").write_text(text, encoding="utf-8")

    by_dir = CsvPriceHistory(tmp_path)
    series, snap = analyze_history(by_dir, "solana", days=40)
    assert len(series) == 40
    assert snap.rsi == pytest.approx(analyze(raw[-40:]).rsi)

    single = CsvPriceHistory(tmp_path / "solana.csv")
    assert single.history("anything", 5) == by_dir.history("solana", 5)
    with pytest.raises(OSError):
        by_dir.history("dogecoin", 5)
