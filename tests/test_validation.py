from __future__ import annotations

import pytest

from cryptodash.core.errors import InsufficientDataError, InvalidDataError
from cryptodash.core.types import PricePoint
from cryptodash.data.validation import closes, validate


def test_validate_drops_bad_rows_and_converts_ms() -> None:
    raw = [
        (1_700_000_200_000, 102.0),
        (1_700_000_000_000, 100.0),
        (0, 99.0),  # falsy timestamp
        (None, 99.0),
        (1_700_000_100_000, -5.0),  # non-positive
        (1_700_000_100_000, float("nan")),
        (1_700_000_100_000, "101.5"),  # numeric string is accepted
        (1_700_000_000_000, 100.5),  # duplicate timestamp, first wins
        (1_700_000_300_000, "n/a"),
        ("garbage",),
    ]
    series = validate(raw, min_length=1)
    assert series == (
        PricePoint(time=1_700_000_000, value=100.0),
        PricePoint(time=1_700_000_100, value=101.5),
        PricePoint(time=1_700_000_200, value=102.0),
    )
    assert closes(series) == (100.0, 101.5, 102.0)


def test_validate_seconds_passthrough() -> None:
    series = validate([(1_700_000_000, 1.0), (1_700_086_400, 2.0)], min_length=2, timestamps_in_ms=False)
    assert [p.time for p in series] == [1_700_000_000, 1_700_086_400]


def test_validate_no_numeric_values() -> None:
    with pytest.raises(InvalidDataError):
        validate([(1, "x"), (2, None), (3, 0.0)], min_length=1)
    with pytest.raises(InvalidDataError):
        validate([], min_length=0)


def test_validate_too_short() -> None:
    raw = [(i * 86_400_000 + 1, 100.0 + i) for i in range(10)]
    with pytest.raises(InsufficientDataError) as exc:
        validate(raw, min_length=26)
    assert exc.value.required == 26
    assert exc.value.available == 10
