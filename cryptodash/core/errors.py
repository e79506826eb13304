from __future__ import annotations


class CryptodashError(Exception):
    """Base class for every error raised by the analysis and simulation core."""


class InvalidDataError(CryptodashError, ValueError):
    """A price or order value is non-numeric, non-finite or non-positive."""


class InsufficientDataError(CryptodashError, ValueError):
    """Fewer points than an indicator's minimum period requires."""

    def __init__(self, required: int, available: int, what: str = "calculation") -> None:
        self.required = int(required)
        self.available = int(available)
        super().__init__(f"{what} requires at least {self.required} data points, got {self.available}")


class InsufficientFundsError(CryptodashError):
    def __init__(self, required: float, available: float) -> None:
        self.required = float(required)
        self.available = float(available)
        super().__init__(f"Insufficient funds: need {self.required:.2f}, balance {self.available:.2f}")


class InsufficientPositionError(CryptodashError):
    def __init__(self, asset_id: str, side: str, requested: float, available: float) -> None:
        self.asset_id = asset_id
        self.side = side
        self.requested = float(requested)
        self.available = float(available)
        super().__init__(
            f"Only {self.available:g} {asset_id} ({side}) available to sell, requested {self.requested:g}"
        )
