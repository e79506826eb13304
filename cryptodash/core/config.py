from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, model_validator


class SimulatorConfig(BaseModel):
    initial_balance: PositiveFloat = 10000.0


class IndicatorConfig(BaseModel):
    rsi_period: PositiveInt = 14
    macd_fast: PositiveInt = 12
    macd_slow: PositiveInt = 26
    macd_signal: PositiveInt = 9
    bollinger_period: PositiveInt = 20
    bollinger_std_dev: float = Field(default=2.0, ge=0.0)

    @model_validator(mode="after")
    def _fast_below_slow(self) -> "IndicatorConfig":
        if self.macd_fast >= self.macd_slow:
            raise ValueError("macd_fast must be shorter than macd_slow")
        return self

    @property
    def min_history(self) -> int:
        # Longest warm-up among the snapshot indicators
        return max(
            self.macd_slow + self.macd_signal - 1,
            self.rsi_period + 1,
            self.bollinger_period,
        )


class RiskConfig(BaseModel):
    tolerance: Literal["low", "medium", "high"] = "medium"


class DataConfig(BaseModel):
    timestamps_in_ms: bool = True  # CoinGecko market_chart uses epoch ms
    history_days: PositiveInt = 90


class LoggingConfig(BaseModel):
    log_dir: str = "logs"
    level: str = "INFO"


class AppConfig(BaseModel):
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    indicators: IndicatorConfig = Field(default_factory=IndicatorConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(path: str | Path) -> "AppConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return AppConfig(**(data or {}))
