"""TradeLab — application configuration.

Loads .env variables into a typed config object.
Every variable is optional; ``Config()`` gives the reference defaults so
library callers and tests never depend on the environment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


INDICATOR_MODES = ("sampled", "computed")


@dataclass(frozen=True)
class Config:
    """Typed configuration for series generation, detection and the API."""

    start_price_min: float = 150.0
    start_price_max: float = 200.0
    volatility: float = 0.02
    price_floor: float = 10.0
    max_bars: int = 250
    warmup_bars: int = 20
    macd_gate_probability: Optional[float] = None  # None = every bar evaluated
    indicator_mode: str = "sampled"  # "sampled" or "computed"
    initial_capital: float = 10_000.0
    log_level: str = "INFO"
    api_port: int = 8080

    def __post_init__(self) -> None:
        if self.start_price_min <= 0:
            raise ValueError(
                f"start_price_min must be positive, got {self.start_price_min}"
            )
        if self.start_price_min >= self.start_price_max:
            raise ValueError(
                "start_price_min must be below start_price_max, got "
                f"{self.start_price_min} >= {self.start_price_max}"
            )
        if self.volatility < 0:
            raise ValueError(f"volatility must be >= 0, got {self.volatility}")
        if self.price_floor <= 0:
            raise ValueError(f"price_floor must be positive, got {self.price_floor}")
        if self.max_bars < 0:
            raise ValueError(f"max_bars must be >= 0, got {self.max_bars}")
        if self.warmup_bars < 1:
            raise ValueError(f"warmup_bars must be >= 1, got {self.warmup_bars}")
        if self.macd_gate_probability is not None and not (
            0.0 <= self.macd_gate_probability <= 1.0
        ):
            raise ValueError(
                "macd_gate_probability must be within [0, 1], got "
                f"{self.macd_gate_probability}"
            )
        if self.indicator_mode not in INDICATOR_MODES:
            raise ValueError(
                f"Unknown indicator_mode '{self.indicator_mode}'. "
                f"Available: {', '.join(INDICATOR_MODES)}"
            )


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending setting when a
    value is out of range or cannot be parsed.
    """
    load_dotenv(dotenv_path=env_path)

    try:
        return Config(
            start_price_min=float(os.environ.get("TRADELAB_START_PRICE_MIN", "150.0")),
            start_price_max=float(os.environ.get("TRADELAB_START_PRICE_MAX", "200.0")),
            volatility=float(os.environ.get("TRADELAB_VOLATILITY", "0.02")),
            price_floor=float(os.environ.get("TRADELAB_PRICE_FLOOR", "10.0")),
            max_bars=int(os.environ.get("TRADELAB_MAX_BARS", "250")),
            warmup_bars=int(os.environ.get("TRADELAB_WARMUP_BARS", "20")),
            macd_gate_probability=_optional_float("TRADELAB_MACD_GATE_PROBABILITY"),
            indicator_mode=os.environ.get("TRADELAB_INDICATOR_MODE", "sampled"),
            initial_capital=float(os.environ.get("TRADELAB_INITIAL_CAPITAL", "10000.0")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            api_port=int(os.environ.get("API_PORT", "8080")),
        )
    except ValueError as exc:
        raise ValueError(f"Invalid TradeLab configuration: {exc}") from exc
