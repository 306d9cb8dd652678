"""Strategy data models — typed representations for series bars and signals."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Bar:
    """One time step of price, volume and indicator values."""

    date: date
    price: float
    volume: int
    rsi: Optional[float] = None
    macd: Optional[float] = None


@dataclass(frozen=True)
class Signal:
    """A buy/sell event tied to a specific bar's date."""

    date: date
    kind: str  # "buy" or "sell"
    price: float
    reason: str


# ── Reporting labels ─────────────────────────────────────────────────────

TIMEFRAMES: dict[str, str] = {
    "1m": "1 Minute",
    "5m": "5 Minutes",
    "15m": "15 Minutes",
    "1h": "1 Hour",
    "4h": "4 Hours",
    "1D": "1 Day",
    "1W": "1 Week",
}

POPULAR_SYMBOLS: list[str] = [
    "AAPL", "GOOGL", "MSFT", "AMZN", "TSLA", "NVDA", "META", "NFLX",
    "SPY", "QQQ", "IWM", "GLD", "BTCUSD", "ETHUSD",
]
