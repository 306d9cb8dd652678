"""Backtest data models — equity curve, closed trades and the run result."""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Optional

from tradelab.strategy.models import Bar, Signal


class InvalidCapitalError(ValueError):
    """Raised when a run is started with non-positive or non-finite capital."""


WEEKDAYS: tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


@dataclass(frozen=True)
class EquityPoint:
    """Mark-to-market portfolio value for one bar."""

    date: date
    equity: float
    drawdown: float  # percent below the high-water mark, always <= 0


@dataclass(frozen=True)
class RoundTrip:
    """A closed buy → sell trade."""

    entry_date: date
    exit_date: date
    entry_price: float
    exit_price: float
    shares: float
    pnl: float
    return_pct: float

    @property
    def duration_days(self) -> int:
        """Calendar days between entry and exit."""
        return (self.exit_date - self.entry_date).days


@dataclass(frozen=True)
class MonthlyPnL:
    """Percentage equity change over one calendar month."""

    month: str  # "YYYY-MM"
    pnl: float


@dataclass(frozen=True)
class BacktestMetrics:
    """Summary statistics for one run.  All zero for an empty run."""

    total_return: float = 0.0
    win_rate: float = 0.0
    profit_factor: Optional[float] = 0.0  # None = winners but no losers
    max_drawdown: float = 0.0
    recovery_factor: float = 0.0
    total_trades: int = 0
    avg_trade_duration: float = 0.0  # days
    weekday_returns: dict[str, float] = field(
        default_factory=lambda: {day: 0.0 for day in WEEKDAYS}
    )
    monthly_pnl: list[MonthlyPnL] = field(default_factory=list)


@dataclass(frozen=True)
class BacktestResult:
    """Everything a reporting layer needs to render one run."""

    symbol: str
    timeframe: str
    initial_capital: float
    final_equity: float
    metrics: BacktestMetrics
    series: list[Bar]
    signals: list[Signal]
    equity_curve: list[EquityPoint]
    trades: list[RoundTrip]
    open_position: bool = False

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation with ISO dates."""
        data = asdict(self)
        for bar in data["series"]:
            bar["date"] = bar["date"].isoformat()
        for signal in data["signals"]:
            signal["date"] = signal["date"].isoformat()
        for point in data["equity_curve"]:
            point["date"] = point["date"].isoformat()
        for trade, raw in zip(data["trades"], self.trades):
            trade["entry_date"] = trade["entry_date"].isoformat()
            trade["exit_date"] = trade["exit_date"].isoformat()
            trade["duration_days"] = raw.duration_days
        return data
