"""Backtest engine — replays a bar series through detected signals.

Composes the pipeline provider → detector → simulator.  The simulator is a
two-state machine (flat / long) holding at most one position, sized with
the whole of current equity.  Every run allocates its own position and
high-water mark state, so a single ``BacktestEngine`` can serve concurrent
runs.  No real orders are placed.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import numpy as np

from tradelab.backtest.models import (
    BacktestResult,
    EquityPoint,
    InvalidCapitalError,
    RoundTrip,
)
from tradelab.backtest.stats import calculate_stats
from tradelab.config import Config
from tradelab.data.generator import (
    SeriesProvider,
    SyntheticSeriesProvider,
    generate_series,
    parse_date,
)
from tradelab.risk.drawdown import DrawdownTracker, validate_capital
from tradelab.strategy.models import TIMEFRAMES, Bar, Signal
from tradelab.strategy.signals import detect_signals

logger = logging.getLogger("tradelab")

__all__ = [
    "BacktestEngine",
    "InvalidCapitalError",
    "detect_signals",
    "generate_series",
    "run_backtest",
    "simulate",
]

_SIGNAL_KINDS = ("buy", "sell")


@dataclass
class _Position:
    """The single open long position of a run."""

    shares: float
    entry_price: float
    entry_date: date


def _close(position: _Position, signal: Signal) -> RoundTrip:
    return RoundTrip(
        entry_date=position.entry_date,
        exit_date=signal.date,
        entry_price=position.entry_price,
        exit_price=signal.price,
        shares=position.shares,
        pnl=position.shares * (signal.price - position.entry_price),
        return_pct=(signal.price - position.entry_price) / position.entry_price * 100.0,
    )


def _first_signal_by_date(signals: list[Signal]) -> dict[date, Signal]:
    """Map each date to the first signal encountered on it.

    Later signals on an already-seen date are dropped.
    """
    by_date: dict[date, Signal] = {}
    for signal in signals:
        if signal.kind not in _SIGNAL_KINDS:
            raise ValueError(
                f"Signal kind must be 'buy' or 'sell', got {signal.kind!r}"
            )
        by_date.setdefault(signal.date, signal)
    return by_date


def simulate(
    series: list[Bar],
    signals: list[Signal],
    initial_capital: float,
    *,
    symbol: str = "",
    timeframe: str = "",
) -> BacktestResult:
    """Simulate a single long-only position through *signals*.

    Per bar, in order:

    1. A buy while flat opens a position with all equity at the signal
       price; a sell while long closes it at the signal price.  A buy while
       long or a sell while flat is ignored.
    2. Without a signal, an open position is marked to market at the bar
       price; flat equity is unchanged.
    3. The high-water mark and drawdown are updated and one
       ``EquityPoint`` is appended.

    A position still open after the final bar is left open.

    Args:
        series: Bars in strictly increasing date order.
        signals: Signals whose dates are drawn from *series*.
        initial_capital: Starting equity, must be positive.
        symbol: Reporting label passed through to the result.
        timeframe: Reporting label passed through to the result.

    Raises:
        InvalidCapitalError: If *initial_capital* is not positive, before
            any simulation work is done.
    """
    capital = validate_capital(initial_capital)
    tracker = DrawdownTracker(capital)
    signal_at = _first_signal_by_date(signals)

    equity = capital
    position: Optional[_Position] = None
    curve: list[EquityPoint] = []
    trades: list[RoundTrip] = []

    for bar in series:
        signal = signal_at.get(bar.date)

        if signal is not None:
            if signal.kind == "buy" and position is None:
                shares = equity / signal.price
                equity = shares * signal.price
                position = _Position(shares, signal.price, bar.date)
            elif signal.kind == "sell" and position is not None:
                equity = position.shares * signal.price
                trades.append(_close(position, signal))
                position = None
        elif position is not None:
            equity = position.shares * bar.price

        drawdown = tracker.update(equity)
        curve.append(EquityPoint(date=bar.date, equity=equity, drawdown=drawdown))

    return BacktestResult(
        symbol=symbol,
        timeframe=timeframe,
        initial_capital=capital,
        final_equity=equity,
        metrics=calculate_stats(trades, curve, capital),
        series=list(series),
        signals=list(signals),
        equity_curve=curve,
        trades=trades,
        open_position=position is not None,
    )


class BacktestEngine:
    """Runs the full provider → detector → simulator pipeline.

    Args:
        config: Generator bounds, warm-up offset and MACD gate settings.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self._config = config or Config()

    @property
    def config(self) -> Config:
        return self._config

    # ── Public API ───────────────────────────────────────────────────────

    def run(
        self,
        symbol: str,
        timeframe: str,
        start_date: date | str,
        end_date: date | str,
        initial_capital: float,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        provider: Optional[SeriesProvider] = None,
        indicator_mode: Optional[str] = None,
        macd_gate_probability: Optional[float] = None,
    ) -> BacktestResult:
        """Execute a full backtest for one symbol and date range.

        Args:
            symbol: Non-empty instrument label, reported only.
            timeframe: One of ``TIMEFRAMES``, reported only.
            start_date: First bar date (``date`` or ISO string).
            end_date: Exclusive range end.  ``end_date <= start_date``
                yields an empty result rather than an error.
            initial_capital: Starting equity, must be positive.
            seed: Seed for a fresh generator when *rng* is not supplied.
            rng: Generator shared by the synthetic provider and the MACD
                gate.
            provider: Series source; defaults to a
                ``SyntheticSeriesProvider`` on *rng*.
            indicator_mode: Overrides ``config.indicator_mode`` for the
                default provider; must be omitted when *provider* is given.
            macd_gate_probability: Overrides
                ``config.macd_gate_probability``.

        Raises:
            ValueError: For an empty symbol, an unknown timeframe, a
                malformed date, or *indicator_mode* passed with *provider*.
            InvalidCapitalError: If *initial_capital* is not positive.
        """
        if not isinstance(symbol, str) or not symbol.strip():
            raise ValueError(f"symbol must be a non-empty string, got {symbol!r}")
        if not isinstance(timeframe, str) or timeframe not in TIMEFRAMES:
            raise ValueError(
                f"Unknown timeframe {timeframe!r}. "
                f"Available: {', '.join(TIMEFRAMES)}"
            )
        # Fail fast on capital before any series is generated
        validate_capital(initial_capital)
        if provider is not None and indicator_mode is not None:
            raise ValueError("indicator_mode applies only to the default synthetic provider")
        start = parse_date(start_date, "start_date")
        end = parse_date(end_date, "end_date")

        if rng is None:
            rng = np.random.default_rng(seed)
        if provider is None:
            provider = SyntheticSeriesProvider(
                rng=rng, config=self._config, indicator_mode=indicator_mode,
            )
        gate = (
            macd_gate_probability
            if macd_gate_probability is not None
            else self._config.macd_gate_probability
        )

        series = provider.series(start, end)
        if not series:
            logger.debug(
                "No bars for %s %s..%s, returning empty result.",
                symbol, start, end,
            )

        signals = detect_signals(
            series, rng,
            macd_gate_probability=gate,
            warmup=self._config.warmup_bars,
        )
        result = simulate(
            series, signals, initial_capital,
            symbol=symbol.strip(), timeframe=timeframe,
        )

        logger.info(
            "Backtest %s %s complete: %d bars, %d signals, %d trades, return %.2f%%",
            result.symbol,
            timeframe,
            len(series),
            len(signals),
            result.metrics.total_trades,
            result.metrics.total_return,
        )
        return result


def run_backtest(
    symbol: str,
    timeframe: str,
    start_date: date | str,
    end_date: date | str,
    initial_capital: float,
    *,
    config: Optional[Config] = None,
    **kwargs,
) -> BacktestResult:
    """Convenience wrapper: ``BacktestEngine(config).run(...)``."""
    return BacktestEngine(config).run(
        symbol, timeframe, start_date, end_date, initial_capital, **kwargs,
    )
