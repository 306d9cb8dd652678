"""Signal detection — indicator threshold crossings, no I/O.

Scans a bar series after a warm-up offset and emits buy/sell signals from
two independent rules:

* **RSI mean reversion** — RSI climbing through 30 (oversold bounce → buy)
  or through 70 (overbought → sell).
* **MACD cross** — MACD changing sign (bullish → buy, bearish → sell).

Both rules may fire on the same bar.  The RSI signal is emitted first, so
output stays ordered by date and stable for equal dates.
"""

from typing import Optional

import numpy as np

from tradelab.strategy.models import Bar, Signal


DEFAULT_WARMUP = 20
RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0


def _rsi_signal(prev: Bar, current: Bar) -> Optional[Signal]:
    """Rule A — RSI crossing up through the oversold or overbought level."""
    if prev.rsi is None or current.rsi is None:
        return None
    if prev.rsi <= RSI_OVERSOLD and current.rsi > RSI_OVERSOLD:
        return Signal(
            date=current.date,
            kind="buy",
            price=current.price,
            reason=f"RSI oversold bounce: {current.rsi:.1f}",
        )
    if prev.rsi <= RSI_OVERBOUGHT and current.rsi > RSI_OVERBOUGHT:
        return Signal(
            date=current.date,
            kind="sell",
            price=current.price,
            reason=f"RSI overbought: {current.rsi:.1f}",
        )
    return None


def _macd_signal(prev: Bar, current: Bar) -> Optional[Signal]:
    """Rule B — MACD changing sign between consecutive bars."""
    if prev.macd is None or current.macd is None:
        return None
    if prev.macd < 0 < current.macd:
        return Signal(
            date=current.date,
            kind="buy",
            price=current.price,
            reason=f"MACD bullish cross: {current.macd:.3f}",
        )
    if prev.macd > 0 > current.macd:
        return Signal(
            date=current.date,
            kind="sell",
            price=current.price,
            reason=f"MACD bearish cross: {current.macd:.3f}",
        )
    return None


def detect_signals(
    series: list[Bar],
    rng: Optional[np.random.Generator] = None,
    *,
    macd_gate_probability: Optional[float] = None,
    warmup: int = DEFAULT_WARMUP,
) -> list[Signal]:
    """Scan *series* and return signals in ascending date order.

    Bars ``warmup .. len(series) - 2`` are scanned, each against its
    predecessor; the final bar is never scanned.

    Args:
        series: Bars in strictly increasing date order.
        rng: Random generator drawn from by the MACD gate.  Only used when
            *macd_gate_probability* is below 1.
        macd_gate_probability: Per-bar probability that the MACD rule is
            evaluated.  ``None`` (default) evaluates every bar, keeping
            detection deterministic.  ``0.05`` reproduces the reference
            sampling gate.
        warmup: Index of the first scanned bar.

    Returns:
        List of ``Signal``; empty for series of ``warmup + 1`` bars or fewer.

    Raises:
        ValueError: If the gate probability is outside ``[0, 1]`` or
            *warmup* is below 1.
    """
    if warmup < 1:
        raise ValueError(f"warmup must be >= 1, got {warmup}")
    gated = macd_gate_probability is not None and macd_gate_probability < 1.0
    if macd_gate_probability is not None and not 0.0 <= macd_gate_probability <= 1.0:
        raise ValueError(
            "macd_gate_probability must be within [0, 1], got "
            f"{macd_gate_probability}"
        )
    if gated and rng is None:
        rng = np.random.default_rng()

    signals: list[Signal] = []

    for i in range(warmup, len(series) - 1):
        prev = series[i - 1]
        current = series[i]

        rsi_signal = _rsi_signal(prev, current)
        if rsi_signal is not None:
            signals.append(rsi_signal)

        # Exactly one draw per scanned bar, whether or not the rule fires
        if gated and rng.random() >= macd_gate_probability:
            continue
        macd_signal = _macd_signal(prev, current)
        if macd_signal is not None:
            signals.append(macd_signal)

    return signals
