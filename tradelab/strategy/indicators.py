"""Technical indicators — EMA, RSI, MACD over a price path. Pure functions, no I/O.

Every function returns a list aligned with its input; positions before an
indicator has enough history hold ``nan``.
"""

import math


def _require(prices: list[float], needed: int, label: str) -> None:
    if len(prices) < needed:
        raise ValueError(f"{label} needs {needed} prices, got {len(prices)}")


def calculate_ema(prices: list[float], period: int) -> list[float]:
    """Exponential moving average with smoothing ``2 / (period + 1)``.

    Seeded at index ``period - 1`` with the mean of the first *period*
    prices.
    """
    _require(prices, period, f"EMA({period})")

    alpha = 2.0 / (period + 1)
    value = sum(prices[:period]) / period
    ema = [math.nan] * (period - 1) + [value]
    for price in prices[period:]:
        value += alpha * (price - value)
        ema.append(value)
    return ema


# ── RSI ──────────────────────────────────────────────────────────────────


def _rsi(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def calculate_rsi(prices: list[float], period: int = 14) -> list[float]:
    """Wilder's RSI; the first value lands on index *period*."""
    _require(prices, period + 1, f"RSI({period})")

    moves = [cur - prev for prev, cur in zip(prices, prices[1:])]
    avg_gain = sum(m for m in moves[:period] if m > 0) / period
    avg_loss = -sum(m for m in moves[:period] if m < 0) / period

    rsi = [math.nan] * period + [_rsi(avg_gain, avg_loss)]
    for move in moves[period:]:
        avg_gain = (avg_gain * (period - 1) + max(move, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-move, 0.0)) / period
        rsi.append(_rsi(avg_gain, avg_loss))
    return rsi


# ── MACD ─────────────────────────────────────────────────────────────────


def calculate_macd(
    prices: list[float],
    fast_period: int = 12,
    slow_period: int = 26,
) -> list[float]:
    """Calculate the MACD line: ``EMA(fast) − EMA(slow)``.

    Requires at least *slow_period* prices.  Entries before the slow EMA
    is seeded are ``float('nan')``.
    """
    if fast_period >= slow_period:
        raise ValueError(
            f"fast_period must be below slow_period, got "
            f"{fast_period} >= {slow_period}"
        )
    fast = calculate_ema(prices, fast_period)
    slow = calculate_ema(prices, slow_period)
    return [
        math.nan if math.isnan(s) else f - s
        for f, s in zip(fast, slow)
    ]
