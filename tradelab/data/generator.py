"""Synthetic series provider — seeded random-walk bars for backtesting.

Produces one bar per calendar day between two dates.  Price follows a
bounded multiplicative random walk clamped to a positive floor.  Volume
and, in the default ``"sampled"`` mode, RSI and MACD are drawn
independently of price.  ``"computed"`` mode derives RSI/MACD from the
generated price path instead.

Any object satisfying ``SeriesProvider`` can stand in for this module
(e.g. a historical market-data reader) without touching detection or
simulation.
"""

import math
from datetime import date, datetime, timedelta
from typing import Optional, Protocol, runtime_checkable

import numpy as np

from tradelab.config import INDICATOR_MODES, Config
from tradelab.strategy.indicators import calculate_macd, calculate_rsi
from tradelab.strategy.models import Bar


RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26


def parse_date(value: date | str, field_name: str = "date") -> date:
    """Coerce a ``date``/``datetime`` or ISO ``YYYY-MM-DD`` string to ``date``.

    Raises ``ValueError`` naming *field_name* when the string is malformed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(
            f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}"
        ) from exc


def _bar_count(start: date, end: date, max_bars: int) -> int:
    return max(0, min((end - start).days, max_bars))


def _random_walk(
    rng: np.random.Generator, count: int, config: Config,
) -> list[tuple[float, int, float, float]]:
    """Draw ``(price, volume, rsi, macd)`` tuples for *count* bars.

    Published prices are rounded to cents and never below the floor.
    """
    price = config.start_price_min + rng.random() * (
        config.start_price_max - config.start_price_min
    )
    rows = []
    for _ in range(count):
        change = (rng.random() - 0.5) * config.volatility * price
        price = max(price + change, config.price_floor)
        rsi = 30.0 + rng.random() * 40.0
        macd = (rng.random() - 0.5) * 2.0
        volume = int(math.floor(1_000_000 + rng.random() * 5_000_000))
        published = max(round(price, 2), config.price_floor)
        rows.append((published, volume, round(rsi, 2), round(macd, 2)))
    return rows


def _computed_indicators(
    prices: list[float],
) -> tuple[list[Optional[float]], list[Optional[float]]]:
    """RSI(14) and MACD(12, 26) over *prices*, ``None`` until ready."""
    n = len(prices)
    rsi: list[Optional[float]] = [None] * n
    macd: list[Optional[float]] = [None] * n

    if n >= RSI_PERIOD + 1:
        rsi = [
            None if math.isnan(v) else round(v, 2)
            for v in calculate_rsi(prices, RSI_PERIOD)
        ]
    if n >= MACD_SLOW:
        macd = [
            None if math.isnan(v) else round(v, 4)
            for v in calculate_macd(prices, MACD_FAST, MACD_SLOW)
        ]
    return rsi, macd


def generate_series(
    start_date: date | str,
    end_date: date | str,
    rng: Optional[np.random.Generator] = None,
    *,
    config: Optional[Config] = None,
    indicator_mode: Optional[str] = None,
) -> list[Bar]:
    """Generate a daily bar series covering ``[start_date, end_date)``.

    Args:
        start_date: First bar date.
        end_date: Exclusive end of the range.
        rng: Source of randomness.  A fresh unseeded generator is created
            when omitted; pass ``np.random.default_rng(seed)`` for
            reproducible output.
        config: Generator bounds (start price band, volatility, floor,
            bar cap).  Defaults to ``Config()``.
        indicator_mode: ``"sampled"`` or ``"computed"``; defaults to
            ``config.indicator_mode``.

    Returns:
        ``min(days, config.max_bars)`` bars; an empty list when
        ``end_date <= start_date``.
    """
    config = config or Config()
    mode = indicator_mode or config.indicator_mode
    if mode not in INDICATOR_MODES:
        raise ValueError(
            f"Unknown indicator_mode '{mode}'. "
            f"Available: {', '.join(INDICATOR_MODES)}"
        )

    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")
    count = _bar_count(start, end, config.max_bars)
    if count == 0:
        return []

    if rng is None:
        rng = np.random.default_rng()

    rows = _random_walk(rng, count, config)

    if mode == "computed":
        rsi, macd = _computed_indicators([r[0] for r in rows])
    else:
        rsi = [r[2] for r in rows]
        macd = [r[3] for r in rows]

    return [
        Bar(
            date=start + timedelta(days=i),
            price=price,
            volume=volume,
            rsi=rsi[i],
            macd=macd[i],
        )
        for i, (price, volume, _, _) in enumerate(rows)
    ]


# ── Provider interface ───────────────────────────────────────────────────


@runtime_checkable
class SeriesProvider(Protocol):
    """Interface that every series source must satisfy."""

    def series(self, start_date: date | str, end_date: date | str) -> list[Bar]:
        """Return bars in strictly increasing date order for the range."""
        ...


class SyntheticSeriesProvider:
    """``SeriesProvider`` backed by ``generate_series``.

    Args:
        rng: Generator shared by every ``series()`` call on this provider.
        config: Generator bounds; defaults to ``Config()``.
        indicator_mode: Overrides ``config.indicator_mode`` when given.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        config: Optional[Config] = None,
        indicator_mode: Optional[str] = None,
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self._config = config or Config()
        self._indicator_mode = indicator_mode

    def series(self, start_date: date | str, end_date: date | str) -> list[Bar]:
        return generate_series(
            start_date,
            end_date,
            self._rng,
            config=self._config,
            indicator_mode=self._indicator_mode,
        )
