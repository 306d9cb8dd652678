"""High-water mark and drawdown tracking — pure math, no I/O.

Drawdown is reported as a signed percentage: ``0`` at a new high and
negative below it, ``(equity − peak) / peak × 100``.
"""

import math
import numbers

from tradelab.backtest.models import InvalidCapitalError


def validate_capital(value) -> float:
    """Return *value* as a float, or raise ``InvalidCapitalError``.

    Accepts any real number (numpy scalars included) except ``bool``;
    the value must be finite and positive.
    """
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise InvalidCapitalError(f"initial capital must be a number, got {value!r}")
    capital = float(value)
    if not math.isfinite(capital) or capital <= 0:
        raise InvalidCapitalError(f"initial capital must be positive, got {value}")
    return capital


class DrawdownTracker:
    """Tracks the equity peak and current drawdown for a single run.

    Args:
        initial_equity: Starting equity; becomes the first high-water mark.

    Raises:
        InvalidCapitalError: If *initial_equity* is not a positive number.
    """

    def __init__(self, initial_equity: float) -> None:
        capital = validate_capital(initial_equity)
        self._peak_equity: float = capital
        self._current_equity: float = capital

    # ── Mutation ─────────────────────────────────────────────────────────

    def update(self, equity: float) -> float:
        """Record the latest equity value and return the resulting drawdown.

        If *equity* exceeds the current peak, the peak is raised.
        """
        self._current_equity = equity
        if equity > self._peak_equity:
            self._peak_equity = equity
        return self.drawdown_pct

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def peak_equity(self) -> float:
        """Highest equity recorded (the high-water mark)."""
        return self._peak_equity

    @property
    def current_equity(self) -> float:
        """Most recently recorded equity."""
        return self._current_equity

    @property
    def drawdown_pct(self) -> float:
        """Current drawdown as a signed percentage of peak equity (≤ 0)."""
        return (
            (self._current_equity - self._peak_equity) / self._peak_equity
        ) * 100.0
