"""Tests for the risk module — high-water mark and drawdown tracking."""

import math

import numpy as np
import pytest

from tradelab.backtest.models import InvalidCapitalError
from tradelab.risk.drawdown import DrawdownTracker, validate_capital


class TestDrawdownTracking:
    """Unit tests for DrawdownTracker."""

    def test_drawdown_tracking(self):
        """Drawdown % is negative after an equity decline."""
        tracker = DrawdownTracker(initial_equity=10_000.0)
        dd = tracker.update(9_500.0)
        # drawdown = (9500 - 10000) / 10000 * 100 = -5.0%
        assert dd == pytest.approx(-5.0)
        assert tracker.drawdown_pct == pytest.approx(-5.0)
        assert tracker.peak_equity == 10_000.0
        assert tracker.current_equity == 9_500.0

    def test_drawdown_peak_updates(self):
        """Peak equity rises when new equity exceeds previous peak."""
        tracker = DrawdownTracker(initial_equity=10_000.0)
        assert tracker.update(10_500.0) == 0.0
        assert tracker.peak_equity == 10_500.0

    def test_peak_never_decreases(self):
        tracker = DrawdownTracker(initial_equity=100.0)
        peaks = []
        for equity in [110.0, 90.0, 120.0, 60.0, 119.0]:
            tracker.update(equity)
            peaks.append(tracker.peak_equity)
        assert peaks == [110.0, 110.0, 120.0, 120.0, 120.0]
        assert tracker.drawdown_pct == pytest.approx((119.0 - 120.0) / 120.0 * 100)

    def test_starts_at_zero(self):
        assert DrawdownTracker(1.0).drawdown_pct == 0.0


class TestInvalidCapital:
    @pytest.mark.parametrize("capital", [0, -5, -0.01, math.nan, math.inf])
    def test_rejects_non_positive_or_non_finite(self, capital):
        with pytest.raises(InvalidCapitalError, match="initial capital"):
            DrawdownTracker(capital)

    def test_rejects_non_numeric(self):
        with pytest.raises(InvalidCapitalError, match="number"):
            DrawdownTracker("10000")

    def test_rejects_bool(self):
        with pytest.raises(InvalidCapitalError, match="number"):
            DrawdownTracker(True)

    @pytest.mark.parametrize("capital", [np.int64(500), np.float32(500.0), np.float64(500.0)])
    def test_accepts_numpy_scalars(self, capital):
        assert validate_capital(capital) == 500.0
        assert DrawdownTracker(capital).peak_equity == 500.0

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            DrawdownTracker(-1.0)
