"""Backtest statistics — pure functions over closed trades and the equity curve."""

from typing import Optional

from tradelab.backtest.models import (
    WEEKDAYS,
    BacktestMetrics,
    EquityPoint,
    MonthlyPnL,
    RoundTrip,
)


def calculate_stats(
    trades: list[RoundTrip],
    equity_curve: list[EquityPoint],
    initial_capital: float,
) -> BacktestMetrics:
    """Compute summary metrics for one simulated run.

    Trade statistics (win rate, profit factor, trade count, average
    duration) come from closed round-trips only; a position still open at
    the end of the run is excluded.  Return and drawdown figures come from
    the equity curve.

    Returns:
        ``BacktestMetrics`` with every value rounded to 4 decimals.  An
        empty curve yields the zeroed defaults.
    """
    if not equity_curve:
        return BacktestMetrics()

    final_equity = equity_curve[-1].equity
    total_return = (final_equity - initial_capital) / initial_capital * 100.0
    max_dd = min(p.drawdown for p in equity_curve)
    recovery = total_return / abs(max_dd) if max_dd < 0 else 0.0

    total = len(trades)
    winners = [t.pnl for t in trades if t.pnl > 0]
    win_rate = len(winners) / total * 100.0 if total else 0.0
    avg_duration = (
        sum(t.duration_days for t in trades) / total if total else 0.0
    )
    profit_factor = _profit_factor(trades)

    return BacktestMetrics(
        total_return=round(total_return, 4),
        win_rate=round(win_rate, 4),
        profit_factor=round(profit_factor, 4) if profit_factor is not None else None,
        max_drawdown=round(max_dd, 4),
        recovery_factor=round(recovery, 4),
        total_trades=total,
        avg_trade_duration=round(avg_duration, 4),
        weekday_returns=_weekday_returns(equity_curve, initial_capital),
        monthly_pnl=_monthly_pnl(equity_curve, initial_capital),
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _profit_factor(trades: list[RoundTrip]) -> Optional[float]:
    """Gross profit over gross loss.

    ``0.0`` when nothing was won (including no trades at all) and ``None``
    when trades were won but none lost, since the ratio is unbounded.
    """
    gross_profit = sum(t.pnl for t in trades if t.pnl > 0)
    gross_loss = abs(sum(t.pnl for t in trades if t.pnl < 0))
    if gross_profit == 0:
        return 0.0
    if gross_loss == 0:
        return None
    return gross_profit / gross_loss


def _pct_change(previous: float, current: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100.0


def _weekday_returns(
    equity_curve: list[EquityPoint], initial_capital: float,
) -> dict[str, float]:
    """Sum of bar-over-bar equity % changes, bucketed by weekday."""
    totals = {day: 0.0 for day in WEEKDAYS}
    previous = initial_capital
    for point in equity_curve:
        totals[WEEKDAYS[point.date.weekday()]] += _pct_change(previous, point.equity)
        previous = point.equity
    return {day: round(value, 4) for day, value in totals.items()}


def _monthly_pnl(
    equity_curve: list[EquityPoint], initial_capital: float,
) -> list[MonthlyPnL]:
    """Equity % change per calendar month, in chronological order.

    Each month is measured from the previous month's closing equity (the
    initial capital for the first month) to its own last point.
    """
    months: list[MonthlyPnL] = []
    month_open = initial_capital
    previous = initial_capital
    current_key: Optional[str] = None

    for point in equity_curve:
        key = f"{point.date.year:04d}-{point.date.month:02d}"
        if key != current_key:
            if current_key is not None:
                months.append(
                    MonthlyPnL(current_key, round(_pct_change(month_open, previous), 4))
                )
                month_open = previous
            current_key = key
        previous = point.equity

    if current_key is not None:
        months.append(MonthlyPnL(current_key, round(_pct_change(month_open, previous), 4)))
    return months
