"""CLI report — plain-text summary of a backtest result."""

from tradelab.backtest.models import BacktestResult


def format_summary(result: BacktestResult, max_signals: int = 10) -> str:
    """Format a backtest result for the console.

    Args:
        result: A completed ``BacktestResult``.
        max_signals: Number of signals listed before truncating.

    Returns:
        The formatted multi-line string.
    """
    m = result.metrics
    pf_str = f"{m.profit_factor:.2f}" if m.profit_factor is not None else "n/a"

    lines = [
        "──────────────── TradeLab Backtest ────────────────",
        f"  Symbol:          {result.symbol} ({result.timeframe})",
        f"  Bars:            {len(result.series)}",
        f"  Initial Capital: {result.initial_capital:,.2f}",
        f"  Final Equity:    {result.final_equity:,.2f}",
        f"  Total Return:    {m.total_return:.2f}%",
        f"  Win Rate:        {m.win_rate:.1f}%",
        f"  Profit Factor:   {pf_str}",
        f"  Max Drawdown:    {m.max_drawdown:.2f}%",
        f"  Recovery Factor: {m.recovery_factor:.2f}",
        f"  Trades:          {m.total_trades}",
        f"  Avg Duration:    {m.avg_trade_duration:.1f} days",
        f"  Open Position:   {'yes' if result.open_position else 'no'}",
        "  Weekday Returns:",
    ]
    lines += [
        f"    {day.capitalize():<10} {value:+.2f}%"
        for day, value in m.weekday_returns.items()
    ]
    if m.monthly_pnl:
        lines.append("  Monthly P&L:")
        lines += [f"    {row.month}    {row.pnl:+.2f}%" for row in m.monthly_pnl]

    if result.signals:
        lines.append("  Signals:")
        for signal in result.signals[:max_signals]:
            lines.append(
                f"    {signal.date.isoformat()}  {signal.kind.upper():<4} "
                f"{signal.price:>10.2f}  {signal.reason}"
            )
        if len(result.signals) > max_signals:
            lines.append(
                f"    Showing first {max_signals} of {len(result.signals)} signals"
            )
    lines.append("───────────────────────────────────────────────────")
    return "\n".join(lines)
