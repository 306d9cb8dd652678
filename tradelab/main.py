"""TradeLab — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
one-off backtests.
"""

import logging

from fastapi import FastAPI

from tradelab.api.routers import router

app = FastAPI(title="TradeLab Backtest API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("tradelab")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and either run one backtest or serve the API."""
    import argparse

    from tradelab.backtest.engine import BacktestEngine
    from tradelab.cli.report import format_summary
    from tradelab.config import load_config
    from tradelab.strategy.models import TIMEFRAMES

    parser = argparse.ArgumentParser(description="TradeLab strategy backtester")
    parser.add_argument("--symbol", default="AAPL", help="Instrument label (default: AAPL)")
    parser.add_argument(
        "--timeframe",
        choices=list(TIMEFRAMES),
        default="1D",
        help="Timeframe label (default: 1D)",
    )
    parser.add_argument("--start", default="2022-01-01", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", default="2024-01-01", help="End date (YYYY-MM-DD)")
    parser.add_argument(
        "--capital",
        type=float,
        default=None,
        help="Initial capital (default: TRADELAB_INITIAL_CAPITAL or 10000)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--indicators",
        choices=["sampled", "computed"],
        default=None,
        help="Indicator source (default: TRADELAB_INDICATOR_MODE or sampled)",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP API instead of running a single backtest",
    )
    parser.add_argument("--port", type=int, default=None, help="API port")
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.serve:
        _serve(config, args.port or config.api_port)
        return

    engine = BacktestEngine(config)
    capital = args.capital if args.capital is not None else config.initial_capital
    try:
        result = engine.run(
            args.symbol,
            args.timeframe,
            args.start,
            args.end,
            capital,
            seed=args.seed,
            indicator_mode=args.indicators,
        )
    except ValueError as exc:
        parser.error(str(exc))
    print(format_summary(result))


def _serve(config, port: int) -> None:
    """Start the API server with *config* installed in the routers."""
    import uvicorn

    from tradelab.api.routers import configure_routers

    configure_routers(config)
    logger.info("TradeLab API available at http://localhost:%d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level=config.log_level.lower())


if __name__ == "__main__":
    _run_cli()
