"""Internal API routers — /timeframes and /backtest endpoints.

No business logic.  Validates the request body and delegates to the
backtest engine.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from tradelab.backtest.engine import BacktestEngine
from tradelab.config import Config
from tradelab.strategy.models import POPULAR_SYMBOLS, TIMEFRAMES

logger = logging.getLogger("tradelab")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_engine: BacktestEngine = BacktestEngine()


def configure_routers(config: Optional[Config] = None) -> None:
    """Install the engine configuration used by ``POST /backtest``."""
    global _engine  # noqa: PLW0603
    _engine = BacktestEngine(config)


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get("/timeframes")
async def get_timeframes():
    """Return the supported timeframes and suggested symbols."""
    return {
        "timeframes": [
            {"value": value, "label": label} for value, label in TIMEFRAMES.items()
        ],
        "symbols": list(POPULAR_SYMBOLS),
    }


def _optional_number(body: dict, key: str, cast):
    if body.get(key) is None:
        return None
    try:
        return cast(body[key])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be a number, got {body[key]!r}") from exc


@router.post("/backtest")
def post_backtest(body: dict):
    """Run one backtest and return the full serialized result.

    Body keys: ``symbol``, ``timeframe``, ``start_date``, ``end_date``,
    ``initial_capital`` (required); ``seed``, ``indicator_mode``,
    ``macd_gate_probability`` (optional).  Invalid input → 422.
    """
    missing = [
        k for k in ("symbol", "timeframe", "start_date", "end_date", "initial_capital")
        if body.get(k) is None
    ]
    if missing:
        raise HTTPException(
            status_code=422,
            detail=f"Missing required field(s): {', '.join(missing)}",
        )

    try:
        capital = _optional_number(body, "initial_capital", float)
        result = _engine.run(
            body["symbol"],
            body["timeframe"],
            body["start_date"],
            body["end_date"],
            capital,
            seed=_optional_number(body, "seed", int),
            indicator_mode=body.get("indicator_mode"),
            macd_gate_probability=_optional_number(body, "macd_gate_probability", float),
        )
    except ValueError as exc:
        logger.info("Rejected backtest request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return result.to_dict()
