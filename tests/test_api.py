"""Tests for the HTTP API — /health, /timeframes and /backtest."""

from fastapi.testclient import TestClient

from tradelab.api.routers import configure_routers
from tradelab.config import Config
from tradelab.main import app

client = TestClient(app)


# ── Helpers ──────────────────────────────────────────────────────────────


def _body(**overrides):
    body = {
        "symbol": "AAPL",
        "timeframe": "1D",
        "start_date": "2023-01-01",
        "end_date": "2023-07-01",
        "initial_capital": 10_000,
        "seed": 42,
    }
    body.update(overrides)
    return body


# ── Tests ────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestTimeframesEndpoint:
    def test_lists_timeframes(self):
        resp = client.get("/timeframes")
        assert resp.status_code == 200
        data = resp.json()
        values = [tf["value"] for tf in data["timeframes"]]
        assert values == ["1m", "5m", "15m", "1h", "4h", "1D", "1W"]
        assert data["timeframes"][5]["label"] == "1 Day"
        assert "AAPL" in data["symbols"]


class TestBacktestEndpoint:
    def setup_method(self):
        configure_routers(Config())

    def test_returns_full_result(self):
        resp = client.post("/backtest", json=_body())
        assert resp.status_code == 200
        data = resp.json()
        assert data["symbol"] == "AAPL"
        assert data["timeframe"] == "1D"
        assert len(data["series"]) == 181
        assert len(data["equity_curve"]) == len(data["series"])
        assert data["series"][0]["date"] == "2023-01-01"
        assert set(data["metrics"]) >= {
            "total_return", "win_rate", "profit_factor", "max_drawdown",
            "recovery_factor", "total_trades", "avg_trade_duration",
            "weekday_returns", "monthly_pnl",
        }

    def test_seeded_requests_identical(self):
        first = client.post("/backtest", json=_body()).json()
        second = client.post("/backtest", json=_body()).json()
        assert first == second

    def test_empty_range(self):
        resp = client.post("/backtest", json=_body(end_date="2023-01-01"))
        assert resp.status_code == 200
        data = resp.json()
        assert data["series"] == []
        assert data["equity_curve"] == []
        assert data["metrics"]["total_return"] == 0.0

    def test_negative_capital_422(self):
        resp = client.post("/backtest", json=_body(initial_capital=-5))
        assert resp.status_code == 422
        assert "initial capital" in resp.json()["detail"]

    def test_unknown_timeframe_422(self):
        resp = client.post("/backtest", json=_body(timeframe="3D"))
        assert resp.status_code == 422
        assert "timeframe" in resp.json()["detail"]

    def test_missing_fields_422(self):
        resp = client.post("/backtest", json={"symbol": "AAPL"})
        assert resp.status_code == 422
        assert "initial_capital" in resp.json()["detail"]

    def test_non_numeric_capital_422(self):
        resp = client.post("/backtest", json=_body(initial_capital="lots"))
        assert resp.status_code == 422
        assert "initial_capital" in resp.json()["detail"]

    def test_bad_indicator_mode_422(self):
        resp = client.post("/backtest", json=_body(indicator_mode="magic"))
        assert resp.status_code == 422

    def test_configured_engine_used(self):
        configure_routers(Config(max_bars=10))
        resp = client.post("/backtest", json=_body())
        assert len(resp.json()["series"]) == 10

    def test_non_string_timeframe_422(self):
        resp = client.post("/backtest", json=_body(timeframe=["1D"]))
        assert resp.status_code == 422
        assert "timeframe" in resp.json()["detail"]
