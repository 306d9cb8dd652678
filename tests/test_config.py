"""Tests for tradelab.config — environment variable loading and validation."""

import pytest

from tradelab.config import Config, load_config


_VARS = [
    "TRADELAB_START_PRICE_MIN",
    "TRADELAB_START_PRICE_MAX",
    "TRADELAB_VOLATILITY",
    "TRADELAB_PRICE_FLOOR",
    "TRADELAB_MAX_BARS",
    "TRADELAB_WARMUP_BARS",
    "TRADELAB_MACD_GATE_PROBABILITY",
    "TRADELAB_INDICATOR_MODE",
    "TRADELAB_INITIAL_CAPITAL",
    "LOG_LEVEL",
    "API_PORT",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure TradeLab env vars are cleared between tests."""
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def env_path(tmp_path):
    """A non-existent .env so load_dotenv never reads a developer's file."""
    return str(tmp_path / "nonexistent.env")


class TestLoadConfig:
    def test_defaults(self, env_path):
        cfg = load_config(env_path=env_path)
        assert cfg == Config()
        assert cfg.start_price_min == 150.0
        assert cfg.start_price_max == 200.0
        assert cfg.volatility == 0.02
        assert cfg.price_floor == 10.0
        assert cfg.max_bars == 250
        assert cfg.warmup_bars == 20
        assert cfg.macd_gate_probability is None
        assert cfg.indicator_mode == "sampled"
        assert cfg.initial_capital == 10_000.0
        assert cfg.log_level == "INFO"
        assert cfg.api_port == 8080

    def test_overrides(self, monkeypatch, env_path):
        monkeypatch.setenv("TRADELAB_MAX_BARS", "100")
        monkeypatch.setenv("TRADELAB_MACD_GATE_PROBABILITY", "0.05")
        monkeypatch.setenv("TRADELAB_INDICATOR_MODE", "computed")
        monkeypatch.setenv("API_PORT", "9000")
        cfg = load_config(env_path=env_path)
        assert cfg.max_bars == 100
        assert cfg.macd_gate_probability == 0.05
        assert cfg.indicator_mode == "computed"
        assert cfg.api_port == 9000

    def test_blank_gate_means_deterministic(self, monkeypatch, env_path):
        monkeypatch.setenv("TRADELAB_MACD_GATE_PROBABILITY", "  ")
        assert load_config(env_path=env_path).macd_gate_probability is None

    def test_reads_dotenv_file(self, monkeypatch, tmp_path):
        # Registers the variable with monkeypatch so the value load_dotenv
        # writes is removed again at teardown
        monkeypatch.setenv("TRADELAB_PRICE_FLOOR", "placeholder")
        monkeypatch.delenv("TRADELAB_PRICE_FLOOR")
        env_file = tmp_path / ".env"
        env_file.write_text("TRADELAB_PRICE_FLOOR=5\n", encoding="utf-8")
        cfg = load_config(env_path=str(env_file))
        assert cfg.price_floor == 5.0

    def test_unparseable_value(self, monkeypatch, env_path):
        monkeypatch.setenv("TRADELAB_MAX_BARS", "many")
        with pytest.raises(ValueError, match="Invalid TradeLab configuration"):
            load_config(env_path=env_path)

    def test_unknown_indicator_mode(self, monkeypatch, env_path):
        monkeypatch.setenv("TRADELAB_INDICATOR_MODE", "magic")
        with pytest.raises(ValueError, match="indicator_mode"):
            load_config(env_path=env_path)


class TestConfigValidation:
    def test_price_band_inverted(self):
        with pytest.raises(ValueError, match="start_price_min"):
            Config(start_price_min=200.0, start_price_max=150.0)

    def test_non_positive_floor(self):
        with pytest.raises(ValueError, match="price_floor"):
            Config(price_floor=0.0)

    def test_gate_out_of_range(self):
        with pytest.raises(ValueError, match="macd_gate_probability"):
            Config(macd_gate_probability=1.5)

    def test_warmup_must_be_positive(self):
        with pytest.raises(ValueError, match="warmup_bars"):
            Config(warmup_bars=0)
