from decimal import Decimal
from pathlib import Path

import pytest

yaml = pytest.importorskip("yaml")

from strategy_lab.config import compute_config_hash, load_config
from strategy_lab.errors import UnsupportedConfigurationError
from strategy_lab.runner import BacktestRunner, Exchange, Timeframe
from strategy_lab.strategy import MovingAverageCrossoverParameters

SAMPLE = Path(__file__).resolve().parents[1] / "configs" / "sample_backtest.yaml"


def _write(tmp_path, data):
    target = tmp_path / "backtest.yaml"
    target.write_text(yaml.safe_dump(data), encoding="utf-8")
    return target


def test_load_config_sample():
    config = load_config(SAMPLE)
    assert config.symbol == "BTCUSDT"
    assert config.exchange == Exchange.BINANCE
    assert config.timeframe == Timeframe.ONE_HOUR
    assert config.strategy.name == "moving_average_crossover"
    assert config.strategy.parameters["slow_period"] == 21
    assert config.initial_balance == Decimal("10000")
    assert config.data.bars_path == "data/sample_bars.csv"
    assert config.simulation.enforce_take_profit is False


def test_sample_config_prepares_a_runnable_request():
    config = load_config(SAMPLE)
    request = config.to_request("sample-run")

    strategy, parameters = BacktestRunner().prepare(request)

    assert strategy.strategy_id == "moving_average_crossover"
    assert isinstance(parameters, MovingAverageCrossoverParameters)
    assert parameters.fast_period == 9
    assert parameters.stop_loss_percent == Decimal("5.0")
    assert request.name == "btc-golden-cross"


def test_missing_required_key(tmp_path):
    path = _write(tmp_path, {"name": "x", "version": 1, "strategy": "rsi_mean_reversion"})
    with pytest.raises(ValueError, match="symbol"):
        load_config(path)


def test_non_mapping_document(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)


def test_strategy_shorthand_and_defaults(tmp_path):
    path = _write(tmp_path, {"name": "eth", "version": 2, "symbol": "ETHUSDT", "strategy": "vwap"})
    config = load_config(path)
    assert config.strategy.name == "vwap"
    assert config.strategy.parameters == {}
    assert config.run_id_prefix == "eth"
    assert config.monitoring.runs_dir == "runtime/runs"


def test_unknown_timeframe_is_unsupported(tmp_path):
    path = _write(
        tmp_path,
        {"name": "x", "version": 1, "symbol": "BTCUSDT", "strategy": "vwap", "timeframe": "2h"},
    )
    with pytest.raises(UnsupportedConfigurationError):
        load_config(path)


def test_config_hash_is_stable_sha256():
    first = compute_config_hash(SAMPLE)
    assert first == compute_config_hash(SAMPLE)
    assert len(first) == 64
    int(first, 16)
