"""Load backtest configuration files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import yaml

from strategy_lab.config.models import (
    BacktestConfig,
    DataConfig,
    MonitoringConfig,
    SimulationOptions,
    StrategyConfig,
)
from strategy_lab.runner.models import Exchange, Timeframe
from strategy_lab.simulator.models import to_decimal


def load_config(path: str | Path) -> BacktestConfig:
    path = Path(path)
    data = _load_yaml(path)

    name = str(_require(data, "name"))
    version = str(_require(data, "version"))
    run_id_prefix = str(data.get("run_id_prefix", name))
    symbol = str(_require(data, "symbol"))

    return BacktestConfig(
        name=name,
        version=version,
        run_id_prefix=run_id_prefix,
        symbol=symbol,
        strategy=_parse_strategy(_require(data, "strategy")),
        exchange=Exchange.parse(data.get("exchange", Exchange.BINANCE.value)),
        timeframe=Timeframe.parse(data.get("timeframe", Timeframe.ONE_HOUR.value)),
        initial_balance=to_decimal(data.get("initial_balance", "10000")),
        commission_rate=to_decimal(data.get("commission_rate", "0.001")),
        data=_parse_data(data.get("data") or {}),
        simulation=_parse_simulation(data.get("simulation") or {}),
        monitoring=_parse_monitoring(data.get("monitoring") or {}),
    )


def compute_config_hash(path: str | Path) -> str:
    path = Path(path)
    content = path.read_bytes()
    return hashlib.sha256(content).hexdigest()


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_strategy(data: Any) -> StrategyConfig:
    if isinstance(data, str):
        return StrategyConfig(name=data)
    if not isinstance(data, dict):
        raise ValueError("strategy must be a name or a mapping")
    parameters = data.get("parameters") or {}
    if not isinstance(parameters, dict):
        raise ValueError("strategy.parameters must be a mapping")
    return StrategyConfig(name=str(_require(data, "name")), parameters=dict(parameters))


def _parse_data(data: dict[str, Any]) -> DataConfig:
    bars_path = data.get("bars_path")
    return DataConfig(bars_path=str(bars_path) if bars_path is not None else None)


def _parse_simulation(data: dict[str, Any]) -> SimulationOptions:
    return SimulationOptions(enforce_take_profit=bool(data.get("enforce_take_profit", False)))


def _parse_monitoring(data: dict[str, Any]) -> MonitoringConfig:
    log_file = data.get("log_file")
    return MonitoringConfig(
        log_level=str(data.get("log_level", "INFO")),
        log_file=str(log_file) if log_file is not None else None,
        audit_log_path=str(data.get("audit_log_path", "runtime/audit.log")),
        runs_dir=str(data.get("runs_dir", "runtime/runs")),
    )
