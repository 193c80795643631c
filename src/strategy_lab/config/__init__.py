"""Configuration loading utilities."""

from strategy_lab.config.loader import compute_config_hash, load_config
from strategy_lab.config.models import (
    BacktestConfig,
    DataConfig,
    MonitoringConfig,
    SimulationOptions,
    StrategyConfig,
)

__all__ = [
    "BacktestConfig",
    "DataConfig",
    "MonitoringConfig",
    "SimulationOptions",
    "StrategyConfig",
    "compute_config_hash",
    "load_config",
]
