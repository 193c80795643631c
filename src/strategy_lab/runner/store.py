"""Persistence hooks for run status and results."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from strategy_lab.runner.models import BacktestRun
from strategy_lab.simulator.models import BacktestResult, EquityPoint, TradeRecord


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def serialize_trade(trade: TradeRecord) -> dict[str, Any]:
    return _plain(asdict(trade))


def serialize_result(result: BacktestResult) -> dict[str, Any]:
    return _plain(asdict(result))


def serialize_equity_curve(equity_curve: list[EquityPoint]) -> list[dict[str, Any]]:
    return [_plain(asdict(point)) for point in equity_curve]


def serialize_run(run: BacktestRun, include_trades: bool = True) -> dict[str, Any]:
    request = run.request
    payload: dict[str, Any] = {
        "run_id": run.run_id,
        "name": request.name,
        "strategy": request.strategy,
        "symbol": request.symbol,
        "exchange": request.exchange.value,
        "timeframe": request.timeframe.value,
        "start": _plain(request.start),
        "end": _plain(request.end),
        "initial_balance": str(request.initial_balance),
        "commission_rate": str(request.commission_rate),
        "parameters": run.parameters.to_dict(),
        "status": run.status.value,
        "created_at": _plain(run.created_at),
        "started_at": _plain(run.started_at),
        "completed_at": _plain(run.completed_at),
        "execution_duration_seconds": _plain(run.execution_duration),
        "error_message": run.error_message,
        "result": serialize_result(run.result) if run.result is not None else None,
    }
    if include_trades:
        payload["trades"] = [serialize_trade(trade) for trade in run.trades]
    return payload


class RunStore:
    def save_status(self, run: BacktestRun) -> None:
        raise NotImplementedError

    def save_results(self, run: BacktestRun) -> None:
        raise NotImplementedError


class JsonRunStore(RunStore):
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, run_id: str) -> Path:
        return self.directory / f"{run_id}.json"

    def save_status(self, run: BacktestRun) -> None:
        self._write(run, include_trades=False)

    def save_results(self, run: BacktestRun) -> None:
        self._write(run, include_trades=True)

    def read_run(self, run_id: str) -> Optional[dict[str, Any]]:
        path = self.path_for(run_id)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, run: BacktestRun, include_trades: bool) -> None:
        payload = serialize_run(run, include_trades=include_trades)
        path = self.path_for(run.run_id)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(path)
