from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path

from strategy_lab.config import compute_config_hash, load_config
from strategy_lab.monitoring import AuditLog, setup_logging
from strategy_lab.runner import (
    BacktestRunner,
    BacktestStatus,
    JsonRunStore,
    create_run_id,
    serialize_equity_curve,
    serialize_run,
)
from strategy_lab.simulator import load_bars_csv


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a single backtest from a YAML config")
    parser.add_argument("--config", required=True)
    parser.add_argument("--output", required=True)
    parser.add_argument("--bars", help="CSV of bars; overrides data.bars_path in the config")
    parser.add_argument("--run-id")
    args = parser.parse_args()

    config_path = Path(args.config)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config = load_config(config_path)
    logger = setup_logging(config.monitoring.log_level, config.monitoring.log_file)
    config_hash = compute_config_hash(config_path)
    run_id = args.run_id or create_run_id(config.run_id_prefix, config_hash)

    bars_path = args.bars or config.data.bars_path
    if not bars_path:
        raise SystemExit("No bars file given: pass --bars or set data.bars_path")
    bars = load_bars_csv(bars_path)
    logger.info("Loaded %s bars from %s", len(bars), bars_path)

    runner = BacktestRunner(
        store=JsonRunStore(config.monitoring.runs_dir),
        audit_log=AuditLog(config.monitoring.audit_log_path, run_id=run_id, config_hash=config_hash),
    )
    run = runner.execute(config.to_request(run_id), bars)

    report = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "config_path": str(config_path),
        "config_hash": config_hash,
        "bars_path": str(bars_path),
        "bars": len(bars),
        "run": serialize_run(run),
        "equity_curve": serialize_equity_curve(run.equity_curve),
    }
    output_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"Wrote {output_path}")
    if run.status != BacktestStatus.COMPLETED:
        raise SystemExit(f"Backtest {run_id} {run.status.value}: {run.error_message}")


if __name__ == "__main__":
    main()
