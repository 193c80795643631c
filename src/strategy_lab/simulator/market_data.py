"""CSV market data adapter for offline backtests."""

from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from strategy_lab.simulator.models import MarketBar

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


def parse_timestamp(value: str) -> datetime:
    value = value.strip()
    if value.replace(".", "", 1).isdigit():
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_bars(bars: Iterable[MarketBar]) -> list[MarketBar]:
    """Sort by timestamp and keep the last bar seen for each timestamp."""
    by_time: dict[datetime, MarketBar] = {}
    for bar in bars:
        by_time[bar.timestamp] = bar
    return [by_time[key] for key in sorted(by_time)]


def load_bars_csv(path: str | Path) -> list[MarketBar]:
    path = Path(path)
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        missing = [column for column in REQUIRED_COLUMNS if column not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"Missing bar columns in {path}: {', '.join(missing)}")
        bars = [_parse_row(row) for row in reader]
    return normalize_bars(bars)


def _parse_row(row: dict[str, str]) -> MarketBar:
    def optional(key: str) -> Optional[str]:
        value = row.get(key)
        return value if value not in (None, "") else None

    trade_count = optional("trade_count")
    return MarketBar(
        timestamp=parse_timestamp(row["timestamp"]),
        open=row["open"],
        high=row["high"],
        low=row["low"],
        close=row["close"],
        volume=row["volume"],
        vwap=optional("vwap"),
        trade_count=int(trade_count) if trade_count is not None else None,
    )
