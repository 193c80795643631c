from datetime import datetime, timedelta, timezone
from decimal import Decimal

from strategy_lab.runner import BacktestPool, BacktestRequest, BacktestRunner
from strategy_lab.simulator import MarketBar
from strategy_lab.strategy import available_strategies


start = datetime(2024, 1, 1, tzinfo=timezone.utc)
bars = []
price = Decimal("100")
for index in range(120):
    step = Decimal("-0.8") if (index // 20) % 2 == 0 else Decimal("1.1")
    close = price + step
    bars.append(
        MarketBar(
            timestamp=start + timedelta(hours=index),
            open=price,
            high=max(price, close) + Decimal("0.4"),
            low=min(price, close) - Decimal("0.4"),
            close=close,
            volume=1000 + (index % 5) * 150,
        )
    )
    price = close

requests = [
    BacktestRequest(run_id=f"demo-{info.strategy_id}", strategy=info.strategy_id, symbol="BTCUSDT")
    for info in available_strategies()
]

with BacktestPool(BacktestRunner(), max_workers=3) as pool:
    runs = pool.run_all((request, bars) for request in requests)

for run in runs:
    result = run.result
    if result is None:
        print(f"{run.request.strategy}: {run.status.value} {run.error_message}")
        continue
    print(
        f"{run.request.strategy}: final={result.final_balance:.2f} "
        f"return={result.total_return_percent:.2f}% "
        f"max_dd={result.max_drawdown_percent:.2f}% trades={result.total_trades}"
    )
