from datetime import datetime, timezone
from decimal import Decimal

from strategy_lab.simulator import (
    DrawdownTracker,
    TradeRecord,
    TradeType,
    aggregate_performance,
    max_drawdown_percent,
)

HUNDRED = Decimal(100)


def _trade(trade_type, price, reason="signal"):
    price = Decimal(price)
    return TradeRecord(
        symbol="ETHUSDT",
        exchange="kraken",
        trade_type=trade_type,
        price=price,
        quantity=Decimal(1),
        value=price,
        commission=Decimal(0),
        executed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        reason=reason,
        net_value=price,
        balance_before=Decimal(0),
        balance_after=Decimal(0),
    )


def test_max_drawdown_scenario():
    equity = [Decimal(10000), Decimal(10500), Decimal(9000), Decimal(9500)]
    expected = (Decimal(10500) - Decimal(9000)) / Decimal(10500) * HUNDRED

    assert max_drawdown_percent(equity) == expected
    assert max_drawdown_percent(equity).quantize(Decimal("0.01")) == Decimal("14.29")


def test_drawdown_tracker_follows_peak():
    tracker = DrawdownTracker(Decimal(10000))
    peaks = []
    for equity in (Decimal(10000), Decimal(10500), Decimal(9000), Decimal(9500)):
        tracker.update(equity)
        peaks.append(tracker.peak)

    assert peaks == [Decimal(10000), Decimal(10500), Decimal(10500), Decimal(10500)]
    assert tracker.current_drawdown_percent < tracker.max_drawdown_percent


def test_win_loss_attribution_against_last_buy():
    trades = [
        _trade(TradeType.SELL, 120),
        _trade(TradeType.BUY, 100),
        _trade(TradeType.SELL, 110),
        _trade(TradeType.BUY, 110),
        _trade(TradeType.SELL, 105),
    ]

    result = aggregate_performance(Decimal(10000), Decimal(10450), trades)

    assert result.total_trades == 5
    assert result.winning_trades == 1
    assert result.losing_trades == 1
    assert result.win_rate_percent == Decimal(1) / Decimal(5) * HUNDRED
    assert result.winning_trades + result.losing_trades <= result.total_trades
    assert result.total_return_percent == Decimal("4.5")


def test_sell_at_buy_price_counts_as_loss():
    trades = [_trade(TradeType.BUY, 100), _trade(TradeType.SELL, 100)]
    result = aggregate_performance(Decimal(100), Decimal(100), trades)
    assert result.winning_trades == 0
    assert result.losing_trades == 1


def test_average_trade_return():
    trades = [
        _trade(TradeType.BUY, 100),
        _trade(TradeType.SELL, 110),
        _trade(TradeType.BUY, 110),
        _trade(TradeType.SELL, 105),
    ]
    result = aggregate_performance(Decimal(10000), Decimal(10000), trades)

    first = (Decimal(110) - Decimal(100)) / Decimal(100) * HUNDRED
    second = (Decimal(105) - Decimal(110)) / Decimal(110) * HUNDRED
    assert result.average_trade_return_percent == (Decimal(0) + first + second) / 2


def test_no_trades_yields_zero_rates():
    result = aggregate_performance(Decimal(10000), Decimal(10000), [])
    assert result.total_trades == 0
    assert result.win_rate_percent == 0
    assert result.total_return_percent == 0
    assert result.average_trade_return_percent == 0


def test_sharpe_ratio_sign_follows_returns():
    flat = aggregate_performance(Decimal(100), Decimal(100), [], [Decimal(100)] * 5)
    rising = aggregate_performance(
        Decimal(100), Decimal(110), [], [Decimal(100), Decimal(102), Decimal(103), Decimal(106), Decimal(110)]
    )
    assert flat.sharpe_ratio == 0
    assert rising.sharpe_ratio > 0


def test_aggregation_is_idempotent():
    trades = [_trade(TradeType.BUY, 100), _trade(TradeType.SELL, 90)]
    equity = [Decimal(1000), Decimal(950), Decimal(900)]

    first = aggregate_performance(Decimal(1000), Decimal(900), trades, equity)
    second = aggregate_performance(Decimal(1000), Decimal(900), trades, equity)

    assert first == second
    assert first.max_drawdown_percent == Decimal(10)
