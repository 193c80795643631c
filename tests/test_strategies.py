from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from strategy_lab.errors import InvalidParametersError, UnsupportedConfigurationError
from strategy_lab.simulator import MarketBar, Position, Signal, SignalAction
from strategy_lab.strategy import (
    INSUFFICIENT_DATA,
    INSUFFICIENT_VOLUME,
    BollingerBandsBreakoutStrategy,
    BollingerBandsParameters,
    ExternalStrategy,
    MacdCrossoverStrategy,
    MacdParameters,
    MovingAverageCrossoverParameters,
    MovingAverageCrossoverStrategy,
    MovingAverageType,
    RsiMeanReversionParameters,
    RsiMeanReversionStrategy,
    StrategyParameters,
    StrategySource,
    StrategyType,
    VwapParameters,
    VwapStrategy,
    available_strategies,
    build_strategy,
)
from strategy_lab.strategy.indicators import atr, macd, rsi

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _bar(index, close, high=None, low=None, volume=1000):
    close = Decimal(str(close))
    return MarketBar(
        timestamp=START + timedelta(hours=index),
        open=close,
        high=high if high is not None else close + Decimal("0.1"),
        low=low if low is not None else close - Decimal("0.1"),
        close=close,
        volume=volume,
    )


def _bars(closes, volume=1000):
    return [_bar(index, close, volume=volume) for index, close in enumerate(closes)]


def _position(price=100):
    price = Decimal(price)
    return Position(
        quantity=Decimal(10),
        entry_price=price,
        entry_time=START,
        current_value=price * 10,
    )


def _golden_cross_closes():
    declining = [Decimal(100) - Decimal("0.5") * index for index in range(25)]
    rising = [declining[-1] + 3 * (step + 1) for step in range(10)]
    return declining + rising


def _first_action(strategy, bars, parameters, action, position=None):
    for index in range(len(bars)):
        signal = strategy.analyze(bars[: index + 1], position, parameters)
        if signal.action == action:
            return index, signal
    return None, None


ALL_STRATEGIES = [
    MovingAverageCrossoverStrategy(),
    RsiMeanReversionStrategy(),
    BollingerBandsBreakoutStrategy(),
    MacdCrossoverStrategy(),
    VwapStrategy(),
]


@pytest.mark.parametrize("strategy", ALL_STRATEGIES, ids=lambda strategy: strategy.strategy_id)
def test_insufficient_data_holds(strategy):
    parameters = strategy.default_parameters()
    short = _bars([100] * (strategy.min_bars(parameters) - 1))

    for bars in (None, [], short):
        signal = strategy.analyze(bars, None, parameters)
        assert signal.action == SignalAction.HOLD
        assert signal.reason == INSUFFICIENT_DATA


@pytest.mark.parametrize("strategy", ALL_STRATEGIES, ids=lambda strategy: strategy.strategy_id)
def test_default_parameters_validate(strategy):
    assert strategy.validate_parameters(strategy.default_parameters()) == (True, "")
    assert strategy.validate_parameters(object()) == (False, "Invalid parameter type")


def test_analyze_rejects_wrong_parameter_type():
    with pytest.raises(InvalidParametersError):
        MovingAverageCrossoverStrategy().analyze(_bars([100] * 30), None, RsiMeanReversionParameters())


def test_golden_cross_buys_at_crossover_close():
    strategy = MovingAverageCrossoverStrategy()
    parameters = MovingAverageCrossoverParameters()
    bars = _bars(_golden_cross_closes())

    index, signal = _first_action(strategy, bars, parameters, SignalAction.BUY)

    assert index is not None
    assert index >= 25
    assert signal.entry_price == bars[index].close
    assert signal.reason.startswith("Golden Cross")
    assert signal.stop_loss == bars[index].close * (1 - Decimal(5) / 100)
    assert signal.take_profit == bars[index].close * (1 + Decimal(10) / 100)
    assert signal.confidence == Decimal("0.75")


def test_golden_cross_with_ema_also_buys_after_decline():
    strategy = MovingAverageCrossoverStrategy()
    parameters = MovingAverageCrossoverParameters(ma_type=MovingAverageType.EMA)
    bars = _bars(_golden_cross_closes())

    index, signal = _first_action(strategy, bars, parameters, SignalAction.BUY)

    assert index is not None
    assert index >= 25
    assert signal.entry_price == bars[index].close


def test_crossover_never_buys_with_open_position():
    strategy = MovingAverageCrossoverStrategy()
    bars = _bars(_golden_cross_closes())

    index, _ = _first_action(strategy, bars, MovingAverageCrossoverParameters(), SignalAction.BUY, _position())

    assert index is None


def test_death_cross_sells_only_with_position():
    strategy = MovingAverageCrossoverStrategy()
    parameters = MovingAverageCrossoverParameters(fast_period=3, slow_period=6)
    closes = [Decimal(100) + index for index in range(15)] + [Decimal(114) - 3 * (step + 1) for step in range(8)]
    bars = _bars(closes)

    index, signal = _first_action(strategy, bars, parameters, SignalAction.SELL, _position())
    assert index is not None
    assert index >= 15
    assert signal.reason.startswith("Death Cross")
    assert signal.entry_price == bars[index].close

    flat_index, _ = _first_action(strategy, bars, parameters, SignalAction.SELL)
    assert flat_index is None


def test_volume_confirmation_blocks_crossover():
    strategy = MovingAverageCrossoverStrategy()
    parameters = MovingAverageCrossoverParameters(
        require_volume_confirmation=True,
        volume_multiplier=Decimal("2.0"),
    )
    bars = _bars(_golden_cross_closes())

    index, _ = _first_action(strategy, bars, parameters, SignalAction.BUY)
    signal = strategy.analyze(bars, None, parameters)

    assert index is None
    assert signal.action == SignalAction.HOLD
    assert signal.reason == INSUFFICIENT_VOLUME


def test_volume_confirmation_passes_on_volume_spike():
    strategy = MovingAverageCrossoverStrategy()
    parameters = MovingAverageCrossoverParameters(
        require_volume_confirmation=True,
        volume_multiplier=Decimal("1.5"),
    )
    bars = [_bar(index, close, volume=5000) for index, close in enumerate(_golden_cross_closes())]
    baseline = _bars(_golden_cross_closes())

    index, _ = _first_action(strategy, baseline, MovingAverageCrossoverParameters(), SignalAction.BUY)
    spiked = baseline[:index] + [bars[index]]

    signal = strategy.analyze(spiked, None, parameters)
    assert signal.action == SignalAction.BUY


def test_atr_stop_replaces_percentage_stop():
    strategy = MovingAverageCrossoverStrategy()
    parameters = MovingAverageCrossoverParameters(use_atr_for_stops=True, atr_multiplier=Decimal("1.5"))
    bars = _bars(_golden_cross_closes())

    index, signal = _first_action(strategy, bars, parameters, SignalAction.BUY)

    window = bars[: index + 1]
    expected_atr = atr([bar.high for bar in window], [bar.low for bar in window], [bar.close for bar in window], 14)
    assert signal.stop_loss == bars[index].close - expected_atr * Decimal("1.5")


def test_rsi_oversold_buys_once_rsi_crosses_threshold():
    strategy = RsiMeanReversionStrategy()
    parameters = RsiMeanReversionParameters()
    closes = [Decimal(100 + index % 2) for index in range(16)]
    closes += [closes[-1] - (step + 1) for step in range(14)]
    bars = _bars(closes)

    index, signal = _first_action(strategy, bars, parameters, SignalAction.BUY)

    assert index is not None
    closes_so_far = [bar.close for bar in bars[: index + 1]]
    assert rsi(closes_so_far, 14) < Decimal(30)
    assert rsi(closes_so_far[:-1], 14) >= Decimal(30)
    assert signal.entry_price == bars[index].close
    assert "oversold" in signal.reason


def test_rsi_neutral_and_overbought():
    strategy = RsiMeanReversionStrategy()
    parameters = RsiMeanReversionParameters()
    alternating = _bars([100 + index % 2 for index in range(20)])
    rising = _bars([100 + index for index in range(20)])

    neutral = strategy.analyze(alternating, None, parameters)
    assert neutral.action == SignalAction.HOLD
    assert neutral.reason.startswith("RSI neutral")

    assert strategy.analyze(rising, _position(), parameters).action == SignalAction.SELL
    assert strategy.analyze(rising, None, parameters).action == SignalAction.HOLD


def _band_base():
    return [_bar(index, 100 + index % 2) for index in range(21)]


def test_bollinger_lower_band_touch_with_momentum_buys():
    strategy = BollingerBandsBreakoutStrategy()
    parameters = BollingerBandsParameters()
    bars = _band_base() + [_bar(21, "100.8", high=Decimal(101), low=Decimal(95))]

    signal = strategy.analyze(bars, None, parameters)

    assert signal.action == SignalAction.BUY
    assert signal.entry_price == Decimal("100.8")
    assert signal.confidence == Decimal("0.65")


def test_bollinger_lower_band_touch_without_momentum_holds():
    strategy = BollingerBandsBreakoutStrategy()
    bars = _band_base() + [_bar(21, "99.9", high=Decimal(100), low=Decimal(95))]

    assert strategy.analyze(bars, None, BollingerBandsParameters()).action == SignalAction.HOLD

    relaxed = BollingerBandsParameters(require_momentum_confirmation=False)
    assert strategy.analyze(bars, None, relaxed).action == SignalAction.BUY


def test_bollinger_upper_band_touch_sells_with_position():
    strategy = BollingerBandsBreakoutStrategy()
    bars = _band_base() + [_bar(21, "100.2", high=Decimal(106), low=Decimal("100.1"))]

    signal = strategy.analyze(bars, _position(), BollingerBandsParameters())

    assert signal.action == SignalAction.SELL
    assert "upper band" in signal.reason


def test_macd_buys_after_decline_reverses():
    strategy = MacdCrossoverStrategy()
    parameters = MacdParameters()
    closes = [Decimal(200) - Decimal("0.05") * index * index for index in range(40)]
    closes += [closes[-1] + 3 * (step + 1) for step in range(20)]
    bars = _bars(closes)

    index, signal = _first_action(strategy, bars, parameters, SignalAction.BUY)

    assert index is not None
    assert index >= 40
    window = [bar.close for bar in bars[: index + 1]]
    current = macd(window, 12, 26, 9)
    previous = macd(window[:-1], 12, 26, 9)
    assert previous.macd <= previous.signal
    assert current.macd > current.signal
    assert signal.entry_price == bars[index].close


def test_vwap_deviation_drives_entries_and_exits():
    strategy = VwapStrategy()
    parameters = VwapParameters()
    flat = [_bar(index, 100) for index in range(13)]

    below = strategy.analyze(flat + [_bar(13, 95)], None, parameters)
    assert below.action == SignalAction.BUY
    assert "below VWAP" in below.reason

    above = strategy.analyze(flat + [_bar(13, 105)], _position(), parameters)
    assert above.action == SignalAction.SELL

    near = strategy.analyze(flat + [_bar(13, 100)], None, parameters)
    assert near.action == SignalAction.HOLD


@pytest.mark.parametrize(
    "strategy, parameters, message",
    [
        (
            MovingAverageCrossoverStrategy(),
            MovingAverageCrossoverParameters(fast_period=30, slow_period=10),
            "fast_period must be greater than 0 and less than slow_period",
        ),
        (
            RsiMeanReversionStrategy(),
            RsiMeanReversionParameters(oversold_threshold=Decimal(0)),
            "oversold_threshold must be between 0 and 50",
        ),
        (
            RsiMeanReversionStrategy(),
            RsiMeanReversionParameters(overbought_threshold=Decimal(100)),
            "overbought_threshold must be between 50 and 100",
        ),
        (
            BollingerBandsBreakoutStrategy(),
            BollingerBandsParameters(std_devs=Decimal(6)),
            "std_devs must be between 0 and 5",
        ),
        (
            MacdCrossoverStrategy(),
            MacdParameters(fast_period=26, slow_period=12),
            "slow_period must be greater than fast_period",
        ),
        (
            VwapStrategy(),
            VwapParameters(deviation_threshold=Decimal(0)),
            "deviation_threshold must be between 0 and 50",
        ),
        (
            MovingAverageCrossoverStrategy(),
            MovingAverageCrossoverParameters(stop_loss_percent=Decimal(0)),
            "stop_loss_percent must be between 0 and 100",
        ),
        (
            RsiMeanReversionStrategy(),
            RsiMeanReversionParameters(take_profit_percent=Decimal(1500)),
            "take_profit_percent must be between 0 and 1000",
        ),
    ],
)
def test_validation_names_first_offending_field(strategy, parameters, message):
    assert strategy.validate_parameters(parameters) == (False, message)


def test_strategy_specific_checks_run_before_common_checks():
    parameters = MovingAverageCrossoverParameters(fast_period=0, stop_loss_percent=Decimal(0))
    valid, message = MovingAverageCrossoverStrategy().validate_parameters(parameters)
    assert not valid
    assert message.startswith("fast_period")


def test_non_finite_values_are_reported_by_field():
    parameters = RsiMeanReversionParameters(oversold_threshold=Decimal("NaN"))
    assert RsiMeanReversionStrategy().validate_parameters(parameters) == (
        False,
        "oversold_threshold must be a finite number",
    )

    parameters = BollingerBandsParameters(stop_loss_percent=Decimal("Infinity"))
    assert BollingerBandsBreakoutStrategy().validate_parameters(parameters) == (
        False,
        "stop_loss_percent must be a finite number",
    )


@pytest.mark.parametrize(
    "data, message",
    [
        ({"stop_loss_percent": "five"}, "stop_loss_percent must be a number"),
        ({"volume_multiplier": float("nan")}, "volume_multiplier must be a finite number"),
        ({"fast_period": "nine"}, "fast_period must be an integer"),
        ({"slow_period": float("inf")}, "slow_period must be an integer"),
    ],
)
def test_from_dict_rejects_malformed_values(data, message):
    with pytest.raises(ValueError, match=message):
        MovingAverageCrossoverParameters.from_dict(data)


def test_parameters_from_dict_coerces_values():
    parameters = MovingAverageCrossoverParameters.from_dict(
        {"fast_period": "5", "slow_period": 10, "ma_type": "EMA", "stop_loss_percent": 2.5, "use_atr_for_stops": "yes"}
    )
    assert parameters.fast_period == 5
    assert parameters.ma_type == MovingAverageType.EMA
    assert parameters.stop_loss_percent == Decimal("2.5")
    assert parameters.use_atr_for_stops is True
    assert parameters.take_profit_percent == Decimal("10.0")

    payload = parameters.to_dict()
    assert payload["ma_type"] == "ema"
    assert payload["stop_loss_percent"] == "2.5"
    assert MovingAverageCrossoverParameters.from_dict(payload) == parameters


def test_parameter_definitions_cover_strategy_and_common_fields():
    definitions = RsiMeanReversionStrategy().parameter_definitions()
    names = [definition.name for definition in definitions]
    assert names[:3] == ["rsi_period", "oversold_threshold", "overbought_threshold"]
    assert "stop_loss_percent" in names
    assert "volume_multiplier" in names
    orders = [definition.display_order for definition in definitions]
    assert len(orders) == len(set(orders))


def test_registry_resolves_ids_and_display_names():
    assert isinstance(build_strategy("moving_average_crossover"), MovingAverageCrossoverStrategy)
    assert isinstance(build_strategy("RSI Mean Reversion"), RsiMeanReversionStrategy)
    assert isinstance(build_strategy("Volume Weighted Average Price"), VwapStrategy)

    with pytest.raises(UnsupportedConfigurationError):
        build_strategy("martingale")


def test_available_strategies_expose_identity():
    infos = {info.strategy_id: info for info in available_strategies()}
    assert set(infos) == {
        "moving_average_crossover",
        "rsi_mean_reversion",
        "bollinger_bands_breakout",
        "macd_crossover",
        "vwap",
    }
    assert infos["moving_average_crossover"].strategy_type == StrategyType.TREND_FOLLOWING
    assert infos["bollinger_bands_breakout"].strategy_type == StrategyType.BREAKOUT
    assert infos["macd_crossover"].strategy_type == StrategyType.TREND_FOLLOWING
    assert all(info.source == StrategySource.HARD_CODED for info in infos.values())


def test_external_strategy_is_gated_by_position():
    strategy = ExternalStrategy(
        "always-buy",
        lambda bars, position, parameters: Signal(action=SignalAction.BUY, reason="buy"),
    )
    bars = _bars([100, 101])

    assert strategy.source == StrategySource.CUSTOM
    assert strategy.analyze(bars, None, StrategyParameters()).action == SignalAction.BUY
    assert strategy.analyze(bars, _position(), StrategyParameters()).action == SignalAction.HOLD


def test_external_strategy_without_signal_is_an_error():
    strategy = ExternalStrategy("broken", lambda bars, position, parameters: None)
    with pytest.raises(RuntimeError):
        strategy.analyze(_bars([100]), None, StrategyParameters())
