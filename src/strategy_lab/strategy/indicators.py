"""Technical indicators over bar windows.

Every function is pure and works in ``Decimal``. A window shorter than
the requested period yields ``None``, which strategies treat as
insufficient data.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from strategy_lab.simulator.models import MarketBar

ZERO = Decimal(0)
TWO = Decimal(2)
THREE = Decimal(3)
HUNDRED = Decimal(100)
VOLUME_LOOKBACK = 20


@dataclass(frozen=True)
class Bands:
    middle: Decimal
    upper: Decimal
    lower: Decimal


@dataclass(frozen=True)
class MacdValue:
    macd: Decimal
    signal: Decimal
    histogram: Decimal


def sma(values: Sequence[Decimal], period: int) -> Optional[Decimal]:
    if period <= 0 or len(values) < period:
        return None
    return sum(values[-period:], ZERO) / period


def sma_series(values: Sequence[Decimal], period: int) -> list[Optional[Decimal]]:
    if period <= 0:
        return []
    result: list[Optional[Decimal]] = []
    running = ZERO
    for index, value in enumerate(values):
        running += value
        if index >= period:
            running -= values[index - period]
        result.append(running / period if index >= period - 1 else None)
    return result


def ema_series(values: Sequence[Decimal], period: int) -> list[Optional[Decimal]]:
    if period <= 0 or len(values) < period:
        return []
    multiplier = TWO / (period + 1)
    current = sum(values[:period], ZERO) / period
    result: list[Optional[Decimal]] = [None] * (period - 1)
    result.append(current)
    for value in values[period:]:
        current = (value - current) * multiplier + current
        result.append(current)
    return result


def ema(values: Sequence[Decimal], period: int) -> Optional[Decimal]:
    series = ema_series(values, period)
    return series[-1] if series else None


def stddev(values: Sequence[Decimal], period: int) -> Optional[Decimal]:
    mean = sma(values, period)
    if mean is None:
        return None
    window = values[-period:]
    variance = sum(((value - mean) ** 2 for value in window), ZERO) / period
    return variance.sqrt()


def rsi(values: Sequence[Decimal], period: int) -> Optional[Decimal]:
    if period <= 0 or len(values) < period + 1:
        return None
    gains: list[Decimal] = []
    losses: list[Decimal] = []
    for previous, current in zip(values, values[1:]):
        change = current - previous
        gains.append(change if change > 0 else ZERO)
        losses.append(-change if change < 0 else ZERO)

    average_gain = sum(gains[:period], ZERO) / period
    average_loss = sum(losses[:period], ZERO) / period
    for gain, loss in zip(gains[period:], losses[period:]):
        average_gain = (average_gain * (period - 1) + gain) / period
        average_loss = (average_loss * (period - 1) + loss) / period

    if average_loss == 0:
        return HUNDRED
    relative_strength = average_gain / average_loss
    return HUNDRED - HUNDRED / (1 + relative_strength)


def macd(
    values: Sequence[Decimal],
    fast_period: int,
    slow_period: int,
    signal_period: int,
) -> Optional[MacdValue]:
    longest = max(fast_period, slow_period)
    if min(fast_period, slow_period, signal_period) <= 0 or len(values) < longest + signal_period:
        return None
    fast_series = ema_series(values, fast_period)
    slow_series = ema_series(values, slow_period)
    start = longest - 1
    line = [fast - slow for fast, slow in zip(fast_series[start:], slow_series[start:])]
    signal_series = ema_series(line, signal_period)
    if not signal_series:
        return None
    signal = signal_series[-1]
    return MacdValue(macd=line[-1], signal=signal, histogram=line[-1] - signal)


def bollinger(values: Sequence[Decimal], period: int, std_devs: Decimal) -> Optional[Bands]:
    middle = sma(values, period)
    deviation = stddev(values, period)
    if middle is None or deviation is None:
        return None
    return Bands(middle=middle, upper=middle + std_devs * deviation, lower=middle - std_devs * deviation)


def true_ranges(
    highs: Sequence[Decimal],
    lows: Sequence[Decimal],
    closes: Sequence[Decimal],
) -> list[Decimal]:
    ranges = []
    for index in range(1, len(closes)):
        high = highs[index]
        low = lows[index]
        prev_close = closes[index - 1]
        ranges.append(max(high - low, abs(high - prev_close), abs(low - prev_close)))
    return ranges


def atr(
    highs: Sequence[Decimal],
    lows: Sequence[Decimal],
    closes: Sequence[Decimal],
    period: int,
) -> Optional[Decimal]:
    if period <= 0 or len(closes) < period + 1:
        return None
    ranges = true_ranges(highs, lows, closes)
    current = sum(ranges[:period], ZERO) / period
    for value in ranges[period:]:
        current = (current * (period - 1) + value) / period
    return current


def typical_prices(
    highs: Sequence[Decimal],
    lows: Sequence[Decimal],
    closes: Sequence[Decimal],
) -> list[Decimal]:
    return [(high + low + close) / THREE for high, low, close in zip(highs, lows, closes)]


def vwap(
    highs: Sequence[Decimal],
    lows: Sequence[Decimal],
    closes: Sequence[Decimal],
    volumes: Sequence[Decimal],
    period: int,
) -> Optional[Decimal]:
    if period <= 0 or len(closes) < period:
        return None
    typical = typical_prices(highs[-period:], lows[-period:], closes[-period:])
    window_volumes = volumes[-period:]
    total_volume = sum(window_volumes, ZERO)
    if total_volume == 0:
        return None
    weighted = sum((price * volume for price, volume in zip(typical, window_volumes)), ZERO)
    return weighted / total_volume


def vwap_bands(
    highs: Sequence[Decimal],
    lows: Sequence[Decimal],
    closes: Sequence[Decimal],
    volumes: Sequence[Decimal],
    period: int,
    std_devs: Decimal,
) -> Optional[Bands]:
    middle = vwap(highs, lows, closes, volumes, period)
    if middle is None:
        return None
    typical = typical_prices(highs[-period:], lows[-period:], closes[-period:])
    deviation = stddev(typical, period)
    if deviation is None:
        return None
    return Bands(middle=middle, upper=middle + std_devs * deviation, lower=middle - std_devs * deviation)


def average_volume(volumes: Sequence[Decimal], lookback: int = VOLUME_LOOKBACK) -> Optional[Decimal]:
    if not volumes or lookback <= 0:
        return None
    window = volumes[-lookback:]
    return sum(window, ZERO) / len(window)


class IndicatorSeries:
    """Column view over a bar window with indicator accessors."""

    def __init__(self, bars: Sequence[MarketBar]) -> None:
        self.bars = bars
        self.closes = [bar.close for bar in bars]
        self.highs = [bar.high for bar in bars]
        self.lows = [bar.low for bar in bars]
        self.volumes = [bar.volume for bar in bars]

    def __len__(self) -> int:
        return len(self.bars)

    def previous(self) -> "IndicatorSeries":
        return IndicatorSeries(self.bars[:-1])

    def sma(self, period: int) -> Optional[Decimal]:
        return sma(self.closes, period)

    def ema(self, period: int) -> Optional[Decimal]:
        return ema(self.closes, period)

    def rsi(self, period: int) -> Optional[Decimal]:
        return rsi(self.closes, period)

    def macd(self, fast_period: int, slow_period: int, signal_period: int) -> Optional[MacdValue]:
        return macd(self.closes, fast_period, slow_period, signal_period)

    def bollinger(self, period: int, std_devs: Decimal) -> Optional[Bands]:
        return bollinger(self.closes, period, std_devs)

    def atr(self, period: int) -> Optional[Decimal]:
        return atr(self.highs, self.lows, self.closes, period)

    def vwap(self, period: int) -> Optional[Decimal]:
        return vwap(self.highs, self.lows, self.closes, self.volumes, period)

    def average_volume(self, lookback: int = VOLUME_LOOKBACK) -> Optional[Decimal]:
        return average_volume(self.volumes, lookback)
