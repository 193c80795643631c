"""Error taxonomy for backtest runs."""

from __future__ import annotations


class BacktestError(Exception):
    """Base class for errors raised by the backtest core."""


class InvalidParametersError(BacktestError, ValueError):
    """Parameters rejected before a run starts."""


class UnsupportedConfigurationError(BacktestError, ValueError):
    """Unknown strategy, timeframe or exchange identifier."""


class BacktestCancelled(BacktestError):
    """Raised between bars when a run is cancelled cooperatively."""
