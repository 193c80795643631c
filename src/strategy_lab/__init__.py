"""Backtesting engine, strategies and run lifecycle."""
