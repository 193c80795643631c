"""Logging and audit journal helpers."""

from strategy_lab.monitoring.audit import AuditLog
from strategy_lab.monitoring.logs import setup_logging

__all__ = ["AuditLog", "setup_logging"]
