"""Celery tasks."""

from .copy_trade_tasks import (
    copy_trade_closed,
    copy_trade_opened,
    report_stuck_executions,
)

__all__ = [
    "copy_trade_opened",
    "copy_trade_closed",
    "report_stuck_executions",
]
