"""Enums для Copy Trading domain."""

from enum import Enum


class CopyMode(str, Enum):
    """Політика розрахунку розміру копії."""

    PROPORTIONAL = "proportional"
    """size = provider quantity * size_value (1.0 дзеркалить, 0.5 половинить)."""

    FIXED_PERCENT = "fixed_percent"
    """size = size_value% від власного балансу follower'а / entry price."""

    FIXED_SIZE = "fixed_size"
    """size = size_value (notional в quote currency) / entry price."""


class ExecutionStatus(str, Enum):
    """Status CopyExecution в ledger."""

    PENDING = "pending"
    """Зарезервована, exchange ще не викликався."""

    OPEN = "open"
    """Ордер виконано, позиція відкрита і чекає на close event."""

    CLOSED = "closed"
    """Позицію закрито, P&L зафіксовано."""

    BLOCKED = "blocked"
    """Risk Gate відхилив копію. Terminal."""

    FAILED = "failed"
    """Помилка під час виконання. Terminal."""

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionStatus.CLOSED, ExecutionStatus.BLOCKED, ExecutionStatus.FAILED)


class ProviderTradeStatus(str, Enum):
    """Status позиції провайдера (read-only для engine)."""

    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"
