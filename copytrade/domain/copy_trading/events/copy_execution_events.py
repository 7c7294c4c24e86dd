"""Domain events для CopyExecution lifecycle.

Notifiers (Telegram, webhooks) підписуються на ці events через EventBus.
"""

from dataclasses import dataclass
from decimal import Decimal

from copytrade.domain.shared import DomainEvent


@dataclass(frozen=True)
class CopyExecutionOpenedEvent(DomainEvent):
    """Копія провайдерської позиції відкрита на біржі follower'а."""

    execution_id: int
    copy_settings_id: int
    wallet_id: int
    provider_trade_id: str
    pair: str
    direction: str
    order_id: str
    size: Decimal
    entry_price: Decimal
    leverage: int


@dataclass(frozen=True)
class CopyExecutionBlockedEvent(DomainEvent):
    """Risk Gate відхилив копію."""

    execution_id: int
    copy_settings_id: int
    wallet_id: int
    provider_trade_id: str
    reason: str


@dataclass(frozen=True)
class CopyExecutionFailedEvent(DomainEvent):
    """Відкриття копії завершилось помилкою."""

    execution_id: int
    copy_settings_id: int
    wallet_id: int
    provider_trade_id: str
    error: str


@dataclass(frozen=True)
class CopyExecutionClosedEvent(DomainEvent):
    """Копію закрито слідом за провайдером."""

    execution_id: int
    copy_settings_id: int
    wallet_id: int
    provider_trade_id: str
    pair: str
    direction: str
    exit_price: Decimal
    realized_pnl: Decimal
    pnl_percent: Decimal


@dataclass(frozen=True)
class CopyExecutionCloseFailedEvent(DomainEvent):
    """Закриття не вдалось: позиція лишається відкритою на біржі.

    Потребує ручного втручання.
    """

    execution_id: int
    copy_settings_id: int
    wallet_id: int
    provider_trade_id: str
    error: str
