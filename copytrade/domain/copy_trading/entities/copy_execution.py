"""CopyExecution Aggregate Root - одна спроба скопіювати trade провайдера.

CopyExecution відповідає за:
- Lifecycle копії (PENDING → OPEN/BLOCKED/FAILED, OPEN → CLOSED)
- P&L calculation при закритті
- Domain events на кожен перехід
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from copytrade.domain.exchanges.value_objects import Direction
from copytrade.domain.shared import AggregateRoot, InvalidStateTransition

from ..events import (
    CopyExecutionBlockedEvent,
    CopyExecutionClosedEvent,
    CopyExecutionCloseFailedEvent,
    CopyExecutionFailedEvent,
    CopyExecutionOpenedEvent,
)
from ..value_objects import ExecutionStatus, FollowerBinding, ProviderTrade

PNL_PRECISION = Decimal("0.00000001")

_ALLOWED_TRANSITIONS: dict[ExecutionStatus, frozenset[ExecutionStatus]] = {
    ExecutionStatus.PENDING: frozenset(
        {ExecutionStatus.OPEN, ExecutionStatus.BLOCKED, ExecutionStatus.FAILED}
    ),
    ExecutionStatus.OPEN: frozenset({ExecutionStatus.CLOSED}),
    ExecutionStatus.CLOSED: frozenset(),
    ExecutionStatus.BLOCKED: frozenset(),
    ExecutionStatus.FAILED: frozenset(),
}


class CopyExecution(AggregateRoot):
    """CopyExecution Aggregate Root.

    Правила:
    - Максимум одна execution на (copy_settings_id, provider_trade_id)
    - BLOCKED, FAILED і CLOSED - terminal, ніколи не retry'яться
    - Невдале закриття лишає execution в OPEN з error_message

    Example:
        >>> execution = CopyExecution.reserve(binding, trade)
        >>> # execution.status == ExecutionStatus.PENDING
        >>> execution.mark_open(order_id="abc", size=Decimal("0.0119"), entry_price=Decimal("42000"))
        >>> execution.close(exit_price=Decimal("43000"))
        >>> execution.realized_pnl
        Decimal('11.90000000')
    """

    def __init__(
        self,
        copy_settings_id: int,
        provider_trade_id: str,
        wallet_id: int,
        pair: str,
        direction: Direction,
        leverage: int = 1,
        status: ExecutionStatus = ExecutionStatus.PENDING,
        size: Optional[Decimal] = None,
        entry_price: Optional[Decimal] = None,
        exit_price: Optional[Decimal] = None,
        order_id: Optional[str] = None,
        error_message: Optional[str] = None,
        block_reason: Optional[str] = None,
        realized_pnl: Optional[Decimal] = None,
        pnl_percent: Optional[Decimal] = None,
        executed_at: Optional[datetime] = None,
        closed_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)

        self.copy_settings_id = copy_settings_id
        self.provider_trade_id = provider_trade_id
        self.wallet_id = wallet_id
        self.pair = pair
        self.direction = direction
        self.leverage = leverage

        self.status = status
        self.size = size
        self.entry_price = entry_price
        self.exit_price = exit_price
        self.order_id = order_id
        self.error_message = error_message
        self.block_reason = block_reason

        self.realized_pnl = realized_pnl
        self.pnl_percent = pnl_percent

        self.executed_at = executed_at or datetime.now(timezone.utc)
        self.closed_at = closed_at

    @classmethod
    def reserve(cls, binding: FollowerBinding, trade: ProviderTrade) -> "CopyExecution":
        """Factory method: PENDING execution для follower'а.

        Reservation зберігається і commit'иться ДО будь-якого exchange call,
        щоб unique constraint на (settings, trade) спрацював раніше за ордер.

        Args:
            binding: Follower (settings + wallet).
            trade: Provider trade.

        Returns:
            CopyExecution в PENDING status.
        """
        return cls(
            copy_settings_id=binding.settings.id,
            provider_trade_id=trade.id,
            wallet_id=binding.wallet.id,
            pair=trade.pair,
            direction=trade.direction,
            leverage=trade.leverage,
        )

    # --- STATE TRANSITIONS ---

    def mark_open(
        self,
        order_id: str,
        size: Decimal,
        entry_price: Decimal,
        leverage: Optional[int] = None,
    ) -> None:
        """Ордер виконано: PENDING → OPEN.

        Args:
            order_id: Venue order ID.
            size: Виконаний size в base units.
            entry_price: Ціна виконання.
            leverage: Leverage, якщо відрізняється від trade.

        Raises:
            InvalidStateTransition: Якщо execution не PENDING.
        """
        self._transition(ExecutionStatus.OPEN)

        self.order_id = order_id
        self.size = size
        self.entry_price = entry_price
        if leverage is not None:
            self.leverage = leverage

        self.add_domain_event(
            CopyExecutionOpenedEvent(
                execution_id=self.id or 0,
                copy_settings_id=self.copy_settings_id,
                wallet_id=self.wallet_id,
                provider_trade_id=self.provider_trade_id,
                pair=self.pair,
                direction=self.direction.value,
                order_id=order_id,
                size=size,
                entry_price=entry_price,
                leverage=self.leverage,
            )
        )

    def block(self, reason: str) -> None:
        """Risk Gate відхилив копію: PENDING → BLOCKED."""
        self._transition(ExecutionStatus.BLOCKED)
        self.block_reason = reason

        self.add_domain_event(
            CopyExecutionBlockedEvent(
                execution_id=self.id or 0,
                copy_settings_id=self.copy_settings_id,
                wallet_id=self.wallet_id,
                provider_trade_id=self.provider_trade_id,
                reason=reason,
            )
        )

    def fail(self, error: str, size: Optional[Decimal] = None) -> None:
        """Відкриття не вдалось: PENDING → FAILED."""
        self._transition(ExecutionStatus.FAILED)
        self.error_message = error
        if size is not None:
            self.size = size

        self.add_domain_event(
            CopyExecutionFailedEvent(
                execution_id=self.id or 0,
                copy_settings_id=self.copy_settings_id,
                wallet_id=self.wallet_id,
                provider_trade_id=self.provider_trade_id,
                error=error,
            )
        )

    def close(self, exit_price: Decimal) -> Decimal:
        """Позицію закрито: OPEN → CLOSED, фіксуємо P&L.

        Args:
            exit_price: Ціна закриття.

        Returns:
            Realized P&L в quote currency.

        Raises:
            InvalidStateTransition: Якщо execution не OPEN.
        """
        self._transition(ExecutionStatus.CLOSED)

        pnl_percent, realized_pnl = self.calculate_pnl(
            direction=self.direction,
            entry_price=self.entry_price,
            exit_price=exit_price,
            size=self.size,
        )

        self.exit_price = exit_price
        self.pnl_percent = pnl_percent
        self.realized_pnl = realized_pnl
        self.error_message = None
        self.closed_at = datetime.now(timezone.utc)

        self.add_domain_event(
            CopyExecutionClosedEvent(
                execution_id=self.id or 0,
                copy_settings_id=self.copy_settings_id,
                wallet_id=self.wallet_id,
                provider_trade_id=self.provider_trade_id,
                pair=self.pair,
                direction=self.direction.value,
                exit_price=exit_price,
                realized_pnl=realized_pnl,
                pnl_percent=pnl_percent,
            )
        )

        return realized_pnl

    def record_close_failure(self, error: str) -> None:
        """Закриття не вдалось. Execution лишається OPEN для ручного втручання.

        Raises:
            InvalidStateTransition: Якщо execution не OPEN.
        """
        if self.status != ExecutionStatus.OPEN:
            raise InvalidStateTransition(
                "Only open executions can fail to close",
                execution_id=self.id,
                status=self.status.value,
            )

        self.error_message = error

        self.add_domain_event(
            CopyExecutionCloseFailedEvent(
                execution_id=self.id or 0,
                copy_settings_id=self.copy_settings_id,
                wallet_id=self.wallet_id,
                provider_trade_id=self.provider_trade_id,
                error=error,
            )
        )

    # --- QUERIES ---

    @property
    def is_open(self) -> bool:
        return self.status == ExecutionStatus.OPEN

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    # --- PRIVATE HELPERS ---

    def _transition(self, to_status: ExecutionStatus) -> None:
        if to_status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {to_status.value}",
                execution_id=self.id,
                from_status=self.status.value,
                to_status=to_status.value,
            )
        self.status = to_status

    @staticmethod
    def calculate_pnl(
        direction: Direction,
        entry_price: Optional[Decimal],
        exit_price: Decimal,
        size: Optional[Decimal],
    ) -> tuple[Decimal, Decimal]:
        """Розрахувати percent і notional P&L.

        LONG: (exit - entry) / entry * 100
        SHORT: (entry - exit) / entry * 100
        notional = size * entry * percent / 100

        Returns:
            (pnl_percent, realized_pnl), обидва з точністю 8 знаків.
        """
        if not entry_price or not size:
            raise InvalidStateTransition(
                "Cannot calculate P&L without entry price and size",
                entry_price=entry_price,
                size=size,
            )

        if direction == Direction.LONG:
            pnl_percent = (exit_price - entry_price) / entry_price * 100
        else:
            pnl_percent = (entry_price - exit_price) / entry_price * 100

        realized_pnl = size * entry_price * pnl_percent / 100

        return (
            pnl_percent.quantize(PNL_PRECISION, rounding=ROUND_HALF_UP),
            realized_pnl.quantize(PNL_PRECISION, rounding=ROUND_HALF_UP),
        )

    def __repr__(self) -> str:
        return (
            f"CopyExecution(id={self.id}, settings={self.copy_settings_id}, "
            f"trade={self.provider_trade_id}, status={self.status.value})"
        )
