"""CopyOutcome DTO - результат для одного follower'а в fan-out."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from copytrade.domain.copy_trading.entities import CopyExecution
from copytrade.domain.copy_trading.value_objects import ExecutionStatus, FollowerBinding
from copytrade.domain.shared import DomainEvent


@dataclass
class CopyOutcome:
    """Outcome одного follower'а.

    ``status`` - це status outcome, не завжди status рядка в ledger:
    невдале закриття дає outcome FAILED, а execution лишається OPEN.
    ``persisted=False`` означає, що ledger не змінювався (дублікат або
    помилка запису).
    """

    copy_settings_id: int
    wallet_id: int
    execution_id: int | None
    status: ExecutionStatus
    order_id: str | None = None
    size: Decimal | None = None
    price: Decimal | None = None
    realized_pnl: Decimal | None = None
    error: str | None = None
    block_reason: str | None = None
    persisted: bool = True
    events: list[DomainEvent] = field(default_factory=list, repr=False)

    @property
    def success(self) -> bool:
        return self.status in (ExecutionStatus.OPEN, ExecutionStatus.CLOSED)

    @classmethod
    def from_execution(
        cls,
        execution: CopyExecution,
        events: list[DomainEvent] | None = None,
    ) -> "CopyOutcome":
        """Outcome з поточного стану execution."""
        if execution.status == ExecutionStatus.CLOSED:
            price = execution.exit_price
        else:
            price = execution.entry_price

        return cls(
            copy_settings_id=execution.copy_settings_id,
            wallet_id=execution.wallet_id,
            execution_id=execution.id,
            status=execution.status,
            order_id=execution.order_id,
            size=execution.size,
            price=price,
            realized_pnl=execution.realized_pnl,
            error=execution.error_message,
            block_reason=execution.block_reason,
            events=list(events or []),
        )

    @classmethod
    def not_persisted(
        cls,
        binding: FollowerBinding,
        status: ExecutionStatus,
        error: str | None = None,
        block_reason: str | None = None,
    ) -> "CopyOutcome":
        """Outcome без запису в ledger."""
        return cls(
            copy_settings_id=binding.settings.id or 0,
            wallet_id=binding.wallet.id or 0,
            execution_id=None,
            status=status,
            error=error,
            block_reason=block_reason,
            persisted=False,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict (Decimal → str, без events)."""
        return {
            "copy_settings_id": self.copy_settings_id,
            "wallet_id": self.wallet_id,
            "execution_id": self.execution_id,
            "status": self.status.value,
            "success": self.success,
            "order_id": self.order_id,
            "size": str(self.size) if self.size is not None else None,
            "price": str(self.price) if self.price is not None else None,
            "realized_pnl": str(self.realized_pnl) if self.realized_pnl is not None else None,
            "error": self.error,
            "block_reason": self.block_reason,
            "persisted": self.persisted,
        }
