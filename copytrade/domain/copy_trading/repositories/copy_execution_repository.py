"""CopyExecutionRepository Port - ledger копій."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..entities import CopyExecution


class CopyExecutionRepository(ABC):
    """Abstract interface для CopyExecution persistence.

    Example (Use case):
        >>> pnl = await executions.get_realized_pnl_since(settings.id, start_of_day)
        >>> open_rows = await executions.get_open_for_trade(trade.id)
    """

    @abstractmethod
    async def save(self, execution: CopyExecution) -> None:
        """Save або update execution.

        Note:
            - execution.id is None → INSERT (id присвоюється після flush)
            - інакше → UPDATE

        Raises:
            DuplicateExecutionError: Якщо execution для
                (copy_settings_id, provider_trade_id) вже існує.
        """
        pass

    @abstractmethod
    async def get_by_id(self, execution_id: int) -> Optional[CopyExecution]:
        """Get execution by ID."""
        pass

    @abstractmethod
    async def get_for(
        self, copy_settings_id: int, provider_trade_id: str
    ) -> Optional[CopyExecution]:
        """Get execution для пари (settings, trade), в будь-якому status.

        Використовується як dedupe pre-check перед reservation.
        """
        pass

    @abstractmethod
    async def get_open_for_trade(self, provider_trade_id: str) -> list[CopyExecution]:
        """Get all OPEN executions, що копіюють trade провайдера."""
        pass

    @abstractmethod
    async def get_realized_pnl_since(
        self, copy_settings_id: int, since: datetime
    ) -> Decimal:
        """Сума realized P&L executions цих settings з executed_at >= since.

        Returns:
            Decimal("0") якщо executions немає.
        """
        pass

    @abstractmethod
    async def list_stuck(
        self, limit: int = 100, pending_before: Optional[datetime] = None
    ) -> list[CopyExecution]:
        """Executions, що потребують ручного втручання.

        - OPEN з error_message: закриття на біржі не вдалось
        - PENDING з executed_at < pending_before: confirm write не дійшов
          до ledger, ордер міг бути розміщений
        """
        pass
