"""Unit of Work pattern - manages transactions.

Один UnitOfWork = одна session = одна транзакція. Кожен follower task
в fan-out відкриває власний UnitOfWork: sessions між tasks не шаряться.
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Callable, Optional, Type

from copytrade.domain.copy_trading.repositories import (
    CopyExecutionRepository,
    FollowerRepository,
)


class UnitOfWork(ABC):
    """Abstract Unit of Work interface.

    Example:
        >>> async with uow:
        ...     execution = CopyExecution.reserve(binding, trade)
        ...     await uow.executions.save(execution)
        ...     await uow.commit()
    """

    @abstractmethod
    async def __aenter__(self) -> "UnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context manager.

        Note:
            Якщо exc_type не None, має викликати rollback().
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback transaction."""
        pass

    @property
    @abstractmethod
    def executions(self) -> CopyExecutionRepository:
        """CopyExecution ledger repository."""
        pass

    @property
    @abstractmethod
    def followers(self) -> FollowerRepository:
        """Wallets + copy settings repository."""
        pass


UnitOfWorkFactory = Callable[[], UnitOfWork]
"""Створює новий UnitOfWork (нова session) на кожен виклик."""
