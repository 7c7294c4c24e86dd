"""SQLAlchemy Unit of Work.

Одна AsyncSession = одна транзакція ledger'а. Orchestrator відкриває
короткий UoW на кожен крок (reserve, mark opened, mark failed), тому
exchange I/O ніколи не відбувається всередині відкритої транзакції.
"""

import logging
from types import TracebackType
from typing import Callable, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copytrade.application.shared import UnitOfWork
from copytrade.domain.copy_trading.repositories import (
    CopyExecutionRepository,
    FollowerRepository,
)
from copytrade.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyCopyExecutionRepository,
    SQLAlchemyFollowerRepository,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class SQLAlchemyUnitOfWork(UnitOfWork):
    """Unit of Work поверх async_sessionmaker.

    Repositories створюються при першому зверненні і живуть до кінця
    ``async with``. Вихід без commit() = rollback (незакомічені зміни
    відкидаються разом з session).

    Example:
        >>> async with SQLAlchemyUnitOfWork(session_factory) as uow:
        ...     await uow.executions.save(CopyExecution.reserve(binding, trade))
        ...     await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._repositories: dict[str, object] = {}

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        session, self._session = self._session, None
        self._repositories.clear()
        if session is None:
            return

        try:
            if exc_type is not None:
                await session.rollback()
                logger.warning(
                    "unit_of_work.rolled_back",
                    extra={"exception_type": exc_type.__name__},
                )
        finally:
            await session.close()

    async def commit(self) -> None:
        """Commit ledger changes.

        Raises:
            SQLAlchemyError: Commit failed; транзакцію вже відкочено.
        """
        session = self._active_session()
        try:
            await session.commit()
        except Exception as e:
            logger.error("unit_of_work.commit_failed", extra={"error": str(e)})
            await session.rollback()
            raise

    async def rollback(self) -> None:
        await self._active_session().rollback()

    @property
    def executions(self) -> CopyExecutionRepository:
        return self._repository("executions", SQLAlchemyCopyExecutionRepository)

    @property
    def followers(self) -> FollowerRepository:
        return self._repository("followers", SQLAlchemyFollowerRepository)

    def _repository(self, name: str, build: Callable[[AsyncSession], R]) -> R:
        session = self._active_session()
        if name not in self._repositories:
            self._repositories[name] = build(session)
        return self._repositories[name]  # type: ignore[return-value]

    def _active_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("SQLAlchemyUnitOfWork used outside 'async with'")
        return self._session
