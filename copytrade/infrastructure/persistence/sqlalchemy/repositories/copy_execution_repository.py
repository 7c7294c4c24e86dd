"""SQLAlchemy implementation of CopyExecutionRepository."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copy_trading.entities import CopyExecution
from copytrade.domain.copy_trading.exceptions import DuplicateExecutionError
from copytrade.domain.copy_trading.repositories import (
    CopyExecutionRepository as CopyExecutionRepositoryPort,
)
from copytrade.domain.copy_trading.value_objects import ExecutionStatus
from copytrade.infrastructure.persistence.sqlalchemy.mappers import CopyExecutionMapper
from copytrade.infrastructure.persistence.sqlalchemy.models import CopyExecutionModel


class SQLAlchemyCopyExecutionRepository(CopyExecutionRepositoryPort):
    """SQLAlchemy implementation of CopyExecutionRepository port.

    Example:
        >>> async with session_factory() as session:
        ...     repo = SQLAlchemyCopyExecutionRepository(session)
        ...     for execution in await repo.get_open_for_trade("t-1"):
        ...         execution.close(exit_price)
        ...         await repo.save(execution)
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = CopyExecutionMapper()

    async def save(self, execution: CopyExecution) -> None:
        """Save або update execution.

        Raises:
            DuplicateExecutionError: Unique (settings, trade) violated on INSERT.
                Session після цього потребує rollback.
        """
        if execution.id is None:
            model = self._mapper.to_model(execution)
            self._session.add(model)
            try:
                await self._session.flush()  # Get generated ID
            except IntegrityError as e:
                raise DuplicateExecutionError(
                    "Copy execution already exists",
                    copy_settings_id=execution.copy_settings_id,
                    provider_trade_id=execution.provider_trade_id,
                ) from e
            execution.id = model.id
        else:
            existing_model = await self._session.get(CopyExecutionModel, execution.id)
            if existing_model is None:
                raise ValueError(f"CopyExecution {execution.id} not found for update")

            self._mapper.update_model_from_entity(existing_model, execution)
            await self._session.flush()

    async def get_by_id(self, execution_id: int) -> Optional[CopyExecution]:
        model = await self._session.get(CopyExecutionModel, execution_id)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_for(
        self, copy_settings_id: int, provider_trade_id: str
    ) -> Optional[CopyExecution]:
        stmt = (
            select(CopyExecutionModel)
            .where(CopyExecutionModel.copy_settings_id == copy_settings_id)
            .where(CopyExecutionModel.provider_trade_id == provider_trade_id)
        )

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._mapper.to_entity(model) if model else None

    async def get_open_for_trade(self, provider_trade_id: str) -> list[CopyExecution]:
        stmt = (
            select(CopyExecutionModel)
            .where(CopyExecutionModel.provider_trade_id == provider_trade_id)
            .where(CopyExecutionModel.status == ExecutionStatus.OPEN.value)
            .order_by(CopyExecutionModel.id.asc())
        )

        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._mapper.to_entity(model) for model in models]

    async def get_realized_pnl_since(
        self, copy_settings_id: int, since: datetime
    ) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(CopyExecutionModel.realized_pnl), 0))
            .where(CopyExecutionModel.copy_settings_id == copy_settings_id)
            .where(CopyExecutionModel.executed_at >= since)
            .where(CopyExecutionModel.realized_pnl.isnot(None))
        )

        result = await self._session.execute(stmt)
        total = result.scalar_one()

        return Decimal(str(total))

    async def list_stuck(
        self, limit: int = 100, pending_before: Optional[datetime] = None
    ) -> list[CopyExecution]:
        condition = and_(
            CopyExecutionModel.status == ExecutionStatus.OPEN.value,
            CopyExecutionModel.error_message.isnot(None),
        )
        if pending_before is not None:
            condition = or_(
                condition,
                and_(
                    CopyExecutionModel.status == ExecutionStatus.PENDING.value,
                    CopyExecutionModel.executed_at < pending_before,
                ),
            )

        stmt = (
            select(CopyExecutionModel)
            .where(condition)
            .order_by(CopyExecutionModel.executed_at.asc())
            .limit(limit)
        )

        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._mapper.to_entity(model) for model in models]
