"""CopyExecution Mapper - converts between CopyExecution entity and CopyExecutionModel ORM."""

from copytrade.domain.copy_trading.entities import CopyExecution
from copytrade.domain.copy_trading.value_objects import Direction, ExecutionStatus
from copytrade.infrastructure.persistence.sqlalchemy.models import CopyExecutionModel

from ._time import as_utc


class CopyExecutionMapper:
    """Mapper для CopyExecution entity ↔ CopyExecutionModel ORM.

    Example:
        >>> mapper = CopyExecutionMapper()
        >>> model = mapper.to_model(execution)  # Domain → ORM
        >>> execution_back = mapper.to_entity(model)  # ORM → Domain
    """

    def to_entity(self, model: CopyExecutionModel) -> CopyExecution:
        """Convert ORM model → Domain entity."""
        execution = CopyExecution(
            id=model.id,
            copy_settings_id=model.copy_settings_id,
            provider_trade_id=model.provider_trade_id,
            wallet_id=model.wallet_id,
            pair=model.pair,
            direction=Direction(model.direction),
            leverage=model.leverage,
            status=ExecutionStatus(model.status),
            size=model.size,
            entry_price=model.entry_price,
            exit_price=model.exit_price,
            order_id=model.order_id,
            error_message=model.error_message,
            block_reason=model.block_reason,
            realized_pnl=model.realized_pnl,
            pnl_percent=model.pnl_percent,
            executed_at=as_utc(model.executed_at),
            closed_at=as_utc(model.closed_at),
        )

        # Events з DB не replay'яться
        execution.clear_domain_events()

        return execution

    def to_model(self, entity: CopyExecution) -> CopyExecutionModel:
        """Convert Domain entity → new ORM model."""
        model = CopyExecutionModel(id=entity.id)
        return self.update_model_from_entity(model, entity)

    def update_model_from_entity(
        self, model: CopyExecutionModel, entity: CopyExecution
    ) -> CopyExecutionModel:
        """Copy entity state onto an existing ORM model."""
        model.copy_settings_id = entity.copy_settings_id
        model.provider_trade_id = entity.provider_trade_id
        model.wallet_id = entity.wallet_id
        model.pair = entity.pair
        model.direction = entity.direction.value
        model.leverage = entity.leverage
        model.status = entity.status.value
        model.size = entity.size
        model.entry_price = entity.entry_price
        model.exit_price = entity.exit_price
        model.order_id = entity.order_id
        model.error_message = entity.error_message
        model.block_reason = entity.block_reason
        model.realized_pnl = entity.realized_pnl
        model.pnl_percent = entity.pnl_percent
        model.executed_at = entity.executed_at
        model.closed_at = entity.closed_at
        return model
