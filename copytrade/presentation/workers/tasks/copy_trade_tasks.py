"""Copy Trade Celery Tasks.

Тонка обгортка навколо CopyTradeOrchestrator. Lifecycle Source гарантує,
що opened event оброблено до кінця (включно з ledger write) перед тим,
як dispatch'ити closed event того ж trade.

Architecture:
    Lifecycle Source → copy_trade_opened / copy_trade_closed
                     → CopyTradeOrchestrator → SQLAlchemyUnitOfWork
                                             → ExchangeFactory → BitgetAdapter
                     → EventBus (notifiers)

Tasks ніколи не retry'яться автоматично: order placement не idempotent
на боці біржі, повтор - це операційне рішення.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, AsyncIterator, Mapping

from celery import shared_task

from copytrade.application.copy_trading import CopyOutcome, CopyTradeOrchestrator
from copytrade.application.shared import UnitOfWork
from copytrade.config import bind_event_context, clear_event_context, get_settings
from copytrade.domain.copy_trading.services import PositionSizer
from copytrade.domain.copy_trading.value_objects import ProviderTrade
from copytrade.domain.shared import ValidationError
from copytrade.infrastructure.encryption import get_credential_vault
from copytrade.infrastructure.exchanges.factories import ExchangeFactory
from copytrade.infrastructure.messaging import EventBus, get_event_bus
from copytrade.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyUnitOfWork,
    create_engine_from_settings,
    create_session_factory,
)

logger = logging.getLogger(__name__)

TRADE_OPENED = "trade_opened"
TRADE_CLOSED = "trade_closed"


def async_task(f):
    """Decorator to run async function in Celery task."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(f(*args, **kwargs))
        finally:
            loop.close()
    return wrapper


@asynccontextmanager
async def orchestrator_scope() -> AsyncIterator[CopyTradeOrchestrator]:
    """Orchestrator з власним engine на час одного task.

    Engine створюється в event loop task'а і dispose'иться в ньому ж:
    asyncpg connections не переживають loop.

    Raises:
        ConfigurationError: ENCRYPTION_KEY missing or invalid.
    """
    settings = get_settings()
    vault = get_credential_vault()

    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)
    try:
        yield CopyTradeOrchestrator(
            uow_factory=lambda: SQLAlchemyUnitOfWork(session_factory),
            exchange_factory=ExchangeFactory(settings),
            vault=vault,
            sizer=PositionSizer(size_step=settings.order_size_step),
            call_timeout=settings.exchange_call_timeout,
            max_concurrency=settings.max_concurrent_followers,
            quote_asset=settings.quote_asset,
        )
    finally:
        await engine.dispose()


def summarize(event_type: str, trade_id: str, outcomes: list[CopyOutcome]) -> dict[str, Any]:
    """JSON summary, що повертає task."""
    return {
        "status": "processed",
        "event_type": event_type,
        "provider_trade_id": trade_id,
        "total": len(outcomes),
        "successful": sum(1 for o in outcomes if o.success),
        "failed": sum(1 for o in outcomes if o.status.value == "failed"),
        "blocked": sum(1 for o in outcomes if o.status.value == "blocked"),
        "outcomes": [o.to_dict() for o in outcomes],
    }


async def handle_trade_event(
    event_type: str,
    payload: Mapping[str, Any],
    orchestrator: CopyTradeOrchestrator,
    event_bus: EventBus,
    task_id: str | None = None,
) -> dict[str, Any]:
    """Parse payload, run orchestrator, publish domain events.

    Returns:
        Summary dict. Невалідний payload → status "invalid_payload".

    Raises:
        ConfigurationError: Fatal для всього event.
    """
    try:
        trade = ProviderTrade.from_payload(payload)
    except ValidationError as e:
        logger.error(
            "copy_trade.invalid_payload",
            extra={"event_type": event_type, "error": str(e), "task_id": task_id},
        )
        return {"status": "invalid_payload", "event_type": event_type, "error": str(e)}

    bind_event_context(trade.id, event_type, task_id=task_id, provider_id=trade.provider_id)
    try:
        if event_type == TRADE_OPENED:
            outcomes = await orchestrator.on_trade_opened(trade)
        elif event_type == TRADE_CLOSED:
            outcomes = await orchestrator.on_trade_closed(trade)
        else:
            raise ValueError(f"Unknown trade event type: {event_type}")

        # Ledger already committed; notifier failures are logged by the bus
        await event_bus.publish_all(event for o in outcomes for event in o.events)

        return summarize(event_type, trade.id, outcomes)
    finally:
        clear_event_context()


@shared_task(bind=True, max_retries=0)
@async_task
async def copy_trade_opened(self, payload: dict[str, Any]) -> dict[str, Any]:
    """Provider opened a position: copy it to every active follower.

    Args:
        payload: {id, provider_id, pair, direction, entry_price, quantity,
            leverage, stop_loss?, take_profit?}.

    Example:
        >>> copy_trade_opened.delay({"id": "t-1", "provider_id": "p-1", ...})
    """
    try:
        async with orchestrator_scope() as orchestrator:
            return await handle_trade_event(
                TRADE_OPENED, payload, orchestrator, get_event_bus(), task_id=self.request.id
            )
    except Exception as e:
        logger.error(
            "copy_trade_opened.error",
            extra={"provider_trade_id": payload.get("id"), "error": str(e)},
            exc_info=True,
        )
        raise


@shared_task(bind=True, max_retries=0)
@async_task
async def copy_trade_closed(self, payload: dict[str, Any]) -> dict[str, Any]:
    """Provider closed a position: close every open copy and realize P&L."""
    try:
        async with orchestrator_scope() as orchestrator:
            return await handle_trade_event(
                TRADE_CLOSED, payload, orchestrator, get_event_bus(), task_id=self.request.id
            )
    except Exception as e:
        logger.error(
            "copy_trade_closed.error",
            extra={"provider_trade_id": payload.get("id"), "error": str(e)},
            exc_info=True,
        )
        raise


async def collect_stuck_executions(
    uow: UnitOfWork,
    limit: int = 100,
    pending_grace: timedelta = timedelta(minutes=5),
    now: datetime | None = None,
) -> dict[str, Any]:
    """Executions, що потребують ручного втручання.

    OPEN з невдалим закриттям, а також PENDING старші за pending_grace:
    ордер міг бути розміщений, але confirm write не дійшов до ledger.
    """
    now = now or datetime.now(timezone.utc)
    async with uow:
        stuck = await uow.executions.list_stuck(limit=limit, pending_before=now - pending_grace)

    for execution in stuck:
        logger.warning(
            "copy_trade.stuck_execution",
            extra={
                "execution_id": execution.id,
                "copy_settings_id": execution.copy_settings_id,
                "status": execution.status.value,
                "order_id": execution.order_id,
                "wallet_id": execution.wallet_id,
                "provider_trade_id": execution.provider_trade_id,
                "pair": execution.pair,
                "error": execution.error_message,
            },
        )

    return {
        "status": "ok",
        "stuck_count": len(stuck),
        "execution_ids": [execution.id for execution in stuck],
    }


@shared_task(bind=True, max_retries=0)
@async_task
async def report_stuck_executions(self, limit: int = 100) -> dict[str, Any]:
    """Periodic report of positions left open on follower accounts."""
    settings = get_settings()
    engine = create_engine_from_settings(settings)
    try:
        uow = SQLAlchemyUnitOfWork(create_session_factory(engine))
        return await collect_stuck_executions(
            uow,
            limit=limit,
            pending_grace=timedelta(seconds=settings.stuck_pending_grace_seconds),
        )
    finally:
        await engine.dispose()
