"""E2E: wallet → copy settings → provider opens → provider closes.

Повний шлях через handlers, orchestrator, SQLAlchemy ledger (SQLite)
і worker handler. Біржа - FakeExchange з conftest.
"""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from copytrade.application.copy_trading import (
    ConnectWalletCommand,
    ConnectWalletHandler,
    CopyTradeOrchestrator,
    CreateCopySettingsCommand,
    CreateCopySettingsHandler,
)
from copytrade.config import Settings
from copytrade.domain.copy_trading.events import (
    CopyExecutionClosedEvent,
    CopyExecutionOpenedEvent,
)
from copytrade.domain.copy_trading.value_objects import ExecutionStatus
from copytrade.infrastructure.messaging import EventBus
from copytrade.infrastructure.persistence.sqlalchemy import (
    Base,
    SQLAlchemyUnitOfWork,
    create_session_factory,
)
from copytrade.presentation.workers.tasks.copy_trade_tasks import (
    TRADE_CLOSED,
    TRADE_OPENED,
    handle_trade_event,
)


@pytest.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def uow_factory(session_factory):
    return lambda: SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
async def follower(uow_factory, exchange_factory, vault):
    """Subscriber підключає Bitget wallet і копіює провайдера p-1."""
    wallet = await ConnectWalletHandler(uow_factory(), exchange_factory, vault).handle(
        ConnectWalletCommand(
            user_id=1,
            exchange="bitget",
            api_key="bg_key",
            api_secret="bg_secret",
            passphrase="bg_pass",
        )
    )

    return await CreateCopySettingsHandler(
        uow_factory(), settings=Settings(_env_file=None)
    ).handle(
        CreateCopySettingsCommand(
            user_id=1,
            wallet_id=wallet.id,
            provider_id="p-1",
            copy_mode="fixed_percent",
            size_value=Decimal("5"),
            max_position_usd=Decimal("2000"),
            max_daily_loss_usd=Decimal("500"),
        )
    )


@pytest.fixture
def orchestrator(uow_factory, exchange_factory, vault):
    return CopyTradeOrchestrator(uow_factory, exchange_factory, vault, max_concurrency=1)


@pytest.fixture
def event_bus():
    bus = EventBus()
    bus.received = []

    async def record(event):
        bus.received.append(event)

    bus.subscribe(CopyExecutionOpenedEvent, record)
    bus.subscribe(CopyExecutionClosedEvent, record)
    return bus


async def test_provider_trade_copied_and_closed(
    follower, orchestrator, event_bus, exchange_factory, uow_factory, trade_payload
):
    # Provider opens BTC/USDT long @ 42000
    opened = await handle_trade_event(TRADE_OPENED, trade_payload, orchestrator, event_bus)

    [outcome] = opened["outcomes"]
    assert outcome["status"] == "open"
    assert outcome["size"] == "0.0119"
    assert outcome["order_id"] == "abc"
    assert Decimal(outcome["price"]) == Decimal("42000")
    assert outcome["copy_settings_id"] == follower.id

    # Redelivery of the same event places no second order
    again = await handle_trade_event(TRADE_OPENED, trade_payload, orchestrator, event_bus)
    assert again["outcomes"][0]["block_reason"] == "already processed"
    assert len(exchange_factory.exchanges["bg_key"].called("open_position")) == 1

    # Provider closes @ 43000
    exchange_factory.exchanges["bg_key"].price = Decimal("43000")
    closed = await handle_trade_event(
        TRADE_CLOSED,
        {**trade_payload, "status": "closed", "exit_price": "43000"},
        orchestrator,
        event_bus,
    )

    [close_outcome] = closed["outcomes"]
    assert close_outcome["status"] == "closed"
    assert Decimal(close_outcome["realized_pnl"]) == Decimal("11.9")

    async with uow_factory() as uow:
        execution = await uow.executions.get_by_id(close_outcome["execution_id"])
        pnl_today = await uow.executions.get_realized_pnl_since(
            follower.id, execution.executed_at
        )

    assert execution.status == ExecutionStatus.CLOSED
    assert execution.exit_price == Decimal("43000")
    assert pnl_today == Decimal("11.9")
    assert [type(e) for e in event_bus.received] == [
        CopyExecutionOpenedEvent,
        CopyExecutionClosedEvent,
    ]


async def test_provider_trade_outside_allow_list_is_blocked(
    uow_factory, exchange_factory, vault, orchestrator, event_bus, trade_payload
):
    wallet = await ConnectWalletHandler(uow_factory(), exchange_factory, vault).handle(
        ConnectWalletCommand(
            user_id=7, exchange="bitget", api_key="k2", api_secret="s2", passphrase="p2"
        )
    )
    await CreateCopySettingsHandler(uow_factory(), settings=Settings(_env_file=None)).handle(
        CreateCopySettingsCommand(
            user_id=7, wallet_id=wallet.id, provider_id="p-1", allowed_pairs=("ETH/USDT",)
        )
    )

    summary = await handle_trade_event(TRADE_OPENED, trade_payload, orchestrator, event_bus)

    assert summary["blocked"] == 1
    assert summary["outcomes"][0]["block_reason"] == "pair not allowed"
    assert exchange_factory.exchanges["k2"].called("open_position") == []
