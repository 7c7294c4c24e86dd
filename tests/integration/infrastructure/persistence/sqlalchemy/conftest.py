"""Pytest fixtures for SQLAlchemy integration tests."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from copytrade.domain.copy_trading.value_objects import (
    CopyMode,
    CopySettings,
    FollowerBinding,
    FollowerWallet,
)
from copytrade.infrastructure.persistence.sqlalchemy import (
    Base,
    SQLAlchemyUnitOfWork,
    create_session_factory,
)


@pytest.fixture
async def engine():
    """Create async SQLite engine for testing.

    Returns:
        Async SQLAlchemy engine.
    """
    # In-memory SQLite database для швидких tests
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def sql_uow_factory(session_factory):
    return lambda: SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
def persist_follower(sql_uow_factory, vault):
    """Зберегти wallet + copy settings через repositories.

    Returns:
        Async callable(api_key, provider_id="p-1", **settings_overrides) -> FollowerBinding.
    """

    async def _persist(api_key: str, provider_id: str = "p-1", **overrides) -> FollowerBinding:
        async with sql_uow_factory() as uow:
            wallet = await uow.followers.save_wallet(
                FollowerWallet(
                    id=None,
                    user_id=1,
                    exchange="bitget",
                    api_key_encrypted=vault.encrypt(api_key),
                    api_secret_encrypted=vault.encrypt(f"{api_key}-secret"),
                    api_passphrase_encrypted=vault.encrypt(f"{api_key}-pass"),
                    label=api_key,
                )
            )

            values = {
                "copy_mode": CopyMode.FIXED_PERCENT,
                "size_value": Decimal("5"),
                "max_position_usd": Decimal("2000"),
                "max_daily_loss_usd": Decimal("500"),
            }
            values.update(overrides)
            settings = await uow.followers.save_settings(
                CopySettings(id=None, wallet_id=wallet.id, provider_id=provider_id, **values)
            )
            await uow.commit()

        return FollowerBinding(settings=settings, wallet=wallet)

    return _persist
