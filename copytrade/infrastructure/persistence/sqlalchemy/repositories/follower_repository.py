"""SQLAlchemy implementation of FollowerRepository."""

import dataclasses
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copy_trading.exceptions import DuplicateCopySettingsError
from copytrade.domain.copy_trading.repositories import (
    FollowerRepository as FollowerRepositoryPort,
)
from copytrade.domain.copy_trading.value_objects import (
    CopySettings,
    FollowerBinding,
    FollowerWallet,
)
from copytrade.infrastructure.persistence.sqlalchemy.mappers import FollowerMapper
from copytrade.infrastructure.persistence.sqlalchemy.models import (
    CopySettingsModel,
    SubscriberWalletModel,
)


class SQLAlchemyFollowerRepository(FollowerRepositoryPort):
    """SQLAlchemy implementation of FollowerRepository port."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = FollowerMapper()

    async def get_active_bindings_for_provider(self, provider_id: str) -> list[FollowerBinding]:
        stmt = (
            select(CopySettingsModel, SubscriberWalletModel)
            .join(SubscriberWalletModel, SubscriberWalletModel.id == CopySettingsModel.wallet_id)
            .where(CopySettingsModel.provider_id == provider_id)
            .where(CopySettingsModel.is_active.is_(True))
            .order_by(CopySettingsModel.id.asc())
        )

        result = await self._session.execute(stmt)

        return [
            FollowerBinding(
                settings=self._mapper.settings_to_domain(settings_model),
                wallet=self._mapper.wallet_to_domain(wallet_model),
            )
            for settings_model, wallet_model in result.all()
        ]

    async def get_wallet(self, wallet_id: int) -> Optional[FollowerWallet]:
        model = await self._session.get(SubscriberWalletModel, wallet_id)
        return self._mapper.wallet_to_domain(model) if model else None

    async def save_wallet(self, wallet: FollowerWallet) -> FollowerWallet:
        model = self._mapper.wallet_to_model(wallet)
        self._session.add(model)
        await self._session.flush()
        return dataclasses.replace(wallet, id=model.id)

    async def get_settings_for(
        self, wallet_id: int, provider_id: str
    ) -> Optional[CopySettings]:
        stmt = (
            select(CopySettingsModel)
            .where(CopySettingsModel.wallet_id == wallet_id)
            .where(CopySettingsModel.provider_id == provider_id)
        )

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._mapper.settings_to_domain(model) if model else None

    async def save_settings(self, settings: CopySettings) -> CopySettings:
        model = self._mapper.settings_to_model(settings)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise DuplicateCopySettingsError(
                "Wallet already copies this provider",
                wallet_id=settings.wallet_id,
                provider_id=settings.provider_id,
            ) from e
        return dataclasses.replace(settings, id=model.id)
