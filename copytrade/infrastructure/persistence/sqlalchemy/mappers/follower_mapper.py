"""Follower Mapper - wallets і copy settings між ORM і domain value objects."""

from copytrade.domain.copy_trading.value_objects import CopyMode, CopySettings, FollowerWallet
from copytrade.infrastructure.persistence.sqlalchemy.models import (
    CopySettingsModel,
    SubscriberWalletModel,
)


class FollowerMapper:
    """Mapper для FollowerWallet / CopySettings ↔ ORM."""

    def wallet_to_domain(self, model: SubscriberWalletModel) -> FollowerWallet:
        return FollowerWallet(
            id=model.id,
            user_id=model.user_id,
            exchange=model.exchange,
            label=model.label,
            api_key_encrypted=model.api_key_encrypted,
            api_secret_encrypted=model.api_secret_encrypted,
            api_passphrase_encrypted=model.api_passphrase_encrypted,
            is_active=model.is_active,
        )

    def wallet_to_model(self, wallet: FollowerWallet) -> SubscriberWalletModel:
        return SubscriberWalletModel(
            id=wallet.id,
            user_id=wallet.user_id,
            exchange=wallet.exchange,
            label=wallet.label,
            api_key_encrypted=wallet.api_key_encrypted,
            api_secret_encrypted=wallet.api_secret_encrypted,
            api_passphrase_encrypted=wallet.api_passphrase_encrypted,
            is_active=wallet.is_active,
        )

    def settings_to_domain(self, model: CopySettingsModel) -> CopySettings:
        return CopySettings(
            id=model.id,
            wallet_id=model.wallet_id,
            provider_id=model.provider_id,
            copy_mode=CopyMode(model.copy_mode),
            size_value=model.size_value,
            max_position_usd=model.max_position_usd,
            max_daily_loss_usd=model.max_daily_loss_usd,
            allowed_pairs=tuple(model.allowed_pairs or ()),
            copy_stop_loss=model.copy_stop_loss,
            copy_take_profit=model.copy_take_profit,
            is_active=model.is_active,
            is_paused=model.is_paused,
        )

    def settings_to_model(self, settings: CopySettings) -> CopySettingsModel:
        return CopySettingsModel(
            id=settings.id,
            wallet_id=settings.wallet_id,
            provider_id=settings.provider_id,
            copy_mode=settings.copy_mode.value,
            size_value=settings.size_value,
            max_position_usd=settings.max_position_usd,
            max_daily_loss_usd=settings.max_daily_loss_usd,
            # Порожній allow-list = всі pairs, зберігаємо як NULL
            allowed_pairs=list(settings.allowed_pairs) or None,
            copy_stop_loss=settings.copy_stop_loss,
            copy_take_profit=settings.copy_take_profit,
            is_active=settings.is_active,
            is_paused=settings.is_paused,
        )
