"""CreateCopySettings Handler - follower підписується на провайдера."""

import logging
from decimal import Decimal, InvalidOperation

from copytrade.application.copy_trading.commands import CreateCopySettingsCommand
from copytrade.application.copy_trading.dtos import CopySettingsDTO
from copytrade.application.shared import CommandHandler, UnitOfWork
from copytrade.config import Settings, get_settings
from copytrade.domain.copy_trading.exceptions import (
    DuplicateCopySettingsError,
    WalletNotFoundError,
)
from copytrade.domain.copy_trading.value_objects import CopyMode, CopySettings
from copytrade.domain.shared import ValidationError

logger = logging.getLogger(__name__)


def _positive(value: Decimal | int | str, field_name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid {field_name}", value=value) from e
    if not result.is_finite() or result <= 0:
        raise ValidationError(f"{field_name} must be positive", value=str(result))
    return result


class CreateCopySettingsHandler(CommandHandler[CreateCopySettingsCommand, CopySettingsDTO]):
    """Handler для CreateCopySettings command.

    Правила:
    - copy_mode валідний, size і ліміти > 0
    - Wallet існує і належить user
    - Максимум одні settings на (wallet, provider)
    """

    def __init__(self, uow: UnitOfWork, settings: Settings | None = None) -> None:
        self.uow = uow
        self.settings = settings or get_settings()

    async def handle(self, command: CreateCopySettingsCommand) -> CopySettingsDTO:
        """Create copy settings.

        Raises:
            ValidationError: Invalid mode or non-positive values.
            WalletNotFoundError: Wallet missing or owned by another user.
            DuplicateCopySettingsError: Wallet already copies this provider.
        """
        mode_value = command.copy_mode or self.settings.default_copy_mode
        try:
            copy_mode = CopyMode(mode_value)
        except ValueError as e:
            raise ValidationError(
                "Unknown copy mode",
                copy_mode=mode_value,
                supported=[m.value for m in CopyMode],
            ) from e

        size_value = _positive(
            command.size_value if command.size_value is not None else self.settings.default_size_value,
            "size_value",
        )
        max_position_usd = _positive(
            command.max_position_usd
            if command.max_position_usd is not None
            else self.settings.default_max_position_usd,
            "max_position_usd",
        )
        max_daily_loss_usd = _positive(
            command.max_daily_loss_usd
            if command.max_daily_loss_usd is not None
            else self.settings.default_max_daily_loss_usd,
            "max_daily_loss_usd",
        )

        if not command.provider_id:
            raise ValidationError("provider_id is required")

        async with self.uow:
            wallet = await self.uow.followers.get_wallet(command.wallet_id)
            if wallet is None or wallet.user_id != command.user_id:
                raise WalletNotFoundError(
                    "Wallet not found", wallet_id=command.wallet_id, user_id=command.user_id
                )

            existing = await self.uow.followers.get_settings_for(
                command.wallet_id, command.provider_id
            )
            if existing is not None:
                raise DuplicateCopySettingsError(
                    "Wallet already copies this provider",
                    wallet_id=command.wallet_id,
                    provider_id=command.provider_id,
                )

            copy_settings = await self.uow.followers.save_settings(
                CopySettings(
                    id=None,
                    wallet_id=command.wallet_id,
                    provider_id=command.provider_id,
                    copy_mode=copy_mode,
                    size_value=size_value,
                    max_position_usd=max_position_usd,
                    max_daily_loss_usd=max_daily_loss_usd,
                    allowed_pairs=tuple(command.allowed_pairs),
                    copy_stop_loss=command.copy_stop_loss,
                    copy_take_profit=command.copy_take_profit,
                )
            )
            await self.uow.commit()

        logger.info(
            "create_copy_settings.completed",
            extra={
                "copy_settings_id": copy_settings.id,
                "wallet_id": copy_settings.wallet_id,
                "provider_id": copy_settings.provider_id,
                "copy_mode": copy_settings.copy_mode.value,
            },
        )

        return CopySettingsDTO(
            id=copy_settings.id or 0,
            wallet_id=copy_settings.wallet_id,
            provider_id=copy_settings.provider_id,
            copy_mode=copy_settings.copy_mode.value,
            size_value=copy_settings.size_value,
            max_position_usd=copy_settings.max_position_usd,
            max_daily_loss_usd=copy_settings.max_daily_loss_usd,
            allowed_pairs=list(copy_settings.allowed_pairs),
            copy_stop_loss=copy_settings.copy_stop_loss,
            copy_take_profit=copy_settings.copy_take_profit,
            is_active=copy_settings.is_active,
            is_paused=copy_settings.is_paused,
        )
