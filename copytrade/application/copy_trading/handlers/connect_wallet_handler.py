"""ConnectWallet Handler - validate, encrypt і зберегти wallet."""

import asyncio
import logging

from copytrade.application.copy_trading.commands import ConnectWalletCommand
from copytrade.application.copy_trading.dtos import WalletDTO
from copytrade.application.shared import CommandHandler, UnitOfWork
from copytrade.domain.copy_trading.value_objects import FollowerWallet
from copytrade.domain.exchanges.exceptions import UnsupportedExchangeError
from copytrade.domain.exchanges.value_objects import ExchangeCredentials
from copytrade.domain.shared import ValidationError
from copytrade.infrastructure.encryption import CredentialVault
from copytrade.infrastructure.exchanges.factories import ExchangeFactory, ExchangeName

logger = logging.getLogger(__name__)


class ConnectWalletHandler(CommandHandler[ConnectWalletCommand, WalletDTO]):
    """Handler для ConnectWallet command.

    Flow:
    1. Біржа підтримується, credentials повні (Bitget → passphrase)
    2. Credentials перевіряються live запитом балансу
    3. Key / secret / passphrase шифруються CredentialVault
    4. FollowerWallet зберігається, commit

    Plaintext credentials ніколи не логуються і не зберігаються.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        exchange_factory: ExchangeFactory,
        vault: CredentialVault,
        call_timeout: float = 10.0,
    ) -> None:
        self.uow = uow
        self.exchange_factory = exchange_factory
        self.vault = vault
        self.call_timeout = call_timeout

    async def handle(self, command: ConnectWalletCommand) -> WalletDTO:
        """Connect wallet.

        Raises:
            UnsupportedExchangeError: Exchange has no adapter.
            ValidationError: Missing credential parts, credentials rejected
                or exchange did not respond within call_timeout.
        """
        exchange_name = (command.exchange or "").strip().lower()

        logger.info(
            "connect_wallet.started",
            extra={"user_id": command.user_id, "exchange": exchange_name},
        )

        if not self.exchange_factory.is_supported(exchange_name):
            raise UnsupportedExchangeError(
                f"Unsupported exchange: {command.exchange}",
                supported=self.exchange_factory.get_supported_exchanges(),
            )

        if not command.api_key or not command.api_secret:
            raise ValidationError("API key and secret are required")

        if exchange_name == ExchangeName.BITGET and not command.passphrase:
            raise ValidationError("Bitget requires API passphrase")

        credentials = ExchangeCredentials(
            api_key=command.api_key,
            api_secret=command.api_secret,
            passphrase=command.passphrase,
        )

        try:
            async with self.exchange_factory.create_exchange(exchange_name, credentials) as exchange:
                is_valid = await asyncio.wait_for(
                    exchange.validate_credentials(), timeout=self.call_timeout
                )
        except asyncio.TimeoutError as e:
            logger.warning(
                "connect_wallet.validation_timeout",
                extra={"user_id": command.user_id, "exchange": exchange_name},
            )
            raise ValidationError("Exchange did not respond", exchange=exchange_name) from e

        if not is_valid:
            logger.warning(
                "connect_wallet.credentials_rejected",
                extra={"user_id": command.user_id, "exchange": exchange_name},
            )
            raise ValidationError("Exchange rejected API credentials", exchange=exchange_name)

        wallet = FollowerWallet(
            id=None,
            user_id=command.user_id,
            exchange=exchange_name,
            label=command.label,
            api_key_encrypted=self.vault.encrypt(command.api_key),
            api_secret_encrypted=self.vault.encrypt(command.api_secret),
            api_passphrase_encrypted=(
                self.vault.encrypt(command.passphrase) if command.passphrase else None
            ),
        )

        async with self.uow:
            wallet = await self.uow.followers.save_wallet(wallet)
            await self.uow.commit()

        logger.info(
            "connect_wallet.completed",
            extra={"user_id": command.user_id, "wallet_id": wallet.id},
        )

        return WalletDTO(
            id=wallet.id or 0,
            user_id=wallet.user_id,
            exchange=wallet.exchange,
            label=wallet.label,
            is_active=wallet.is_active,
        )
