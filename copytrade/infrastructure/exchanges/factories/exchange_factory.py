"""Exchange Factory - creates exchange adapters for a wallet.

Factory Pattern: orchestrator знає тільки назву біржі з wallet,
factory повертає adapter, що імплементує ExchangePort.
"""

import logging
from enum import Enum

from copytrade.config import Settings, get_settings
from copytrade.domain.exchanges.exceptions import UnsupportedExchangeError
from copytrade.domain.exchanges.ports import ExchangePort
from copytrade.domain.exchanges.value_objects import ExchangeCredentials
from copytrade.domain.shared import ValidationError
from copytrade.infrastructure.exchanges.adapters import BitgetAdapter

logger = logging.getLogger(__name__)


class ExchangeName(str, Enum):
    """Supported exchanges."""

    BITGET = "bitget"


class ExchangeFactory:
    """Factory для створення exchange adapters.

    Example:
        >>> factory = ExchangeFactory()
        >>> exchange = factory.create_exchange(
        ...     "bitget",
        ...     ExchangeCredentials("key", "secret", passphrase="pass"),
        ... )
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_exchange(
        self, exchange_name: str, credentials: ExchangeCredentials
    ) -> ExchangePort:
        """Create exchange adapter based on name.

        Args:
            exchange_name: Exchange name ("bitget").
            credentials: Decrypted credentials of the wallet.

        Returns:
            Exchange adapter implementing ExchangePort.

        Raises:
            UnsupportedExchangeError: If exchange_name not supported.
            ValidationError: If required credential parts are missing.
        """
        name = (exchange_name or "").strip().lower()

        logger.debug("exchange_factory.creating", extra={"exchange": name})

        if name == ExchangeName.BITGET:
            if not credentials.passphrase:
                raise ValidationError("Bitget requires 'passphrase'")

            return BitgetAdapter(
                credentials=credentials,
                sandbox=self._settings.exchange_sandbox,
                max_retries=self._settings.exchange_max_retries,
                retry_base_delay=self._settings.exchange_retry_base_delay,
                retry_max_delay=self._settings.exchange_retry_max_delay,
            )

        supported = ", ".join(self.get_supported_exchanges())
        raise UnsupportedExchangeError(
            f"Unsupported exchange: {exchange_name}. Supported exchanges: {supported}"
        )

    def is_supported(self, exchange_name: str) -> bool:
        """Check if exchange is supported."""
        try:
            ExchangeName((exchange_name or "").lower())
            return True
        except ValueError:
            return False

    def get_supported_exchanges(self) -> list[str]:
        """Get list of supported exchange names."""
        return [e.value for e in ExchangeName]
