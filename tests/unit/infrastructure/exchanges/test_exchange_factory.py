"""Unit tests для ExchangeFactory."""

import pytest

from copytrade.config import Settings
from copytrade.domain.exchanges.exceptions import UnsupportedExchangeError
from copytrade.domain.exchanges.value_objects import ExchangeCredentials
from copytrade.domain.shared import ValidationError
from copytrade.infrastructure.exchanges.adapters import BitgetAdapter
from copytrade.infrastructure.exchanges.factories import ExchangeFactory


@pytest.fixture
def factory():
    return ExchangeFactory(Settings(_env_file=None))


class TestExchangeFactory:
    async def test_creates_bitget_adapter(self, factory):
        exchange = factory.create_exchange(
            "Bitget", ExchangeCredentials("key", "secret", passphrase="pass")
        )

        assert isinstance(exchange, BitgetAdapter)
        await exchange.close()

    def test_bitget_without_passphrase_rejected(self, factory):
        with pytest.raises(ValidationError):
            factory.create_exchange("bitget", ExchangeCredentials("key", "secret"))

    @pytest.mark.parametrize("name", ["binance", "", "kraken"])
    def test_unsupported_exchange(self, factory, name):
        with pytest.raises(UnsupportedExchangeError):
            factory.create_exchange(name, ExchangeCredentials("key", "secret", passphrase="p"))

    def test_supported_exchanges(self, factory):
        assert factory.get_supported_exchanges() == ["bitget"]
        assert factory.is_supported("BITGET") is True
        assert factory.is_supported("binance") is False

    def test_unsupported_exchange_is_validation_error(self):
        """Test: UnsupportedExchangeError - per-follower ValidationError."""
        assert issubclass(UnsupportedExchangeError, ValidationError)
