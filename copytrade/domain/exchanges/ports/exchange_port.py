"""ExchangePort - abstract interface одного exchange account.

Це PORT в Hexagonal Architecture: domain визначає ЩО потрібно,
infrastructure adapters (Bitget) імплементують ЯК.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from types import TracebackType
from typing import Optional, Type

from ..value_objects import Direction, OrderResult


class ExchangePort(ABC):
    """Capability-typed client одного exchange account.

    Adapter володіє credentials, request signing і мапінгом canonical
    pair ("BTC/USDT") в symbol біржі. Business logic тут немає, і
    gateway нічого не deduplicate'ить: це робота orchestrator'а.

    Всі методи можуть кинути:
        AuthError: Bad credentials.
        NetworkError: Transport failure / timeout.
        ExchangeError: Venue rejected the request.

    Example:
        >>> async with factory.create_exchange("bitget", credentials) as exchange:
        ...     balance = await exchange.get_balance("USDT")
        ...     result = await exchange.open_position("BTC/USDT", Direction.LONG, size, leverage=5)
    """

    async def __aenter__(self) -> "ExchangePort":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    @abstractmethod
    async def close(self) -> None:
        """Close exchange connection (HTTP sessions)."""
        pass

    @abstractmethod
    async def get_balance(self, asset: str) -> Decimal:
        """Get available (free) balance for asset.

        Args:
            asset: Asset code (e.g., "USDT").

        Returns:
            Available quantity, Decimal("0") якщо asset відсутній.
        """
        pass

    @abstractmethod
    async def get_price(self, pair: str) -> Decimal:
        """Get last traded price.

        Args:
            pair: Canonical pair (e.g., "BTC/USDT").

        Returns:
            Last traded price.
        """
        pass

    @abstractmethod
    async def open_position(
        self,
        pair: str,
        direction: Direction,
        size: Decimal,
        leverage: int | None = None,
        stop_loss: Decimal | None = None,
        take_profit: Decimal | None = None,
    ) -> OrderResult:
        """Open position with a market order.

        Якщо leverage передано, він виставляється ДО ордеру для обох
        margin sides (long і short).

        Args:
            pair: Canonical pair.
            direction: LONG або SHORT.
            size: Size в base units.
            leverage: Optional leverage.
            stop_loss: Optional preset stop-loss price.
            take_profit: Optional preset take-profit price.

        Returns:
            OrderResult.
        """
        pass

    @abstractmethod
    async def close_position(
        self, pair: str, direction: Direction, size: Decimal
    ) -> OrderResult:
        """Close position with a reduce-only market order.

        Closing LONG submits SELL, closing SHORT submits BUY.

        Args:
            pair: Canonical pair.
            direction: Direction of the position being closed.
            size: Size в base units.

        Returns:
            OrderResult.
        """
        pass

    @abstractmethod
    async def cancel_order(self, pair: str, order_id: str) -> None:
        """Cancel an open order.

        Args:
            pair: Canonical pair.
            order_id: Venue order ID.
        """
        pass

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Best-effort balance query.

        Returns:
            True якщо credentials працюють. Ніколи не кидає exceptions.
        """
        pass
