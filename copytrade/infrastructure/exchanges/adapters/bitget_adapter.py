"""Bitget Exchange Adapter - implements ExchangePort for USDT-M perpetual swaps.

Використовує CCXT для unified API access: CCXT підписує кожен request
(HMAC-SHA256 over timestamp + method + path + body, свіжий timestamp
на кожен request) і шле ACCESS-KEY / ACCESS-SIGN / ACCESS-TIMESTAMP /
ACCESS-PASSPHRASE headers.
"""

import logging
import re
from decimal import Decimal
from typing import Any, Awaitable, Callable, TypeVar

import ccxt.async_support as ccxt

from copytrade.domain.exchanges.exceptions import (
    AuthError,
    ExchangeError,
    NetworkError,
)
from copytrade.domain.exchanges.ports import ExchangePort
from copytrade.domain.exchanges.value_objects import (
    Direction,
    ExchangeCredentials,
    OrderResult,
    OrderSide,
)
from copytrade.domain.shared import ValidationError
from copytrade.infrastructure.exchanges.retry import retry_async

logger = logging.getLogger(__name__)

T = TypeVar("T")

SETTLE_ASSET = "USDT"
PRODUCT_TYPE = "USDT-FUTURES"

_VENUE_CODE_RE = re.compile(r'"code"\s*:\s*"?(\w+)"?')


def to_venue_symbol(pair: str) -> str:
    """Canonical pair → CCXT swap symbol.

    >>> to_venue_symbol("BTC/USDT")
    'BTC/USDT:USDT'
    """
    pair = pair.strip().upper()
    if ":" in pair:
        return pair
    if "/" not in pair and pair.endswith(SETTLE_ASSET):
        pair = f"{pair[: -len(SETTLE_ASSET)]}/{SETTLE_ASSET}"
    quote = pair.split("/")[-1]
    return f"{pair}:{quote}"


class BitgetAdapter(ExchangePort):
    """Bitget USDT-M futures adapter.

    Example:
        >>> credentials = ExchangeCredentials("key", "secret", passphrase="pass")
        >>> async with BitgetAdapter(credentials) as exchange:
        ...     await exchange.open_position("BTC/USDT", Direction.LONG, Decimal("0.0119"), leverage=5)
    """

    def __init__(
        self,
        credentials: ExchangeCredentials,
        sandbox: bool = False,
        hedge_mode: bool = True,
        margin_mode: str = "cross",
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        retry_max_delay: float = 4.0,
        client: Any | None = None,
    ) -> None:
        """Initialize Bitget adapter.

        Args:
            credentials: Decrypted API credentials (passphrase required).
            sandbox: Use Bitget demo trading.
            hedge_mode: Account is in hedge (two-way) position mode.
            margin_mode: "cross" або "isolated".
            max_retries: Retries for read-only calls.
            retry_base_delay: Base backoff delay in seconds.
            retry_max_delay: Max backoff delay in seconds.
            client: Pre-built CCXT client (tests inject a fake here).

        Raises:
            ValidationError: If passphrase is missing.
        """
        if not credentials.passphrase:
            raise ValidationError("Bitget requires API passphrase")

        self._hedge_mode = hedge_mode
        self._margin_mode = margin_mode
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay

        if client is None:
            client = ccxt.bitget(
                {
                    "apiKey": credentials.api_key,
                    "secret": credentials.api_secret,
                    "password": credentials.passphrase,
                    "enableRateLimit": True,
                    "options": {"defaultType": "swap"},
                }
            )
            if sandbox:
                client.set_sandbox_mode(True)
                logger.info("bitget.sandbox_enabled")

        self._client = client

    async def close(self) -> None:
        """Close Bitget connection."""
        await self._client.close()

    # --- ACCOUNT ---

    async def get_balance(self, asset: str) -> Decimal:
        """Get available futures balance for asset."""
        response = await self._read(
            lambda: self._client.fetch_balance({"type": "swap", "productType": PRODUCT_TYPE}),
            "get_balance",
        )

        free = (response.get("free") or {}).get(asset)
        if free is None:
            free = (response.get(asset) or {}).get("free")

        balance = Decimal(str(free)) if free is not None else Decimal("0")

        logger.debug("bitget.balance.fetched", extra={"asset": asset, "free": str(balance)})
        return balance

    async def get_price(self, pair: str) -> Decimal:
        """Get last traded price."""
        symbol = to_venue_symbol(pair)
        ticker = await self._read(lambda: self._client.fetch_ticker(symbol), "get_price")

        last = ticker.get("last")
        if last is None:
            raise ExchangeError("Ticker has no last price", pair=pair)

        return Decimal(str(last))

    # --- FUTURES TRADING ---

    async def open_position(
        self,
        pair: str,
        direction: Direction,
        size: Decimal,
        leverage: int | None = None,
        stop_loss: Decimal | None = None,
        take_profit: Decimal | None = None,
    ) -> OrderResult:
        """Open futures position with a market order."""
        symbol = to_venue_symbol(pair)

        if leverage:
            # Cross margin: leverage per hold side, обидві сторони
            for hold_side in (Direction.LONG.value, Direction.SHORT.value):
                await self._call(
                    self._client.set_leverage(
                        leverage,
                        symbol,
                        {"marginCoin": SETTLE_ASSET, "holdSide": hold_side},
                    ),
                    "set_leverage",
                )

        params: dict[str, Any] = {
            "marginMode": self._margin_mode,
            "hedged": self._hedge_mode,
        }
        if stop_loss is not None:
            params["stopLoss"] = {"triggerPrice": float(stop_loss)}
        if take_profit is not None:
            params["takeProfit"] = {"triggerPrice": float(take_profit)}

        side = direction.opening_side

        logger.info(
            "bitget.open_position.start",
            extra={
                "symbol": symbol,
                "side": side.value,
                "size": str(size),
                "leverage": leverage,
            },
        )

        order = await self._call(
            self._client.create_order(symbol, "market", side.value, float(size), None, params),
            "open_position",
        )

        result = self._normalize_order_result(order, pair, side, size)

        logger.info(
            "bitget.open_position.success",
            extra={"symbol": symbol, "order_id": result.order_id},
        )

        return result

    async def close_position(
        self, pair: str, direction: Direction, size: Decimal
    ) -> OrderResult:
        """Close futures position (LONG → sell, SHORT → buy)."""
        symbol = to_venue_symbol(pair)
        side = direction.closing_side

        logger.info(
            "bitget.close_position.start",
            extra={"symbol": symbol, "side": side.value, "size": str(size)},
        )

        order = await self._call(
            self._client.create_order(
                symbol,
                "market",
                side.value,
                float(size),
                None,
                {
                    "marginMode": self._margin_mode,
                    "hedged": self._hedge_mode,
                    "reduceOnly": True,
                },
            ),
            "close_position",
        )

        result = self._normalize_order_result(order, pair, side, size)

        logger.info(
            "bitget.close_position.success",
            extra={"symbol": symbol, "order_id": result.order_id},
        )

        return result

    async def cancel_order(self, pair: str, order_id: str) -> None:
        """Cancel an open order."""
        await self._call(
            self._client.cancel_order(order_id, to_venue_symbol(pair)),
            "cancel_order",
        )
        logger.info("bitget.cancel_order.success", extra={"pair": pair, "order_id": order_id})

    async def validate_credentials(self) -> bool:
        """Best-effort balance query. Never raises."""
        try:
            await self.get_balance(SETTLE_ASSET)
            return True
        except Exception as e:
            logger.warning(
                "bitget.credentials_invalid",
                extra={"error_type": type(e).__name__, "error": str(e)},
            )
            return False

    # --- PRIVATE HELPERS ---

    async def _read(self, call: Callable[[], Awaitable[T]], operation: str) -> T:
        """Idempotent read з retry на NetworkError."""

        async def attempt() -> T:
            return await self._call(call(), operation)

        attempt.__name__ = f"bitget.{operation}"
        return await retry_async(
            attempt,
            max_retries=self._max_retries,
            base_delay=self._retry_base_delay,
            max_delay=self._retry_max_delay,
        )

    async def _call(self, awaitable: Awaitable[T], operation: str) -> T:
        """Await CCXT call, translating CCXT errors to domain errors."""
        try:
            return await awaitable

        except (ccxt.AuthenticationError, ccxt.PermissionDenied, ccxt.AccountSuspended) as e:
            logger.warning("bitget.auth_error", extra={"operation": operation, "error": str(e)})
            raise AuthError(f"Bitget rejected credentials: {e}", operation=operation) from e

        except ccxt.NetworkError as e:
            logger.warning("bitget.network_error", extra={"operation": operation, "error": str(e)})
            raise NetworkError(f"Bitget network error: {e}", operation=operation) from e

        except ccxt.BaseError as e:
            code = self._extract_code(e)
            logger.error(
                "bitget.api_error",
                extra={"operation": operation, "code": code, "error": str(e)},
            )
            raise ExchangeError(f"Bitget API error: {e}", code=code, operation=operation) from e

    @staticmethod
    def _extract_code(error: Exception) -> str | None:
        match = _VENUE_CODE_RE.search(str(error))
        return match.group(1) if match else None

    @staticmethod
    def _normalize_order_result(
        order: dict[str, Any], pair: str, side: OrderSide, size: Decimal
    ) -> OrderResult:
        """Normalize CCXT order response to OrderResult value object."""
        order_id = order.get("id") or (order.get("info") or {}).get("orderId")
        if not order_id:
            raise ExchangeError("Order response has no order id", pair=pair)

        price = order.get("average") or order.get("price")

        return OrderResult(
            order_id=str(order_id),
            pair=pair,
            side=side,
            size=size,
            price=Decimal(str(price)) if price else None,
            status=order.get("status") or "submitted",
        )
