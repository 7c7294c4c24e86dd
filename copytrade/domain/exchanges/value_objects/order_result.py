"""OrderResult value object - результат виконання ордеру на біржі."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from copytrade.domain.shared import ValueObject, validate_value_object


class OrderSide(str, Enum):
    """Сторона market ордеру."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class OrderResult(ValueObject):
    """Normalized результат ордеру з будь-якої біржі.

    Example:
        >>> result = OrderResult(
        ...     order_id="abc",
        ...     pair="BTC/USDT",
        ...     side=OrderSide.BUY,
        ...     size=Decimal("0.0119"),
        ...     price=Decimal("42000"),
        ... )
    """

    order_id: str
    """Унікальний ID ордеру на біржі."""

    pair: str
    """Canonical pair ("BTC/USDT")."""

    side: OrderSide
    """BUY або SELL."""

    size: Decimal
    """Requested size в base units."""

    price: Decimal | None = None
    """Average fill price, якщо біржа одразу його повернула."""

    status: str = "submitted"
    """Venue order status (submitted, filled, open, ...)."""

    def __post_init__(self) -> None:
        validate_value_object(bool(self.order_id), "Order ID is required")
        validate_value_object(self.size > 0, "Order size must be positive")
        if self.price is not None:
            validate_value_object(self.price > 0, "Order price must be positive")
