"""ProviderTrade value object - позиція провайдера, яку копіюємо."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from copytrade.domain.exchanges.value_objects import Direction
from copytrade.domain.shared import ValidationError, ValueObject

from .enums import ProviderTradeStatus

_REQUIRED_FIELDS = ("id", "provider_id", "pair", "direction", "entry_price", "quantity")


def _to_decimal(value: Any, field_name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(f"Invalid decimal for '{field_name}'", value=value) from e
    if not result.is_finite():
        raise ValidationError(f"Non-finite value for '{field_name}'", value=value)
    return result


def _optional_decimal(value: Any, field_name: str) -> Decimal | None:
    if value is None or value == "":
        return None
    return _to_decimal(value, field_name)


def _to_leverage(value: Any) -> int:
    if value is None or value == "":
        return 1
    try:
        leverage = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError("Invalid leverage", leverage=value) from e
    if not leverage.is_finite() or leverage != leverage.to_integral_value():
        raise ValidationError("Leverage must be a whole number", leverage=value)
    return max(int(leverage), 1)


def _to_datetime(value: Any, field_name: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp for '{field_name}'", value=value)
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp for '{field_name}'", value=value) from e


@dataclass(frozen=True)
class ProviderTrade(ValueObject):
    """Позиція провайдера, як її емітить Lifecycle Source.

    Example:
        >>> trade = ProviderTrade.from_payload({
        ...     "id": "t-1",
        ...     "provider_id": "p-1",
        ...     "pair": "BTC/USDT",
        ...     "direction": "long",
        ...     "entry_price": "42000",
        ...     "quantity": "0.1",
        ...     "leverage": 5,
        ... })
    """

    id: str
    provider_id: str
    pair: str
    direction: Direction
    entry_price: Decimal
    quantity: Decimal
    leverage: int = 1
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None
    status: ProviderTradeStatus = ProviderTradeStatus.OPEN
    exit_price: Decimal | None = None
    realized_pnl: Decimal | None = None
    closed_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ProviderTrade":
        """Build trade from a Lifecycle Source payload.

        Args:
            payload: Dict з полями trade (JSON-decoded).

        Returns:
            ProviderTrade.

        Raises:
            ValidationError: Missing field, bad direction, non-positive
                entry price / quantity, fractional leverage або bad timestamp.
        """
        missing = [f for f in _REQUIRED_FIELDS if payload.get(f) in (None, "")]
        if missing:
            raise ValidationError("Trade payload missing required fields", missing=missing)

        try:
            direction = Direction(str(payload["direction"]).lower())
        except ValueError as e:
            raise ValidationError("Unknown trade direction", direction=payload["direction"]) from e

        try:
            status = ProviderTradeStatus(str(payload.get("status") or "open").lower())
        except ValueError as e:
            raise ValidationError("Unknown trade status", status=payload.get("status")) from e

        entry_price = _to_decimal(payload["entry_price"], "entry_price")
        quantity = _to_decimal(payload["quantity"], "quantity")
        if entry_price <= 0 or quantity <= 0:
            raise ValidationError(
                "Trade entry price and quantity must be positive",
                entry_price=str(entry_price),
                quantity=str(quantity),
            )

        return cls(
            id=str(payload["id"]),
            provider_id=str(payload["provider_id"]),
            pair=str(payload["pair"]).upper(),
            direction=direction,
            entry_price=entry_price,
            quantity=quantity,
            leverage=_to_leverage(payload.get("leverage")),
            stop_loss=_optional_decimal(payload.get("stop_loss"), "stop_loss"),
            take_profit=_optional_decimal(payload.get("take_profit"), "take_profit"),
            status=status,
            exit_price=_optional_decimal(payload.get("exit_price"), "exit_price"),
            realized_pnl=_optional_decimal(payload.get("realized_pnl"), "realized_pnl"),
            closed_at=_to_datetime(payload.get("closed_at"), "closed_at"),
        )
