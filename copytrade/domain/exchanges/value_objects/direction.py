"""Direction value object - сторона позиції (long / short)."""

from enum import Enum

from .order_result import OrderSide


class Direction(str, Enum):
    """Напрямок позиції провайдера і всіх її копій."""

    LONG = "long"
    """Відкривається BUY, закривається SELL."""

    SHORT = "short"
    """Відкривається SELL, закривається BUY."""

    @property
    def opening_side(self) -> OrderSide:
        """Side ордеру, що відкриває позицію."""
        return OrderSide.BUY if self is Direction.LONG else OrderSide.SELL

    @property
    def closing_side(self) -> OrderSide:
        """Side ордеру, що закриває позицію (завжди протилежний opening_side)."""
        return OrderSide.SELL if self is Direction.LONG else OrderSide.BUY
