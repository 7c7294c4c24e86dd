"""Position Sizer - розмір копії в base units.

Pure domain service, без I/O. Три політики:
1. PROPORTIONAL - provider quantity * multiplier
2. FIXED_PERCENT - відсоток від власного балансу follower'а
3. FIXED_SIZE - фіксований notional в quote currency

Всі три обрізаються до max_position_usd / entry_price і округлюються
ВНИЗ до order size step, тому size * entry_price <= max_position_usd
тримається точно.
"""

import logging
from decimal import ROUND_DOWN, Decimal

from ..value_objects import CopyMode, CopySettings, ProviderTrade

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
DEFAULT_SIZE_STEP = Decimal("0.0001")


def _is_positive(value: Decimal | None) -> bool:
    # Decimal NaN не можна порівнювати через <, тому is_finite першим
    return value is not None and value.is_finite() and value > 0


class PositionSizer:
    """Calculator розміру копії.

    Example:
        >>> sizer = PositionSizer()
        >>> sizer.calculate(settings, trade, available_balance=Decimal("10000"))
        Decimal('0.0119')
    """

    def __init__(self, size_step: Decimal = DEFAULT_SIZE_STEP) -> None:
        if not _is_positive(size_step):
            raise ValueError("Size step must be positive")
        self._size_step = size_step

    def calculate(
        self,
        settings: CopySettings,
        trade: ProviderTrade,
        available_balance: Decimal,
    ) -> Decimal:
        """Розрахувати order size.

        Args:
            settings: Follower copy settings.
            trade: Provider trade (entry price, quantity).
            available_balance: Вільний баланс follower'а в quote currency.

        Returns:
            Size в base units. Decimal("0") для невалідних inputs
            (нульова ціна, нульовий баланс, non-finite значення):
            orchestrator трактує це як "нічого виконувати".
        """
        entry_price = trade.entry_price

        if not (
            _is_positive(entry_price)
            and _is_positive(available_balance)
            and _is_positive(settings.size_value)
            and _is_positive(settings.max_position_usd)
        ):
            return ZERO

        if settings.copy_mode == CopyMode.PROPORTIONAL:
            if not _is_positive(trade.quantity):
                return ZERO
            raw_size = trade.quantity * settings.size_value
        elif settings.copy_mode == CopyMode.FIXED_PERCENT:
            raw_size = (settings.size_value / 100 * available_balance) / entry_price
        elif settings.copy_mode == CopyMode.FIXED_SIZE:
            raw_size = settings.size_value / entry_price
        else:
            raise ValueError(f"Unknown copy mode: {settings.copy_mode}")

        max_size = settings.max_position_usd / entry_price
        size = self._round_down(min(raw_size, max_size))

        if size < raw_size:
            logger.debug(
                "position_sizer.clipped",
                extra={
                    "copy_settings_id": settings.id,
                    "raw_size": str(raw_size),
                    "size": str(size),
                    "max_position_usd": str(settings.max_position_usd),
                },
            )

        return size if size > 0 else ZERO

    def _round_down(self, size: Decimal) -> Decimal:
        steps = (size / self._size_step).to_integral_value(rounding=ROUND_DOWN)
        return steps * self._size_step
