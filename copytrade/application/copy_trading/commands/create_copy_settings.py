"""CreateCopySettings Command - почати копіювати провайдера на wallet."""

from dataclasses import dataclass
from decimal import Decimal

from copytrade.application.shared import Command


@dataclass(frozen=True)
class CreateCopySettingsCommand(Command):
    """Command для створення copy settings.

    None поля беруться з defaults (Settings.default_*).
    """

    user_id: int
    wallet_id: int
    provider_id: str

    copy_mode: str | None = None
    """proportional | fixed_percent | fixed_size."""

    size_value: Decimal | None = None
    """Multiplier, відсоток балансу або notional, залежно від copy_mode."""

    max_position_usd: Decimal | None = None
    max_daily_loss_usd: Decimal | None = None

    allowed_pairs: tuple[str, ...] = ()
    """Порожній = всі pairs."""

    copy_stop_loss: bool = True
    copy_take_profit: bool = True
