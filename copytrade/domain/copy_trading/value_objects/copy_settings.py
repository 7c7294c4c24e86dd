"""CopySettings value object - правила копіювання одного провайдера на один wallet."""

from dataclasses import dataclass, field
from decimal import Decimal

from copytrade.domain.shared import ValueObject

from .enums import CopyMode


@dataclass(frozen=True)
class CopySettings(ValueObject):
    """Налаштування follower'а для конкретного провайдера.

    Максимум одні settings на (wallet_id, provider_id).
    Значення не валідуються тут: PositionSizer повертає 0 для
    невалідних inputs, а CreateCopySettingsHandler перевіряє нові settings.
    """

    id: int | None
    wallet_id: int
    provider_id: str
    copy_mode: CopyMode
    size_value: Decimal
    max_position_usd: Decimal
    max_daily_loss_usd: Decimal
    allowed_pairs: tuple[str, ...] = field(default_factory=tuple)
    copy_stop_loss: bool = True
    copy_take_profit: bool = True
    is_active: bool = True
    is_paused: bool = False

    def __post_init__(self) -> None:
        # list з DB/JSON → tuple, щоб VO лишався hashable
        object.__setattr__(self, "copy_mode", CopyMode(self.copy_mode))
        object.__setattr__(
            self, "allowed_pairs", tuple(p.upper() for p in (self.allowed_pairs or ()))
        )
