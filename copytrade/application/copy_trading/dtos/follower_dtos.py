"""Follower DTOs - результати follower management commands."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class WalletDTO:
    """Підключений wallet. Credentials (навіть зашифровані) сюди не потрапляють."""

    id: int
    user_id: int
    exchange: str
    label: str | None
    is_active: bool


@dataclass
class CopySettingsDTO:
    id: int
    wallet_id: int
    provider_id: str
    copy_mode: str
    size_value: Decimal
    max_position_usd: Decimal
    max_daily_loss_usd: Decimal
    allowed_pairs: list[str]
    copy_stop_loss: bool
    copy_take_profit: bool
    is_active: bool
    is_paused: bool
