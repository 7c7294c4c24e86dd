"""FollowerBinding - типізована пара (CopySettings, FollowerWallet)."""

from dataclasses import dataclass

from copytrade.domain.shared import ValueObject, validate_value_object

from .copy_settings import CopySettings
from .follower_wallet import FollowerWallet


@dataclass(frozen=True)
class FollowerBinding(ValueObject):
    """Follower провайдера: його settings і wallet, зібрані repository."""

    settings: CopySettings
    wallet: FollowerWallet

    def __post_init__(self) -> None:
        validate_value_object(
            self.settings.wallet_id == self.wallet.id,
            "Copy settings do not belong to wallet",
        )
