from copytrade.domain.exchanges.value_objects import Direction

from .copy_settings import CopySettings
from .enums import CopyMode, ExecutionStatus, ProviderTradeStatus
from .follower_binding import FollowerBinding
from .follower_wallet import FollowerWallet
from .provider_trade import ProviderTrade
from .risk_decision import RiskDecision

__all__ = [
    "CopyMode",
    "CopySettings",
    "Direction",
    "ExecutionStatus",
    "FollowerBinding",
    "FollowerWallet",
    "ProviderTrade",
    "ProviderTradeStatus",
    "RiskDecision",
]
