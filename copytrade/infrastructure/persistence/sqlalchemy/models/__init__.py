from .base import Base
from .copy_execution_model import CopyExecutionModel
from .copy_settings_model import CopySettingsModel
from .wallet_model import SubscriberWalletModel

__all__ = [
    "Base",
    "SubscriberWalletModel",
    "CopySettingsModel",
    "CopyExecutionModel",
]
