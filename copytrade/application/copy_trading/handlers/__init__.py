"""Copy trading use case handlers."""

from .connect_wallet_handler import ConnectWalletHandler
from .create_copy_settings_handler import CreateCopySettingsHandler

__all__ = ["ConnectWalletHandler", "CreateCopySettingsHandler"]
