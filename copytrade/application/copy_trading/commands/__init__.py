"""Copy trading commands."""

from .connect_wallet import ConnectWalletCommand
from .create_copy_settings import CreateCopySettingsCommand

__all__ = ["ConnectWalletCommand", "CreateCopySettingsCommand"]
