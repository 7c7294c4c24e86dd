from .copy_trading_exceptions import (
    DecryptionError,
    DuplicateCopySettingsError,
    DuplicateExecutionError,
    WalletNotFoundError,
)

__all__ = [
    "DecryptionError",
    "DuplicateCopySettingsError",
    "DuplicateExecutionError",
    "WalletNotFoundError",
]
