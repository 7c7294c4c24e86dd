from .copy_outcome import CopyOutcome
from .follower_dtos import CopySettingsDTO, WalletDTO

__all__ = ["CopyOutcome", "CopySettingsDTO", "WalletDTO"]
