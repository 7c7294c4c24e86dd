"""Copy Trading application layer: orchestrator і follower management."""

from .commands import ConnectWalletCommand, CreateCopySettingsCommand
from .dtos import CopyOutcome, CopySettingsDTO, WalletDTO
from .handlers import ConnectWalletHandler, CreateCopySettingsHandler
from .orchestrator import CopyTradeOrchestrator

__all__ = [
    "CopyTradeOrchestrator",
    "CopyOutcome",
    "ConnectWalletCommand",
    "ConnectWalletHandler",
    "CreateCopySettingsCommand",
    "CreateCopySettingsHandler",
    "CopySettingsDTO",
    "WalletDTO",
]
