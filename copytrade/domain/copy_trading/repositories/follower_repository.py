"""FollowerRepository Port - wallets і copy settings підписників."""

from abc import ABC, abstractmethod
from typing import Optional

from ..value_objects import CopySettings, FollowerBinding, FollowerWallet


class FollowerRepository(ABC):
    """Abstract interface для followers persistence.

    Repository збирає типізовані FollowerBinding: orchestrator ніколи
    не бачить сирих join rows.
    """

    @abstractmethod
    async def get_active_bindings_for_provider(self, provider_id: str) -> list[FollowerBinding]:
        """Всі active CopySettings провайдера разом з їх wallets.

        Wallets не фільтруються за is_active: orchestrator сам записує
        неактивні wallets як failed.
        """
        pass

    @abstractmethod
    async def get_wallet(self, wallet_id: int) -> Optional[FollowerWallet]:
        """Get wallet by ID."""
        pass

    @abstractmethod
    async def save_wallet(self, wallet: FollowerWallet) -> FollowerWallet:
        """Insert wallet.

        Returns:
            Wallet з присвоєним ID.
        """
        pass

    @abstractmethod
    async def get_settings_for(
        self, wallet_id: int, provider_id: str
    ) -> Optional[CopySettings]:
        """Get copy settings для (wallet, provider)."""
        pass

    @abstractmethod
    async def save_settings(self, settings: CopySettings) -> CopySettings:
        """Insert copy settings.

        Returns:
            Settings з присвоєним ID.

        Raises:
            DuplicateCopySettingsError: Якщо (wallet, provider) вже існує.
        """
        pass
