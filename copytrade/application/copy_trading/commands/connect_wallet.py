"""ConnectWallet Command - підключити exchange account підписника."""

from dataclasses import dataclass, field

from copytrade.application.shared import Command


@dataclass(frozen=True)
class ConnectWalletCommand(Command):
    """Command для підключення wallet.

    Example:
        >>> command = ConnectWalletCommand(
        ...     user_id=1,
        ...     exchange="bitget",
        ...     api_key="bg_...",
        ...     api_secret="...",
        ...     passphrase="...",
        ... )
        >>> wallet = await handler.handle(command)
    """

    user_id: int
    """ID підписника."""

    exchange: str
    """Назва біржі (bitget)."""

    api_key: str = field(repr=False)
    api_secret: str = field(repr=False)
    passphrase: str | None = field(default=None, repr=False)
    """Обов'язковий для Bitget."""

    label: str | None = None
