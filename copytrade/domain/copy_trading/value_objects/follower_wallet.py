"""FollowerWallet value object - підключений exchange account підписника."""

from dataclasses import dataclass, field

from copytrade.domain.shared import ValueObject


@dataclass(frozen=True)
class FollowerWallet(ValueObject):
    """Exchange account з зашифрованими credentials.

    Plaintext тут ніколи не зберігається: тільки ciphertext з CredentialVault.
    """

    id: int | None
    user_id: int
    exchange: str
    api_key_encrypted: str = field(repr=False)
    api_secret_encrypted: str = field(repr=False)
    api_passphrase_encrypted: str | None = field(default=None, repr=False)
    label: str | None = None
    is_active: bool = True
