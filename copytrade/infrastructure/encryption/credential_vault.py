"""Credential Vault for exchange API credentials.

Uses AES-256-GCM (authenticated encryption) for storing API keys,
secrets and passphrases at rest.

Ciphertext format: ``hex(iv):hex(auth_tag):hex(ciphertext)`` with a
16-byte random IV per encryption.
"""

import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from copytrade.config import get_settings
from copytrade.domain.copy_trading.exceptions import DecryptionError
from copytrade.domain.copy_trading.value_objects import FollowerWallet
from copytrade.domain.exchanges.value_objects import ExchangeCredentials
from copytrade.domain.shared import ConfigurationError

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
TAG_LENGTH = 16


def _parse_key(key: str | bytes) -> bytes:
    """Decode the process key (64 hex chars or 32 raw bytes)."""
    if isinstance(key, bytes):
        raw = key
    else:
        try:
            raw = bytes.fromhex(key.strip())
        except ValueError as e:
            raise ConfigurationError("Encryption key must be hex encoded") from e

    if len(raw) != KEY_LENGTH:
        raise ConfigurationError(
            "Encryption key must be 32 bytes (64 hex chars)",
            actual_length=len(raw),
        )
    return raw


class CredentialVault:
    """Handles encryption and decryption of exchange credentials."""

    def __init__(self, key: str | bytes) -> None:
        """Initialize vault.

        Args:
            key: 32-byte key as 64 hex chars (ENCRYPTION_KEY) or raw bytes.

        Raises:
            ConfigurationError: If key is missing or has wrong length.
        """
        if not key:
            raise ConfigurationError("Encryption key is not configured")
        self._aesgcm = AESGCM(_parse_key(key))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string.

        Args:
            plaintext: The string to encrypt.

        Returns:
            ``iv:tag:ciphertext`` hex string.
        """
        iv = os.urandom(IV_LENGTH)
        sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        # AESGCM appends the tag to the ciphertext
        body, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return f"{iv.hex()}:{tag.hex()}:{body.hex()}"

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt an ``iv:tag:ciphertext`` string.

        Args:
            ciphertext: Value produced by encrypt().

        Returns:
            Decrypted plaintext string.

        Raises:
            DecryptionError: Malformed format, tampered data or wrong key.
        """
        parts = ciphertext.split(":") if isinstance(ciphertext, str) else []
        if len(parts) != 3:
            raise DecryptionError("Malformed ciphertext: expected iv:tag:data")

        try:
            iv, tag, body = (bytes.fromhex(part) for part in parts)
        except ValueError as e:
            raise DecryptionError("Malformed ciphertext: invalid hex") from e

        if len(iv) != IV_LENGTH or len(tag) != TAG_LENGTH:
            raise DecryptionError(
                "Malformed ciphertext: bad iv or tag length",
                iv_length=len(iv),
                tag_length=len(tag),
            )

        try:
            plaintext = self._aesgcm.decrypt(iv, body + tag, None)
        except InvalidTag as e:
            raise DecryptionError("Ciphertext authentication failed") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted data is not valid UTF-8") from e

    def open_wallet(self, wallet: FollowerWallet) -> ExchangeCredentials:
        """Decrypt the credential bundle of a wallet.

        Raises:
            DecryptionError: If any of the ciphertexts is invalid.
        """
        try:
            return ExchangeCredentials(
                api_key=self.decrypt(wallet.api_key_encrypted),
                api_secret=self.decrypt(wallet.api_secret_encrypted),
                passphrase=(
                    self.decrypt(wallet.api_passphrase_encrypted)
                    if wallet.api_passphrase_encrypted
                    else None
                ),
            )
        except DecryptionError:
            logger.error(
                "credential_vault.wallet_decryption_failed",
                extra={"wallet_id": wallet.id, "exchange": wallet.exchange},
            )
            raise


def encrypt(plaintext: str, key: str | bytes) -> str:
    """Encrypt plaintext with an explicit key."""
    return CredentialVault(key).encrypt(plaintext)


def decrypt(ciphertext: str, key: str | bytes) -> str:
    """Decrypt ciphertext with an explicit key."""
    return CredentialVault(key).decrypt(ciphertext)


# Singleton instance
_credential_vault: CredentialVault | None = None


def get_credential_vault() -> CredentialVault:
    """Get or create the vault singleton from settings.

    Raises:
        ConfigurationError: If ENCRYPTION_KEY is missing or invalid.
    """
    global _credential_vault
    if _credential_vault is None:
        _credential_vault = CredentialVault(get_settings().encryption_key)
    return _credential_vault
