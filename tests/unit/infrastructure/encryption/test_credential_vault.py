"""Unit tests для CredentialVault (AES-256-GCM)."""

import pytest

from copytrade.domain.copy_trading.exceptions import DecryptionError
from copytrade.domain.copy_trading.value_objects import FollowerWallet
from copytrade.domain.shared import ConfigurationError
from copytrade.infrastructure.encryption import CredentialVault, decrypt, encrypt

OTHER_KEY = "ff" * 32


class TestRoundTrip:
    @pytest.mark.parametrize(
        "plaintext",
        ["bg_0123456789abcdef", "", "пароль з юнікодом 🔑", "a:b:c", "x" * 4096],
    )
    def test_decrypt_inverts_encrypt(self, vault, plaintext):
        assert vault.decrypt(vault.encrypt(plaintext)) == plaintext

    def test_ciphertext_format(self, vault):
        """Test: hex(iv):hex(tag):hex(data), IV 16 bytes, tag 16 bytes."""
        iv, tag, body = vault.encrypt("secret").split(":")

        assert len(bytes.fromhex(iv)) == 16
        assert len(bytes.fromhex(tag)) == 16
        assert len(bytes.fromhex(body)) == len("secret")

    def test_random_iv_per_encryption(self, vault):
        assert vault.encrypt("same") != vault.encrypt("same")

    def test_module_helpers_with_explicit_key(self):
        key = "ab" * 32

        assert decrypt(encrypt("api-key", key), key) == "api-key"


class TestTamperDetection:
    """Decrypt fails closed."""

    @pytest.mark.parametrize("part", [0, 1, 2])
    def test_flipped_byte_in_any_part_rejected(self, vault, part):
        parts = vault.encrypt("api-secret").split(":")
        raw = bytearray(bytes.fromhex(parts[part]))
        raw[0] ^= 0x01
        parts[part] = raw.hex()

        with pytest.raises(DecryptionError):
            vault.decrypt(":".join(parts))

    def test_wrong_key_rejected(self, vault):
        ciphertext = vault.encrypt("api-secret")

        with pytest.raises(DecryptionError):
            CredentialVault(OTHER_KEY).decrypt(ciphertext)

    @pytest.mark.parametrize(
        "ciphertext",
        ["", "abc", "aa:bb", "zz:zz:zz", "00:00:00", f"{'00' * 16}:{'00' * 8}:00"],
    )
    def test_malformed_ciphertext_rejected(self, vault, ciphertext):
        with pytest.raises(DecryptionError):
            vault.decrypt(ciphertext)


class TestKeyValidation:
    @pytest.mark.parametrize("key", ["", "abcd", "zz" * 32, "00" * 31])
    def test_bad_key_is_configuration_error(self, key):
        with pytest.raises(ConfigurationError):
            CredentialVault(key)

    def test_raw_bytes_key_accepted(self):
        vault = CredentialVault(b"\x01" * 32)

        assert vault.decrypt(vault.encrypt("ok")) == "ok"


class TestOpenWallet:
    def test_open_wallet_decrypts_bundle(self, vault):
        wallet = FollowerWallet(
            id=1,
            user_id=1,
            exchange="bitget",
            api_key_encrypted=vault.encrypt("key"),
            api_secret_encrypted=vault.encrypt("secret"),
            api_passphrase_encrypted=vault.encrypt("pass"),
        )

        credentials = vault.open_wallet(wallet)

        assert credentials.api_key == "key"
        assert credentials.api_secret == "secret"
        assert credentials.passphrase == "pass"
        assert "secret" not in repr(credentials)

    def test_open_wallet_with_tampered_secret_fails(self, vault):
        wallet = FollowerWallet(
            id=1,
            user_id=1,
            exchange="bitget",
            api_key_encrypted=vault.encrypt("key"),
            api_secret_encrypted="00:00:00",
        )

        with pytest.raises(DecryptionError):
            vault.open_wallet(wallet)
