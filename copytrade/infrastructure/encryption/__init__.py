from .credential_vault import CredentialVault, decrypt, encrypt, get_credential_vault

__all__ = ["CredentialVault", "encrypt", "decrypt", "get_credential_vault"]
