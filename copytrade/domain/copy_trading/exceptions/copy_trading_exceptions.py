"""Exceptions для Copy Trading bounded context."""

from copytrade.domain.shared import AggregateNotFound, DomainException, ValidationError


class DecryptionError(DomainException):
    """Credential ciphertext пошкоджений, підроблений або зашифрований іншим ключем.

    Terminal для цього wallet: оператор має втрутитись.
    Partial plaintext ніколи не повертається.
    """

    pass


class DuplicateExecutionError(DomainException):
    """CopyExecution для (copy_settings_id, provider_trade_id) вже існує."""

    pass


class DuplicateCopySettingsError(ValidationError):
    """Wallet вже копіює цього провайдера."""

    pass


class WalletNotFoundError(AggregateNotFound):
    """Wallet не існує або належить іншому user."""

    pass
