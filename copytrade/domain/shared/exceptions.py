"""Base domain exceptions.

Domain exceptions представляють порушення бізнес-правил і помилки
конфігурації. Вони частина domain layer і не залежать від infrastructure.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain errors.

    Example:
        >>> raise DomainException("Copy settings not found", settings_id=7)
    """

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            **context: Additional context (wallet_id, provider_trade_id, etc).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ValidationError(DomainException):
    """Input violates a business precondition.

    Missing trade fields, unsupported copy mode, non-positive limits.
    Per-follower: skip that follower, not a systemic failure.
    """

    pass


class ConfigurationError(DomainException):
    """Process configuration is missing or invalid.

    Єдиний тип помилки, що валить весь event (наприклад, немає ENCRYPTION_KEY).
    """

    pass


class AggregateNotFound(DomainException):
    """Exception raised when aggregate is not found.

    Example:
        >>> raise AggregateNotFound("Wallet not found", wallet_id=123)
    """

    pass


class InvalidStateTransition(DomainException):
    """Exception raised for invalid state transitions.

    Example:
        >>> # CopyExecution BLOCKED -> OPEN is invalid
        >>> raise InvalidStateTransition(
        ...     "Cannot open blocked execution",
        ...     from_status="blocked",
        ...     to_status="open",
        ... )
    """

    pass
