"""Exceptions для Exchange bounded context.

Taxonomy, яку бачить orchestrator:
- AuthError: погані credentials, subscriber має перепідключити wallet
- NetworkError: transient transport failure, безпечно повторити на наступному event
- ExchangeError: біржа відхилила запит (несе venue code)
"""

from copytrade.domain.shared import DomainException, ValidationError


class ExchangeGatewayError(DomainException):
    """Base exception для всіх exchange-related errors."""

    pass


class AuthError(ExchangeGatewayError):
    """Raised коли біржа відхилила credentials або permissions."""

    pass


class NetworkError(ExchangeGatewayError):
    """Raised на transport failure, timeout, rate limit або недоступність біржі.

    Це transient error: read-only calls retry'яться з backoff,
    order placement - ніколи.
    """

    pass


class ExchangeError(ExchangeGatewayError):
    """Raised коли біржа повернула non-success код."""

    def __init__(self, message: str, code: str | None = None, **context) -> None:
        if code is not None:
            context["code"] = code
        super().__init__(message, **context)
        self.code = code


class UnsupportedExchangeError(ValidationError):
    """Raised коли wallet посилається на біржу без adapter'а."""

    pass
