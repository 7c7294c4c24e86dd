from .exchange_exceptions import (
    AuthError,
    ExchangeError,
    ExchangeGatewayError,
    NetworkError,
    UnsupportedExchangeError,
)

__all__ = [
    "ExchangeGatewayError",
    "AuthError",
    "NetworkError",
    "ExchangeError",
    "UnsupportedExchangeError",
]
