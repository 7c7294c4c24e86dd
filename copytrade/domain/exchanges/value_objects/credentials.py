"""ExchangeCredentials value object - розшифровані API credentials."""

from dataclasses import dataclass, field

from copytrade.domain.shared import ValueObject, validate_value_object


@dataclass(frozen=True)
class ExchangeCredentials(ValueObject):
    """Plaintext API credentials одного wallet.

    Існують тільки в scope однієї follower operation і ніколи не
    потрапляють в repr/logs.
    """

    api_key: str = field(repr=False)
    api_secret: str = field(repr=False)
    passphrase: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        validate_value_object(bool(self.api_key), "API key is required")
        validate_value_object(bool(self.api_secret), "API secret is required")
