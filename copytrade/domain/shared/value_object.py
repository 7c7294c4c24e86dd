"""ValueObject - immutable, порівнюється за значенням.

ProviderTrade, CopySettings, FollowerBinding, OrderResult - value objects:
два однакові trade payloads дають рівні об'єкти.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class ValueObject(ABC):
    """Base class for domain value objects.

    Subclasses перевіряють інваріанти в ``__post_init__``:

        >>> @dataclass(frozen=True)
        ... class Leverage(ValueObject):
        ...     value: int
        ...
        ...     def __post_init__(self):
        ...         validate_value_object(1 <= self.value <= 125, "leverage out of range")
    """

    def __post_init__(self) -> None:
        pass


def validate_value_object(condition: bool, message: str) -> None:
    """Raise ValueError(message) if condition is false."""
    if not condition:
        raise ValueError(message)
