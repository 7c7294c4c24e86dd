"""Base Command class.

Command - запит на зміну стану системи (write operation).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Command(ABC):
    """Base class для всіх commands.

    Commands immutable і не містять business logic: тільки data,
    logic живе в Handler.

    Example:
        >>> @dataclass(frozen=True)
        ... class ConnectWalletCommand(Command):
        ...     user_id: int
        ...     exchange: str
    """

    pass
