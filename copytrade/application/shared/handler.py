"""Base Handler class для Commands."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .command import Command

TCommand = TypeVar("TCommand", bound=Command)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """Base class для command handlers.

    Handler відповідає за:
    - Load aggregates з repository
    - Execute domain logic
    - Save changes через Unit of Work
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle command and return result.

        Raises:
            DomainException: If business rule violated.
        """
        pass
