"""Shared Application Layer components."""

from .command import Command
from .handler import CommandHandler
from .unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "Command",
    "CommandHandler",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
