"""SQLAlchemy persistence adapter."""

from .database import create_engine_from_settings, create_session_factory
from .models import Base
from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "SQLAlchemyUnitOfWork",
    "create_engine_from_settings",
    "create_session_factory",
]
