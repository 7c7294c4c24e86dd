from .copy_execution_repository import SQLAlchemyCopyExecutionRepository
from .follower_repository import SQLAlchemyFollowerRepository

__all__ = ["SQLAlchemyCopyExecutionRepository", "SQLAlchemyFollowerRepository"]
