from .copy_execution_repository import CopyExecutionRepository
from .follower_repository import FollowerRepository

__all__ = ["CopyExecutionRepository", "FollowerRepository"]
