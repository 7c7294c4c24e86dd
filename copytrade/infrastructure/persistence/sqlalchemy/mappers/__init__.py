from .copy_execution_mapper import CopyExecutionMapper
from .follower_mapper import FollowerMapper

__all__ = ["CopyExecutionMapper", "FollowerMapper"]
