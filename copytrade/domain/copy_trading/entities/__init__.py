from .copy_execution import CopyExecution

__all__ = ["CopyExecution"]
