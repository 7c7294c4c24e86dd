from .copy_execution_events import (
    CopyExecutionBlockedEvent,
    CopyExecutionClosedEvent,
    CopyExecutionCloseFailedEvent,
    CopyExecutionFailedEvent,
    CopyExecutionOpenedEvent,
)

__all__ = [
    "CopyExecutionOpenedEvent",
    "CopyExecutionBlockedEvent",
    "CopyExecutionFailedEvent",
    "CopyExecutionClosedEvent",
    "CopyExecutionCloseFailedEvent",
]
