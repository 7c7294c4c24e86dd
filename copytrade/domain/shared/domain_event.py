"""Base DomainEvent class for event-driven architecture.

DomainEvent - факт що стався в domain (execution відкрита, заблокована,
закрита). Notifiers (Telegram, webhooks) підписуються на events і не
знають нічого про orchestrator.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for all domain events.

    Events іменуються в минулому часі (CopyExecutionOpened, не OpenCopyExecution)
    і immutable після створення.

    Example:
        >>> @dataclass(frozen=True)
        ... class CopyExecutionOpenedEvent(DomainEvent):
        ...     execution_id: int
        ...     order_id: str

        >>> event_bus.subscribe(CopyExecutionOpenedEvent, notify_subscriber)
    """

    event_id: UUID = field(default_factory=uuid4, init=False)
    """Унікальний ID події (auto-generated)."""

    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )
    """Час коли подія сталась (auto-generated, UTC)."""

    @property
    def event_name(self) -> str:
        """Get event class name (e.g., "CopyExecutionOpenedEvent")."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.event_name}(event_id={self.event_id}, occurred_at={self.occurred_at})"
