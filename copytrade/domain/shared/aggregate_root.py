"""Base AggregateRoot class for domain model.

AggregateRoot - головний Entity в aggregate: зовнішній код змінює стан
тільки через його методи, а він фіксує зміни у вигляді domain events.
"""

from typing import List

from .domain_event import DomainEvent
from .entity import Entity


class AggregateRoot(Entity):
    """Base class for aggregate roots.

    Aggregate накопичує domain events під час use case. Events не
    публікуються одразу: caller забирає їх після commit і передає
    в EventBus.

    Example:
        >>> execution = CopyExecution.reserve(binding, trade)
        >>> execution.mark_open(order_id="abc", size=..., entry_price=..., leverage=5)
        >>> execution.get_domain_events()
        [CopyExecutionOpenedEvent(...)]
    """

    def __init__(self, id: int | None = None) -> None:
        super().__init__(id)
        self._domain_events: List[DomainEvent] = []

    def add_domain_event(self, event: DomainEvent) -> None:
        """Add domain event to pending events list.

        Args:
            event: Domain event to add.
        """
        self._domain_events.append(event)

    def get_domain_events(self) -> List[DomainEvent]:
        """Get all pending domain events.

        Returns:
            Copy of the pending events list.
        """
        return self._domain_events.copy()

    def clear_domain_events(self) -> None:
        """Clear all pending domain events.

        Викликається після публікації events, або mapper'ом після
        завантаження з DB (events не replay'яться).
        """
        self._domain_events.clear()

    @property
    def has_domain_events(self) -> bool:
        """Check if aggregate has pending domain events."""
        return len(self._domain_events) > 0
