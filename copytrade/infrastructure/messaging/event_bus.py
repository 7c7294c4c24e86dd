"""Event Bus - доставка domain events notifiers.

Orchestrator повертає domain events разом з outcomes; worker публікує
їх тут після commit. Notifiers (Telegram, webhooks) підписуються на
конкретний event type або на базовий клас (DomainEvent → всі events)
і нічого не знають про orchestrator.
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Iterable, Type

from copytrade.domain.shared import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventBus:
    """In-process Event Bus.

    Handler отримує event, якщо підписаний на його клас або будь-який
    базовий клас. Порядок: спершу найконкретніший тип, далі по MRO;
    в межах типу - в порядку підписки.

    Example:
        >>> bus = EventBus()
        >>> bus.subscribe(CopyExecutionOpenedEvent, notify_subscriber)
        >>> bus.subscribe(DomainEvent, audit_log)
        >>> await bus.publish_all(outcome.events)
    """

    def __init__(self) -> None:
        self._subscribers: dict[Type[DomainEvent], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """Subscribe handler to event type (and its subclasses)."""
        if handler in self._subscribers[event_type]:
            return
        self._subscribers[event_type].append(handler)
        logger.info(
            "event_bus.subscribed",
            extra={"event_type": event_type.__name__, "handler": _handler_name(handler)},
        )

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> list[EventHandler]:
        """Handlers, що отримають event цього типу."""
        resolved: list[EventHandler] = []
        for cls in event_type.__mro__:
            for handler in self._subscribers.get(cls, ()):
                if handler not in resolved:
                    resolved.append(handler)
        return resolved

    async def publish(self, event: DomainEvent) -> int:
        """Deliver event to its handlers.

        Handler failure логується і не зупиняє інших: execution вже
        закомічений, notifier його не відкотить.

        Returns:
            Number of handlers that completed without error.
        """
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug("event_bus.no_subscribers", extra={"event_type": event.event_name})
            return 0

        delivered = 0
        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "event_bus.handler_failed",
                    extra={
                        "event_type": event.event_name,
                        "handler": _handler_name(handler),
                        "event_id": str(event.event_id),
                        "error": str(e),
                    },
                    exc_info=True,
                )
            else:
                delivered += 1
        return delivered

    async def publish_all(self, events: Iterable[DomainEvent]) -> int:
        """Publish events in order.

        Returns:
            Number of events published.
        """
        count = 0
        for event in events:
            await self.publish(event)
            count += 1

        if count:
            logger.info("event_bus.published_batch", extra={"events_count": count})
        return count

    def clear_subscribers(self) -> None:
        self._subscribers.clear()

    def get_subscribers_count(self, event_type: Type[DomainEvent]) -> int:
        """Direct subscribers of event_type (без базових класів)."""
        return len(self._subscribers.get(event_type, []))


_event_bus_instance: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide event bus (workers subscribe notifiers at startup)."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance


def reset_event_bus() -> None:
    """Reset event bus (for testing)."""
    global _event_bus_instance
    _event_bus_instance = EventBus()
