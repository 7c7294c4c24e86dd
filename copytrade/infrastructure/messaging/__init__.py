from .event_bus import EventBus, EventHandler, get_event_bus, reset_event_bus

__all__ = ["EventBus", "EventHandler", "get_event_bus", "reset_event_bus"]
