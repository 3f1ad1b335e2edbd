"""Event system for observing diagram interaction."""

from archgraph.events.dispatcher import EventDispatcher
from archgraph.events.processor import (
    CallbackProcessor,
    EventCollector,
    EventProcessor,
    TypedEventProcessor,
)
from archgraph.events.types import (
    BaseEvent,
    Event,
    NodeActivateEvent,
    NodeToggleEvent,
    SearchMatchEvent,
    SimulationSettledEvent,
    SystemClickEvent,
)

__all__ = [
    # Event types
    "BaseEvent",
    "Event",
    "NodeActivateEvent",
    "NodeToggleEvent",
    "SearchMatchEvent",
    "SimulationSettledEvent",
    "SystemClickEvent",
    # Processor interfaces
    "CallbackProcessor",
    "EventCollector",
    "EventProcessor",
    "TypedEventProcessor",
    # Dispatcher
    "EventDispatcher",
]
