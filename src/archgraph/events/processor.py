"""Event processor base classes."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from archgraph.events.types import (
        BaseEvent,
        Event,
        NodeActivateEvent,
        NodeToggleEvent,
        SearchMatchEvent,
        SimulationSettledEvent,
        SystemClickEvent,
    )


# Mapping from event class name to handler method name.
_EVENT_METHOD_MAP: dict[str, str] = {
    "SearchMatchEvent": "on_search_match",
    "NodeActivateEvent": "on_node_activate",
    "SystemClickEvent": "on_system_click",
    "NodeToggleEvent": "on_node_toggle",
    "SimulationSettledEvent": "on_simulation_settled",
}


class EventProcessor:
    """Base class for event consumers.

    Subclass and override ``on_event`` to receive all events,
    or use ``TypedEventProcessor`` for per-type dispatch.
    """

    def on_event(self, event: Event) -> None:
        """Called for every event. Override in subclasses."""

    def shutdown(self) -> None:
        """Called once when the diagram is torn down. Override to flush buffers."""


class TypedEventProcessor(EventProcessor):
    """Dispatches ``on_event`` to typed handler methods automatically.

    Override any of the ``on_*`` methods below to handle specific event types.
    Unhandled event types are silently ignored.
    """

    def on_event(self, event: Event) -> None:
        method_name = _EVENT_METHOD_MAP.get(type(event).__name__)
        if method_name is not None:
            method = getattr(self, method_name, None)
            if method is not None:
                method(event)

    def on_search_match(self, event: SearchMatchEvent) -> None: ...
    def on_node_activate(self, event: NodeActivateEvent) -> None: ...
    def on_system_click(self, event: SystemClickEvent) -> None: ...
    def on_node_toggle(self, event: NodeToggleEvent) -> None: ...
    def on_simulation_settled(self, event: SimulationSettledEvent) -> None: ...


class CallbackProcessor(EventProcessor):
    """Forwards events to a plain callable.

    Args:
        callback: Called with each accepted event
        event_types: Only forward these event classes (default: all)
    """

    def __init__(
        self,
        callback: Callable[[Event], None],
        event_types: tuple[type[BaseEvent], ...] | None = None,
    ) -> None:
        self._callback = callback
        self._event_types = event_types

    def on_event(self, event: Event) -> None:
        if self._event_types is None or isinstance(event, self._event_types):
            self._callback(event)


class EventCollector(EventProcessor):
    """Keeps every event it sees, in order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def on_event(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[BaseEvent]) -> list[Event]:
        return [e for e in self.events if isinstance(e, event_type)]
