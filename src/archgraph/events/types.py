"""Events emitted by diagram sessions."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


def _now() -> float:
    """Current timestamp."""
    return time.time()


@dataclass(frozen=True)
class BaseEvent:
    """Base class for all diagram events.

    Attributes:
        diagram: Name of the diagram that produced this event.
        timestamp: Unix timestamp when the event was created.
    """

    diagram: str = ""
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class SearchMatchEvent(BaseEvent):
    """Emitted whenever the capability search is recomputed.

    Attributes:
        query: The stripped query ("" when the search was cleared).
        matched_ids: Ids of nodes whose name contains the query.
    """

    query: str = ""
    matched_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class NodeActivateEvent(BaseEvent):
    """Emitted when a click asks to open a node's own diagram.

    Attributes:
        node_id: Id of the clicked node.
        target_id: Id of the diagram to open (role suffix stripped).
    """

    node_id: str = ""
    target_id: str = ""


@dataclass(frozen=True)
class SystemClickEvent(BaseEvent):
    """Emitted when a System node of the capability tree is clicked.

    Attributes:
        node_id: Id of the clicked tree node.
        system_code: Code of the system it represents.
    """

    node_id: str = ""
    system_code: str = ""


@dataclass(frozen=True)
class NodeToggleEvent(BaseEvent):
    """Emitted when a tree node is expanded or collapsed by a click.

    Attributes:
        node_id: Id of the toggled node.
        expanded: New state.
    """

    node_id: str = ""
    expanded: bool = False


@dataclass(frozen=True)
class SimulationSettledEvent(BaseEvent):
    """Emitted when a force simulation stops ticking.

    Attributes:
        ticks: Number of ticks run since the session started.
        alpha: Temperature at the moment it settled.
        reason: "cooled" (alpha fell below alpha_min) or "budget" (time ran out).
    """

    ticks: int = 0
    alpha: float = 0.0
    reason: str = ""


Event = SearchMatchEvent | NodeActivateEvent | SystemClickEvent | NodeToggleEvent | SimulationSettledEvent
