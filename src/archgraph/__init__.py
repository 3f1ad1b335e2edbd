"""Archgraph - layout and interaction engine for enterprise architecture diagrams."""

from archgraph.config import (
    ColumnMode,
    FlowLayoutConfig,
    ForceConfig,
    Margin,
    TieBreak,
    TreeLayoutConfig,
)
from archgraph.diagrams import CapabilityDiagram, FlowDiagram, NetworkDiagram
from archgraph.events import (
    BaseEvent,
    CallbackProcessor,
    Event,
    EventCollector,
    EventDispatcher,
    EventProcessor,
    NodeActivateEvent,
    NodeToggleEvent,
    SearchMatchEvent,
    SimulationSettledEvent,
    SystemClickEvent,
    TypedEventProcessor,
)
from archgraph.events.rich_log import RichEventLog
from archgraph.exceptions import DiagramDataError, SimulationClosedError
from archgraph.flow import (
    FlowLayout,
    FlowLayoutEngine,
    FlowOrdering,
    PathFilter,
    Role,
    SystemFilter,
    filter_path,
    filter_systems,
)
from archgraph.force import (
    AsyncioScheduler,
    ForceSimulation,
    ManualScheduler,
    SimulationSession,
)
from archgraph.gestures import ClickPolicy, Gesture, GestureController, GestureKind
from archgraph.instructions import PaintEdge, PaintInstructions, PaintNode, Viewport
from archgraph.model import GraphModel, Highlight, parse_flow, parse_hierarchy
from archgraph.tree import (
    CapabilityTree,
    SearchResult,
    TreeLayout,
    TreeLayoutEngine,
    VisibilityController,
    VisibilityState,
    build_tree,
    derive_visible_tree,
    search,
)

__all__ = [
    # Model
    "GraphModel",
    "Highlight",
    "parse_flow",
    "parse_hierarchy",
    # Capability tree
    "CapabilityTree",
    "SearchResult",
    "TreeLayout",
    "TreeLayoutEngine",
    "VisibilityController",
    "VisibilityState",
    "build_tree",
    "derive_visible_tree",
    "search",
    # Flow
    "FlowLayout",
    "FlowLayoutEngine",
    "FlowOrdering",
    "PathFilter",
    "Role",
    "SystemFilter",
    "filter_path",
    "filter_systems",
    # Force
    "AsyncioScheduler",
    "ForceSimulation",
    "ManualScheduler",
    "SimulationSession",
    # Gestures
    "ClickPolicy",
    "Gesture",
    "GestureController",
    "GestureKind",
    # Diagrams and paint instructions
    "CapabilityDiagram",
    "FlowDiagram",
    "NetworkDiagram",
    "PaintEdge",
    "PaintInstructions",
    "PaintNode",
    "Viewport",
    # Config
    "ColumnMode",
    "FlowLayoutConfig",
    "ForceConfig",
    "Margin",
    "TieBreak",
    "TreeLayoutConfig",
    # Events
    "BaseEvent",
    "CallbackProcessor",
    "Event",
    "EventCollector",
    "EventDispatcher",
    "EventProcessor",
    "NodeActivateEvent",
    "NodeToggleEvent",
    "RichEventLog",
    "SearchMatchEvent",
    "SimulationSettledEvent",
    "SystemClickEvent",
    "TypedEventProcessor",
    # Exceptions
    "DiagramDataError",
    "SimulationClosedError",
]
