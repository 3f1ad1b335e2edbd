"""Mounted diagram sessions.

A session owns the interaction state of one diagram on screen and wires the
engines together: gestures and queries go in, events and paint instructions
come out. Layouts are recomputed lazily after each state change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from archgraph.config import FlowLayoutConfig, ForceConfig, TreeLayoutConfig
from archgraph.events.dispatcher import EventDispatcher
from archgraph.events.types import (
    NodeActivateEvent,
    NodeToggleEvent,
    SearchMatchEvent,
    SystemClickEvent,
)
from archgraph.flow.filters import PathFilter, SystemFilter, filter_path, filter_systems, navigation_target
from archgraph.flow.sankey import FlowLayout, FlowLayoutEngine
from archgraph.force.session import Scheduler, SimulationSession
from archgraph.force.simulation import ForceSimulation
from archgraph.gestures import ClickPolicy, Gesture, GestureController
from archgraph.instructions import (
    DiagramKind,
    PaintInstructions,
    Viewport,
    flow_instructions,
    network_instructions,
    tree_instructions,
)
from archgraph.model.graph_model import GraphModel
from archgraph.model.types import SYSTEM_LEVEL
from archgraph.tree.builder import CapabilityTree, build_tree
from archgraph.tree.layout import TreeLayout, TreeLayoutEngine
from archgraph.tree.search import SearchResult, apply_search, search
from archgraph.tree.visibility import VisibilityController

logger = logging.getLogger(__name__)


def _as_model(data: GraphModel | Any) -> GraphModel:
    return data if isinstance(data, GraphModel) else GraphModel.from_payload(data)


# =============================================================================
# Capability tree
# =============================================================================


class CapabilityDiagram:
    """Collapsible capability tree with search.

    Args:
        records: Hierarchy payload or parsed HierarchyRecord objects
        config: Layout settings
        dispatcher: Receives search, toggle and system-click events
        name: Name stamped on emitted events
    """

    def __init__(
        self,
        records: Any = None,
        *,
        config: TreeLayoutConfig | None = None,
        dispatcher: EventDispatcher | None = None,
        name: str = "capabilities",
    ) -> None:
        self.config = config or TreeLayoutConfig()
        self.dispatcher = dispatcher or EventDispatcher()
        self.name = name
        self.engine = TreeLayoutEngine(self.config)
        self.search_result = SearchResult()
        self.hovered_id: str | None = None
        self.viewport = Viewport(zoom_extent=self.config.zoom_extent)
        self._load(records)

    def __repr__(self) -> str:
        return f"CapabilityDiagram(name={self.name!r}, nodes={len(self.tree)}, query={self.query!r})"

    def _load(self, records: Any) -> None:
        self.tree: CapabilityTree = build_tree(records)
        self.controller = VisibilityController(self.tree, self.config.max_visible_depth)
        self._layout: TreeLayout | None = None
        self._dirty = True

    @property
    def query(self) -> str:
        return self.search_result.query

    @property
    def is_empty(self) -> bool:
        """True when no record made it into the tree."""
        return self.tree.synthetic_root and len(self.tree) == 1

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    def reload(self, records: Any) -> None:
        """Replace the data. Visibility is reset; an active query is re-run."""
        query = self.query
        self.hovered_id = None
        self._load(records)
        if query:
            self.set_query(query)

    def set_query(self, query: str | None) -> SearchResult:
        """Search by name and recompute visibility from scratch."""
        result = search(self.tree, query)
        self.search_result = result
        apply_search(self.controller, result)
        self._dirty = True
        self.dispatcher.emit(SearchMatchEvent(diagram=self.name, query=result.query, matched_ids=result.matched_ids))
        return result

    def click(self, node_id: str) -> bool:
        """Toggle a parent node; a System leaf with a code reports a system click.

        Returns True when the visible tree changed.
        """
        if node_id not in self.tree:
            logger.debug("Click on unknown capability %r ignored", node_id)
            return False
        if not self.tree.is_leaf(node_id):
            self.controller.toggle(node_id)
            self._dirty = True
            self.dispatcher.emit(
                NodeToggleEvent(diagram=self.name, node_id=node_id, expanded=self.controller.is_expanded(node_id))
            )
            return True
        record = self.tree.record(node_id)
        if record is not None and record.level == SYSTEM_LEVEL and record.system_code:
            self.dispatcher.emit(SystemClickEvent(diagram=self.name, node_id=node_id, system_code=record.system_code))
        return False

    def hover(self, node_id: str | None) -> None:
        self.hovered_id = node_id if node_id in self.tree else None

    def expand_all(self) -> None:
        self.controller.expand_all()
        self._dirty = True

    def collapse_all(self) -> None:
        self.controller.collapse_all()
        self._dirty = True

    def resize(self, width: float, height: float) -> None:
        self.config = self.config.with_size(width, height)
        self.engine = TreeLayoutEngine(self.config)
        self._dirty = True

    def zoom(self, scale: float, translate: tuple[float, float] | None = None) -> Viewport:
        self.viewport = self.viewport.zoom(scale, translate)
        return self.viewport

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def layout(self) -> TreeLayout:
        """Current layout; previous positions are carried into ``x0, y0``."""
        if self._dirty or self._layout is None:
            self._layout = self.engine.layout(self.controller.visible_tree(), self._layout)
            self._dirty = False
        return self._layout

    def instructions(self) -> PaintInstructions:
        if self.is_empty:
            return PaintInstructions(diagram=DiagramKind.TREE, viewport=self.viewport)
        return tree_instructions(
            self.tree,
            self.layout(),
            self.config,
            search=self.search_result,
            hovered_id=self.hovered_id,
            viewport=self.viewport,
        )


# =============================================================================
# Flow (sankey)
# =============================================================================


class FlowDiagram:
    """Priority-ordered flow diagram around a pinned system.

    Args:
        data: Flow payload or a GraphModel
        config: Layout settings (``FlowLayoutConfig.bordered()`` for the
            bordered variant)
        pinned_id: System whose own diagram this is; defaults to metadata code
        middleware_ids: Defaults to the metadata integration middleware list
        bordered: Draw link borders that follow the hover state
        dispatcher: Receives NodeActivateEvent
        name: Name stamped on emitted events
    """

    def __init__(
        self,
        data: GraphModel | Any = None,
        *,
        config: FlowLayoutConfig | None = None,
        pinned_id: str | None = None,
        middleware_ids: Iterable[str] | None = None,
        bordered: bool = False,
        dispatcher: EventDispatcher | None = None,
        name: str = "flow",
    ) -> None:
        self.config = config or FlowLayoutConfig()
        self.engine = FlowLayoutEngine(self.config)
        self.pinned_id = pinned_id
        self.middleware_ids = tuple(middleware_ids) if middleware_ids is not None else None
        self.bordered = bordered
        self.dispatcher = dispatcher or EventDispatcher()
        self.name = name
        self.hovered_link: str | None = None
        self.viewport = Viewport(zoom_extent=self.config.zoom_extent)
        self.source_model = _as_model(data)
        self.model = self.source_model
        self._layout: FlowLayout | None = None

    def __repr__(self) -> str:
        return f"FlowDiagram(name={self.name!r}, nodes={len(self.model)}, links={len(self.model.links)})"

    def reload(self, data: GraphModel | Any) -> None:
        self.source_model = _as_model(data)
        self.model = self.source_model
        self.hovered_link = None
        self._layout = None

    def apply_filter(self, filters: PathFilter | SystemFilter | None) -> GraphModel:
        """Narrow the displayed model; None restores the full model."""
        if filters is None:
            self.model = self.source_model
        elif isinstance(filters, PathFilter):
            self.model = filter_path(self.source_model, filters)
        else:
            self.model = filter_systems(self.source_model, filters)
        self.hovered_link = None
        self._layout = None
        return self.model

    def layout(self) -> FlowLayout:
        if self._layout is None:
            self._layout = self.engine.layout(self.model, self.pinned_id, self.middleware_ids)
        return self._layout

    def hover_link(self, link_id: str | None) -> None:
        self.hovered_link = link_id

    def click(self, node_id: str) -> NodeActivateEvent | None:
        """Ask to open a node's own diagram; the pinned node is a no-op."""
        layout = self.layout()
        if node_id not in layout.nodes or node_id == layout.pinned_id:
            return None
        event = NodeActivateEvent(diagram=self.name, node_id=node_id, target_id=navigation_target(node_id))
        self.dispatcher.emit(event)
        return event

    def zoom(self, scale: float, translate: tuple[float, float] | None = None) -> Viewport:
        self.viewport = self.viewport.zoom(scale, translate)
        return self.viewport

    def instructions(self) -> PaintInstructions:
        return flow_instructions(
            self.layout(),
            self.config,
            hovered_link=self.hovered_link,
            bordered=self.bordered,
            viewport=self.viewport,
        )


# =============================================================================
# Network (force)
# =============================================================================


class NetworkDiagram:
    """Force-directed network of systems with draggable nodes.

    Pointer coordinates are in simulation space. Pressing a node pins it and
    reheats the simulation; releasing it without moving counts as a click
    and asks to open the node's diagram.

    Use it as a context manager so teardown cancels pending ticks.

    Args:
        data: Flow payload or a GraphModel
        scheduler: Host timer facility
        config: Simulation settings
        policy: Click/drag thresholds (``ClickPolicy.timed()`` for quick-press)
        dispatcher: Receives NodeActivateEvent and SimulationSettledEvent
        on_tick: Repaint hook called after every tick
        seed: Seed for the overlap jitter
        name: Name stamped on emitted events
    """

    def __init__(
        self,
        data: GraphModel | Any,
        scheduler: Scheduler,
        *,
        config: ForceConfig | None = None,
        policy: ClickPolicy | None = None,
        dispatcher: EventDispatcher | None = None,
        on_tick: Callable[[ForceSimulation], Any] | None = None,
        seed: int = 0,
        name: str = "network",
    ) -> None:
        self.config = config or ForceConfig()
        self.scheduler = scheduler
        self.dispatcher = dispatcher or EventDispatcher()
        self.on_tick = on_tick
        self.seed = seed
        self.name = name
        self.gestures = GestureController(policy)
        self.hovered_node: str | None = None
        self.hovered_link: str | None = None
        self.viewport = Viewport(zoom_extent=self.config.zoom_extent)
        self.source_model = _as_model(data)
        self.session = self._new_session(self.source_model)

    def __repr__(self) -> str:
        return f"NetworkDiagram(name={self.name!r}, session={self.session!r})"

    def __enter__(self) -> NetworkDiagram:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _new_session(self, model: GraphModel) -> SimulationSession:
        simulation = ForceSimulation(model, self.config, seed=self.seed)
        return SimulationSession(
            simulation,
            self.scheduler,
            dispatcher=self.dispatcher,
            on_tick=self.on_tick,
            diagram=self.name,
        )

    @property
    def simulation(self) -> ForceSimulation:
        return self.session.simulation

    @property
    def model(self) -> GraphModel:
        return self.simulation.model

    def start(self) -> None:
        self.session.start()

    def close(self) -> None:
        self.gestures.cancel()
        self.session.close()

    def apply_filter(self, filters: SystemFilter | None) -> GraphModel:
        """Restart on a filtered model; in-flight ticks of the old one are cancelled."""
        model = self.source_model if filters is None else filter_systems(self.source_model, filters)
        was_running = self.session.is_running
        self.close()
        self.hovered_node = self.hovered_link = None
        self.session = self._new_session(model)
        if was_running:
            self.session.start()
        return model

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def pointer_down(self, node_id: str, x: float, y: float, t_ms: float) -> None:
        if node_id not in self.simulation.nodes:
            logger.debug("pointer_down on unknown system %r ignored", node_id)
            return
        # A pointer_up can be lost (pointer left the window); release that drag first.
        self.pointer_cancel()
        self.gestures.pointer_down(node_id, x, y, t_ms)
        self.session.drag_start(node_id)

    def pointer_move(self, x: float, y: float) -> None:
        if not self.gestures.active:
            return
        self.gestures.pointer_move(x, y)
        self.session.drag_to(self.gestures.target, x, y)

    def pointer_cancel(self) -> None:
        """Abandon the current gesture without a click; the dragged node is released."""
        if not self.gestures.active:
            return
        node_id = self.gestures.target
        self.gestures.cancel()
        self.session.drag_end(node_id)

    def pointer_up(self, x: float, y: float, t_ms: float) -> Gesture | None:
        node_id = self.gestures.target
        gesture = self.gestures.pointer_up(x, y, t_ms)
        if gesture is None:
            return None
        self.session.drag_end(node_id)
        if gesture.is_click:
            self.dispatcher.emit(
                NodeActivateEvent(diagram=self.name, node_id=node_id, target_id=navigation_target(node_id))
            )
        return gesture

    def hover_node(self, node_id: str | None) -> None:
        self.hovered_node = node_id

    def hover_link(self, link_id: str | None) -> None:
        self.hovered_link = link_id

    def zoom(self, scale: float, translate: tuple[float, float] | None = None) -> Viewport:
        self.viewport = self.viewport.zoom(scale, translate)
        return self.viewport

    def instructions(self) -> PaintInstructions:
        return network_instructions(
            self.simulation,
            self.config,
            hovered_node=self.hovered_node,
            hovered_link=self.hovered_link,
            viewport=self.viewport,
        )
