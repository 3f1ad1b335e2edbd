"""Force-directed placement for the systems network.

A step-for-step model of a d3-force simulation with three forces, applied in
this order on every tick:

* link springs with rest length ``link_distance``. Strength is
  ``1 / min(degree(source), degree(target))``. The correction is split by
  degree so that the busier end moves less.
* many-body repulsion, summed exactly over all pairs;
* centering, which translates the whole layout so its mean sits at the
  viewport centre.

Nodes start on a phyllotaxis spiral, so two runs over the same model give
the same positions. Tiny random jitter breaks exact overlaps; it comes from
a seeded generator.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from archgraph.config import ForceConfig
from archgraph.model.graph_model import GraphModel
from archgraph.model.types import FlowLink

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
DISTANCE_MIN2 = 1.0


@dataclass(eq=False)
class SimNode:
    """Position and velocity of one node. ``fx``/``fy`` pin it in place."""

    id: str
    index: int
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def is_pinned(self) -> bool:
        return self.fx is not None or self.fy is not None

    @property
    def position(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass(eq=False)
class SimLink:
    link: FlowLink
    id: str
    source: SimNode
    target: SimNode
    strength: float = 1.0
    bias: float = 0.5


class ForceSimulation:
    """Deterministic force simulation over a GraphModel.

    The simulation only advances when ``tick`` is called; scheduling ticks
    is the job of ``SimulationSession``.

    Args:
        model: Nodes and links to place
        config: Force strengths and cooling schedule
        seed: Seed for the overlap jitter
    """

    def __init__(self, model: GraphModel, config: ForceConfig | None = None, *, seed: int = 0) -> None:
        self.model = model
        self.config = config or ForceConfig()
        self.alpha = self.config.alpha
        self.alpha_target = 0.0
        self.ticks = 0
        self._random = random.Random(seed)

        self.nodes: dict[str, SimNode] = {
            node_id: SimNode(id=node_id, index=index) for index, node_id in enumerate(model.node_ids)
        }
        self.links: list[SimLink] = []
        for link_id, link in model.link_items():
            if link.source == link.target:
                logger.debug("Ignoring self-loop %s in force layout", link.source)
                continue
            self.links.append(
                SimLink(link=link, id=link_id, source=self.nodes[link.source], target=self.nodes[link.target])
            )
        self._initialize_nodes()
        self._initialize_links()

    def __len__(self) -> int:
        return len(self.nodes)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _initialize_nodes(self) -> None:
        for node in self.nodes.values():
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if math.isnan(node.x) or math.isnan(node.y):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + node.index)
                angle = node.index * INITIAL_ANGLE
                node.x = radius * math.cos(angle)
                node.y = radius * math.sin(angle)

    def _initialize_links(self) -> None:
        count = dict.fromkeys(self.nodes, 0)
        for sim_link in self.links:
            count[sim_link.source.id] += 1
            count[sim_link.target.id] += 1
        for sim_link in self.links:
            source_count = count[sim_link.source.id]
            target_count = count[sim_link.target.id]
            sim_link.bias = source_count / (source_count + target_count)
            sim_link.strength = 1 / min(source_count, target_count)

    def _jiggle(self) -> float:
        return (self._random.random() - 0.5) * 1e-6

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    @property
    def is_cooled(self) -> bool:
        """Alpha has dropped below ``alpha_min`` and nothing is reheating it."""
        return self.alpha < self.config.alpha_min and self.alpha_target < self.config.alpha_min

    def reheat(self, alpha_target: float | None = None, alpha: float | None = None) -> None:
        """Set the temperature target (and optionally the current alpha)."""
        if alpha_target is not None:
            self.alpha_target = alpha_target
        if alpha is not None:
            self.alpha = alpha

    def tick(self, iterations: int = 1) -> None:
        """Advance the simulation ``iterations`` steps."""
        config = self.config
        friction = 1 - config.velocity_decay
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * config.alpha_decay
            self._apply_links(self.alpha)
            self._apply_many_body(self.alpha)
            self._apply_center()
            for node in self.nodes.values():
                if node.fx is None:
                    node.vx *= friction
                    node.x += node.vx
                else:
                    node.x = node.fx
                    node.vx = 0.0
                if node.fy is None:
                    node.vy *= friction
                    node.y += node.vy
                else:
                    node.y = node.fy
                    node.vy = 0.0
            self.ticks += 1

    def run(self, max_ticks: int | None = None) -> int:
        """Tick until cooled (or ``max_ticks``); returns the ticks run."""
        ran = 0
        while not self.is_cooled and (max_ticks is None or ran < max_ticks):
            self.tick()
            ran += 1
        return ran

    def _apply_links(self, alpha: float) -> None:
        distance = self.config.link_distance
        for sim_link in self.links:
            source, target = sim_link.source, sim_link.target
            x = (target.x + target.vx - source.x - source.vx) or self._jiggle()
            y = (target.y + target.vy - source.y - source.vy) or self._jiggle()
            length = math.sqrt(x * x + y * y)
            length = (length - distance) / length * alpha * sim_link.strength
            x *= length
            y *= length
            bias = sim_link.bias
            target.vx -= x * bias
            target.vy -= y * bias
            source.vx += x * (1 - bias)
            source.vy += y * (1 - bias)

    def _apply_many_body(self, alpha: float) -> None:
        strength = self.config.charge_strength
        nodes = list(self.nodes.values())
        for node in nodes:
            for other in nodes:
                if other is node:
                    continue
                x = other.x - node.x
                y = other.y - node.y
                if x == 0:
                    x = self._jiggle()
                if y == 0:
                    y = self._jiggle()
                distance2 = x * x + y * y
                if distance2 < DISTANCE_MIN2:
                    distance2 = math.sqrt(DISTANCE_MIN2 * distance2)
                weight = strength * alpha / distance2
                node.vx += x * weight
                node.vy += y * weight

    def _apply_center(self) -> None:
        if not self.nodes:
            return
        cx, cy = self.config.center
        count = len(self.nodes)
        sx = sum(node.x for node in self.nodes.values()) / count - cx
        sy = sum(node.y for node in self.nodes.values()) / count - cy
        for node in self.nodes.values():
            node.x -= sx
            node.y -= sy

    # ------------------------------------------------------------------
    # Pinning
    # ------------------------------------------------------------------

    def pin(self, node_id: str, x: float | None = None, y: float | None = None) -> SimNode:
        """Fix a node at (x, y); defaults to where it currently is."""
        node = self.nodes[node_id]
        node.fx = node.x if x is None else x
        node.fy = node.y if y is None else y
        return node

    def unpin(self, node_id: str) -> SimNode:
        node = self.nodes[node_id]
        node.fx = None
        node.fy = None
        return node

    def positions(self) -> dict[str, tuple[float, float]]:
        return {node_id: node.position for node_id, node in self.nodes.items()}
