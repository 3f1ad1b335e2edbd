"""Layout and simulation settings.

Every engine takes one of these frozen dataclasses. Defaults reproduce the
diagrams as they are drawn in the architecture review application; projects
can override them from ``[tool.archgraph]`` (see ``archgraph.cli._config``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Margin:
    """Space between the viewport edge and the drawing area."""

    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def coerce(cls, value: Margin | dict[str, float] | tuple[float, ...] | float) -> Margin:
        """Accept a Margin, a mapping, a CSS-style tuple or a single number."""
        if isinstance(value, Margin):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if isinstance(value, (int, float)):
            return cls(value, value, value, value)
        if len(value) == 2:
            vertical, horizontal = value
            return cls(vertical, horizontal, vertical, horizontal)
        return cls(*value)


class TieBreak(str, Enum):
    """How the flow ordering settles nodes that compare equal otherwise."""

    TYPE = "type"
    STABLE = "stable"


class ColumnMode(str, Enum):
    """How flow nodes are assigned to columns."""

    TYPE = "type"
    JUSTIFY = "justify"


def _from_mapping(cls: type, values: dict[str, Any]) -> Any:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} option(s): {', '.join(unknown)}")
    return cls(**values)


@dataclass(frozen=True)
class TreeLayoutConfig:
    """Settings for the capability tree.

    Attributes:
        width: Viewport width in pixels
        height: Viewport height in pixels
        margin: Inner margin; breadth is scaled to the inner height
        depth_step: Horizontal distance between tree levels
        sibling_separation: Gap between nodes sharing a parent
        cousin_separation: Gap between neighbours with different parents
        max_visible_depth: Nodes deeper than this start collapsed
        node_radius: Circle radius handed to the painter
        transition_ms: Suggested animation length for enter/update/exit
        zoom_extent: Allowed (min, max) zoom scale
    """

    width: float = 1200.0
    height: float = 800.0
    margin: Margin = field(default_factory=lambda: Margin(20, 120, 20, 120))
    depth_step: float = 200.0
    sibling_separation: float = 1.0
    cousin_separation: float = 1.2
    max_visible_depth: int = 1
    node_radius: float = 8.0
    transition_ms: int = 300
    zoom_extent: tuple[float, float] = (0.5, 3.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "margin", Margin.coerce(self.margin))
        object.__setattr__(self, "zoom_extent", tuple(self.zoom_extent))

    @property
    def inner_width(self) -> float:
        return max(0.0, self.width - self.margin.left - self.margin.right)

    @property
    def inner_height(self) -> float:
        return max(0.0, self.height - self.margin.top - self.margin.bottom)

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> TreeLayoutConfig:
        return _from_mapping(cls, values)

    def with_size(self, width: float, height: float) -> TreeLayoutConfig:
        """Copy with a new viewport size (e.g. after a resize)."""
        return replace(self, width=width, height=height)


@dataclass(frozen=True)
class FlowLayoutConfig:
    """Settings for the priority-ordered flow layout.

    Attributes:
        width: Viewport width in pixels
        height: Viewport height in pixels
        margin: Inner margin around the columns
        node_width: Width of a node bar
        node_padding: Vertical gap between nodes in a column
        iterations: Relaxation passes toward linked neighbours
        tie_break: Residual ordering among otherwise equal nodes
        column_mode: Column assignment strategy
        zoom_extent: Allowed (min, max) zoom scale
    """

    width: float = 1000.0
    height: float = 1000.0
    margin: Margin = field(default_factory=lambda: Margin(30, 200, 30, 200))
    node_width: float = 20.0
    node_padding: float = 25.0
    iterations: int = 6
    tie_break: TieBreak = TieBreak.TYPE
    column_mode: ColumnMode = ColumnMode.TYPE
    zoom_extent: tuple[float, float] = (0.5, 5.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "margin", Margin.coerce(self.margin))
        object.__setattr__(self, "tie_break", TieBreak(self.tie_break))
        object.__setattr__(self, "column_mode", ColumnMode(self.column_mode))
        object.__setattr__(self, "zoom_extent", tuple(self.zoom_extent))
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")

    @property
    def inner_width(self) -> float:
        return max(0.0, self.width - self.margin.left - self.margin.right)

    @property
    def inner_height(self) -> float:
        return max(0.0, self.height - self.margin.top - self.margin.bottom)

    @classmethod
    def bordered(cls, **overrides: Any) -> FlowLayoutConfig:
        """Preset for the bordered system diagram: wider padding, stable ties."""
        values: dict[str, Any] = {
            "margin": Margin(30, 20, 30, 20),
            "node_padding": 50.0,
            "iterations": 1000,
            "tie_break": TieBreak.STABLE,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> FlowLayoutConfig:
        return _from_mapping(cls, values)


ALPHA_MIN = 0.001


@dataclass(frozen=True)
class ForceConfig:
    """Settings for the force-directed network.

    Attributes:
        width: Viewport width; the centering force targets its middle
        height: Viewport height
        charge_strength: Many-body strength (negative repels)
        link_distance: Rest length of link springs
        alpha: Starting temperature
        alpha_min: Cooling stops below this
        alpha_decay: Per-tick cooling rate
        velocity_decay: Friction applied to velocities each tick
        drag_alpha_target: Temperature target while a node is dragged
        tick_interval: Seconds between scheduled ticks
        settle_after: Wall-clock budget in seconds before the session settles
        keep_pinned: Leave dragged nodes fixed after the drag ends
        node_radius: Circle radius handed to the painter
        hover_radius: Circle radius of a hovered node
        zoom_extent: Allowed (min, max) zoom scale
    """

    width: float = 960.0
    height: float = 600.0
    charge_strength: float = -200.0
    link_distance: float = 150.0
    alpha: float = 1.0
    alpha_min: float = ALPHA_MIN
    alpha_decay: float = 1 - math.pow(ALPHA_MIN, 1 / 300)
    velocity_decay: float = 0.4
    drag_alpha_target: float = 0.3
    tick_interval: float = 1 / 60
    settle_after: float = 3.0
    keep_pinned: bool = False
    node_radius: float = 12.0
    hover_radius: float = 15.0
    zoom_extent: tuple[float, float] = (0.1, 10.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "zoom_extent", tuple(self.zoom_extent))
        if not 0 <= self.velocity_decay <= 1:
            raise ValueError(f"velocity_decay must be within [0, 1], got {self.velocity_decay}")
        if self.settle_after < 0:
            raise ValueError(f"settle_after must be >= 0, got {self.settle_after}")

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> ForceConfig:
        return _from_mapping(cls, values)
