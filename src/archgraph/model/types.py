"""Typed records for hierarchy and flow diagram input."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ROOT_LEVEL = "Root"
SYSTEM_LEVEL = "System"


class Highlight(str, Enum):
    """Highlight classification handed to the painter for a node or edge."""

    NONE = "none"
    MATCHED = "matched"
    ON_PATH = "on_path"
    HOVERED = "hovered"


@dataclass(frozen=True)
class HierarchyRecord:
    """One row of the flat capability hierarchy.

    Attributes:
        id: Unique node id
        name: Display label
        level: "L1", "L2", "L3", "System" or the "Root" marker
        parent_id: Parent node id, or None for top-level rows
        system_code: Code of the system this row represents (System rows)
        system_count: Number of systems under a capability, if known
        metadata: Free-form bag (project name, architect, review status...)
    """

    id: str
    name: str
    level: str = ""
    parent_id: str | None = None
    system_code: str | None = None
    system_count: int | None = None
    metadata: dict[str, Any] | None = None

    @property
    def is_root_marker(self) -> bool:
        """True for the top-level row that marks a system-specific view."""
        return self.parent_id is None and self.level == ROOT_LEVEL


@dataclass(frozen=True)
class FlowNode:
    """A system in a flow or network diagram."""

    id: str
    name: str
    type: str = ""
    criticality: str = ""
    url: str | None = None


@dataclass(frozen=True)
class FlowLink:
    """An integration between two systems.

    ``value`` is the flow magnitude; missing or non-positive values are
    normalized to 1 when the record is parsed.
    """

    source: str
    target: str
    pattern: str = ""
    frequency: str = ""
    role: str = ""
    value: float = 1.0
    description: str | None = None

    @property
    def key(self) -> str:
        """De-duplication key used by the flow filters; parallel links share it."""
        return f"{self.source}-{self.target}"

    def touches(self, ids: frozenset[str] | set[str]) -> bool:
        """True if either endpoint is in ``ids``."""
        return self.source in ids or self.target in ids


def make_link_id(link: FlowLink, position: int) -> str:
    """Paint and hover id of the link at ``position`` in its model."""
    return f"{link.source}->{link.target}#{position}"


@dataclass(frozen=True)
class FlowMetadata:
    """Context for a flow payload: the reviewed system and its middleware."""

    code: str = ""
    review: str = ""
    integration_middleware: tuple[str, ...] = ()
    generated_date: str = ""


@dataclass(frozen=True)
class FlowData:
    """Nodes, links and metadata of one flow/network payload."""

    nodes: tuple[FlowNode, ...] = ()
    links: tuple[FlowLink, ...] = ()
    metadata: FlowMetadata = field(default_factory=FlowMetadata)

    @property
    def is_empty(self) -> bool:
        return not self.nodes
