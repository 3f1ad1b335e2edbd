"""Narrow a flow model down to the systems a reviewer is looking at.

Two filters exist, one per diagram family:

* ``SystemFilter`` for the overall-systems network. Focus nodes are picked by
  type, criticality and role; links are kept around them, routing through
  integration middleware back to the main system.
* ``PathFilter`` for the path-between-systems flow. Nodes and links are
  filtered independently and nodes are re-derived from surviving links.

``"All"`` in any categorical field means "no constraint".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from archgraph.model.graph_model import GraphModel
from archgraph.model.types import FlowLink, FlowNode

ALL = "All"


class Role(str, Enum):
    """Integration role encoded as an id suffix (``SYS-P`` / ``SYS-C``)."""

    ALL = "All"
    PRODUCER = "Producer"
    CONSUMER = "Consumer"

    @property
    def suffix(self) -> str | None:
        return {Role.PRODUCER: "-P", Role.CONSUMER: "-C"}.get(self)


ROLE_SUFFIXES = ("-P", "-C")


def strip_role_suffix(node_id: str) -> str:
    """``SYS-P`` -> ``SYS``; ids without a role suffix are returned as is."""
    if node_id.endswith(ROLE_SUFFIXES):
        return node_id[:-2]
    return node_id


def navigation_target(node_id: str) -> str:
    """Id of the diagram to open when a flow node is clicked."""
    return strip_role_suffix(node_id)


def filter_options(values: Iterable[str]) -> list[str]:
    """``All`` followed by distinct non-empty values in first-appearance order."""
    return [ALL, *dict.fromkeys(v for v in values if v)]


def _matches(value: str, wanted: str) -> bool:
    return wanted == ALL or value == wanted


@dataclass(frozen=True)
class SystemFilter:
    """Criteria for the overall-systems network."""

    search: str = ""
    system_type: str = ALL
    criticality: str = ALL
    role: Role = Role.ALL

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))

    @property
    def term(self) -> str:
        return self.search.strip().lower()

    @property
    def is_default(self) -> bool:
        return self == SystemFilter()

    def is_focus(self, node: FlowNode) -> bool:
        suffix = self.role.suffix
        return (
            _matches(node.type, self.system_type)
            and _matches(node.criticality, self.criticality)
            and (suffix is None or node.id.endswith(suffix))
        )


def filter_systems(model: GraphModel, filters: SystemFilter | None = None) -> GraphModel:
    """Apply a SystemFilter; the result shares the model's metadata.

    With a search term, a link survives when one end is a focus node and
    the other end's id contains the term. Without one, links between focus
    nodes survive, as do focus <-> middleware links together with the
    matching middleware <-> main system link; isolated focus nodes are kept.
    Links are de-duplicated by ``source-target``.
    """
    filters = filters or SystemFilter()
    if filters.is_default:
        return model

    main_id = model.metadata.code
    middleware = frozenset(model.metadata.integration_middleware)
    focus = {node.id for node in model.nodes if filters.is_focus(node)}
    term = filters.term
    links = model.links

    def first_link(source: str, target: str) -> FlowLink | None:
        return next((link for link in links if link.source == source and link.target == target), None)

    kept: dict[str, FlowLink] = {}
    for link in links:
        if term:
            if (link.source in focus and term in link.target.lower()) or (
                link.target in focus and term in link.source.lower()
            ):
                kept[link.key] = link
            continue

        if link.source in focus and link.target in middleware:
            kept[link.key] = link
            onward = first_link(link.target, main_id)
            if onward is not None:
                kept[onward.key] = onward
        elif link.target in focus and link.source in middleware:
            kept[link.key] = link
            inbound = first_link(main_id, link.source)
            if inbound is not None:
                kept[inbound.key] = inbound
        elif link.source in focus and link.target in focus:
            kept[link.key] = link

    node_ids = {end for link in kept.values() for end in (link.source, link.target)}
    if not term:
        node_ids |= focus
    return model.subset(node_ids, list(kept.values()))


def system_filter_options(model: GraphModel) -> dict[str, list[str]]:
    return {
        "system_type": filter_options(node.type for node in model.nodes),
        "criticality": filter_options(node.criticality for node in model.nodes),
        "role": [role.value for role in Role],
    }


@dataclass(frozen=True)
class PathFilter:
    """Criteria for the path-between-systems flow."""

    search: str = ""
    system_type: str = ALL
    connection_type: str = ALL
    criticality: str = ALL
    frequency: str = ALL
    role: str = ALL

    @property
    def term(self) -> str:
        return self.search.strip().lower()

    def is_focus(self, node: FlowNode) -> bool:
        term = self.term
        search_match = not term or term in node.name.lower() or term in node.id.lower()
        return search_match and _matches(node.type, self.system_type) and _matches(node.criticality, self.criticality)

    def keeps(self, link: FlowLink) -> bool:
        return (
            _matches(link.pattern, self.connection_type)
            and _matches(link.frequency, self.frequency)
            and (self.role == ALL or link.role.lower() == self.role.lower())
        )


def filter_path(model: GraphModel, filters: PathFilter | None = None) -> GraphModel:
    """Apply a PathFilter: only links between focus nodes survive."""
    filters = filters or PathFilter()
    focus = {node.id for node in model.nodes if filters.is_focus(node)}
    links = [
        link for link in model.links if filters.keeps(link) and link.source in focus and link.target in focus
    ]
    node_ids = {end for link in links for end in (link.source, link.target)}
    return model.subset(node_ids, links)


def path_filter_options(model: GraphModel) -> dict[str, list[str]]:
    links = model.links
    return {
        "system_type": filter_options(node.type for node in model.nodes),
        "criticality": filter_options(node.criticality for node in model.nodes),
        "connection_type": filter_options(link.pattern for link in links),
        "frequency": filter_options(link.frequency for link in links),
        "role": filter_options(link.role for link in links),
    }
