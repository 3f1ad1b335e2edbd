"""Normalize raw payloads (JSON-like dicts) into typed records.

Both the camelCase keys used by the backend API and their snake_case
equivalents are accepted. Records that cannot be used (no id) are skipped
and logged; a payload of the wrong top-level shape raises DiagramDataError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from archgraph.exceptions import DiagramDataError
from archgraph.model.types import (
    FlowData,
    FlowLink,
    FlowMetadata,
    FlowNode,
    HierarchyRecord,
)

logger = logging.getLogger(__name__)


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key among ``keys``."""
    for key in keys:
        if key in raw:
            return raw[key]
    return default


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _as_flow_value(value: Any) -> float:
    """Flow magnitude: missing, non-numeric or non-positive values become 1."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1.0
    return number if number > 0 else 1.0


def _as_count(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _ensure_records(payload: Any, what: str) -> list[Mapping[str, Any]]:
    if payload is None:
        return []
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Iterable):
        raise DiagramDataError(f"a list of {what}", payload)
    records = []
    for raw in payload:
        if not isinstance(raw, Mapping):
            logger.debug("Skipping non-mapping %s record: %r", what, raw)
            continue
        records.append(raw)
    return records


def parse_hierarchy(payload: Any) -> list[HierarchyRecord]:
    """Parse the flat capability list.

    Accepts either the list itself or a mapping with a ``capabilities`` key.
    """
    if isinstance(payload, Mapping):
        payload = payload.get("capabilities", [])

    records: list[HierarchyRecord] = []
    for raw in _ensure_records(payload, "capability records"):
        node_id = raw.get("id")
        if node_id is None or node_id == "":
            logger.debug("Skipping capability record without id: %r", raw)
            continue
        parent_id = _pick(raw, "parentId", "parent_id")
        metadata = raw.get("metadata")
        records.append(
            HierarchyRecord(
                id=str(node_id),
                name=_as_str(raw.get("name", node_id)),
                level=_as_str(raw.get("level")),
                parent_id=None if parent_id is None else str(parent_id),
                system_code=_pick(raw, "systemCode", "system_code"),
                system_count=_as_count(_pick(raw, "systemCount", "system_count")),
                metadata=dict(metadata) if isinstance(metadata, Mapping) else None,
            )
        )
    return records


def parse_flow_node(raw: Mapping[str, Any]) -> FlowNode | None:
    node_id = raw.get("id")
    if node_id is None or node_id == "":
        logger.debug("Skipping flow node without id: %r", raw)
        return None
    return FlowNode(
        id=str(node_id),
        name=_as_str(raw.get("name", node_id)),
        type=_as_str(raw.get("type")),
        criticality=_as_str(raw.get("criticality")),
        url=raw.get("url"),
    )


def _endpoint(value: Any) -> str | None:
    # Links may already reference node objects ({"id": ...}) after a round trip.
    if isinstance(value, Mapping):
        value = value.get("id")
    return None if value is None else str(value)


def parse_flow_link(raw: Mapping[str, Any]) -> FlowLink | None:
    source = _endpoint(raw.get("source"))
    target = _endpoint(raw.get("target"))
    if source is None or target is None:
        logger.debug("Skipping flow link without endpoints: %r", raw)
        return None
    return FlowLink(
        source=source,
        target=target,
        pattern=_as_str(raw.get("pattern")),
        frequency=_as_str(raw.get("frequency")),
        role=_as_str(raw.get("role")),
        value=_as_flow_value(raw.get("value")),
        description=raw.get("description"),
    )


def parse_metadata(raw: Any) -> FlowMetadata:
    if not isinstance(raw, Mapping):
        return FlowMetadata()
    middleware = _pick(raw, "integrationMiddleware", "integration_middleware", default=()) or ()
    if isinstance(middleware, str):
        middleware = [middleware]
    return FlowMetadata(
        code=_as_str(raw.get("code")),
        review=_as_str(raw.get("review")),
        integration_middleware=tuple(str(m) for m in middleware),
        generated_date=_as_str(_pick(raw, "generatedDate", "generated_date")),
    )


def parse_flow(payload: Any) -> FlowData:
    """Parse a ``{nodes, links, metadata}`` flow payload."""
    if payload is None:
        return FlowData()
    if not isinstance(payload, Mapping):
        raise DiagramDataError("a mapping with 'nodes' and 'links'", payload)

    nodes = [
        node
        for raw in _ensure_records(payload.get("nodes"), "flow nodes")
        if (node := parse_flow_node(raw)) is not None
    ]
    links = [
        link
        for raw in _ensure_records(payload.get("links"), "flow links")
        if (link := parse_flow_link(raw)) is not None
    ]
    return FlowData(
        nodes=tuple(nodes),
        links=tuple(links),
        metadata=parse_metadata(payload.get("metadata")),
    )
