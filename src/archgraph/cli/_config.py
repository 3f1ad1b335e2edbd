"""Project-level configuration from pyproject.toml.

Reads the [tool.archgraph] section. Each subsection holds overrides for one
engine's settings::

    [tool.archgraph.tree]
    max_visible_depth = 2

    [tool.archgraph.flow]
    tie_break = "stable"

    [tool.archgraph.force]
    settle_after = 5.0

    [tool.archgraph.gestures]
    time_threshold_ms = 200
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from archgraph.config import FlowLayoutConfig, ForceConfig, TreeLayoutConfig
from archgraph.gestures import ClickPolicy


@dataclass(frozen=True)
class ArchgraphConfig:
    """Configuration from [tool.archgraph] in pyproject.toml."""

    tree: dict[str, Any] = field(default_factory=dict)
    flow: dict[str, Any] = field(default_factory=dict)
    force: dict[str, Any] = field(default_factory=dict)
    gestures: dict[str, Any] = field(default_factory=dict)

    def tree_config(self, **overrides: Any) -> TreeLayoutConfig:
        return TreeLayoutConfig.from_mapping({**self.tree, **overrides})

    def flow_config(self, *, bordered: bool = False, **overrides: Any) -> FlowLayoutConfig:
        values = {**self.flow, **overrides}
        config = FlowLayoutConfig.from_mapping(values)
        return FlowLayoutConfig.bordered(**values) if bordered else config

    def force_config(self, **overrides: Any) -> ForceConfig:
        return ForceConfig.from_mapping({**self.force, **overrides})

    def click_policy(self) -> ClickPolicy:
        return ClickPolicy.from_mapping(dict(self.gestures))


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> ArchgraphConfig:
    """Load [tool.archgraph] from the nearest pyproject.toml.

    Returns default config if no pyproject.toml or no [tool.archgraph] section.
    """
    path = find_pyproject(start)
    if path is None:
        return ArchgraphConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("archgraph", {})
    if not section:
        return ArchgraphConfig()

    return ArchgraphConfig(
        tree=dict(section.get("tree", {})),
        flow=dict(section.get("flow", {})),
        force=dict(section.get("force", {})),
        gestures=dict(section.get("gestures", {})),
    )
