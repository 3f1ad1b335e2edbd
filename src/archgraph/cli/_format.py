"""Formatting utilities for CLI output.

Handles aligned tables, the indented tree view and JSON envelope wrapping.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from archgraph.tree.builder import CapabilityTree
    from archgraph.tree.search import SearchResult
    from archgraph.tree.visibility import VisibleTree

# JSON envelope version, bump on breaking changes to JSON structure
SCHEMA_VERSION = 1

MAX_LINES = 200

_MARKS = {"matched": "*", "on_path": "~"}


def json_envelope(command: str, data: Any) -> dict[str, Any]:
    """Wrap data in the standard JSON output envelope."""
    return {
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def print_json(command: str, data: Any, output: str | None = None) -> None:
    """Print JSON envelope to stdout or write to file."""
    envelope = json_envelope(command, data)
    text = json.dumps(envelope, indent=2, default=str)

    if output:
        with open(output, "w") as f:
            f.write(text)
        size_kb = len(text.encode()) / 1024
        print(f"Wrote {command} output to {output} ({size_kb:.1f}KB)")
    else:
        print(text)


def format_number(value: float) -> str:
    """Coordinates and flow values with at most one decimal."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def print_table(headers: list[str], rows: list[list[str]], indent: int = 2) -> list[str]:
    """Format a table with aligned columns.

    Returns list of lines (does not print).
    """
    if not rows:
        return []

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(cell))

    prefix = " " * indent
    lines = [
        prefix + "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)),
        prefix + "  ".join("─" * w for w in widths),
    ]
    for row in rows:
        cells = []
        for i, cell in enumerate(row[: len(widths)]):
            # Right-align numeric columns
            if headers[i] in ("X", "Y", "Value", "Column", "Order"):
                cells.append(cell.rjust(widths[i]))
            else:
                cells.append(cell.ljust(widths[i]))
        lines.append(prefix + "  ".join(cells))
    return lines


def tree_lines(tree: CapabilityTree, visible: VisibleTree, search: SearchResult | None = None) -> list[str]:
    """Indented outline of the visible tree.

    Collapsed parents end in ``[+]``; matches are marked ``*`` and path
    nodes ``~``.
    """
    lines = []
    for node_id in visible.order:
        depth = tree.depth(node_id)
        marker = ""
        if search is not None:
            marker = _MARKS.get(search.highlight(node_id).value, "")
        suffix = " [+]" if visible.has_hidden_children(node_id) else ""
        level = tree.level(node_id)
        lines.append(f"{'  ' * depth}{marker}{tree.name(node_id)} ({level}){suffix}")
    return lines


def print_lines(lines: list[str], max_lines: int = MAX_LINES) -> None:
    """Print lines with truncation warning if too many."""
    if len(lines) <= max_lines:
        for line in lines:
            print(line)
    else:
        for line in lines[:max_lines]:
            print(line)
        remaining = len(lines) - max_lines
        print(f"\n  # ... {remaining} more lines")
