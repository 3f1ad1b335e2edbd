"""Capability tree command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from archgraph.cli._data import fail, make_dispatcher, project_config, read_payload
from archgraph.cli._format import print_json, print_lines, tree_lines
from archgraph.diagrams import CapabilityDiagram
from archgraph.exceptions import DiagramDataError


def register_commands(app: typer.Typer) -> None:
    """Register `tree` as a top-level command on the app."""

    @app.command("tree")
    def tree_cmd(
        file: Annotated[Path, typer.Argument(help="Capability hierarchy export (JSON list)")],
        search: Annotated[str | None, typer.Option("--search", "-s", help="Highlight nodes whose name contains this")] = None,
        expand_all: Annotated[bool, typer.Option("--expand-all", help="Expand every node")] = False,
        collapse_all: Annotated[bool, typer.Option("--collapse-all", help="Collapse everything below the root")] = False,
        depth: Annotated[int | None, typer.Option("--depth", help="Deepest level shown expanded by default")] = None,
        as_json: Annotated[bool, typer.Option("--json", help="Output paint instructions as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log diagram events")] = False,
    ):
        """Show the visible capability tree."""
        if expand_all and collapse_all:
            fail("--expand-all and --collapse-all are mutually exclusive")

        overrides = {} if depth is None else {"max_visible_depth": depth}
        try:
            config = project_config().tree_config(**overrides)
        except ValueError as e:
            fail(str(e))

        payload = read_payload(file)
        try:
            diagram = CapabilityDiagram(payload, config=config, dispatcher=make_dispatcher(verbose))
        except DiagramDataError as e:
            fail(str(e))

        if search:
            diagram.set_query(search)
        if expand_all:
            diagram.expand_all()
        elif collapse_all:
            diagram.collapse_all()

        result = diagram.search_result
        if as_json:
            data = diagram.instructions().to_dict()
            data["search"] = {
                "query": result.query,
                "matched_ids": list(result.matched_ids),
                "path_ids": list(result.path_ids),
            }
            data["dropped_ids"] = list(diagram.tree.dropped_ids)
            print_json("tree", data, output)
            return

        if diagram.is_empty:
            print("\n  No capabilities to show.")
            return

        visible = diagram.controller.visible_tree()
        print(f"\nCapabilities: {len(diagram.tree)} nodes | {len(visible)} visible\n")
        if result.is_active:
            print(f"  Search {result.query!r}: {len(result.matched_ids)} match(es)\n")
        print_lines(tree_lines(diagram.tree, visible, result))
        if diagram.tree.dropped_ids:
            print(f"\n  Omitted {len(diagram.tree.dropped_ids)} record(s) with unresolvable parents")
