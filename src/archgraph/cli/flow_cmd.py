"""Flow, network and filter commands over a flow export."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from archgraph.cli._data import fail, make_dispatcher, project_config, read_payload
from archgraph.cli._format import format_number, print_json, print_lines, print_table
from archgraph.config import ColumnMode, TieBreak
from archgraph.diagrams import FlowDiagram, NetworkDiagram
from archgraph.exceptions import DiagramDataError
from archgraph.flow.filters import ALL, Role, SystemFilter, filter_systems
from archgraph.force.session import ManualScheduler
from archgraph.model.graph_model import GraphModel


def _load_model(file: Path) -> GraphModel:
    try:
        return GraphModel.from_payload(read_payload(file))
    except DiagramDataError as e:
        fail(str(e))


def register_commands(app: typer.Typer) -> None:
    """Register `flow`, `network` and `filter` as top-level commands."""

    @app.command("flow")
    def flow_cmd(
        file: Annotated[Path, typer.Argument(help="Flow export (JSON object with nodes/links/metadata)")],
        pinned: Annotated[str | None, typer.Option("--pinned", help="Pinned system id (default: metadata code)")] = None,
        tie_break: Annotated[TieBreak | None, typer.Option("--tie-break", help="Residual ordering")] = None,
        columns: Annotated[ColumnMode | None, typer.Option("--columns", help="Column assignment")] = None,
        bordered: Annotated[bool, typer.Option("--bordered", help="Bordered system-diagram preset")] = False,
        as_json: Annotated[bool, typer.Option("--json", help="Output paint instructions as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
    ):
        """Show flow columns in priority order."""
        overrides = {}
        if tie_break is not None:
            overrides["tie_break"] = tie_break
        if columns is not None:
            overrides["column_mode"] = columns
        try:
            config = project_config().flow_config(bordered=bordered, **overrides)
        except ValueError as e:
            fail(str(e))

        diagram = FlowDiagram(_load_model(file), config=config, pinned_id=pinned, bordered=bordered)
        layout = diagram.layout()

        if as_json:
            data = diagram.instructions().to_dict()
            data["columns"] = layout.columns
            data["pinned_id"] = layout.pinned_id
            print_json("flow", data, output)
            return

        if layout.is_empty:
            print("\n  No systems to show.")
            return

        print(
            f"\nFlow: {len(layout.nodes)} systems | {len(layout.links)} links"
            f" | pinned {layout.pinned_id or '—'} | columns by {layout.column_mode.value}\n"
        )
        headers = ["Column", "Order", "System", "Type", "Criticality", "Value", "Y"]
        rows = []
        for column in layout.columns:
            for node_id in column:
                box = layout.nodes[node_id]
                rows.append(
                    [
                        str(box.column),
                        str(box.order),
                        box.id,
                        box.node.type or "—",
                        box.node.criticality or "—",
                        format_number(box.value),
                        format_number(box.y0),
                    ]
                )
        print_lines(print_table(headers, rows))

    @app.command("network")
    def network_cmd(
        file: Annotated[Path, typer.Argument(help="Flow export (JSON object with nodes/links/metadata)")],
        max_ticks: Annotated[int | None, typer.Option("--max-ticks", help="Stop after this many ticks")] = None,
        seed: Annotated[int, typer.Option("--seed", help="Seed for overlap jitter")] = 0,
        as_json: Annotated[bool, typer.Option("--json", help="Output paint instructions as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log diagram events")] = False,
    ):
        """Run the force layout offline and print positions."""
        try:
            config = project_config().force_config()
        except ValueError as e:
            fail(str(e))

        scheduler = ManualScheduler()
        with NetworkDiagram(
            _load_model(file), scheduler, config=config, dispatcher=make_dispatcher(verbose), seed=seed
        ) as diagram:
            diagram.start()
            while diagram.session.is_running:
                if max_ticks is not None and diagram.simulation.ticks >= max_ticks:
                    diagram.session.settle("manual")
                    break
                scheduler.run_until_idle(max_callbacks=1)
            instructions = diagram.instructions()
            ticks = diagram.simulation.ticks
            reason = diagram.session.settle_reason

        if as_json:
            data = instructions.to_dict()
            data["ticks"] = ticks
            data["settle_reason"] = reason
            print_json("network", data, output)
            return

        if instructions.is_empty:
            print("\n  No systems to show.")
            return

        print(f"\nNetwork: {len(instructions.nodes)} systems | settled after {ticks} ticks ({reason})\n")
        rows = [[node.id, format_number(node.x), format_number(node.y)] for node in instructions.nodes]
        print_lines(print_table(["System", "X", "Y"], rows))

    @app.command("filter")
    def filter_cmd(
        file: Annotated[Path, typer.Argument(help="Flow export (JSON object with nodes/links/metadata)")],
        system_type: Annotated[str, typer.Option("--type", help="Keep systems of this type")] = ALL,
        criticality: Annotated[str, typer.Option("--criticality", help="Keep systems of this criticality")] = ALL,
        role: Annotated[Role, typer.Option("--role", help="Producer (-P) or Consumer (-C) ids")] = Role.ALL,
        search: Annotated[str, typer.Option("--search", "-s", help="Keep links to ids containing this")] = "",
        as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
    ):
        """Apply the overall-systems filters and list what survives."""
        model = _load_model(file)
        filters = SystemFilter(search=search, system_type=system_type, criticality=criticality, role=role)
        result = filter_systems(model, filters)

        if as_json:
            data = {
                "nodes": [{"id": n.id, "name": n.name, "type": n.type, "criticality": n.criticality} for n in result.nodes],
                "links": [
                    {"source": link.source, "target": link.target, "pattern": link.pattern, "frequency": link.frequency}
                    for link in result.links
                ],
            }
            print_json("filter", data, output)
            return

        print(f"\nFiltered: {len(result)} of {len(model)} systems | {len(result.links)} of {len(model.links)} links\n")
        node_rows = [[n.id, n.name, n.type or "—", n.criticality or "—"] for n in result.nodes]
        print_lines(print_table(["System", "Name", "Type", "Criticality"], node_rows))
        if result.links:
            print()
            link_rows = [[link.source, link.target, link.pattern or "—", link.frequency or "—"] for link in result.links]
            print_lines(print_table(["Source", "Target", "Pattern", "Frequency"], link_rows))
