"""Archgraph CLI: lay out architecture diagrams from JSON exports.

Entry point for the `archgraph` command. Requires ``pip install archgraph[cli]``.

Commands:
    tree        Show the visible capability tree (with optional search)
    flow        Show flow columns in priority order around a pinned system
    network     Run the force layout offline and print positions
    filter      Apply the overall-systems filters to a flow export
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install archgraph[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all subcommands."""
    _require_typer()

    import typer

    from archgraph.cli import flow_cmd, tree_cmd

    app = typer.Typer(
        name="archgraph",
        help="Architecture diagram layout and inspection CLI.",
        no_args_is_help=True,
    )
    tree_cmd.register_commands(app)
    flow_cmd.register_commands(app)

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
