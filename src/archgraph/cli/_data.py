"""Shared helpers for commands: reading exports and project config."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer

from archgraph.cli._config import ArchgraphConfig, load_config
from archgraph.events.dispatcher import EventDispatcher


def read_payload(path: Path) -> Any:
    """Read a JSON export, exiting with a message when it cannot be used."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: Could not read '{path}': {e}")
        raise typer.Exit(1) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        print(f"Error: '{path}' is not valid JSON: {e}")
        raise typer.Exit(1) from e


def project_config() -> ArchgraphConfig:
    try:
        return load_config()
    except (OSError, ValueError) as e:
        print(f"Error: Could not read [tool.archgraph] from pyproject.toml: {e}")
        raise typer.Exit(1) from e


def make_dispatcher(verbose: bool) -> EventDispatcher:
    """Dispatcher that prints events to stderr when ``verbose``."""
    dispatcher = EventDispatcher()
    if verbose:
        from archgraph.events.rich_log import RichEventLog

        dispatcher.add(RichEventLog())
    return dispatcher


def fail(message: str) -> NoReturn:
    print(f"Error: {message}")
    raise typer.Exit(1)
