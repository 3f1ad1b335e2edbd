"""Print diagram events to a rich console."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from archgraph.events.processor import TypedEventProcessor

if TYPE_CHECKING:
    from archgraph.events.types import (
        BaseEvent,
        NodeActivateEvent,
        NodeToggleEvent,
        SearchMatchEvent,
        SimulationSettledEvent,
        SystemClickEvent,
    )


def _require_rich() -> None:
    """Raise a clear error if rich is not installed."""
    try:
        import rich  # noqa: F401
    except ImportError:
        raise ImportError(
            "The 'rich' package is required for RichEventLog. Install it with: pip install 'archgraph[cli]' or pip install rich"
        ) from None


class RichEventLog(TypedEventProcessor):
    """One styled line per event.

    Args:
        console: Console to print to (default: a new stderr console)
        max_ids: Longest list of ids printed in full
    """

    def __init__(self, console: Any = None, *, max_ids: int = 8) -> None:
        _require_rich()
        from rich.console import Console

        self.console = console or Console(stderr=True)
        self.max_ids = max_ids

    def _line(self, event: BaseEvent, label: str, style: str, text: str) -> None:
        stamp = datetime.fromtimestamp(event.timestamp).strftime("%H:%M:%S")
        where = f"[dim]{event.diagram}[/dim] " if event.diagram else ""
        self.console.print(f"[dim]{stamp}[/dim] {where}[{style}]{label}[/{style}] {text}", highlight=False)

    def _ids(self, ids: tuple[str, ...]) -> str:
        if len(ids) <= self.max_ids:
            return ", ".join(ids)
        return ", ".join(ids[: self.max_ids]) + f" … (+{len(ids) - self.max_ids})"

    def on_search_match(self, event: SearchMatchEvent) -> None:
        if not event.query:
            self._line(event, "search", "yellow", "cleared")
            return
        self._line(event, "search", "yellow", f"{event.query!r}: {len(event.matched_ids)} match(es) {self._ids(event.matched_ids)}")

    def on_node_activate(self, event: NodeActivateEvent) -> None:
        self._line(event, "open", "cyan", f"{event.node_id} -> {event.target_id}")

    def on_system_click(self, event: SystemClickEvent) -> None:
        self._line(event, "system", "red", f"{event.node_id} ({event.system_code})")

    def on_node_toggle(self, event: NodeToggleEvent) -> None:
        self._line(event, "toggle", "blue", f"{event.node_id} {'expanded' if event.expanded else 'collapsed'}")

    def on_simulation_settled(self, event: SimulationSettledEvent) -> None:
        self._line(event, "settled", "green", f"after {event.ticks} ticks (alpha={event.alpha:.4f}, {event.reason})")
