"""Tick scheduling and lifecycle for a force simulation.

A session never sleeps or spawns threads. It asks a host ``Scheduler`` to
call it back later, once per tick plus once for the wall-clock budget, and
cancels whatever is still pending when it settles or is closed.

Lifecycle::

    IDLE --start()--> RUNNING --cooled / budget spent--> SETTLED
      |                  ^                                  |
      |                  +------------ drag_start() --------+
      +------------------ close() from any state --------> STOPPED
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from archgraph.config import ForceConfig
from archgraph.events.dispatcher import EventDispatcher
from archgraph.events.types import SimulationSettledEvent
from archgraph.exceptions import SimulationClosedError
from archgraph.force.simulation import ForceSimulation

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """A pending callback that can be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Host facility that runs a callback after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


# =============================================================================
# Schedulers
# =============================================================================


class _ManualHandle:
    __slots__ = ("callback", "cancelled")

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock for tests and offline layout.

    Nothing runs until ``advance`` or ``run_until_idle`` is called. Callbacks
    run in due-time order; ties run in scheduling order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(callback)
        heapq.heappush(self._queue, (self.now + max(0.0, delay), next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of callbacks scheduled and not cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def _run_next(self, until: float | None) -> bool:
        while self._queue:
            due, _, handle = self._queue[0]
            if until is not None and due > until:
                return False
            heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, due)
            handle.callback()
            return True
        return False

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running everything that falls due."""
        target = self.now + seconds
        ran = 0
        while self._run_next(target):
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, max_callbacks: int | None = None) -> int:
        """Run callbacks until none are pending (or the limit is hit)."""
        ran = 0
        while (max_callbacks is None or ran < max_callbacks) and self._run_next(None):
            ran += 1
        return ran


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop.

    Args:
        loop: Loop to use; defaults to the running loop at call time
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


# =============================================================================
# Session
# =============================================================================


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"
    STOPPED = "stopped"


class SimulationSession:
    """Owns the scheduled ticks of one mounted network diagram.

    Use it as a context manager so teardown always cancels pending ticks::

        with SimulationSession(simulation, scheduler) as session:
            session.start()
            ...

    Args:
        simulation: The simulation to drive
        scheduler: Host timer facility
        dispatcher: Receives SimulationSettledEvent
        on_tick: Called after every tick with the simulation (repaint hook)
        diagram: Name stamped on emitted events
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        scheduler: Scheduler,
        *,
        dispatcher: EventDispatcher | None = None,
        on_tick: Callable[[ForceSimulation], Any] | None = None,
        diagram: str = "network",
    ) -> None:
        self.simulation = simulation
        self.scheduler = scheduler
        self.dispatcher = dispatcher or EventDispatcher()
        self.on_tick = on_tick
        self.diagram = diagram
        self.state = SessionState.IDLE
        self.settle_reason: str | None = None
        self._tick_handle: TimerHandle | None = None
        self._budget_handle: TimerHandle | None = None
        self._dragging: set[str] = set()

    def __repr__(self) -> str:
        return f"SimulationSession(state={self.state.value}, ticks={self.simulation.ticks})"

    def __enter__(self) -> SimulationSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def config(self) -> ForceConfig:
        return self.simulation.config

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.STOPPED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start (or restart) ticking with a fresh wall-clock budget."""
        self._ensure_open("start")
        if self.state is SessionState.RUNNING:
            return
        self.state = SessionState.RUNNING
        self.settle_reason = None
        self._budget_handle = self.scheduler.call_later(self.config.settle_after, self._on_budget)
        self._schedule_tick()

    def settle(self, reason: str = "manual") -> None:
        """Stop ticking but keep the session usable (a drag restarts it)."""
        if self.state is not SessionState.RUNNING:
            return
        self._cancel_pending()
        self.state = SessionState.SETTLED
        self.settle_reason = reason
        logger.debug("Simulation settled after %d ticks (%s)", self.simulation.ticks, reason)
        self.dispatcher.emit(
            SimulationSettledEvent(
                diagram=self.diagram,
                ticks=self.simulation.ticks,
                alpha=self.simulation.alpha,
                reason=reason,
            )
        )

    def close(self) -> None:
        """Cancel every pending callback. Safe to call more than once."""
        if self.state is SessionState.STOPPED:
            return
        self._cancel_pending()
        self._dragging.clear()
        self.state = SessionState.STOPPED

    def _ensure_open(self, operation: str) -> None:
        if self.state is SessionState.STOPPED:
            raise SimulationClosedError(operation)

    def _cancel_pending(self) -> None:
        for handle in (self._tick_handle, self._budget_handle):
            if handle is not None:
                handle.cancel()
        self._tick_handle = None
        self._budget_handle = None

    def _schedule_tick(self) -> None:
        self._tick_handle = self.scheduler.call_later(self.config.tick_interval, self._on_tick)

    def _on_tick(self) -> None:
        self._tick_handle = None
        if self.state is not SessionState.RUNNING:
            return
        self.simulation.tick()
        if self.on_tick is not None:
            self.on_tick(self.simulation)
        if self.simulation.is_cooled:
            self.settle("cooled")
        else:
            self._schedule_tick()

    def _on_budget(self) -> None:
        self._budget_handle = None
        if self._dragging:
            # Never freeze under the pointer; re-arm until the drag ends.
            self._budget_handle = self.scheduler.call_later(self.config.settle_after, self._on_budget)
            return
        self.settle("budget")

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------

    def drag_start(self, node_id: str) -> None:
        """Pin a node where it is and reheat the simulation."""
        self._ensure_open("drag_start")
        self.simulation.pin(node_id)
        if not self._dragging:
            self.simulation.reheat(alpha_target=self.config.drag_alpha_target)
        self._dragging.add(node_id)
        if self.state is not SessionState.RUNNING:
            self.start()

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        self._ensure_open("drag_to")
        self.simulation.pin(node_id, x, y)

    def drag_end(self, node_id: str, *, keep_pinned: bool | None = None) -> None:
        """Stop reheating; release the node unless it should stay pinned."""
        self._ensure_open("drag_end")
        self._dragging.discard(node_id)
        if not self._dragging:
            self.simulation.reheat(alpha_target=0.0)
        if not (self.config.keep_pinned if keep_pinned is None else keep_pinned):
            self.simulation.unpin(node_id)
