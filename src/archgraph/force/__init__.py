"""Force-directed network layout and its tick-scheduling session."""

from archgraph.force.session import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    SessionState,
    SimulationSession,
    TimerHandle,
)
from archgraph.force.simulation import ForceSimulation, SimLink, SimNode

__all__ = [
    "AsyncioScheduler",
    "ForceSimulation",
    "ManualScheduler",
    "Scheduler",
    "SessionState",
    "SimLink",
    "SimNode",
    "SimulationSession",
    "TimerHandle",
]
