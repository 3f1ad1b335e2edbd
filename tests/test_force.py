"""Tests for the force simulation and its tick-scheduling session."""

from __future__ import annotations

import asyncio
import math

import pytest

from archgraph.config import ForceConfig
from archgraph.events import EventCollector, EventDispatcher, SimulationSettledEvent
from archgraph.exceptions import SimulationClosedError
from archgraph.force import (
    AsyncioScheduler,
    ForceSimulation,
    ManualScheduler,
    SessionState,
    SimulationSession,
)
from archgraph.model import GraphModel


def _pair_model():
    return GraphModel.from_payload(
        {"nodes": [{"id": "a", "name": "a"}, {"id": "b", "name": "b"}], "links": [{"source": "a", "target": "b"}]}
    )


# ============================================================
# Simulation
# ============================================================


class TestForceSimulation:
    def test_initial_spiral(self, flow_model):
        sim = ForceSimulation(flow_model)
        first = sim.nodes["S1"]

        assert first.x == pytest.approx(10 * math.sqrt(0.5))
        assert first.y == pytest.approx(0.0)
        assert len({node.position for node in sim.nodes.values()}) == 4

    def test_deterministic(self, flow_model):
        first = ForceSimulation(flow_model, seed=3)
        second = ForceSimulation(flow_model, seed=3)
        first.tick(50)
        second.tick(50)
        assert first.positions() == second.positions()

    def test_link_strength_and_bias(self, flow_model):
        sim = ForceSimulation(flow_model)
        by_key = {sim_link.link.key: sim_link for sim_link in sim.links}

        # S1 has one link, M-P has two.
        assert by_key["S1-M-P"].strength == 1.0
        assert by_key["S1-M-P"].bias == pytest.approx(1 / 3)
        assert by_key["M-P-A"].strength == 0.5
        assert by_key["M-P-A"].bias == pytest.approx(0.5)
        assert [sim_link.id for sim_link in sim.links] == ["S1->M-P#0", "M-P->A#1", "S2->A#2"]

    def test_self_loop_ignored(self):
        model = GraphModel.from_payload(
            {
                "nodes": [{"id": "a", "name": "a"}, {"id": "b", "name": "b"}],
                "links": [{"source": "a", "target": "a"}, {"source": "a", "target": "b"}],
            }
        )
        sim = ForceSimulation(model)
        assert [sim_link.link.key for sim_link in sim.links] == ["a-b"]

    def test_run_cools(self, flow_model):
        sim = ForceSimulation(flow_model)
        ran = sim.run()

        assert 299 <= ran <= 301
        assert sim.is_cooled
        assert sim.ticks == ran

    def test_run_max_ticks(self, flow_model):
        sim = ForceSimulation(flow_model)
        assert sim.run(max_ticks=10) == 10
        assert not sim.is_cooled

    def test_reheat_prevents_cooling(self, flow_model):
        sim = ForceSimulation(flow_model)
        sim.reheat(alpha_target=0.3)
        sim.tick(400)
        assert not sim.is_cooled
        assert sim.alpha == pytest.approx(0.3, abs=1e-3)

    def test_pinned_node_holds_position(self, flow_model):
        sim = ForceSimulation(flow_model)
        sim.pin("A", 10.0, 20.0)
        sim.tick(5)

        assert sim.nodes["A"].position == (10.0, 20.0)
        assert sim.nodes["A"].is_pinned

        sim.unpin("A")
        sim.tick()
        assert not sim.nodes["A"].is_pinned

    def test_pin_defaults_to_current_position(self, flow_model):
        sim = ForceSimulation(flow_model)
        x, y = sim.nodes["S2"].position
        node = sim.pin("S2")
        assert (node.fx, node.fy) == (x, y)

    def test_layout_centered(self):
        sim = ForceSimulation(_pair_model())
        sim.run()
        xs = [x for x, _ in sim.positions().values()]
        ys = [y for _, y in sim.positions().values()]

        assert sum(xs) / 2 == pytest.approx(480.0, abs=1e-6)
        assert sum(ys) / 2 == pytest.approx(300.0, abs=1e-6)

    def test_nodes_repel(self):
        sim = ForceSimulation(_pair_model())
        sim.run()
        (ax, ay), (bx, by) = sim.positions().values()
        assert math.hypot(ax - bx, ay - by) > 100

    def test_empty_model(self):
        sim = ForceSimulation(GraphModel())
        sim.tick()
        assert sim.positions() == {}
        assert len(sim) == 0


# ============================================================
# Session
# ============================================================


@pytest.fixture
def scheduler():
    return ManualScheduler()


def _session(model, scheduler, collector=None, **config):
    dispatcher = EventDispatcher([collector], strict=True) if collector else None
    return SimulationSession(ForceSimulation(model, ForceConfig(**config)), scheduler, dispatcher=dispatcher)


class TestSimulationSession:
    def test_start_schedules_tick_and_budget(self, flow_model, scheduler):
        session = _session(flow_model, scheduler)
        session.start()
        session.start()

        assert session.state is SessionState.RUNNING
        assert scheduler.pending == 2

    def test_nothing_runs_before_start(self, flow_model, scheduler):
        session = _session(flow_model, scheduler)
        assert scheduler.run_until_idle() == 0
        assert session.simulation.ticks == 0
        assert session.state is SessionState.IDLE

    def test_budget_settles(self, flow_model, scheduler, collector):
        session = _session(flow_model, scheduler, collector)
        session.start()
        scheduler.run_until_idle()

        assert session.state is SessionState.SETTLED
        assert session.settle_reason == "budget"
        assert 175 <= session.simulation.ticks <= 181
        assert scheduler.pending == 0
        [event] = collector.of_type(SimulationSettledEvent)
        assert event.reason == "budget"
        assert event.ticks == session.simulation.ticks
        assert event.diagram == "network"

    def test_cooling_settles(self, flow_model, scheduler, collector):
        session = _session(flow_model, scheduler, collector, settle_after=100.0)
        session.start()
        scheduler.run_until_idle()

        assert session.settle_reason == "cooled"
        assert 299 <= session.simulation.ticks <= 301
        assert scheduler.pending == 0
        assert len(collector.events) == 1

    def test_on_tick_hook(self, flow_model, scheduler):
        seen = []
        session = SimulationSession(ForceSimulation(flow_model), scheduler, on_tick=lambda sim: seen.append(sim.ticks))
        session.start()
        scheduler.advance(0.1)

        assert seen == list(range(1, len(seen) + 1))
        assert 5 <= len(seen) <= 6

    def test_close_cancels_pending(self, flow_model, scheduler, collector):
        session = _session(flow_model, scheduler, collector)
        session.start()
        scheduler.advance(0.5)
        ticks = session.simulation.ticks

        session.close()
        session.close()

        assert session.is_closed
        assert scheduler.pending == 0
        scheduler.advance(10)
        assert session.simulation.ticks == ticks
        assert collector.events == []

    @pytest.mark.parametrize("operation", ["start", "drag_start", "drag_to", "drag_end"])
    def test_closed_session_rejects(self, flow_model, scheduler, operation):
        session = _session(flow_model, scheduler)
        session.close()
        args = {"start": (), "drag_start": ("A",), "drag_to": ("A", 1.0, 2.0), "drag_end": ("A",)}[operation]

        with pytest.raises(SimulationClosedError) as excinfo:
            getattr(session, operation)(*args)
        assert excinfo.value.operation == operation

    def test_drag_reheats_and_releases(self, flow_model, scheduler):
        session = _session(flow_model, scheduler)
        session.start()
        scheduler.advance(0.5)

        session.drag_start("A")
        assert session.simulation.alpha_target == 0.3
        assert session.simulation.nodes["A"].is_pinned

        session.drag_to("A", 5.0, 6.0)
        scheduler.advance(0.1)
        assert session.simulation.nodes["A"].position == (5.0, 6.0)

        session.drag_end("A")
        assert session.simulation.alpha_target == 0.0
        assert not session.simulation.nodes["A"].is_pinned

    def test_keep_pinned(self, flow_model, scheduler):
        session = _session(flow_model, scheduler, keep_pinned=True)
        session.start()
        session.drag_start("A")
        session.drag_end("A")
        assert session.simulation.nodes["A"].is_pinned

        session.drag_start("S1")
        session.drag_end("S1", keep_pinned=False)
        assert not session.simulation.nodes["S1"].is_pinned

    def test_drag_restarts_settled_session(self, flow_model, scheduler):
        session = _session(flow_model, scheduler)
        session.start()
        scheduler.run_until_idle()
        assert session.state is SessionState.SETTLED

        session.drag_start("S2")
        assert session.state is SessionState.RUNNING
        assert session.settle_reason is None
        assert scheduler.pending == 2

    def test_budget_waits_for_drag(self, flow_model, scheduler):
        session = _session(flow_model, scheduler)
        session.start()
        session.drag_start("A")
        scheduler.advance(3.5)
        assert session.is_running

        session.drag_end("A")
        scheduler.advance(3.0)
        assert session.state is SessionState.SETTLED
        assert session.settle_reason == "budget"

    def test_context_manager_closes(self, flow_model, scheduler):
        with _session(flow_model, scheduler) as session:
            session.start()
        assert session.is_closed
        assert scheduler.pending == 0

    def test_asyncio_scheduler(self, flow_model):
        async def run() -> SimulationSession:
            sim = ForceSimulation(flow_model, ForceConfig(settle_after=0.05, tick_interval=0.001))
            with SimulationSession(sim, AsyncioScheduler()) as session:
                session.start()
                await asyncio.sleep(0.5)
                state = session.state
            return state

        assert asyncio.run(run()) is SessionState.SETTLED


class TestManualScheduler:
    def test_runs_in_due_order(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(2.0, lambda: calls.append("late"))
        scheduler.call_later(1.0, lambda: calls.append("early"))
        scheduler.call_later(1.0, lambda: calls.append("tie"))

        assert scheduler.advance(1.5) == 2
        assert calls == ["early", "tie"]
        assert scheduler.now == 1.5
        assert scheduler.run_until_idle() == 1
        assert scheduler.now == 2.0

    def test_cancelled_callbacks_skipped(self):
        scheduler = ManualScheduler()
        calls = []
        handle = scheduler.call_later(1.0, lambda: calls.append("x"))
        handle.cancel()

        assert scheduler.pending == 0
        assert scheduler.run_until_idle() == 0
        assert calls == []

    def test_run_until_idle_limit(self):
        scheduler = ManualScheduler()

        def again():
            scheduler.call_later(1.0, again)

        scheduler.call_later(1.0, again)
        assert scheduler.run_until_idle(max_callbacks=5) == 5
        assert scheduler.pending == 1
