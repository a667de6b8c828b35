"""
Tests for the graph runner.

Most tests run against a small fake node catalog with mock executors so
that ordering, failures, cancellation and timeouts can be controlled
precisely. The broadcast scenario at the end runs the real catalog.
"""

import asyncio
import json
import pytest
from typing import Any

import sys
from pathlib import Path

backend_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_root))

from moodflow.core.exceptions import RunnerBusyError
from moodflow.models.execution import CYCLE_ERROR_KEY, ExecutionContext, RunContext
from moodflow.models.graph import GraphEdge, GraphNode, WorkflowGraph
from moodflow.models.node_registry import NodeSpecTable
from moodflow.models.port_types import NodePortSpec, PortDefinition
from moodflow.models.settings_schema import (
    NodeSettingsSchema,
    SettingsField,
    SettingsSchemaTable,
    SettingsSection,
)
from moodflow.services.executor_registry import ExecutorRegistry
from moodflow.services.executors import build_default_registry
from moodflow.services.graph_runner import CYCLE_ERROR, GraphRunner, topological_sort


# ---------------------------------------------------------------------------
# Fake catalog and mock executors
# ---------------------------------------------------------------------------

def _in(port_id: str, label: str, **kwargs) -> PortDefinition:
    return PortDefinition(id=port_id, label=label, type="string", direction="input", **kwargs)


def _out(port_id: str) -> PortDefinition:
    return PortDefinition(id=port_id, label=port_id.title(), type="string", direction="output")


TEST_SPECS = NodeSpecTable({
    "source": NodePortSpec(inputs=[], outputs=[_out("out")]),
    "sink": NodePortSpec(inputs=[_in("in", "In", required=True)], outputs=[_out("out")]),
    "pair": NodePortSpec(
        inputs=[_in("left", "Left", required=True), _in("right", "Right", required=True)],
        outputs=[_out("out")],
    ),
    "optional": NodePortSpec(inputs=[_in("in", "In", default_value="fallback")], outputs=[_out("out")]),
    "boom": NodePortSpec(inputs=[], outputs=[_out("out")]),
    "blank_boom": NodePortSpec(inputs=[], outputs=[_out("out")]),
    "slow": NodePortSpec(inputs=[], outputs=[_out("out")]),
    "capture": NodePortSpec(inputs=[], outputs=[_out("settings")]),
    "note": NodePortSpec(inputs=[], outputs=[], executable=False),
})

# Node ids in the order their executors were called
calls: list[str] = []


def build_registry() -> ExecutorRegistry:
    registry = ExecutorRegistry()

    @registry.executor("source")
    async def _exec_source(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        return {"out": context.node_settings.get("value", "hello")}

    @registry.executor("sink")
    async def _exec_sink(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        return {"out": f"got:{inputs['in']}"}

    @registry.executor("pair")
    async def _exec_pair(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        return {"out": f"{inputs['left']}+{inputs['right']}"}

    @registry.executor("optional")
    async def _exec_optional(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        return {"out": inputs.get("in")}

    @registry.executor("boom")
    async def _exec_boom(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        raise ValueError("kaboom")

    @registry.executor("blank_boom")
    async def _exec_blank_boom(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        raise RuntimeError()

    @registry.executor("slow")
    async def _exec_slow(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        await asyncio.sleep(context.node_settings.get("delay", 5))
        return {"out": "late"}

    @registry.executor("capture")
    async def _exec_capture(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
        calls.append(context.node_id)
        return {"settings": dict(context.node_settings)}

    return registry


@pytest.fixture(autouse=True)
def reset_calls():
    calls.clear()
    yield
    calls.clear()


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def make_runner(**kwargs) -> GraphRunner:
    return GraphRunner(TEST_SPECS, build_registry(), **kwargs)


def make_graph(nodes: list[tuple], edges: list[tuple] = ()) -> WorkflowGraph:
    """nodes: (id, type[, settings[, is_active]]); edges: (source, source_handle, target, target_handle)."""
    graph_nodes = []
    for spec in nodes:
        node_id, node_type = spec[0], spec[1]
        settings = spec[2] if len(spec) > 2 else {}
        is_active = spec[3] if len(spec) > 3 else True
        graph_nodes.append(GraphNode(id=node_id, type=node_type, settings=settings, is_active=is_active))
    graph_edges = [
        GraphEdge(id=f"e{i}", source=s, source_handle=sh, target=t, target_handle=th)
        for i, (s, sh, t, th) in enumerate(edges)
    ]
    return WorkflowGraph(nodes=graph_nodes, edges=graph_edges)


def assert_valid_linearization(order: list[str], edges: list[GraphEdge]):
    position = {nid: i for i, nid in enumerate(order)}
    for e in edges:
        if e.source in position and e.target in position:
            assert position[e.source] < position[e.target], f"{e.source} must precede {e.target}"


# ---------------------------------------------------------------------------
# Topological sort
# ---------------------------------------------------------------------------


class TestTopologicalSort:
    def test_chain(self):
        graph = make_graph(
            [("a", "source"), ("b", "sink"), ("c", "sink")],
            [("a", "out", "b", "in"), ("b", "out", "c", "in")],
        )
        assert topological_sort(["a", "b", "c"], graph.edges) == ["a", "b", "c"]

    def test_diamond_is_valid_linearization(self):
        graph = make_graph(
            [("d", "pair"), ("b", "sink"), ("c", "sink"), ("a", "source")],
            [("a", "out", "b", "in"), ("a", "out", "c", "in"),
             ("b", "out", "d", "left"), ("c", "out", "d", "right")],
        )
        order = topological_sort(["d", "b", "c", "a"], graph.edges)
        assert sorted(order) == ["a", "b", "c", "d"]
        assert_valid_linearization(order, graph.edges)

    def test_fifo_keeps_declaration_order_for_roots(self):
        assert topological_sort(["z", "y", "x"], []) == ["z", "y", "x"]

    def test_cycle_returns_none(self):
        graph = make_graph(
            [("a", "sink"), ("b", "sink")],
            [("a", "out", "b", "in"), ("b", "out", "a", "in")],
        )
        assert topological_sort(["a", "b"], graph.edges) is None
        assert GraphRunner.topological_sort(["a", "b"], graph.edges) is None

    def test_edges_outside_node_set_ignored(self):
        graph = make_graph(
            [("a", "sink"), ("b", "sink")],
            [("a", "out", "b", "in"), ("b", "out", "a", "in")],
        )
        assert topological_sort(["a"], graph.edges) == ["a"]

    def test_parallel_edges_between_same_nodes(self):
        graph = make_graph(
            [("a", "source"), ("b", "pair")],
            [("a", "out", "b", "left"), ("a", "out", "b", "right")],
        )
        assert topological_sort(["b", "a"], graph.edges) == ["a", "b"]


# ---------------------------------------------------------------------------
# Execution semantics
# ---------------------------------------------------------------------------


class TestExecute:
    @pytest.mark.asyncio
    async def test_chain_passes_upstream_value(self):
        """B receives the value A produced, not a default."""
        graph = make_graph(
            [("a", "source", {"value": "from-a"}), ("b", "sink")],
            [("a", "out", "b", "in")],
        )
        result = await make_runner().execute(graph)

        assert result.success
        assert result.state == "completed"
        assert result.node_outputs["b"] == {"out": "got:from-a"}
        assert result.errors == {}

    @pytest.mark.asyncio
    async def test_cycle_executes_nothing(self):
        graph = make_graph(
            [("a", "sink"), ("b", "sink"), ("c", "source")],
            [("a", "out", "b", "in"), ("b", "out", "a", "in")],
        )
        events = []
        result = await make_runner().execute(graph, on_event=events.append)

        assert not result.success
        assert result.state == "failed"
        assert result.errors == {CYCLE_ERROR_KEY: CYCLE_ERROR}
        assert result.node_outputs == {}
        assert result.node_statuses == {}
        assert calls == []
        assert [e.type for e in events] == ["run-start", "run-error"]
        assert events[-1].error == CYCLE_ERROR

    @pytest.mark.asyncio
    async def test_missing_required_input(self):
        graph = make_graph([("b", "sink")])
        result = await make_runner().execute(graph)

        assert not result.success
        assert result.state == "completed_with_errors"
        assert result.errors["b"] == "Missing required inputs: In"
        assert "b" not in result.node_outputs
        assert result.node_statuses["b"] == "error"
        assert calls == []

    @pytest.mark.asyncio
    async def test_all_missing_labels_listed(self):
        result = await make_runner().execute(make_graph([("p", "pair")]))
        assert result.errors["p"] == "Missing required inputs: Left, Right"

    @pytest.mark.asyncio
    async def test_independent_branch_survives_failure(self):
        graph = make_graph(
            [("a", "boom"), ("c", "source"), ("d", "sink")],
            [("c", "out", "d", "in")],
        )
        result = await make_runner().execute(graph)

        assert not result.success
        assert result.errors == {"a": "kaboom"}
        assert result.node_outputs["c"] == {"out": "hello"}
        assert result.node_outputs["d"] == {"out": "got:hello"}
        assert calls == ["a", "c", "d"]

    @pytest.mark.asyncio
    async def test_failure_starves_downstream(self):
        graph = make_graph([("a", "boom"), ("b", "sink")], [("a", "out", "b", "in")])
        result = await make_runner().execute(graph)

        assert result.errors == {"a": "kaboom", "b": "Missing required inputs: In"}
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_empty_exception_message(self):
        result = await make_runner().execute(make_graph([("x", "blank_boom")]))
        assert result.errors == {"x": "Unknown error"}

    @pytest.mark.asyncio
    async def test_default_applied_when_unconnected(self):
        result = await make_runner().execute(make_graph([("o", "optional")]))
        assert result.node_outputs["o"] == {"out": "fallback"}

    @pytest.mark.asyncio
    async def test_connected_value_beats_default(self):
        graph = make_graph(
            [("a", "source", {"value": "wired"}), ("o", "optional")],
            [("a", "out", "o", "in")],
        )
        result = await make_runner().execute(graph)
        assert result.node_outputs["o"] == {"out": "wired"}

    @pytest.mark.asyncio
    async def test_missing_upstream_key_is_skipped(self):
        """An edge naming an output the source never produced contributes nothing."""
        graph = make_graph(
            [("a", "source"), ("o", "optional")],
            [("a", "nonexistent", "o", "in")],
        )
        result = await make_runner().execute(graph)
        assert result.node_outputs["o"] == {"out": "fallback"}

    @pytest.mark.asyncio
    async def test_edge_without_handles_is_skipped(self):
        graph = make_graph([("a", "source"), ("o", "optional")], [("a", None, "o", None)])
        result = await make_runner().execute(graph)
        assert result.success
        assert result.node_outputs["o"] == {"out": "fallback"}

    @pytest.mark.asyncio
    async def test_last_edge_wins_on_same_port(self):
        graph = make_graph(
            [("a", "source", {"value": "first"}), ("b", "source", {"value": "second"}), ("s", "sink")],
            [("a", "out", "s", "in"), ("b", "out", "s", "in")],
        )
        result = await make_runner().execute(graph)
        assert result.node_outputs["s"] == {"out": "got:second"}

    @pytest.mark.asyncio
    async def test_inactive_node_never_scheduled(self):
        graph = make_graph([("a", "source", {}, False), ("b", "source")])
        statuses = []
        result = await make_runner().execute(graph, on_node_status=lambda nid, s: statuses.append(nid))

        assert result.success
        assert "a" not in result.node_outputs
        assert "a" not in result.node_statuses
        assert "a" not in statuses
        assert calls == ["b"]

    @pytest.mark.asyncio
    async def test_edge_from_non_executable_node_ignored(self):
        graph = make_graph([("n", "note"), ("o", "optional")], [("n", "r", "o", "in")])
        result = await make_runner().execute(graph)

        assert result.success
        assert "n" not in result.node_statuses
        assert result.node_outputs == {"o": {"out": "fallback"}}

    @pytest.mark.asyncio
    async def test_unknown_node_type_skipped(self):
        graph = make_graph([("x", "hologram"), ("a", "source")])
        result = await make_runner().execute(graph)
        assert result.success
        assert list(result.node_outputs) == ["a"]

    @pytest.mark.asyncio
    async def test_settings_merge_precedence(self):
        schemas = SettingsSchemaTable({
            "capture": NodeSettingsSchema(
                node_type="capture",
                sections=[SettingsSection(label="S", fields=[
                    SettingsField(key="a", label="A", type="text", default_value="schema"),
                    SettingsField(key="b", label="B", type="text", default_value="schema"),
                    SettingsField(key="c", label="C", type="text", default_value="schema"),
                ])],
            ),
        })
        runner = make_runner(settings_schemas=schemas)
        graph = make_graph([("cap", "capture", {"c": "node"})])
        context = RunContext(default_settings={"b": "run", "c": "run"})

        result = await runner.execute(graph, context)
        assert result.node_outputs["cap"]["settings"] == {"a": "schema", "b": "run", "c": "node"}

    @pytest.mark.asyncio
    async def test_node_settings_do_not_leak_between_nodes(self):
        graph = make_graph([("one", "capture", {"only": 1}), ("two", "capture")])
        result = await make_runner().execute(graph)
        assert result.node_outputs["two"]["settings"] == {}

    @pytest.mark.asyncio
    async def test_context_scope_passed_to_executor(self):
        seen = {}
        registry = ExecutorRegistry()

        @registry.executor("source")
        async def _exec_source(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
            seen.update(brand=context.brand_id, workspace=context.workspace_id, node=context.node_id)
            return {}

        runner = GraphRunner(TEST_SPECS, registry)
        await runner.execute(make_graph([("a", "source")]), RunContext(brand_id="b1", workspace_id="w1"))
        assert seen == {"brand": "b1", "workspace": "w1", "node": "a"}

    @pytest.mark.asyncio
    async def test_unregistered_executor_passes_inputs_through(self):
        runner = GraphRunner(TEST_SPECS, ExecutorRegistry())
        graph = make_graph([("o", "optional")])
        result = await runner.execute(graph)
        assert result.node_outputs["o"] == {"in": "fallback"}


# ---------------------------------------------------------------------------
# Events and statuses
# ---------------------------------------------------------------------------


class TestEvents:
    @pytest.mark.asyncio
    async def test_event_sequence_and_log(self):
        graph = make_graph([("a", "source"), ("b", "sink")], [("a", "out", "b", "in")])
        events = []
        result = await make_runner().execute(graph, on_event=events.append)

        assert [(e.type, e.node_id) for e in events] == [
            ("run-start", None),
            ("node-start", "a"),
            ("node-complete", "a"),
            ("node-start", "b"),
            ("node-complete", "b"),
            ("run-complete", None),
        ]
        assert result.log == events
        assert events[2].outputs == {"out": "hello"}
        assert events[1].node_type == "source"
        assert all(e.timestamp > 0 for e in events)

    @pytest.mark.asyncio
    async def test_node_error_event(self):
        events = []
        await make_runner().execute(make_graph([("x", "boom")]), on_event=events.append)

        error_events = [e for e in events if e.type == "node-error"]
        assert len(error_events) == 1
        assert error_events[0].node_id == "x"
        assert error_events[0].error == "kaboom"
        assert events[-1].type == "run-error"

    @pytest.mark.asyncio
    async def test_status_transitions(self):
        graph = make_graph([("a", "source"), ("x", "boom")])
        transitions = []
        result = await make_runner().execute(
            graph, on_node_status=lambda nid, status: transitions.append((nid, status)),
        )

        assert transitions == [
            ("a", "pending"),
            ("x", "pending"),
            ("a", "running"),
            ("a", "success"),
            ("x", "running"),
            ("x", "error"),
        ]
        assert result.node_statuses == {"a": "success", "x": "error"}

    @pytest.mark.asyncio
    async def test_duration_recorded(self):
        graph = make_graph([("s", "slow", {"delay": 0.02})])
        result = await make_runner().execute(graph)
        assert result.duration_ms >= 10


# ---------------------------------------------------------------------------
# Cancellation, busy guard and timeouts
# ---------------------------------------------------------------------------


class TestCancellation:
    @pytest.mark.asyncio
    async def test_abort_stops_before_next_node(self):
        runner = make_runner()
        registry = build_registry()

        @registry.executor("source")
        async def _exec_aborting_source(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
            calls.append(context.node_id)
            runner.abort()
            return {"out": "done"}

        runner.executors = registry
        graph = make_graph([("a", "source"), ("b", "sink")], [("a", "out", "b", "in")])
        events = []
        result = await runner.execute(graph, on_event=events.append)

        assert not result.success
        assert result.state == "aborted"
        assert result.node_outputs == {"a": {"out": "done"}}
        assert result.errors == {}
        assert result.node_statuses == {"a": "success", "b": "pending"}
        assert calls == ["a"]
        assert events[-1].type == "run-error"

    @pytest.mark.asyncio
    async def test_pre_cancelled_context_runs_nothing(self):
        cancel_event = asyncio.Event()
        cancel_event.set()
        result = await make_runner().execute(
            make_graph([("a", "source")]), RunContext(cancel_event=cancel_event),
        )
        assert result.state == "aborted"
        assert result.node_statuses == {"a": "pending"}
        assert calls == []

    @pytest.mark.asyncio
    async def test_cooperative_cancel_lets_node_finish(self):
        """Without interruption, an in-flight node still runs to completion."""
        runner = make_runner()
        graph = make_graph([("s", "slow", {"delay": 0.1}), ("b", "source")])

        async def abort_soon():
            await asyncio.sleep(0.02)
            runner.abort()

        aborter = asyncio.create_task(abort_soon())
        result = await runner.execute(graph)
        await aborter

        assert result.state == "aborted"
        assert result.node_outputs == {"s": {"out": "late"}}
        assert calls == ["s"]

    @pytest.mark.asyncio
    async def test_interrupt_on_cancel(self):
        runner = make_runner(interrupt_on_cancel=True)
        graph = make_graph([("s", "slow", {"delay": 5}), ("b", "source")])

        async def abort_soon():
            await asyncio.sleep(0.02)
            runner.abort()

        aborter = asyncio.create_task(abort_soon())
        result = await runner.execute(graph)
        await aborter

        assert result.state == "aborted"
        assert result.errors == {}
        assert result.node_outputs == {}
        assert result.node_statuses == {"s": "running", "b": "pending"}
        assert result.duration_ms < 2000
        assert calls == ["s"]

    @pytest.mark.asyncio
    async def test_busy_guard(self):
        runner = make_runner()
        graph = make_graph([("s", "slow", {"delay": 0.05})])

        first = asyncio.create_task(runner.execute(graph))
        await asyncio.sleep(0.01)
        assert runner.is_running

        with pytest.raises(RunnerBusyError):
            await runner.execute(graph)

        result = await first
        assert result.success
        assert not runner.is_running

    @pytest.mark.asyncio
    async def test_runner_reusable_after_run(self):
        runner = make_runner()
        graph = make_graph([("a", "source")])
        first = await runner.execute(graph)
        second = await runner.execute(graph)
        assert first.success and second.success
        assert not runner.is_running

    @pytest.mark.asyncio
    async def test_node_timeout(self):
        runner = make_runner(node_timeout_seconds=0.05)
        graph = make_graph([("s", "slow", {"delay": 5}), ("a", "source")])
        result = await runner.execute(graph)

        assert result.state == "completed_with_errors"
        assert result.errors == {"s": "Timed out after 0.05s"}
        assert result.node_outputs == {"a": {"out": "hello"}}
        assert result.duration_ms < 2000

    @pytest.mark.asyncio
    async def test_fast_node_within_timeout(self):
        runner = make_runner(node_timeout_seconds=1, interrupt_on_cancel=True)
        graph = make_graph([("a", "source"), ("b", "sink")], [("a", "out", "b", "in")])
        result = await runner.execute(graph)
        assert result.success
        assert result.node_outputs["b"] == {"out": "got:hello"}

    @pytest.mark.asyncio
    async def test_executor_error_surfaces_with_timeout_enabled(self):
        runner = make_runner(node_timeout_seconds=1)
        result = await runner.execute(make_graph([("x", "boom")]))
        assert result.errors == {"x": "kaboom"}


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


def parse_sse(chunks: list[str]) -> list[dict]:
    events = []
    for chunk in chunks:
        assert chunk.startswith("data: ") and chunk.endswith("\n\n")
        events.append(json.loads(chunk[len("data: "):]))
    return events


class TestStreaming:
    @pytest.mark.asyncio
    async def test_stream_events_and_final_result(self):
        graph = make_graph([("a", "source"), ("b", "sink")], [("a", "out", "b", "in")])
        chunks = [chunk async for chunk in make_runner().execute_streaming(graph)]
        events = parse_sse(chunks)

        assert [e["type"] for e in events] == [
            "run-start", "node-start", "node-complete", "node-start", "node-complete", "run-complete",
        ]
        final = events[-1]["result"]
        assert final["success"] is True
        assert final["node_outputs"]["b"] == {"out": "got:hello"}

    @pytest.mark.asyncio
    async def test_stream_cycle(self):
        graph = make_graph(
            [("a", "sink"), ("b", "sink")],
            [("a", "out", "b", "in"), ("b", "out", "a", "in")],
        )
        events = parse_sse([chunk async for chunk in make_runner().execute_streaming(graph)])

        assert [e["type"] for e in events] == ["run-start", "run-error"]
        assert events[-1]["error"] == CYCLE_ERROR
        assert events[-1]["result"]["errors"] == {CYCLE_ERROR_KEY: CYCLE_ERROR}


# ---------------------------------------------------------------------------
# Real catalog scenario
# ---------------------------------------------------------------------------


class TestBroadcastScenario:
    @pytest.mark.asyncio
    async def test_broadcast_switch_delivers_identical_value(self):
        """trigger -> content -> switch(broadcast) -> two emitters."""
        graph = make_graph(
            [
                ("T1", "trigger"),
                ("C1", "content"),
                ("S1", "switch", {"mode": "broadcast"}),
                ("E1", "emitter"),
                ("E2", "emitter"),
            ],
            [
                ("T1", "trigger_out", "C1", "input"),
                ("C1", "content_out", "S1", "input_0"),
                ("S1", "output_0", "E1", "content"),
                ("S1", "output_1", "E2", "content"),
            ],
        )
        runner = GraphRunner(
            NodeSpecTable(),
            build_default_registry(),
            settings_schemas=SettingsSchemaTable(),
        )
        result = await runner.execute(graph, RunContext(brand_id="brand-1"))

        assert result.success, result.errors
        content = result.node_outputs["C1"]["content_out"]
        e1 = result.node_outputs["E1"]["status_out"]["content"]
        e2 = result.node_outputs["E2"]["status_out"]["content"]
        assert e1 is e2
        assert e1 is content
        assert content["triggered"] is True
        assert content["brand_id"] == "brand-1"
        assert result.node_outputs["E1"]["sent"] is True
