"""
Graph runner: executes a workflow graph node by node.

Only executable, active nodes are scheduled. They run strictly one at a time
in topological order (Kahn's algorithm, FIFO), so event order is fully
determined by the graph. A failing node records an error and the run moves
on; downstream nodes that needed its outputs then fail their own required
input checks. A cycle among executable nodes stops the run before anything
executes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict, deque
from typing import Any, AsyncIterator, Callable, Iterable

from moodflow.core.exceptions import MissingRequiredInputsError, NodeTimeoutError, RunnerBusyError
from moodflow.models.execution import (
    CYCLE_ERROR_KEY,
    ExecutionContext,
    ExecutionEvent,
    ExecutionResult,
    ExecutionStatus,
    PortValues,
    RunContext,
)
from moodflow.models.graph import GraphEdge, GraphNode, WorkflowGraph
from moodflow.models.node_registry import NodeSpecTable
from moodflow.models.port_types import NodePortSpec
from moodflow.models.settings_schema import SettingsSchemaTable
from moodflow.services.executor_registry import ExecutorRegistry, NodeExecutor

logger = logging.getLogger(__name__)

CYCLE_ERROR = "Graph contains a cycle, cannot execute"

EventCallback = Callable[[ExecutionEvent], None]
StatusCallback = Callable[[str, ExecutionStatus], None]


class _ExecutionInterrupted(Exception):
    """The in-flight executor call was cut short by the cancel signal."""


def topological_sort(node_ids: Iterable[str], edges: Iterable[GraphEdge]) -> list[str] | None:
    """
    Order node_ids so every edge source comes before its target.

    Only edges with both endpoints in node_ids count. Returns None if those
    edges form a cycle.
    """
    in_degree: dict[str, int] = {nid: 0 for nid in node_ids}
    adjacency: dict[str, list[str]] = defaultdict(list)

    for edge in edges:
        if edge.source in in_degree and edge.target in in_degree:
            adjacency[edge.source].append(edge.target)
            in_degree[edge.target] += 1

    queue: deque[str] = deque(nid for nid, deg in in_degree.items() if deg == 0)
    order: list[str] = []

    while queue:
        nid = queue.popleft()
        order.append(nid)
        for neighbor in adjacency[nid]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(order) != len(in_degree):
        return None
    return order


def _sse(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


class GraphRunner:
    """
    Runs one graph at a time.

    Registries are shared read-only; create a runner per run (or reuse one
    sequentially). Calling execute() while a run is active raises
    RunnerBusyError.
    """

    topological_sort = staticmethod(topological_sort)

    def __init__(
        self,
        spec_table: NodeSpecTable,
        executors: ExecutorRegistry,
        *,
        settings_schemas: SettingsSchemaTable | None = None,
        node_timeout_seconds: float | None = None,
        interrupt_on_cancel: bool = False,
    ) -> None:
        self.spec_table = spec_table
        self.executors = executors
        self.settings_schemas = settings_schemas
        self.node_timeout_seconds = node_timeout_seconds
        self.interrupt_on_cancel = interrupt_on_cancel
        self._cancel_event: asyncio.Event | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def abort(self) -> None:
        """Signal the active run to stop before its next node."""
        if self._cancel_event is not None:
            self._cancel_event.set()

    async def execute(
        self,
        graph: WorkflowGraph,
        context: RunContext | None = None,
        on_event: EventCallback | None = None,
        on_node_status: StatusCallback | None = None,
    ) -> ExecutionResult:
        if self._running:
            raise RunnerBusyError()
        self._running = True
        context = context or RunContext()
        self._cancel_event = context.cancel_event or asyncio.Event()
        try:
            return await self._run(graph, context, self._cancel_event, on_event, on_node_status)
        finally:
            self._running = False

    async def _run(
        self,
        graph: WorkflowGraph,
        context: RunContext,
        cancel_event: asyncio.Event,
        on_event: EventCallback | None,
        on_node_status: StatusCallback | None,
    ) -> ExecutionResult:
        start_time = time.perf_counter()
        log: list[ExecutionEvent] = []
        node_outputs: dict[str, PortValues] = {}
        errors: dict[str, str] = {}
        statuses: dict[str, ExecutionStatus] = {}

        def emit(event: ExecutionEvent) -> None:
            log.append(event)
            if on_event is not None:
                on_event(event)

        def set_status(node_id: str, status: ExecutionStatus) -> None:
            statuses[node_id] = status
            if on_node_status is not None:
                on_node_status(node_id, status)

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start_time) * 1000)

        emit(ExecutionEvent(type="run-start"))

        node_map: dict[str, GraphNode] = {}
        for node in graph.nodes:
            node_map.setdefault(node.id, node)
        executable = [
            nid for nid, node in node_map.items()
            if node.is_active and self.spec_table.is_executable(node.type)
        ]

        order = topological_sort(executable, graph.edges)
        if order is None:
            logger.warning("Refusing to run graph: cycle among %d executable nodes", len(executable))
            emit(ExecutionEvent(type="run-error", error=CYCLE_ERROR))
            return ExecutionResult(
                success=False,
                state="failed",
                errors={CYCLE_ERROR_KEY: CYCLE_ERROR},
                log=log,
                duration_ms=elapsed_ms(),
            )

        logger.info("Running graph: %d executable nodes, order=%s", len(order), order)

        for nid in order:
            set_status(nid, "pending")

        for nid in order:
            if cancel_event.is_set():
                logger.info("Run cancelled before node %s", nid)
                break

            node = node_map[nid]
            spec = self.spec_table.get_spec(node.type)

            set_status(nid, "running")
            emit(ExecutionEvent(type="node-start", node_id=nid, node_type=node.type))

            try:
                inputs = self._gather_inputs(nid, graph.edges, node_outputs)
                self._check_required(nid, spec, inputs)
                self._apply_defaults(spec, inputs)

                node_context = ExecutionContext(
                    brand_id=context.brand_id,
                    workspace_id=context.workspace_id,
                    cancel_event=cancel_event,
                    node_settings=self._merge_settings(node, context),
                    node_id=nid,
                    http_client=context.http_client,
                )
                executor = self.executors.get(node.type)
                outputs = await self._invoke(executor, inputs, node_context)

            except _ExecutionInterrupted:
                logger.info("Node %s interrupted by cancellation", nid)
                break

            except MissingRequiredInputsError as e:
                logger.warning("Node %s (%s) not run: %s", nid, node.type, e.message)
                errors[nid] = e.message
                set_status(nid, "error")
                emit(ExecutionEvent(type="node-error", node_id=nid, node_type=node.type, error=e.message))

            except Exception as e:
                error_msg = str(e) or "Unknown error"
                logger.exception("Node %s (%s) failed: %s", nid, node.type, error_msg)
                errors[nid] = error_msg
                set_status(nid, "error")
                emit(ExecutionEvent(type="node-error", node_id=nid, node_type=node.type, error=error_msg))

            else:
                outputs = dict(outputs or {})
                node_outputs[nid] = outputs
                set_status(nid, "success")
                emit(ExecutionEvent(type="node-complete", node_id=nid, node_type=node.type, outputs=outputs))

        cancelled = cancel_event.is_set()
        success = not errors and not cancelled
        if success:
            state = "completed"
        elif cancelled:
            state = "aborted"
        else:
            state = "completed_with_errors"

        emit(ExecutionEvent(type="run-complete" if success else "run-error"))
        logger.info(
            "Run finished: state=%s, %d succeeded, %d failed, %dms",
            state, len(node_outputs), len(errors), elapsed_ms(),
        )

        return ExecutionResult(
            success=success,
            state=state,
            node_outputs=node_outputs,
            errors=errors,
            node_statuses=statuses,
            log=log,
            duration_ms=elapsed_ms(),
        )

    # ------------------------------------------------------------------
    # Per-node steps
    # ------------------------------------------------------------------

    @staticmethod
    def _gather_inputs(
        node_id: str,
        edges: list[GraphEdge],
        node_outputs: dict[str, PortValues],
    ) -> PortValues:
        inputs: PortValues = {}
        for edge in edges:
            if edge.target != node_id:
                continue
            source_outputs = node_outputs.get(edge.source)
            if source_outputs is None or not edge.source_handle or not edge.target_handle:
                continue
            if edge.source_handle in source_outputs:
                inputs[edge.target_handle] = source_outputs[edge.source_handle]
        return inputs

    @staticmethod
    def _check_required(node_id: str, spec: NodePortSpec, inputs: PortValues) -> None:
        missing = [p.label for p in spec.inputs if p.required and p.id not in inputs]
        if missing:
            raise MissingRequiredInputsError(node_id, missing)

    @staticmethod
    def _apply_defaults(spec: NodePortSpec, inputs: PortValues) -> None:
        for port in spec.inputs:
            if port.id not in inputs and port.has_default:
                inputs[port.id] = port.default_value

    def _merge_settings(self, node: GraphNode, context: RunContext) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        if self.settings_schemas is not None:
            merged.update(self.settings_schemas.defaults_for(node.type))
        merged.update(context.default_settings)
        merged.update(node.settings)
        return merged

    async def _invoke(
        self,
        executor: NodeExecutor,
        inputs: PortValues,
        context: ExecutionContext,
    ) -> PortValues:
        """Await the executor, racing it against the timeout and cancel signal when enabled."""
        if self.node_timeout_seconds is None and not self.interrupt_on_cancel:
            return await executor.execute(inputs, context)

        task = asyncio.ensure_future(executor.execute(inputs, context))
        waiters: set[asyncio.Future] = {task}
        cancel_waiter: asyncio.Future | None = None
        if self.interrupt_on_cancel:
            cancel_waiter = asyncio.ensure_future(context.cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.node_timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        if cancel_waiter is not None and context.cancelled:
            raise _ExecutionInterrupted()
        raise NodeTimeoutError(context.node_id or "", self.node_timeout_seconds)

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def execute_streaming(
        self,
        graph: WorkflowGraph,
        context: RunContext | None = None,
    ) -> AsyncIterator[str]:
        """
        Run the graph and yield Server-Sent Events as it progresses.

        Each event is yielded as `data: {...}\\n\\n`. The closing run-complete or
        run-error event carries the full result under "result".
        """
        event_queue: asyncio.Queue = asyncio.Queue()

        async def run() -> ExecutionResult:
            try:
                return await self.execute(graph, context, on_event=event_queue.put_nowait)
            finally:
                # Signal end of events
                await event_queue.put(None)

        run_task = asyncio.create_task(run())
        final_event: ExecutionEvent | None = None
        try:
            while True:
                event = await event_queue.get()
                if event is None:
                    break
                if event.type in ("run-complete", "run-error"):
                    final_event = event
                    continue
                yield _sse(event.model_dump(mode="json"))

            result = await run_task
            payload = final_event.model_dump(mode="json") if final_event else {"type": "run-error"}
            payload["result"] = result.model_dump(mode="json")
            yield _sse(payload)
        finally:
            if not run_task.done():
                self.abort()
                run_task.cancel()
                try:
                    await run_task
                except asyncio.CancelledError:
                    pass
