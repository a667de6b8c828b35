"""
Executor registry: maps node type names to the code that runs them.

Each executor receives (inputs, context) and returns an outputs dict keyed by
output port id. Inputs come from upstream nodes via edges, after defaults have
been applied; context carries the run scope, the cancellation signal and the
node's merged settings.

Unregistered node types resolve to a passthrough executor so a partially
implemented catalog never stops a run.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Protocol

from moodflow.models.execution import ExecutionContext, PortValues

logger = logging.getLogger(__name__)

ExecutorFn = Callable[[PortValues, ExecutionContext], Awaitable[PortValues]]


class NodeExecutor(Protocol):
    async def execute(self, inputs: PortValues, context: ExecutionContext) -> PortValues: ...


class FunctionExecutor:
    """Adapts a plain async function to the NodeExecutor protocol."""

    def __init__(self, node_type: str, fn: ExecutorFn) -> None:
        self.node_type = node_type
        self.fn = fn

    async def execute(self, inputs: PortValues, context: ExecutionContext) -> PortValues:
        return await self.fn(inputs, context)

    def __repr__(self) -> str:
        return f"FunctionExecutor({self.node_type!r}, {self.fn.__name__})"


class PassthroughExecutor:
    """Returns a shallow copy of its inputs."""

    async def execute(self, inputs: PortValues, context: ExecutionContext) -> PortValues:
        return dict(inputs)


_PASSTHROUGH = PassthroughExecutor()


class ExecutorRegistry:
    def __init__(self) -> None:
        self._executors: dict[str, NodeExecutor] = {}

    def register(self, node_type: str, executor: NodeExecutor) -> None:
        if node_type in self._executors:
            logger.debug("Replacing executor for node type %s", node_type)
        self._executors[node_type] = executor

    def executor(self, node_type: str) -> Callable[[ExecutorFn], ExecutorFn]:
        """
        Decorator that registers an async executor function for a node type.

        Usage:
            @registry.executor("my_node")
            async def _exec_my_node(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
                return {"output_port": result}
        """
        def decorator(fn: ExecutorFn) -> ExecutorFn:
            self.register(node_type, FunctionExecutor(node_type, fn))
            return fn
        return decorator

    def get(self, node_type: str) -> NodeExecutor:
        return self._executors.get(node_type, _PASSTHROUGH)

    def has(self, node_type: str) -> bool:
        return node_type in self._executors

    def node_types(self) -> list[str]:
        return list(self._executors)

    def __len__(self) -> int:
        return len(self._executors)


def as_text(value: Any, default: str = "") -> str:
    """Coerce a loosely-typed port value to a string, treating falsy as missing."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value
    return str(value)
