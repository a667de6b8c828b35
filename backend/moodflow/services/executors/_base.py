from __future__ import annotations

from typing import Callable

from moodflow.services.executor_registry import ExecutorFn, ExecutorRegistry, FunctionExecutor


class ExecutorSet:
    """
    A family of executors collected at import time and installed into a
    registry explicitly via register_into().
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._fns: dict[str, ExecutorFn] = {}

    def executor(self, node_type: str) -> Callable[[ExecutorFn], ExecutorFn]:
        def decorator(fn: ExecutorFn) -> ExecutorFn:
            self._fns[node_type] = fn
            return fn
        return decorator

    def node_types(self) -> list[str]:
        return list(self._fns)

    def register_into(self, registry: ExecutorRegistry) -> None:
        for node_type, fn in self._fns.items():
            registry.register(node_type, FunctionExecutor(node_type, fn))
