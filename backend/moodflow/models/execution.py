"""
Execution models: run context, events and results of a graph run.

A run context is supplied by the caller once per run; the runner derives a
per-node ExecutionContext from it for every executor call.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field


PortValues = dict[str, Any]

# Only what a run reports. Before its first update a node is idle and a run
# not started; the host UI tracks those states itself.
ExecutionStatus = Literal["pending", "running", "success", "error"]
RunState = Literal["completed", "completed_with_errors", "aborted", "failed"]
ExecutionEventType = Literal[
    "run-start", "node-start", "node-complete", "node-error", "run-complete", "run-error",
]

CYCLE_ERROR_KEY = "_cycle"


def _now_ms() -> float:
    return time.time() * 1000


class RunContext(BaseModel):
    """What the caller hands to GraphRunner.execute()."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    brand_id: str | None = None
    workspace_id: str | None = None
    default_settings: dict[str, Any] = Field(default_factory=dict)
    cancel_event: asyncio.Event | None = None
    http_client: httpx.AsyncClient | None = None


class ExecutionContext(BaseModel):
    """What a single executor call receives."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    brand_id: str | None = None
    workspace_id: str | None = None
    cancel_event: asyncio.Event = Field(default_factory=asyncio.Event)
    node_settings: dict[str, Any] = Field(default_factory=dict)
    node_id: str | None = None
    http_client: httpx.AsyncClient | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


class ExecutionEvent(BaseModel):
    type: ExecutionEventType
    node_id: str | None = None
    node_type: str | None = None
    outputs: PortValues | None = None
    error: str | None = None
    timestamp: float = Field(default_factory=_now_ms)


class ExecutionResult(BaseModel):
    success: bool
    state: RunState
    node_outputs: dict[str, PortValues] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    node_statuses: dict[str, ExecutionStatus] = Field(default_factory=dict)
    log: list[ExecutionEvent] = Field(default_factory=list)
    duration_ms: int = 0
