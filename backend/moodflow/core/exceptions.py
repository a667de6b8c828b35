"""Exceptions raised by the workflow graph engine."""

from __future__ import annotations

from typing import Any


class MoodflowError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RunnerBusyError(MoodflowError):
    """Raised when execute() is called while a run is still active."""

    def __init__(self) -> None:
        super().__init__("A run is already active on this runner")


class MissingRequiredInputsError(MoodflowError):
    """Raised for a node whose required input ports have no bound value."""

    def __init__(self, node_id: str, labels: list[str]) -> None:
        super().__init__(
            message=f"Missing required inputs: {', '.join(labels)}",
            details={"node_id": node_id, "labels": labels},
        )
        self.node_id = node_id
        self.labels = labels


class NodeTimeoutError(MoodflowError):
    """Raised when a node executor exceeds the configured timeout."""

    def __init__(self, node_id: str, timeout_seconds: float) -> None:
        super().__init__(
            message=f"Timed out after {timeout_seconds:g}s",
            details={"node_id": node_id, "timeout_seconds": timeout_seconds},
        )
        self.node_id = node_id
        self.timeout_seconds = timeout_seconds


class UnknownTemplateError(MoodflowError):
    """Raised when a workflow template id is not in the catalog."""

    def __init__(self, template_id: str) -> None:
        super().__init__(
            message=f"Template not found: {template_id}",
            details={"template_id": template_id},
        )
        self.template_id = template_id
