"""
Signal nodes: the control and routing layer of a workflow.

trigger starts a flow, engine is the language-model step, switch routes or
fans out values, receiver validates, encoder packages, emitter delivers and
content wraps arbitrary data as a content payload.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

executors = ExecutorSet("signal")

SWITCH_ROUTES = 4
BROADCAST_MODES = {"broadcast", "broadcaster"}


@executors.executor("trigger")
async def _exec_trigger(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "trigger_out": {
            "triggered": True,
            "mode": context.node_settings.get("triggerMode", "manual"),
            "brand_id": context.brand_id,
            "workspace_id": context.workspace_id,
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@executors.executor("engine")
async def _exec_engine(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    prompt = as_text(inputs.get("prompt"))
    system = as_text(inputs.get("system")) or as_text(context.node_settings.get("systemPrompt"))
    return {
        "response": f"[Engine stub] Prompt: {prompt[:100]}",
        "json_out": {
            "prompt": prompt,
            "system": system,
            "context": inputs.get("context"),
            "model": context.node_settings.get("model", "default"),
        },
    }


@executors.executor("switch")
async def _exec_switch(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    """
    Route values between numbered ports.

    passthrough: input_N -> output_N for every bound input.
    broadcast:   the first bound input (in port order) -> every output.
    """
    mode = str(context.node_settings.get("mode") or "passthrough").lower()
    outputs: dict[str, Any] = {}

    if mode in BROADCAST_MODES:
        bound = [f"input_{i}" for i in range(SWITCH_ROUTES) if f"input_{i}" in inputs]
        if not bound:
            return outputs
        value = inputs[bound[0]]
        for i in range(SWITCH_ROUTES):
            outputs[f"output_{i}"] = value
        return outputs

    for i in range(SWITCH_ROUTES):
        key = f"input_{i}"
        if key in inputs:
            outputs[f"output_{i}"] = inputs[key]
    return outputs


@executors.executor("receiver")
async def _exec_receiver(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    data = inputs.get("data_in")
    errors: list[str] = []
    if data is None:
        errors.append("No data received")
    elif context.node_settings.get("strictMode") and data in ("", [], {}):
        errors.append("Empty payload rejected in strict mode")
    return {
        "validated": data if not errors else None,
        "errors": errors,
    }


@executors.executor("encoder")
async def _exec_encoder(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    fmt = as_text(inputs.get("format")) or as_text(context.node_settings.get("format"), "png")
    return {
        "file_out": {"type": "encoded", "format": fmt, "source": inputs.get("input")},
        "url_out": f"data:image/{fmt};base64,stub",
    }


@executors.executor("emitter")
async def _exec_emitter(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    channel = as_text(inputs.get("channel")) or as_text(context.node_settings.get("channel"), "default")
    return {
        "status_out": {"channel": channel, "sent": True, "content": inputs.get("content")},
        "sent": True,
    }


@executors.executor("content")
async def _exec_content(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    value = inputs.get("input")
    return {"content_out": value if value else {"empty": True}}
