"""Refinement nodes: attributes, textures, tone scales, negatives, logic gates, presets."""

from __future__ import annotations

import re
from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

executors = ExecutorSet("refinement")

TONE_LABELS = ["Very Low", "Low", "Medium", "High", "Very High"]


def scale_label(value: float, labels: list[str]) -> str:
    """Bucket a 0-100 value into one of five labels."""
    index = min(int(value // 20), len(labels) - 1)
    return labels[max(index, 0)]


def _as_number(value: Any, default: float = 50) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    return default


@executors.executor("attribute")
async def _exec_attribute(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    text = as_text(inputs.get("text_in"))
    tags = [tag for tag in re.split(r"[,;]\s*", text) if tag]
    return {"attribute_out": text, "tags_out": tags}


@executors.executor("texture")
async def _exec_texture(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {"texture_out": {"type": "material", "value": inputs.get("input")}}


@executors.executor("tone")
async def _exec_tone(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    value = _as_number(inputs.get("value_in"))
    return {"tone_out": value, "label_out": scale_label(value, TONE_LABELS)}


@executors.executor("negative")
async def _exec_negative(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    text = as_text(inputs.get("text_in"))
    negatives = [part.strip() for part in re.split(r"[,;\n]+", text) if part.strip()]
    return {"negatives_out": negatives}


@executors.executor("logic")
async def _exec_logic(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    branch = "input_true" if bool(inputs.get("condition")) else "input_false"
    if branch not in inputs:
        return {}
    return {"output": inputs[branch]}


@executors.executor("preset")
async def _exec_preset(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {"preset_out": {"applied": True, "source": inputs.get("input")}}
