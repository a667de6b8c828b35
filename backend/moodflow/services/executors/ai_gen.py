"""
Image-generation nodes modelled on a diffusion pipeline (checkpoint ->
sampler -> VAE decode) plus a few AI helper nodes.

No diffusion backend is called; each node returns a descriptor of the work it
would hand to one, so downstream nodes and the UI can inspect the wiring.
"""

from __future__ import annotations

import random
from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet
from moodflow.services.executors.refinement import scale_label

executors = ExecutorSet("ai_gen")

MOOD_LABELS = ["Serene", "Calm", "Balanced", "Energetic", "Intense"]
MAX_SEED = 2147483647


@executors.executor("checkpoint")
async def _exec_checkpoint(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    path = as_text(inputs.get("path_in"), "default_model")
    return {
        "model_out": {"type": "model", "path": path},
        "clip_out": {"type": "clip", "path": path},
        "vae_out": {"type": "vae", "path": path},
    }


@executors.executor("ksampler")
async def _exec_ksampler(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    settings = context.node_settings
    seed = settings.get("seed", -1)
    if not isinstance(seed, int) or seed < 0:
        seed = random.randint(0, MAX_SEED)
    return {
        "latent_out": {
            "type": "latent",
            "model": inputs.get("model"),
            "positive": inputs.get("positive"),
            "negative": inputs.get("negative") or "",
            "steps": settings.get("steps", 20),
            "cfg": settings.get("cfg", 7),
            "seed": seed,
            "sampler": settings.get("samplerName", "euler"),
            "scheduler": settings.get("scheduler", "normal"),
            "denoise": settings.get("denoise", 1.0),
        },
    }


@executors.executor("vae")
async def _exec_vae(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "image_out": {
            "type": "image",
            "decoded": True,
            "source": inputs.get("samples"),
            "vae": inputs.get("vae_model"),
        },
    }


@executors.executor("mood_gauge")
async def _exec_mood_gauge(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    value = inputs.get("value_in")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        value = 50
    return {"gauge_out": value, "label_out": scale_label(value, MOOD_LABELS)}


@executors.executor("model_profile")
async def _exec_model_profile(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "profile_out": {
            "context": inputs.get("context_in"),
            "brand_id": context.brand_id,
            "generated": True,
        },
    }


@executors.executor("midjourney")
async def _exec_midjourney(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "prompt_out": as_text(inputs.get("prompt_in")),
        "image_out": inputs.get("image_in"),
    }
