"""Social publishing nodes."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

executors = ExecutorSet("social_media")


@executors.executor("social_poster")
async def _exec_social_poster(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    settings = context.node_settings
    content = (
        as_text(inputs.get("content"))
        or as_text(inputs.get("prompt"))
        or as_text(settings.get("content"))
        or as_text(settings.get("prompt"))
    )
    platform = as_text(inputs.get("platform")) or as_text(settings.get("platform"))
    if not platform:
        tags = settings.get("tags")
        platform = tags[0] if isinstance(tags, list) and tags else "instagram"
    return {
        "post_id": f"post_{int(time.time() * 1000)}",
        "status": {
            "platform": platform,
            "published": False,
            "stub": True,
            "content": content,
            "image": inputs.get("image"),
        },
    }


@executors.executor("scheduler")
async def _exec_scheduler(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "scheduled": {
            "content": inputs.get("content"),
            "schedule": inputs.get("schedule"),
            "created": datetime.now(timezone.utc).isoformat(),
        },
        "confirmation": True,
    }


@executors.executor("story_creator")
async def _exec_story_creator(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "story_out": {
            "images": inputs.get("images") or None,
            "text": as_text(inputs.get("text")),
            "template": as_text(inputs.get("template"), "default"),
        },
        "preview": None,
    }
