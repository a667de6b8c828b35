"""External-data nodes. None of these reach a live service yet; outputs are placeholders."""

from __future__ import annotations

from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

executors = ExecutorSet("extras")


@executors.executor("spotify")
async def _exec_spotify(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    query = as_text(inputs.get("query_in"))
    return {
        "track_out": {"query": query, "service": "spotify", "stub": True},
        "mood_out": "energetic",
    }


@executors.executor("weather")
async def _exec_weather(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    location = as_text(inputs.get("location_in"), "Unknown")
    return {
        "weather_out": {"location": location, "temperature": 22, "unit": "C", "stub": True},
        "condition_out": "Clear",
    }


@executors.executor("competitor")
async def _exec_competitor(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "analysis_out": {"name": as_text(inputs.get("name_in")), "stub": True},
        "share_out": 0,
    }


@executors.executor("web_ref")
async def _exec_web_ref(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    url = as_text(inputs.get("url_in"))
    return {
        "html_out": f"<!-- stub for {url} -->",
        "meta_out": {"url": url, "fetched": False},
    }


@executors.executor("cms_sync")
async def _exec_cms_sync(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {
        "synced_out": inputs.get("data_in") or {},
        "status_out": True,
    }
