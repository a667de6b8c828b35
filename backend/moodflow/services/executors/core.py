"""Core canvas nodes: images, text blocks, palettes, typography, icons, references."""

from __future__ import annotations

from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

executors = ExecutorSet("core")


@executors.executor("image")
async def _exec_image(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    """Pass image data through and expose it as a URL when it is one."""
    image = inputs.get("image_in") or None
    return {
        "image_out": image,
        "url_out": image if isinstance(image, str) else "",
    }


async def _exec_text_block(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    # An unwired block emits the text typed into it on the canvas.
    text = as_text(inputs.get("text_in")) or as_text(context.node_settings.get("text"))
    return {"text_out": text}


for _text_type in ("text", "title", "paragraph"):
    executors.executor(_text_type)(_exec_text_block)


@executors.executor("palette")
async def _exec_palette(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    colors = list(inputs.get("colors_in") or [])
    return {
        "colors_out": colors,
        "primary_out": colors[0] if colors else "#000000",
    }


@executors.executor("typography")
async def _exec_typography(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    font = inputs.get("font_in") or "Inter"
    return {"font_out": {"family": font, "weights": [400, 700]}}


@executors.executor("icons")
async def _exec_icons(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {"icons_out": list(inputs.get("set_in") or [])}


@executors.executor("reference")
async def _exec_reference(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    url = as_text(inputs.get("url_in"))
    return {
        "url_out": url,
        "meta_out": {"url": url, "fetched": False},
    }
