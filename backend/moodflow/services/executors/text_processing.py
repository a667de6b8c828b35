"""
Copywriting nodes.

These produce deterministic placeholder copy shaped like the real model output
(a primary string plus variations) so that downstream wiring can be exercised
without a language model behind them.
"""

from __future__ import annotations

import re
from typing import Any

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

executors = ExecutorSet("text_processing")

HEADLINE_PATTERNS = [
    "Breaking: {topic}",
    "Why {topic} Matters Now",
    "The Future of {topic}",
    "{topic}: What You Need to Know",
    "Inside {topic}",
]


def _count_setting(context: ExecutionContext, key: str, default: int) -> int:
    value = context.node_settings.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 1:
        return default
    return int(value)


@executors.executor("content_gen")
async def _exec_content_gen(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    prompt = as_text(inputs.get("prompt"))
    tone = as_text(inputs.get("tone")) or as_text(context.node_settings.get("tone"), "professional")
    return {
        "content_out": f'[Generated content for: "{prompt[:50]}..." in {tone} tone]',
        "variations": [
            f"Variation 1: {prompt[:30]}...",
            f"Variation 2: {prompt[:30]}...",
        ],
    }


@executors.executor("headline_gen")
async def _exec_headline_gen(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    topic = as_text(inputs.get("topic"))
    count = min(_count_setting(context, "count", 3), len(HEADLINE_PATTERNS))
    headlines = [pattern.format(topic=topic) for pattern in HEADLINE_PATTERNS[:count]]
    return {"headlines": headlines, "best": headlines[0]}


@executors.executor("seo_optimizer")
async def _exec_seo_optimizer(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    content = as_text(inputs.get("content"))
    keywords = [str(k) for k in inputs.get("keywords") or []]
    if keywords:
        suggestions = [f"Optimize for: {', '.join(keywords)}"]
    else:
        suggestions = ["Add target keywords", "Improve meta description"]
    return {"optimized": content, "score": 75, "suggestions": suggestions}


@executors.executor("hashtag_gen")
async def _exec_hashtag_gen(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    """Turn the first few long words of the content into hashtags."""
    content = as_text(inputs.get("content"))
    limit = _count_setting(context, "count", 5)
    words = [w for w in content.split() if len(w) > 3][:limit]
    hashtags = [f"#{re.sub(r'[^a-z0-9]', '', w.lower())}" for w in words]
    return {"hashtags": hashtags, "formatted": " ".join(hashtags)}


@executors.executor("content_rewriter")
async def _exec_content_rewriter(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    content = as_text(inputs.get("content"))
    tone = as_text(inputs.get("tone")) or as_text(context.node_settings.get("tone"), "casual")
    return {
        "rewritten": f"[Rewritten in {tone} tone] {content[:100]}",
        "variations": [
            f"[{tone} v1] {content[:50]}...",
            f"[{tone} v2] {content[:50]}...",
        ],
    }
