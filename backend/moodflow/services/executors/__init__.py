"""
Built-in node executors, grouped by canvas category.

Importing this package only collects executors; nothing is registered until
register_default_executors() installs them into a registry.
"""

from __future__ import annotations

from moodflow.services.executor_registry import ExecutorRegistry
from moodflow.services.executors import (
    ai_gen,
    core,
    extras,
    integrations,
    refinement,
    signal,
    social_media,
    text_processing,
)
from moodflow.services.executors._base import ExecutorSet

ALL_SETS: list[ExecutorSet] = [
    core.executors,
    refinement.executors,
    ai_gen.executors,
    signal.executors,
    extras.executors,
    text_processing.executors,
    social_media.executors,
    integrations.executors,
]


def register_default_executors(registry: ExecutorRegistry) -> ExecutorRegistry:
    for executor_set in ALL_SETS:
        executor_set.register_into(registry)
    return registry


def build_default_registry() -> ExecutorRegistry:
    return register_default_executors(ExecutorRegistry())
