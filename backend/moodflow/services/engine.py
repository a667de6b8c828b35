"""
Engine wiring: builds the shared registries once and hands out runners.

Everything on MoodboardEngine is read-only after construction, so one engine
serves any number of concurrent runs; each run gets its own GraphRunner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from moodflow.core.config import EngineSettings, load_settings
from moodflow.models.node_registry import NodeSpecTable
from moodflow.models.port_types import PortTypeRegistry
from moodflow.models.settings_schema import SettingsSchemaTable
from moodflow.services.connection_validator import ConnectionValidator
from moodflow.services.executor_registry import ExecutorRegistry
from moodflow.services.executors import build_default_registry
from moodflow.services.graph_runner import GraphRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoodboardEngine:
    settings: EngineSettings
    spec_table: NodeSpecTable
    port_types: PortTypeRegistry
    settings_schemas: SettingsSchemaTable
    executors: ExecutorRegistry
    validator: ConnectionValidator

    def new_runner(self) -> GraphRunner:
        return GraphRunner(
            self.spec_table,
            self.executors,
            settings_schemas=self.settings_schemas,
            node_timeout_seconds=self.settings.node_timeout_seconds,
            interrupt_on_cancel=self.settings.interrupt_on_cancel,
        )


def build_engine(
    settings: EngineSettings | None = None,
    *,
    executors: ExecutorRegistry | None = None,
    spec_table: NodeSpecTable | None = None,
) -> MoodboardEngine:
    """Assemble an engine from settings, defaulting to the built-in catalog."""
    settings = settings or load_settings()
    spec_table = spec_table or NodeSpecTable()
    port_types = PortTypeRegistry()
    executors = executors if executors is not None else build_default_registry()

    missing = [t for t in spec_table.node_types() if spec_table.is_executable(t) and not executors.has(t)]
    if missing:
        logger.warning("No executor for node types %s; they will pass inputs through", missing)

    engine = MoodboardEngine(
        settings=settings,
        spec_table=spec_table,
        port_types=port_types,
        settings_schemas=SettingsSchemaTable(),
        executors=executors,
        validator=ConnectionValidator(spec_table, port_types, legacy_handles=settings.legacy_handles),
    )
    logger.info(
        "Engine ready: %d node types, %d executors, timeout=%s, interrupt_on_cancel=%s",
        len(spec_table.node_types()), len(executors),
        settings.node_timeout_seconds, settings.interrupt_on_cancel,
    )
    return engine
