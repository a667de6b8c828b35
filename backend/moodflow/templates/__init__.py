"""
Workflow template catalog and instantiation.

instantiate_template() copies a template onto a canvas: every node and edge
gets a fresh id, edge endpoints are rewired through the old -> new id map,
and positions are shifted by the caller's offset so repeated instances never
overlap or collide.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from moodflow.core.exceptions import UnknownTemplateError
from moodflow.models.graph import GraphEdge, GraphNode, Position, WorkflowGraph
from moodflow.templates.catalog import TemplateCategory, WORKFLOW_TEMPLATES, WorkflowTemplate

logger = logging.getLogger(__name__)

__all__ = [
    "TemplateCategory",
    "WORKFLOW_TEMPLATES",
    "WorkflowTemplate",
    "get_template",
    "instantiate_template",
    "list_templates",
]

_TEMPLATES_BY_ID: dict[str, WorkflowTemplate] = {t.id: t for t in WORKFLOW_TEMPLATES}


def list_templates(category: str | None = None) -> list[WorkflowTemplate]:
    if category is None:
        return list(WORKFLOW_TEMPLATES)
    return [t for t in WORKFLOW_TEMPLATES if t.category == category]


def get_template(template_id: str) -> WorkflowTemplate:
    template = _TEMPLATES_BY_ID.get(template_id)
    if template is None:
        raise UnknownTemplateError(template_id)
    return template


def instantiate_template(
    template_id: str,
    offset: Position | tuple[float, float] = (0, 0),
    id_factory: Callable[[], Any] = uuid.uuid4,
) -> WorkflowGraph:
    """Return a fresh copy of a template's graph, ready to drop onto a canvas."""
    template = get_template(template_id)
    dx, dy = (offset.x, offset.y) if isinstance(offset, Position) else offset

    id_map: dict[str, str] = {}
    nodes: list[GraphNode] = []
    for node in template.nodes:
        new_id = str(id_factory())
        id_map[node.id] = new_id
        nodes.append(node.model_copy(
            update={
                "id": new_id,
                "position": Position(x=node.position.x + dx, y=node.position.y + dy),
            },
            deep=True,
        ))

    edges: list[GraphEdge] = []
    for edge in template.edges:
        edges.append(edge.model_copy(
            update={
                "id": str(id_factory()),
                "source": id_map.get(edge.source, edge.source),
                "target": id_map.get(edge.target, edge.target),
            },
        ))

    logger.debug("Instantiated template %s: %d nodes, %d edges", template_id, len(nodes), len(edges))
    return WorkflowGraph(nodes=nodes, edges=edges)
