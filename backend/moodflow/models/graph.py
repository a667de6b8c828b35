"""
Graph models: the canvas graph as the engine sees it.

Nodes and edges arrive in the editor's camelCase JSON (`sourceHandle`,
`isActive`); both the aliases and the snake_case field names are accepted.
Positions are carried through untouched and never read by the runner.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    x: float = 0
    y: float = 0


class GraphNode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    settings: dict[str, Any] = Field(default_factory=dict)
    position: Position = Field(default_factory=Position)
    label: str | None = None
    is_active: bool = Field(default=True, alias="isActive")


class GraphEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")


class WorkflowGraph(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> GraphNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def incoming_edges(self, node_id: str) -> list[GraphEdge]:
        return [e for e in self.edges if e.target == node_id]

    def remove_node(self, node_id: str) -> bool:
        """Delete a node together with every edge touching it."""
        before = len(self.nodes)
        self.nodes = [n for n in self.nodes if n.id != node_id]
        if len(self.nodes) == before:
            return False
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        return True

    def remove_edge(self, edge_id: str) -> bool:
        before = len(self.edges)
        self.edges = [e for e in self.edges if e.id != edge_id]
        return len(self.edges) != before


class GraphDiagnostic(BaseModel):
    level: Literal["error", "warning"]
    message: str
    node_id: str | None = None
    field: str | None = None
