"""
Connection validator: decides whether an edge may be drawn, and diagnoses
whole graphs before they are run.

is_valid_connection() answers the editor's drag-connect question and looks
ports up by id across the whole spec table. validate_graph() is the stricter
pre-flight check: it resolves handles against each node instance's own type
and reports everything the runner would otherwise skip or fail on.
"""

from __future__ import annotations

import logging
from collections import Counter

from moodflow.models.graph import GraphDiagnostic, GraphEdge, GraphNode, WorkflowGraph
from moodflow.models.node_registry import NodeSpecTable
from moodflow.models.port_types import PortDefinition, PortTypeRegistry
from moodflow.services.graph_runner import topological_sort

logger = logging.getLogger(__name__)

# Directional anchors used by untyped canvas nodes (left/right/top/bottom).
LEGACY_HANDLES = frozenset({"l", "r", "t", "b"})


class ConnectionValidator:
    def __init__(
        self,
        spec_table: NodeSpecTable,
        port_types: PortTypeRegistry,
        *,
        legacy_handles: bool = True,
    ) -> None:
        self.spec_table = spec_table
        self.port_types = port_types
        self.legacy_handles = legacy_handles

    def _is_legacy(self, handle: str | None) -> bool:
        return self.legacy_handles and handle in LEGACY_HANDLES

    def is_valid_connection(
        self,
        source: str | None,
        target: str | None,
        source_port_id: str | None,
        target_port_id: str | None,
    ) -> bool:
        """Whether an edge source.source_port_id -> target.target_port_id may be drawn."""
        if not source or not target or not source_port_id or not target_port_id:
            return False
        if source == target:
            return False

        source_port = self.spec_table.find_port(source_port_id, "output")
        target_port = self.spec_table.find_port(target_port_id, "input")

        if source_port is None or target_port is None:
            return self._is_legacy(source_port_id) or self._is_legacy(target_port_id)

        return self.port_types.is_compatible(source_port.type, target_port.type)

    # ------------------------------------------------------------------
    # Whole-graph diagnostics
    # ------------------------------------------------------------------

    def _schedulable(self, node: GraphNode) -> bool:
        return node.is_active and self.spec_table.is_executable(node.type)

    def _check_handle(
        self,
        node: GraphNode,
        handle: str,
        ports: list[PortDefinition],
        kind: str,
        diags: list[GraphDiagnostic],
    ) -> PortDefinition | None:
        port = next((p for p in ports if p.id == handle), None)
        if port is not None:
            return port
        if self._is_legacy(handle):
            diags.append(GraphDiagnostic(
                level="warning",
                message=f"Node '{node.id}' uses legacy handle '{handle}', which carries no data",
                node_id=node.id,
                field=handle,
            ))
        else:
            diags.append(GraphDiagnostic(
                level="error",
                message=f"Node '{node.id}' ({node.type}) has no {kind} port '{handle}'",
                node_id=node.id,
                field=handle,
            ))
        return None

    def validate_graph(self, graph: WorkflowGraph) -> list[GraphDiagnostic]:
        """
        Check a graph without running it.

        Errors mark graphs that cannot run as drawn (cycles, bad ports, type
        mismatches, dangling edges). Warnings mark things the runner tolerates
        but silently ignores, such as edges to structural nodes.
        """
        diags: list[GraphDiagnostic] = []

        counts = Counter(n.id for n in graph.nodes)
        for node_id, count in counts.items():
            if count > 1:
                diags.append(GraphDiagnostic(
                    level="error",
                    message=f"Duplicate node id '{node_id}' ({count} nodes)",
                    node_id=node_id,
                ))

        node_map: dict[str, GraphNode] = {}
        for node in graph.nodes:
            node_map.setdefault(node.id, node)
            if not self.spec_table.has(node.type):
                diags.append(GraphDiagnostic(
                    level="warning",
                    message=f"Unknown node type '{node.type}'; the node will not run",
                    node_id=node.id,
                ))

        wired_inputs: set[tuple[str, str]] = set()
        scheduled_edges: list[GraphEdge] = []

        for edge in graph.edges:
            src = node_map.get(edge.source)
            tgt = node_map.get(edge.target)
            if src is None:
                diags.append(GraphDiagnostic(
                    level="error",
                    message=f"Edge references unknown source node '{edge.source}'",
                ))
                continue
            if tgt is None:
                diags.append(GraphDiagnostic(
                    level="error",
                    message=f"Edge references unknown target node '{edge.target}'",
                ))
                continue
            if edge.source == edge.target:
                diags.append(GraphDiagnostic(
                    level="error",
                    message=f"Edge connects node '{edge.source}' to itself",
                    node_id=edge.source,
                ))
                continue

            if not (self._schedulable(src) and self._schedulable(tgt)):
                skipped = src if not self._schedulable(src) else tgt
                diags.append(GraphDiagnostic(
                    level="warning",
                    message=(
                        f"Edge {edge.source} -> {edge.target} touches node '{skipped.id}' "
                        f"({skipped.type}), which does not run; the edge is ignored"
                    ),
                    node_id=skipped.id,
                ))
                continue

            scheduled_edges.append(edge)

            if not edge.source_handle or not edge.target_handle:
                diags.append(GraphDiagnostic(
                    level="warning",
                    message=f"Edge {edge.source} -> {edge.target} has no port handles and carries no data",
                    node_id=edge.target,
                ))
                continue

            src_spec = self.spec_table.get_spec(src.type)
            tgt_spec = self.spec_table.get_spec(tgt.type)
            src_port = self._check_handle(src, edge.source_handle, src_spec.outputs, "output", diags)
            tgt_port = self._check_handle(tgt, edge.target_handle, tgt_spec.inputs, "input", diags)

            if src_port and tgt_port:
                if not self.port_types.is_compatible(src_port.type, tgt_port.type):
                    diags.append(GraphDiagnostic(
                        level="error",
                        message=(
                            f"Type mismatch: {edge.source}.{edge.source_handle} ({src_port.type}) -> "
                            f"{edge.target}.{edge.target_handle} ({tgt_port.type})"
                        ),
                        node_id=edge.target,
                        field=edge.target_handle,
                    ))
                wired_inputs.add((edge.target, edge.target_handle))

        for node_id, node in node_map.items():
            if not self._schedulable(node):
                continue
            spec = self.spec_table.get_spec(node.type)
            for port in spec.inputs:
                if port.required and (node_id, port.id) not in wired_inputs:
                    diags.append(GraphDiagnostic(
                        level="warning",
                        message=f"Required input '{port.label}' is not connected",
                        node_id=node_id,
                        field=port.id,
                    ))

        executable_ids = [nid for nid, node in node_map.items() if self._schedulable(node)]
        if topological_sort(executable_ids, scheduled_edges) is None:
            diags.append(GraphDiagnostic(
                level="error",
                message="Graph contains a cycle, cannot execute",
            ))

        logger.debug(
            "Validated graph: %d nodes, %d edges, %d diagnostics",
            len(graph.nodes), len(graph.edges), len(diags),
        )
        return diags
