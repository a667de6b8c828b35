"""
Graph engine API endpoints.

Exposes the node catalog, connection and whole-graph validation, execution
(blocking or streamed as Server-Sent Events) and the template catalog. The
engine and the shared HTTP client are created once in the app lifespan and
injected through dependencies; every execution gets its own runner.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from moodflow.core.exceptions import RunnerBusyError, UnknownTemplateError
from moodflow.models.execution import ExecutionResult, RunContext
from moodflow.models.graph import GraphDiagnostic, GraphEdge, GraphNode, Position, WorkflowGraph
from moodflow.models.port_types import NodePortSpec
from moodflow.models.settings_schema import NodeSettingsSchema
from moodflow.services.engine import MoodboardEngine
from moodflow.templates import WorkflowTemplate, get_template, instantiate_template, list_templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/graph", tags=["graph"])


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_engine(request: Request) -> MoodboardEngine:
    return request.app.state.engine


def get_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    return getattr(request.app.state, "http_client", None)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class NodeSpecResponse(BaseModel):
    type: str
    spec: NodePortSpec
    settings_schema: Optional[NodeSettingsSchema] = None
    has_executor: bool


class ConnectionRequest(BaseModel):
    source: Optional[str] = None
    target: Optional[str] = None
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")
    target_handle: Optional[str] = Field(default=None, alias="targetHandle")

    model_config = {"populate_by_name": True}


class ConnectionResponse(BaseModel):
    valid: bool


class ValidateGraphResponse(BaseModel):
    valid: bool
    diagnostics: List[GraphDiagnostic]


class ExecuteGraphRequest(BaseModel):
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []
    brand_id: Optional[str] = None
    workspace_id: Optional[str] = None
    default_settings: Dict[str, Any] = {}
    validate_first: bool = False

    def graph(self) -> WorkflowGraph:
        return WorkflowGraph(nodes=self.nodes, edges=self.edges)


class InstantiateRequest(BaseModel):
    offset: Position = Position()


def _run_context(request: ExecuteGraphRequest, http_client: Optional[httpx.AsyncClient]) -> RunContext:
    return RunContext(
        brand_id=request.brand_id,
        workspace_id=request.workspace_id,
        default_settings=request.default_settings,
        http_client=http_client,
    )


def _reject_invalid(engine: MoodboardEngine, graph: WorkflowGraph) -> None:
    diagnostics = engine.validator.validate_graph(graph)
    errors = [d for d in diagnostics if d.level == "error"]
    if errors:
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Graph validation failed",
                "diagnostics": [d.model_dump() for d in diagnostics],
            },
        )


# ---------------------------------------------------------------------------
# Catalog & validation
# ---------------------------------------------------------------------------

@router.get("/node-specs", response_model=List[NodeSpecResponse])
async def list_node_specs(engine: MoodboardEngine = Depends(get_engine)):
    return [
        NodeSpecResponse(
            type=node_type,
            spec=spec,
            settings_schema=engine.settings_schemas.get_schema(node_type),
            has_executor=engine.executors.has(node_type),
        )
        for node_type, spec in engine.spec_table.items()
    ]


@router.post("/connections/validate", response_model=ConnectionResponse)
async def validate_connection(
    request: ConnectionRequest,
    engine: MoodboardEngine = Depends(get_engine),
):
    valid = engine.validator.is_valid_connection(
        request.source, request.target, request.source_handle, request.target_handle,
    )
    return ConnectionResponse(valid=valid)


@router.post("/validate", response_model=ValidateGraphResponse)
async def validate_graph(
    graph: WorkflowGraph,
    engine: MoodboardEngine = Depends(get_engine),
):
    diagnostics = engine.validator.validate_graph(graph)
    return ValidateGraphResponse(
        valid=not any(d.level == "error" for d in diagnostics),
        diagnostics=diagnostics,
    )


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

@router.post("/execute", response_model=ExecutionResult)
async def execute_graph(
    request: ExecuteGraphRequest,
    engine: MoodboardEngine = Depends(get_engine),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    """Run a graph to completion and return the full result."""
    graph = request.graph()
    if request.validate_first:
        _reject_invalid(engine, graph)

    runner = engine.new_runner()
    try:
        return await runner.execute(graph, _run_context(request, http_client))
    except RunnerBusyError as e:
        raise HTTPException(status_code=409, detail=e.message)


@router.post("/execute/stream")
async def execute_graph_stream(
    request: ExecuteGraphRequest,
    engine: MoodboardEngine = Depends(get_engine),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    """
    Run a graph and stream its events as Server-Sent Events.

    Events: run-start, node-start, node-complete, node-error, then a final
    run-complete or run-error carrying the full result under "result".
    """
    graph = request.graph()
    if request.validate_first:
        _reject_invalid(engine, graph)

    runner = engine.new_runner()
    return StreamingResponse(
        runner.execute_streaming(graph, _run_context(request, http_client)),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@router.get("/templates", response_model=List[WorkflowTemplate])
async def get_templates(category: Optional[str] = None):
    return list_templates(category)


@router.get("/templates/{template_id}", response_model=WorkflowTemplate)
async def get_template_by_id(template_id: str):
    try:
        return get_template(template_id)
    except UnknownTemplateError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/templates/{template_id}/instantiate", response_model=WorkflowGraph)
async def instantiate(template_id: str, request: Optional[InstantiateRequest] = None):
    offset = request.offset if request else Position()
    try:
        return instantiate_template(template_id, offset)
    except UnknownTemplateError as e:
        raise HTTPException(status_code=404, detail=e.message)
