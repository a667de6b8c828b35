"""
Integration nodes: messaging, ads, sheets, research and outbound HTTP.

webhook and api_request perform a real request when the run supplies an
httpx.AsyncClient in its context; without one they answer with a stub so
that graphs can be dry-run. Every other integration is a stub that checks
its required fields and echoes what it would have sent.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from moodflow.models.execution import ExecutionContext
from moodflow.services.executor_registry import as_text
from moodflow.services.executors._base import ExecutorSet

logger = logging.getLogger(__name__)

executors = ExecutorSet("integrations")

DEFAULT_TIMEOUT_MS = 30000
MAX_TEXT_BODY = 2000


def _stamp() -> int:
    return int(time.time() * 1000)


def _timeout_seconds(context: ExecutionContext) -> float:
    value = context.node_settings.get("timeout", DEFAULT_TIMEOUT_MS)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        value = DEFAULT_TIMEOUT_MS
    return value / 1000


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"text": response.text[:MAX_TEXT_BODY]}


async def _send(
    context: ExecutionContext,
    method: str,
    url: str,
    *,
    json_body: Any = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Issue a request through the run's client. Transport errors propagate to the runner."""
    logger.info("%s %s (node %s)", method, url, context.node_id)
    response = await context.http_client.request(
        method,
        url,
        json=json_body,
        headers=headers,
        timeout=_timeout_seconds(context),
    )
    if response.status_code >= 400:
        logger.warning("%s %s returned %d", method, url, response.status_code)
    return response


@executors.executor("webhook")
async def _exec_webhook(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    url = as_text(inputs.get("url"))
    method = as_text(inputs.get("method"), "POST").upper()

    if not url:
        return {"response": {"error": "No URL provided"}, "status_code": 400}

    if context.http_client is None:
        return {"response": {"stub": True, "url": url, "method": method}, "status_code": 200}

    response = await _send(context, method, url, json_body=inputs.get("payload"))
    return {"response": _response_body(response), "status_code": response.status_code}


@executors.executor("api_request")
async def _exec_api_request(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    url = as_text(inputs.get("url"))
    method = as_text(inputs.get("method"), "GET").upper()

    if not url:
        return {"response": {"error": "No URL provided"}, "status_code": 400, "headers_out": {}}

    if context.http_client is None:
        return {
            "response": {"stub": True, "url": url, "method": method},
            "status_code": 200,
            "headers_out": {},
        }

    headers = inputs.get("headers")
    headers = {str(k): str(v) for k, v in headers.items()} if isinstance(headers, dict) else None
    body = inputs.get("body") if method not in ("GET", "HEAD") else None

    response = await _send(context, method, url, json_body=body, headers=headers)
    return {
        "response": _response_body(response),
        "status_code": response.status_code,
        "headers_out": dict(response.headers),
    }


@executors.executor("email_sender")
async def _exec_email_sender(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    return {"sent": False, "message_id": f"msg_stub_{_stamp()}"}


@executors.executor("google_sheet")
async def _exec_google_sheet(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    sheet_url = as_text(inputs.get("sheet_url"))
    if not sheet_url:
        return {"result": {"error": "No Sheet URL provided"}, "rows": 0}
    return {
        "result": {
            "stub": True,
            "sheet_url": sheet_url,
            "range": as_text(inputs.get("range")),
            "operation": as_text(inputs.get("operation"), "read"),
        },
        "rows": 0,
    }


@executors.executor("slack")
async def _exec_slack(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    channel = as_text(inputs.get("channel"))
    if not channel or not as_text(inputs.get("message")):
        return {"message_id": "", "status": {"error": "Channel and message required"}}
    return {
        "message_id": f"slack_stub_{_stamp()}",
        "status": {"ok": True, "channel": channel, "stub": True},
    }


@executors.executor("telegram")
async def _exec_telegram(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    chat_id = as_text(inputs.get("chat_id"))
    if not chat_id or not as_text(inputs.get("message")):
        return {"message_id": 0, "status": {"error": "Chat ID and message required"}}
    return {
        "message_id": _stamp(),
        "status": {"ok": True, "chat_id": chat_id, "stub": True},
    }


@executors.executor("whatsapp")
async def _exec_whatsapp(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    phone = as_text(inputs.get("phone"))
    if not phone or not as_text(inputs.get("message")):
        return {"message_id": "", "status": {"error": "Phone and message required"}}
    return {
        "message_id": f"wamid_stub_{_stamp()}",
        "status": {"ok": True, "phone": phone, "stub": True},
    }


@executors.executor("research")
async def _exec_research(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    query = as_text(inputs.get("query"))
    if not query:
        return {"findings": {"error": "No query provided"}, "summary": "", "sources": []}
    return {
        "findings": {
            "stub": True,
            "query": query,
            "type": as_text(inputs.get("type"), "Market Analysis"),
            "depth": as_text(inputs.get("depth"), "Standard"),
        },
        "summary": f"Research results for: {query}",
        "sources": [],
    }


@executors.executor("content_plan")
async def _exec_content_plan(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    topic = as_text(inputs.get("topic"))
    if not topic:
        return {"plan": {"error": "No topic provided"}, "calendar": {}, "summary": ""}
    timeframe = as_text(inputs.get("timeframe"), "1 Month")
    return {
        "plan": {
            "stub": True,
            "topic": topic,
            "plan_type": as_text(inputs.get("plan_type"), "Editorial Calendar"),
            "timeframe": timeframe,
        },
        "calendar": {},
        "summary": f"Content plan for: {topic} ({timeframe})",
    }


@executors.executor("meta_ads")
async def _exec_meta_ads(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    if not as_text(inputs.get("campaign_name")):
        return {"campaign_id": "", "status": {"error": "Campaign name required"}, "preview": {}}
    return {
        "campaign_id": f"meta_stub_{_stamp()}",
        "status": {"ok": True, "objective": as_text(inputs.get("objective"), "Awareness"), "stub": True},
        "preview": {},
    }


@executors.executor("google_ads")
async def _exec_google_ads(inputs: dict, context: ExecutionContext) -> dict[str, Any]:
    if not as_text(inputs.get("campaign_name")):
        return {"campaign_id": "", "status": {"error": "Campaign name required"}, "quality_score": 0}
    return {
        "campaign_id": f"gads_stub_{_stamp()}",
        "status": {"ok": True, "campaign_type": as_text(inputs.get("campaign_type"), "Search"), "stub": True},
        "quality_score": 0,
    }
