"""
Per-node-type settings schemas.

Describes the configurable fields the inspector panel renders for a node and,
for the runner, the default value of each field. Defaults sit underneath the
run-level and per-node settings when a node executes.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


SettingsFieldType = Literal[
    "text", "textarea", "number", "range", "select", "toggle", "color", "tags", "key-value", "code",
]


class SettingsOption(BaseModel):
    label: str
    value: str


class SettingsField(BaseModel):
    key: str
    label: str
    type: SettingsFieldType
    default_value: Any = None
    description: str | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: list[SettingsOption] = Field(default_factory=list)
    placeholder: str | None = None


class SettingsSection(BaseModel):
    label: str
    fields: list[SettingsField]


class NodeSettingsSchema(BaseModel):
    node_type: str
    sections: list[SettingsSection]


def _opts(*values: str) -> list[SettingsOption]:
    return [SettingsOption(label=v.replace("_", " ").title(), value=v) for v in values]


_MODEL_OPTIONS = [
    SettingsOption(label="GPT-4o", value="gpt-4o"),
    SettingsOption(label="Gemini 2.5 Pro", value="gemini-2.5-pro"),
    SettingsOption(label="Gemini 2.0 Flash", value="gemini-2.0-flash"),
]
_PLATFORM_OPTIONS = _opts("instagram", "twitter", "linkedin", "tiktok", "facebook")


def _schema(node_type: str, *sections: tuple[str, list[SettingsField]]) -> NodeSettingsSchema:
    return NodeSettingsSchema(
        node_type=node_type,
        sections=[SettingsSection(label=label, fields=fields) for label, fields in sections],
    )


SETTINGS_SCHEMAS: dict[str, NodeSettingsSchema] = {
    "trigger": _schema(
        "trigger",
        ("Source", [
            SettingsField(key="triggerMode", label="Mode", type="select", default_value="manual",
                          options=_opts("schedule", "telegram", "manual")),
        ]),
        ("Schedule", [
            SettingsField(key="recurrence", label="Repeat", type="select", default_value="daily",
                          options=_opts("daily", "weekly", "monthly", "once")),
            SettingsField(key="time", label="Time", type="text", default_value="09:00", placeholder="HH:MM"),
        ]),
    ),
    "engine": _schema(
        "engine",
        ("Model Settings", [
            SettingsField(key="model", label="Model", type="select", default_value="gemini-2.0-flash",
                          options=_MODEL_OPTIONS),
            SettingsField(key="temperature", label="Temperature", type="range", default_value=0.7,
                          min=0, max=2, step=0.1),
            SettingsField(key="maxTokens", label="Max Tokens", type="number", default_value=2048, min=1, max=128000),
            SettingsField(key="responseFormat", label="Response Format", type="select", default_value="text",
                          options=_opts("text", "json")),
        ]),
    ),
    "switch": _schema(
        "switch",
        ("Routing", [
            SettingsField(key="mode", label="Mode", type="select", default_value="passthrough",
                          options=_opts("passthrough", "broadcast")),
        ]),
    ),
    "receiver": _schema(
        "receiver",
        ("Validation", [
            SettingsField(key="strictMode", label="Strict Mode", type="toggle", default_value=False),
        ]),
    ),
    "encoder": _schema(
        "encoder",
        ("Output", [
            SettingsField(key="format", label="Format", type="select", default_value="png",
                          options=_opts("png", "jpg", "webp")),
            SettingsField(key="quality", label="Quality", type="range", default_value=90, min=1, max=100),
        ]),
    ),
    "emitter": _schema(
        "emitter",
        ("Delivery", [
            SettingsField(key="channel", label="Channel", type="select", default_value="download",
                          options=_opts("download", "email", "drive", "telegram")),
            SettingsField(key="retryCount", label="Retry Count", type="number", default_value=3, min=0, max=10),
        ]),
    ),
    "ksampler": _schema(
        "ksampler",
        ("Sampling", [
            SettingsField(key="steps", label="Steps", type="range", default_value=20, min=1, max=150),
            SettingsField(key="cfg", label="CFG Scale", type="range", default_value=7, min=1, max=30, step=0.5),
            SettingsField(key="seed", label="Seed", type="number", default_value=-1, min=-1, max=2147483647,
                          description="-1 for random"),
            SettingsField(key="samplerName", label="Sampler", type="select", default_value="euler",
                          options=_opts("euler", "euler_ancestral", "dpmpp_2m")),
            SettingsField(key="scheduler", label="Scheduler", type="select", default_value="normal",
                          options=_opts("normal", "karras")),
            SettingsField(key="denoise", label="Denoise", type="range", default_value=1.0, min=0, max=1, step=0.01),
        ]),
    ),
    "content_gen": _schema(
        "content_gen",
        ("Generation", [
            SettingsField(key="model", label="Model", type="select", default_value="gemini-2.0-flash",
                          options=_MODEL_OPTIONS),
            SettingsField(key="outputCount", label="Variations", type="number", default_value=2, min=1, max=10),
            SettingsField(key="tone", label="Tone", type="select", default_value="professional",
                          options=_opts("professional", "casual", "playful", "bold")),
        ]),
    ),
    "headline_gen": _schema(
        "headline_gen",
        ("Headlines", [
            SettingsField(key="count", label="Count", type="number", default_value=3, min=1, max=20),
        ]),
    ),
    "hashtag_gen": _schema(
        "hashtag_gen",
        ("Hashtags", [
            SettingsField(key="count", label="Count", type="number", default_value=5, min=1, max=30),
            SettingsField(key="platform", label="Platform", type="select", default_value="instagram",
                          options=_PLATFORM_OPTIONS),
        ]),
    ),
    "content_rewriter": _schema(
        "content_rewriter",
        ("Rewrite", [
            SettingsField(key="tone", label="Tone", type="select", default_value="casual",
                          options=_opts("professional", "casual", "playful", "bold")),
        ]),
    ),
    "social_poster": _schema(
        "social_poster",
        ("Publishing", [
            SettingsField(key="platform", label="Platform", type="select", default_value="instagram",
                          options=_PLATFORM_OPTIONS),
        ]),
    ),
    "api_request": _schema(
        "api_request",
        ("Request", [
            SettingsField(key="timeout", label="Timeout (ms)", type="number", default_value=30000,
                          min=1000, max=120000),
        ]),
    ),
    "webhook": _schema(
        "webhook",
        ("Request", [
            SettingsField(key="timeout", label="Timeout (ms)", type="number", default_value=30000,
                          min=1000, max=120000),
        ]),
    ),
}


class SettingsSchemaTable:
    """Lookup of settings schemas and their declared defaults."""

    def __init__(self, schemas: dict[str, NodeSettingsSchema] | None = None) -> None:
        self._schemas = dict(SETTINGS_SCHEMAS if schemas is None else schemas)

    def get_schema(self, node_type: str) -> NodeSettingsSchema | None:
        return self._schemas.get(node_type)

    def defaults_for(self, node_type: str) -> dict[str, Any]:
        """Declared defaults for a node type; fields without a default are left out."""
        schema = self._schemas.get(node_type)
        if schema is None:
            return {}
        return {
            field.key: field.default_value
            for section in schema.sections
            for field in section.fields
            if field.default_value is not None
        }
