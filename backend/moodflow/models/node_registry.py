"""
Node catalog: the port contract of every canvas node type.

Maps canvas node type strings to their port schemas and to whether they take
part in data-flow execution at all.
"""

from __future__ import annotations

from typing import Any, Iterator

from moodflow.models.port_types import NodePortSpec, PortDataType, PortDefinition, PortDirection

_NO_DEFAULT = object()


def _inp(
    port_id: str,
    label: str,
    port_type: PortDataType,
    required: bool = False,
    default_value: Any = _NO_DEFAULT,
) -> PortDefinition:
    fields: dict[str, Any] = {
        "id": port_id,
        "label": label,
        "type": port_type,
        "direction": "input",
        "required": required,
    }
    if default_value is not _NO_DEFAULT:
        fields["default_value"] = default_value
    return PortDefinition(**fields)


def _out(port_id: str, label: str, port_type: PortDataType) -> PortDefinition:
    return PortDefinition(id=port_id, label=label, type=port_type, direction="output")


def _structural() -> NodePortSpec:
    return NodePortSpec(inputs=[], outputs=[], executable=False)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
# Keys match the canvas node `type` values. Port ids double as handle ids and
# are looked up globally by the connection validator, so keep them suffixed
# (`*_in`, `*_out`) where a bare name would collide.

NODE_PORT_SPECS: dict[str, NodePortSpec] = {
    # ---- Core ----
    "image": NodePortSpec(
        inputs=[_inp("image_in", "Image In", "image")],
        outputs=[_out("image_out", "Image", "image"), _out("url_out", "URL", "string")],
    ),
    "text": NodePortSpec(
        inputs=[_inp("text_in", "Text In", "string")],
        outputs=[_out("text_out", "Text", "string")],
    ),
    "title": NodePortSpec(
        inputs=[_inp("text_in", "Text In", "string")],
        outputs=[_out("text_out", "Text", "string")],
    ),
    "paragraph": NodePortSpec(
        inputs=[_inp("text_in", "Text In", "string")],
        outputs=[_out("text_out", "Text", "string")],
    ),
    "palette": NodePortSpec(
        inputs=[_inp("colors_in", "Colors In", "color_array")],
        outputs=[_out("colors_out", "Colors", "color_array"), _out("primary_out", "Primary", "color")],
    ),
    "typography": NodePortSpec(
        inputs=[_inp("font_in", "Font In", "string")],
        outputs=[_out("font_out", "Font Data", "json")],
    ),
    "icons": NodePortSpec(
        inputs=[_inp("set_in", "Set In", "text_array")],
        outputs=[_out("icons_out", "Icons", "text_array")],
    ),
    "reference": NodePortSpec(
        inputs=[_inp("url_in", "URL In", "string")],
        outputs=[_out("url_out", "URL", "string"), _out("meta_out", "Meta", "json")],
    ),

    # ---- Refinement ----
    "attribute": NodePortSpec(
        inputs=[_inp("text_in", "Text In", "string")],
        outputs=[_out("attribute_out", "Attribute", "string"), _out("tags_out", "Tags", "text_array")],
    ),
    "texture": NodePortSpec(
        inputs=[_inp("input", "Input", "any")],
        outputs=[_out("texture_out", "Texture", "json")],
    ),
    "tone": NodePortSpec(
        inputs=[_inp("value_in", "Value In", "number", default_value=50)],
        outputs=[_out("tone_out", "Tone", "number"), _out("label_out", "Label", "string")],
    ),
    "negative": NodePortSpec(
        inputs=[_inp("text_in", "Text In", "string")],
        outputs=[_out("negatives_out", "Negatives", "text_array")],
    ),
    "logic": NodePortSpec(
        inputs=[
            _inp("condition", "Condition", "boolean", required=True),
            _inp("input_true", "If True", "any"),
            _inp("input_false", "If False", "any"),
        ],
        outputs=[_out("output", "Output", "any")],
    ),
    "preset": NodePortSpec(
        inputs=[_inp("input", "Input", "any")],
        outputs=[_out("preset_out", "Preset", "json")],
    ),

    # ---- AI generation ----
    "checkpoint": NodePortSpec(
        inputs=[_inp("path_in", "Path", "string")],
        outputs=[
            _out("model_out", "Model", "model"),
            _out("clip_out", "CLIP", "clip"),
            _out("vae_out", "VAE", "vae_model"),
        ],
    ),
    "ksampler": NodePortSpec(
        inputs=[
            _inp("model", "Model", "model", required=True),
            _inp("positive", "Positive", "string", required=True),
            _inp("negative", "Negative", "string", default_value=""),
            _inp("latent_image", "Latent", "latent"),
        ],
        outputs=[_out("latent_out", "Latent", "latent")],
    ),
    "vae": NodePortSpec(
        inputs=[
            _inp("samples", "Samples", "latent", required=True),
            _inp("vae_model", "VAE Model", "vae_model", required=True),
        ],
        outputs=[_out("image_out", "Image", "image")],
    ),
    "mood_gauge": NodePortSpec(
        inputs=[_inp("value_in", "Value In", "number", default_value=50)],
        outputs=[_out("gauge_out", "Gauge", "number"), _out("label_out", "Label", "string")],
    ),
    "model_profile": NodePortSpec(
        inputs=[_inp("context_in", "Context", "brand_context")],
        outputs=[_out("profile_out", "Profile", "json")],
    ),
    "midjourney": NodePortSpec(
        inputs=[_inp("prompt_in", "Prompt", "string"), _inp("image_in", "Image", "image")],
        outputs=[_out("prompt_out", "Prompt", "string"), _out("image_out", "Image", "image")],
    ),

    # ---- Signal ----
    "trigger": NodePortSpec(
        inputs=[],
        outputs=[_out("trigger_out", "Trigger", "json"), _out("timestamp", "Time", "string")],
    ),
    "engine": NodePortSpec(
        inputs=[
            _inp("prompt", "Prompt", "string", required=True),
            _inp("context", "Context", "brand_context"),
            _inp("system", "System", "string"),
        ],
        outputs=[_out("response", "Response", "string"), _out("json_out", "JSON", "json")],
    ),
    "switch": NodePortSpec(
        inputs=[_inp(f"input_{i}", f"In {i}", "any") for i in range(4)],
        outputs=[_out(f"output_{i}", f"Out {i}", "any") for i in range(4)],
    ),
    "receiver": NodePortSpec(
        inputs=[_inp("data_in", "Data In", "any", required=True)],
        outputs=[_out("validated", "Validated", "any"), _out("errors", "Errors", "text_array")],
    ),
    "encoder": NodePortSpec(
        inputs=[_inp("input", "Input", "any", required=True), _inp("format", "Format", "string")],
        outputs=[_out("file_out", "File", "image"), _out("url_out", "URL", "string")],
    ),
    "emitter": NodePortSpec(
        inputs=[_inp("content", "Content", "any", required=True), _inp("channel", "Channel", "string")],
        outputs=[_out("status_out", "Status", "json"), _out("sent", "Sent", "boolean")],
    ),
    "content": NodePortSpec(
        inputs=[_inp("input", "Input", "any")],
        outputs=[_out("content_out", "Content", "json")],
    ),

    # ---- System (canvas structure only) ----
    "label": _structural(),
    "section": _structural(),
    "grid": _structural(),

    # ---- Extras ----
    "spotify": NodePortSpec(
        inputs=[_inp("query_in", "Query", "string")],
        outputs=[_out("track_out", "Track", "json"), _out("mood_out", "Mood", "string")],
    ),
    "weather": NodePortSpec(
        inputs=[_inp("location_in", "Location", "string")],
        outputs=[_out("weather_out", "Weather", "json"), _out("condition_out", "Condition", "string")],
    ),
    "competitor": NodePortSpec(
        inputs=[_inp("name_in", "Name", "string")],
        outputs=[_out("analysis_out", "Analysis", "json"), _out("share_out", "Share", "number")],
    ),
    "web_ref": NodePortSpec(
        inputs=[_inp("url_in", "URL", "string")],
        outputs=[_out("html_out", "HTML", "string"), _out("meta_out", "Meta", "json")],
    ),
    "cms_sync": NodePortSpec(
        inputs=[_inp("data_in", "Data In", "json")],
        outputs=[_out("synced_out", "Synced", "json"), _out("status_out", "Status", "boolean")],
    ),

    # ---- Text processing ----
    "content_gen": NodePortSpec(
        inputs=[
            _inp("prompt", "Prompt", "string", required=True),
            _inp("context", "Context", "brand_context"),
            _inp("tone", "Tone", "string"),
        ],
        outputs=[_out("content_out", "Content", "string"), _out("variations", "Variations", "text_array")],
    ),
    "headline_gen": NodePortSpec(
        inputs=[
            _inp("topic", "Topic", "string", required=True),
            _inp("context", "Context", "brand_context"),
        ],
        outputs=[_out("headlines", "Headlines", "text_array"), _out("best", "Best", "string")],
    ),
    "seo_optimizer": NodePortSpec(
        inputs=[
            _inp("content", "Content", "string", required=True),
            _inp("keywords", "Keywords", "text_array"),
        ],
        outputs=[
            _out("optimized", "Optimized", "string"),
            _out("score", "Score", "number"),
            _out("suggestions", "Tips", "text_array"),
        ],
    ),
    "hashtag_gen": NodePortSpec(
        inputs=[
            _inp("content", "Content", "string", required=True),
            _inp("platform", "Platform", "string"),
        ],
        outputs=[_out("hashtags", "Hashtags", "text_array"), _out("formatted", "Formatted", "string")],
    ),
    "content_rewriter": NodePortSpec(
        inputs=[
            _inp("content", "Content", "string", required=True),
            _inp("tone", "Tone", "string"),
            _inp("context", "Context", "brand_context"),
        ],
        outputs=[_out("rewritten", "Rewritten", "string"), _out("variations", "Variations", "text_array")],
    ),

    # ---- Social media ----
    "social_poster": NodePortSpec(
        inputs=[
            _inp("content", "Content", "string", required=True),
            _inp("image", "Image", "image"),
            _inp("platform", "Platform", "string"),
        ],
        outputs=[_out("post_id", "Post ID", "string"), _out("status", "Status", "json")],
    ),
    "scheduler": NodePortSpec(
        inputs=[
            _inp("content", "Content", "any", required=True),
            _inp("schedule", "Schedule", "schedule", required=True),
        ],
        outputs=[_out("scheduled", "Scheduled", "json"), _out("confirmation", "OK", "boolean")],
    ),
    "story_creator": NodePortSpec(
        inputs=[
            _inp("images", "Images", "image"),
            _inp("text", "Text", "string"),
            _inp("template", "Template", "string", default_value="default"),
        ],
        outputs=[_out("story_out", "Story", "json"), _out("preview", "Preview", "image")],
    ),

    # ---- Integrations ----
    "email_sender": NodePortSpec(
        inputs=[
            _inp("to", "To", "string", required=True),
            _inp("subject", "Subject", "string", required=True),
            _inp("body", "Body", "string", required=True),
        ],
        outputs=[_out("sent", "Sent", "boolean"), _out("message_id", "Msg ID", "string")],
    ),
    "webhook": NodePortSpec(
        inputs=[
            _inp("url", "URL", "string", required=True),
            _inp("payload", "Payload", "json"),
            _inp("method", "Method", "string", default_value="POST"),
        ],
        outputs=[_out("response", "Response", "json"), _out("status_code", "Status", "number")],
    ),
    "api_request": NodePortSpec(
        inputs=[
            _inp("url", "URL", "string", required=True),
            _inp("method", "Method", "string", default_value="GET"),
            _inp("headers", "Headers", "json"),
            _inp("body", "Body", "json"),
        ],
        outputs=[
            _out("response", "Response", "json"),
            _out("status_code", "Status", "number"),
            _out("headers_out", "Headers", "json"),
        ],
    ),
    "google_sheet": NodePortSpec(
        inputs=[
            _inp("sheet_url", "Sheet URL", "string", required=True),
            _inp("range", "Range", "string", required=True),
            _inp("data", "Data", "json"),
            _inp("operation", "Operation", "string", default_value="read"),
        ],
        outputs=[_out("result", "Result", "json"), _out("rows", "Rows", "number")],
    ),
    "slack": NodePortSpec(
        inputs=[
            _inp("channel", "Channel", "string", required=True),
            _inp("message", "Message", "string", required=True),
            _inp("thread_ts", "Thread", "string"),
        ],
        outputs=[_out("message_id", "Msg ID", "string"), _out("status", "Status", "json")],
    ),
    "telegram": NodePortSpec(
        inputs=[
            _inp("chat_id", "Chat ID", "string", required=True),
            _inp("message", "Message", "string", required=True),
            _inp("parse_mode", "Parse Mode", "string"),
        ],
        outputs=[_out("message_id", "Msg ID", "number"), _out("status", "Status", "json")],
    ),
    "whatsapp": NodePortSpec(
        inputs=[
            _inp("phone", "Phone", "string", required=True),
            _inp("message", "Message", "string", required=True),
            _inp("template", "Template", "string"),
        ],
        outputs=[_out("message_id", "Msg ID", "string"), _out("status", "Status", "json")],
    ),
    "research": NodePortSpec(
        inputs=[
            _inp("query", "Query", "string", required=True),
            _inp("type", "Type", "string", default_value="Market Analysis"),
            _inp("depth", "Depth", "string", default_value="Standard"),
            _inp("context", "Context", "string"),
        ],
        outputs=[
            _out("findings", "Findings", "json"),
            _out("summary", "Summary", "string"),
            _out("sources", "Sources", "json"),
        ],
    ),
    "content_plan": NodePortSpec(
        inputs=[
            _inp("topic", "Topic", "string", required=True),
            _inp("plan_type", "Plan Type", "string", default_value="Editorial Calendar"),
            _inp("timeframe", "Timeframe", "string", default_value="1 Month"),
            _inp("brief", "Brief", "string"),
        ],
        outputs=[
            _out("plan", "Plan", "json"),
            _out("calendar", "Calendar", "json"),
            _out("summary", "Summary", "string"),
        ],
    ),
    "meta_ads": NodePortSpec(
        inputs=[
            _inp("campaign_name", "Campaign", "string", required=True),
            _inp("objective", "Objective", "string", required=True),
            _inp("targeting", "Targeting", "json"),
            _inp("creative", "Creative", "json"),
        ],
        outputs=[
            _out("campaign_id", "Campaign ID", "string"),
            _out("status", "Status", "json"),
            _out("preview", "Preview", "json"),
        ],
    ),
    "google_ads": NodePortSpec(
        inputs=[
            _inp("campaign_name", "Campaign", "string", required=True),
            _inp("campaign_type", "Type", "string", required=True),
            _inp("keywords", "Keywords", "string"),
            _inp("bid_strategy", "Bidding", "string"),
        ],
        outputs=[
            _out("campaign_id", "Campaign ID", "string"),
            _out("status", "Status", "json"),
            _out("quality_score", "Quality", "number"),
        ],
    ),
}


class NodeSpecTable:
    """Read-only lookup over a node type -> port spec mapping."""

    def __init__(self, specs: dict[str, NodePortSpec] | None = None) -> None:
        self._specs = dict(NODE_PORT_SPECS if specs is None else specs)

    def get_spec(self, node_type: str) -> NodePortSpec | None:
        """Look up a node type spec, returning None if unknown."""
        return self._specs.get(node_type)

    def has(self, node_type: str) -> bool:
        return node_type in self._specs

    def is_executable(self, node_type: str) -> bool:
        spec = self._specs.get(node_type)
        return bool(spec and spec.executable)

    def node_types(self) -> list[str]:
        return list(self._specs)

    def items(self) -> Iterator[tuple[str, NodePortSpec]]:
        return iter(self._specs.items())

    def find_port(self, port_id: str, direction: PortDirection) -> PortDefinition | None:
        """
        Find the first port with this id across every node type.

        Ports are matched by id only, in table order; the node instance the
        handle belongs to is not consulted.
        """
        for spec in self._specs.values():
            ports = spec.inputs if direction == "input" else spec.outputs
            for port in ports:
                if port.id == port_id:
                    return port
        return None
