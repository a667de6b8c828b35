"""
Prebuilt workflow templates used to seed new canvases.

Templates are plain data: every edge names real port handles so a freshly
instantiated template runs as-is.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from moodflow.models.graph import GraphEdge, GraphNode, Position

TemplateCategory = Literal[
    "Brand Architecture",
    "Intelligence Lab",
    "Growth & Ads",
    "Content Engine",
    "Systems Architecture",
    "Automations",
]


class WorkflowTemplate(BaseModel):
    id: str
    label: str
    description: str
    category: TemplateCategory
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)


def _node(node_id: str, node_type: str, x: float, y: float, label: str, **settings: Any) -> GraphNode:
    return GraphNode(
        id=node_id,
        type=node_type,
        position=Position(x=x, y=y),
        label=label,
        settings=settings,
    )


def _edge(source: str, source_handle: str, target: str, target_handle: str) -> GraphEdge:
    return GraphEdge(
        id=f"e-{source}-{target}-{target_handle}",
        source=source,
        target=target,
        source_handle=source_handle,
        target_handle=target_handle,
    )


WORKFLOW_TEMPLATES: list[WorkflowTemplate] = [
    WorkflowTemplate(
        id="signature_render",
        label="Signature Render",
        description="Linear high-fidelity branded art pipeline.",
        category="Brand Architecture",
        nodes=[
            _node("b1", "text", 100, 100, "Creative_Brief",
                  text="Hero shot of the flagship product in the brand palette"),
            _node("e1", "engine", 450, 100, "Synthesizer"),
            _node("en1", "encoder", 850, 100, "Finalizer", format="png"),
        ],
        edges=[
            _edge("b1", "text_out", "e1", "prompt"),
            _edge("e1", "response", "en1", "input"),
        ],
    ),
    WorkflowTemplate(
        id="blog_factory",
        label="Global Editorial Engine",
        description="Scalable content production pipeline for long-form blogs and strategic archives.",
        category="Content Engine",
        nodes=[
            _node("b1", "text", 0, 0, "Editorial_Brief", text="Quarterly trends in sustainable packaging"),
            _node("e1", "engine", 350, 0, "Researcher"),
            _node("c1", "content", 700, 0, "Writer"),
            _node("em1", "emitter", 1050, 0, "G_Drive_Save", channel="drive"),
        ],
        edges=[
            _edge("b1", "text_out", "e1", "prompt"),
            _edge("e1", "json_out", "c1", "input"),
            _edge("c1", "content_out", "em1", "content"),
        ],
    ),
    WorkflowTemplate(
        id="multi_channel",
        label="Multi-Channel Distribution",
        description="Distribute one piece of content to Email, Drive and Telegram at once.",
        category="Automations",
        nodes=[
            _node("t1", "trigger", 100, 300, "Start"),
            _node("c1", "content", 400, 300, "Final_Review"),
            _node("s1", "switch", 700, 300, "Fan_Out", mode="Broadcaster"),
            _node("em1", "emitter", 1050, 100, "Email_Blast", channel="email"),
            _node("em2", "emitter", 1050, 300, "Backup_Drive", channel="drive"),
            _node("em3", "emitter", 1050, 500, "Telegram_Alert", channel="telegram"),
        ],
        edges=[
            _edge("t1", "trigger_out", "c1", "input"),
            _edge("c1", "content_out", "s1", "input_0"),
            _edge("s1", "output_0", "em1", "content"),
            _edge("s1", "output_1", "em2", "content"),
            _edge("s1", "output_2", "em3", "content"),
        ],
    ),
    WorkflowTemplate(
        id="social_auto_pilot",
        label="Automated Social Presence",
        description="Multi-format content generation for effortless social growth.",
        category="Automations",
        nodes=[
            _node("b1", "text", 100, 1000, "Daily_Pulse", text="Behind the scenes at the studio"),
            _node("e4", "engine", 450, 1000, "Creative_Generator"),
            _node("s3", "switch", 800, 1000, "Format_Splitter", mode="Broadcaster"),
            _node("en3", "encoder", 1150, 850, "Story_Encoder", format="jpg"),
            _node("en4", "encoder", 1150, 1150, "Feed_Encoder", format="png"),
        ],
        edges=[
            _edge("b1", "text_out", "e4", "prompt"),
            _edge("e4", "response", "s3", "input_0"),
            _edge("s3", "output_0", "en3", "input"),
            _edge("s3", "output_1", "en4", "input"),
        ],
    ),
    WorkflowTemplate(
        id="brand_multi_shot",
        label="Brand Aesthetics Multi-Shot",
        description="Rapid generation of multi-variant branded visuals for diverse marketing assets.",
        category="Brand Architecture",
        nodes=[
            _node("b1", "text", 100, 300, "Shot_Brief", text="Minimal product still life, soft daylight"),
            _node("s1", "switch", 450, 300, "Router", mode="Broadcaster"),
            _node("e2", "engine", 800, 150, "Engine_A"),
            _node("e3", "engine", 800, 450, "Engine_B"),
            _node("m2", "midjourney", 1200, 150, "Variant_A"),
            _node("m3", "midjourney", 1200, 450, "Variant_B"),
        ],
        edges=[
            _edge("b1", "text_out", "s1", "input_0"),
            _edge("s1", "output_0", "e2", "prompt"),
            _edge("s1", "output_1", "e3", "prompt"),
            _edge("e2", "response", "m2", "prompt_in"),
            _edge("e3", "response", "m3", "prompt_in"),
        ],
    ),
    WorkflowTemplate(
        id="newsletter_auto",
        label="Newsletter Automation",
        description="Curation, AI summary, headline and distribution by e-mail.",
        category="Automations",
        nodes=[
            _node("tp1", "text", 0, 0, "Topic", text="This week in design systems"),
            _node("rc1", "text", 0, 250, "Recipients", text="subscribers@example.com"),
            _node("cp1", "content_plan", 350, 0, "Issue_Plan"),
            _node("hg1", "headline_gen", 350, 250, "Subject_Lines"),
            _node("cg1", "content_gen", 700, 0, "AI_Summarizer"),
            _node("es1", "email_sender", 1050, 100, "Newsletter_Push"),
        ],
        edges=[
            _edge("tp1", "text_out", "cp1", "topic"),
            _edge("tp1", "text_out", "hg1", "topic"),
            _edge("cp1", "summary", "cg1", "prompt"),
            _edge("hg1", "best", "es1", "subject"),
            _edge("cg1", "content_out", "es1", "body"),
            _edge("rc1", "text_out", "es1", "to"),
        ],
    ),
    WorkflowTemplate(
        id="product_launch",
        label="Product Launch Kit",
        description="One launch brief fanned out to social copy, hashtags, visuals and ads.",
        category="Growth & Ads",
        nodes=[
            _node("b1", "text", 100, 500, "Launch_Brief", text="Introducing the Aurora desk lamp"),
            _node("s1", "switch", 450, 500, "Asset_Blast", mode="Broadcaster"),
            _node("cg1", "content_gen", 850, 100, "Social_Blitz", tone="bold"),
            _node("m1", "midjourney", 850, 400, "Hero_Visuals"),
            _node("ma1", "meta_ads", 850, 700, "Campaign_Setup"),
            _node("ob1", "text", 450, 800, "Objective", text="Awareness"),
            _node("hs1", "hashtag_gen", 1250, 100, "Hashtags"),
            _node("sp1", "social_poster", 1250, 300, "Launch_Post"),
        ],
        edges=[
            _edge("b1", "text_out", "s1", "input_0"),
            _edge("s1", "output_0", "cg1", "prompt"),
            _edge("s1", "output_1", "m1", "prompt_in"),
            _edge("s1", "output_2", "ma1", "campaign_name"),
            _edge("ob1", "text_out", "ma1", "objective"),
            _edge("cg1", "content_out", "hs1", "content"),
            _edge("cg1", "content_out", "sp1", "content"),
            _edge("m1", "image_out", "sp1", "image"),
        ],
    ),
    WorkflowTemplate(
        id="lead_gen",
        label="Lead-Gen Orchestrator",
        description="Lead capture webhook into a sheet, with a nurture sequence and CRM push.",
        category="Automations",
        nodes=[
            _node("u1", "text", 0, 0, "Capture_Endpoint", text="https://hooks.example.com/leads"),
            _node("sh1", "text", 0, 200, "Lead_Sheet", text="https://docs.google.com/spreadsheets/d/leads"),
            _node("rg1", "text", 0, 400, "Sheet_Range", text="Leads!A:F"),
            _node("wh1", "webhook", 350, 0, "Lead_Intake"),
            _node("r1", "receiver", 700, 0, "Funnel_Validator"),
            _node("gs1", "google_sheet", 1050, 200, "CRM_Sheet"),
            _node("c3", "content", 1050, -100, "Email_Nurture_Seq"),
            _node("em1", "emitter", 1400, -100, "ESP_Push", channel="email"),
        ],
        edges=[
            _edge("u1", "text_out", "wh1", "url"),
            _edge("wh1", "response", "r1", "data_in"),
            _edge("r1", "validated", "gs1", "data"),
            _edge("sh1", "text_out", "gs1", "sheet_url"),
            _edge("rg1", "text_out", "gs1", "range"),
            _edge("r1", "validated", "c3", "input"),
            _edge("c3", "content_out", "em1", "content"),
        ],
    ),
    WorkflowTemplate(
        id="generative_engine_basic",
        label="Glass Engine (SDXL)",
        description="Checkpoint, sampler and VAE decode: the minimal diffusion pipeline.",
        category="Systems Architecture",
        nodes=[
            _node("ckpt", "checkpoint", 0, 50, "Model Loader"),
            _node("pos", "text", 0, 300, "Positive Prompt", text="frosted glass sculpture, studio lighting"),
            _node("neg", "text", 0, 500, "Negative Prompt", text="blurry, watermark, low contrast"),
            _node("ks", "ksampler", 400, 200, "Sampler", steps=30, cfg=7.5, seed=42),
            _node("vae", "vae", 800, 200, "VAE Decode"),
            _node("out", "image", 1150, 200, "Render"),
        ],
        edges=[
            _edge("ckpt", "model_out", "ks", "model"),
            _edge("pos", "text_out", "ks", "positive"),
            _edge("neg", "text_out", "ks", "negative"),
            _edge("ks", "latent_out", "vae", "samples"),
            _edge("ckpt", "vae_out", "vae", "vae_model"),
            _edge("vae", "image_out", "out", "image_in"),
        ],
    ),
    WorkflowTemplate(
        id="research_board",
        label="Annotated Research Board",
        description="Market research flow framed by a section with sticky-note labels.",
        category="Intelligence Lab",
        nodes=[
            _node("sec", "section", -50, -50, "Research Sprint"),
            _node("note1", "label", 0, -150, "Start with one crisp question"),
            _node("note2", "label", 700, -150, "Summary lands here"),
            _node("q1", "text", 0, 0, "Question", text="Where is demand for refillable cosmetics growing?"),
            _node("rs1", "research", 350, 0, "Market_Scan"),
            _node("p1", "paragraph", 700, 0, "Findings"),
        ],
        edges=[
            _edge("q1", "text_out", "rs1", "query"),
            _edge("rs1", "summary", "p1", "text_in"),
            GraphEdge(id="e-note1-q1", source="note1", target="q1", source_handle="b", target_handle="t"),
            GraphEdge(id="e-note2-p1", source="note2", target="p1", source_handle="b", target_handle="t"),
        ],
    ),
]
