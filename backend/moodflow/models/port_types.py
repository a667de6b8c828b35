"""
Port data types and the compatibility rules between them.

A port carries exactly one PortDataType. Whether an output of one type may
feed an input of another is decided here and nowhere else.
"""

from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel


PortDataType = Literal[
    "string",
    "number",
    "boolean",
    "image",
    "json",
    "brand_context",
    "text_array",
    "color",
    "color_array",
    "model",
    "latent",
    "clip",
    "vae_model",
    "schedule",
    "any",
]
PortDirection = Literal["input", "output"]

PORT_DATA_TYPES: tuple[str, ...] = get_args(PortDataType)


class PortDefinition(BaseModel):
    id: str
    label: str
    type: PortDataType
    direction: PortDirection
    required: bool = False
    default_value: Any = None

    @property
    def has_default(self) -> bool:
        """True only when a default was declared, even if it is None."""
        return "default_value" in self.model_fields_set


class NodePortSpec(BaseModel):
    inputs: list[PortDefinition]
    outputs: list[PortDefinition]
    executable: bool = True


# Asymmetric: a key may feed every type in its set, not the other way round.
DEFAULT_COERCIONS: dict[str, frozenset[str]] = {
    "number": frozenset({"string"}),
    "boolean": frozenset({"string", "number"}),
    "color": frozenset({"string"}),
    "color_array": frozenset({"text_array", "json"}),
    "text_array": frozenset({"json"}),
    "image": frozenset({"string"}),
    "schedule": frozenset({"json"}),
}


class PortTypeRegistry:
    """Decides whether a source port type may feed a target port type."""

    def __init__(self, coercions: dict[str, frozenset[str]] | None = None) -> None:
        table = DEFAULT_COERCIONS if coercions is None else coercions
        self._coercions = {src: frozenset(targets) for src, targets in table.items()}

    def is_compatible(self, source: str, target: str) -> bool:
        if source == target:
            return True
        if source == "any" or target == "any":
            return True
        return target in self._coercions.get(source, frozenset())

    def coercions_from(self, source: str) -> frozenset[str]:
        return self._coercions.get(source, frozenset())
