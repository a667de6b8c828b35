"""
Engine configuration read from the environment.

Values come from process env (optionally seeded from a .env file). Parsing is
tolerant: a malformed value falls back to the default instead of failing
startup.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class EngineSettings(BaseModel):
    node_timeout_seconds: float | None = None
    interrupt_on_cancel: bool = False
    legacy_handles: bool = True
    log_level: str = "INFO"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


def _node_timeout_seconds() -> float | None:
    raw = os.getenv("MOODFLOW_NODE_TIMEOUT_SECONDS", "")
    try:
        parsed = float(raw)
    except ValueError:
        return None
    if parsed <= 0:
        return None
    return parsed


def load_settings() -> EngineSettings:
    """Build settings from the current environment."""
    return EngineSettings(
        node_timeout_seconds=_node_timeout_seconds(),
        interrupt_on_cancel=_env_flag("MOODFLOW_INTERRUPT_ON_CANCEL", False),
        legacy_handles=_env_flag("MOODFLOW_LEGACY_HANDLES", True),
        log_level=os.getenv("MOODFLOW_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
