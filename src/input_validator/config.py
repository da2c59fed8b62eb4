from __future__ import annotations

import os
from pathlib import Path

TRACE_LOG_ENV = "INPUT_VALIDATOR_TRACE_LOG"
DEBUG_ENV = "INPUT_VALIDATOR_DEBUG"

_DEBUG_OVERRIDE: bool | None = None


def set_debug_enabled(enabled: bool | None) -> None:
    """Force the debug flag on/off for this process; `None` defers to the environment again."""
    global _DEBUG_OVERRIDE
    _DEBUG_OVERRIDE = None if enabled is None else bool(enabled)


def debug_enabled() -> bool:
    if _DEBUG_OVERRIDE is not None:
        return _DEBUG_OVERRIDE
    return os.environ.get(DEBUG_ENV) == "1"


def resolve_trace_log_path(explicit: Path | None = None) -> Path | None:
    if explicit is not None:
        return Path(explicit)
    raw = os.environ.get(TRACE_LOG_ENV)
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip()).expanduser()


__all__ = [
    "DEBUG_ENV",
    "TRACE_LOG_ENV",
    "debug_enabled",
    "resolve_trace_log_path",
    "set_debug_enabled",
]
