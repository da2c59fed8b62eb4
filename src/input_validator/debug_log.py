from __future__ import annotations

import datetime as dt
import os
import time
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import TextIO

TRACE_HEADER_PREFIX = "# input-validator trace"

_TRACE_LOCK = Lock()
_TRACE: _TraceSession | None = None


def _format_value(value: object) -> str:
    text = str(value).replace("\\", "\\\\").replace("\r", "\\r").replace("\n", "\\n")
    if not text or any(ch in text for ch in ' "='):
        text = '"' + text.replace('"', '\\"') + '"'
    return text


def format_trace_fields(fields: dict[str, object]) -> str:
    return " ".join(f"{key}={_format_value(fields[key])}" for key in sorted(fields))


@dataclass(slots=True)
class _TraceSession:
    path: Path
    handle: TextIO
    started: float

    def write(self, event: str, fields: dict[str, object]) -> None:
        elapsed_ms = (time.monotonic() - self.started) * 1000.0
        line = f"+{elapsed_ms:.3f}ms event={str(event).strip()}"
        payload = format_trace_fields(fields)
        if payload:
            line += f" {payload}"
        self.handle.write(line + "\n")
        self.handle.flush()


def trace_log_path() -> Path | None:
    with _TRACE_LOCK:
        return None if _TRACE is None else _TRACE.path


def init_trace_log(*, path: Path, **fields: object) -> Path:
    """Open a fresh trace at `path` and write the run's fields as its header line.

    Any previously open trace is closed first. Raises `OSError` if the file cannot be created.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = path.open("w", encoding="utf-8")
    started_at = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    header = format_trace_fields({**fields, "pid": int(os.getpid()), "started": started_at})
    handle.write(f"{TRACE_HEADER_PREFIX} {header}\n")
    handle.flush()

    session = _TraceSession(path=path, handle=handle, started=time.monotonic())
    with _TRACE_LOCK:
        global _TRACE
        previous, _TRACE = _TRACE, session
    if previous is not None:
        previous.handle.close()
    return path


def trace_log(event: str, **fields: object) -> None:
    with _TRACE_LOCK:
        if _TRACE is None:
            return
        _TRACE.write(event, fields)


def close_trace_log() -> None:
    with _TRACE_LOCK:
        global _TRACE
        session, _TRACE = _TRACE, None
    if session is not None:
        session.handle.close()


__all__ = [
    "TRACE_HEADER_PREFIX",
    "close_trace_log",
    "format_trace_fields",
    "init_trace_log",
    "trace_log",
    "trace_log_path",
]
