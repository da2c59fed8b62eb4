from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from pathlib import Path

KEYBOARD_LABEL = "Keyboard Commands"
CONTROLLER_LABEL = "XBox Controller Commands"
NETWORK_LABEL = "TCP Commands"
STATE_LABEL = "Current Task Index"

_FIELD_SEP = ":"
_MIN_FIELDS = 3
_LINE_SPLIT_RE = re.compile(r"\r?\n")


class LogParseError(ValueError):
    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {int(line_number)}: {message}"
        super().__init__(message)
        self.line_number = line_number


@dataclass(frozen=True, slots=True)
class InputRecord:
    time: float
    keyboard_command: str
    controller_command: str
    network_command: str


@dataclass(frozen=True, slots=True)
class StateRecord:
    time: float
    state_index: int


def _iter_fields(text: str):
    """Yield `(line_number, fields)` for every non-blank line of a colon-delimited log."""
    for line_number, line in enumerate(_LINE_SPLIT_RE.split(text), start=1):
        if not line.strip():
            continue
        fields = line.split(_FIELD_SEP)
        if len(fields) < _MIN_FIELDS:
            raise LogParseError(
                f"expected <time>:<label>:<value>, got {line!r}",
                line_number=line_number,
            )
        yield line_number, fields


def _quantize_f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _parse_time(raw: str, *, line_number: int) -> float:
    # Timestamps are single precision in both logs.
    try:
        return _quantize_f32(float(raw))
    except (ValueError, OverflowError):
        raise LogParseError(f"bad time value {raw!r}", line_number=line_number) from None


def _parse_state_index(raw: str, *, line_number: int) -> int:
    try:
        return int(raw)
    except ValueError:
        raise LogParseError(f"bad state index {raw!r}", line_number=line_number) from None


class _PendingInput:
    """Three command slots of the input record currently being assembled."""

    __slots__ = ("time", "keyboard", "controller", "start_line")

    def __init__(self) -> None:
        self.time: float | None = None
        self.keyboard: str | None = None
        self.controller: str | None = None
        self.start_line: int | None = None

    def is_empty(self) -> bool:
        return self.keyboard is None and self.controller is None

    def set_keyboard(self, time: float, value: str, *, line_number: int) -> None:
        if self.keyboard is not None:
            raise LogParseError("keyboard command repeated before TCP command", line_number=line_number)
        self.time = time
        self.keyboard = value
        if self.start_line is None:
            self.start_line = line_number

    def set_controller(self, value: str, *, line_number: int) -> None:
        if self.controller is not None:
            raise LogParseError("controller command repeated before TCP command", line_number=line_number)
        self.controller = value
        if self.start_line is None:
            self.start_line = line_number

    def finish(self, value: str, *, line_number: int) -> InputRecord:
        if self.keyboard is None or self.time is None:
            raise LogParseError("TCP command without a keyboard command", line_number=line_number)
        if self.controller is None:
            raise LogParseError("TCP command without a controller command", line_number=line_number)
        return InputRecord(
            time=self.time,
            keyboard_command=self.keyboard,
            controller_command=self.controller,
            network_command=value,
        )


def parse_input_log(text: str) -> list[InputRecord]:
    records: list[InputRecord] = []
    pending = _PendingInput()
    for line_number, fields in _iter_fields(text):
        time = _parse_time(fields[0], line_number=line_number)
        label = fields[1].strip()
        value = fields[2]
        if label == KEYBOARD_LABEL:
            pending.set_keyboard(time, value, line_number=line_number)
        elif label == CONTROLLER_LABEL:
            pending.set_controller(value, line_number=line_number)
        elif label == NETWORK_LABEL:
            records.append(pending.finish(value, line_number=line_number))
            pending = _PendingInput()
    if not pending.is_empty():
        raise LogParseError("input log ends inside an incomplete command triple", line_number=pending.start_line)
    return records


def parse_state_log(text: str) -> list[StateRecord]:
    records: list[StateRecord] = []
    for line_number, fields in _iter_fields(text):
        if fields[1].strip() != STATE_LABEL:
            continue
        records.append(
            StateRecord(
                time=_parse_time(fields[0], line_number=line_number),
                state_index=_parse_state_index(fields[2], line_number=line_number),
            )
        )
    return records


def read_log_text(path: Path) -> str:
    # Loggers on the recording machine may prefix a UTF-8 BOM.
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise LogParseError(f"{path} is not UTF-8 text: {exc}") from exc


def load_input_log_file(path: Path) -> list[InputRecord]:
    return parse_input_log(read_log_text(path))


def load_state_log_file(path: Path) -> list[StateRecord]:
    return parse_state_log(read_log_text(path))


__all__ = [
    "CONTROLLER_LABEL",
    "KEYBOARD_LABEL",
    "NETWORK_LABEL",
    "STATE_LABEL",
    "InputRecord",
    "LogParseError",
    "StateRecord",
    "load_input_log_file",
    "load_state_log_file",
    "parse_input_log",
    "parse_state_log",
    "read_log_text",
]
