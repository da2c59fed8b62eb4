from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from pathlib import Path

import msgspec

from .session import SessionResult
from .tally import StateTally

REPORT_HEADER = "StateNum,MatchCount,MismatchCount,MatchProportion"


class ReportWriteError(ValueError):
    pass


class StateSummary(msgspec.Struct, forbid_unknown_fields=True):
    state: int
    match_count: int
    mismatch_count: int
    match_proportion: float | None = None


class SessionSummary(msgspec.Struct, forbid_unknown_fields=True):
    mode: str
    start_index: int
    input_record_count: int
    state_record_count: int
    states: list[StateSummary] = msgspec.field(default_factory=list)


def format_proportion(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return f"{value:.15g}"


def format_report_lines(tally: Mapping[int, StateTally]) -> Iterable[str]:
    yield REPORT_HEADER
    for state_id, entry in tally.items():
        yield (
            f"{int(state_id)},{int(entry.match_count)},{int(entry.mismatch_count)},"
            f"{format_proportion(entry.match_proportion)}"
        )


def format_report(tally: Mapping[int, StateTally]) -> str:
    return "".join(f"{line}\n" for line in format_report_lines(tally))


def write_report(path: Path, tally: Mapping[int, StateTally]) -> Path:
    path = Path(path)
    text = format_report(tally)
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise ReportWriteError(f"failed to write report {path}: {exc}") from exc
    return path


def build_summary(result: SessionResult) -> SessionSummary:
    states: list[StateSummary] = []
    for state_id, entry in result.tally.items():
        proportion = entry.match_proportion
        states.append(
            StateSummary(
                state=int(state_id),
                match_count=int(entry.match_count),
                mismatch_count=int(entry.mismatch_count),
                match_proportion=None if math.isnan(proportion) else float(proportion),
            )
        )
    return SessionSummary(
        mode=result.mode.selector,
        start_index=int(result.start_index),
        input_record_count=len(result.inputs),
        state_record_count=len(result.states),
        states=states,
    )


def encode_summary(summary: SessionSummary) -> bytes:
    return msgspec.json.format(msgspec.json.encode(summary), indent=2) + b"\n"


def decode_summary(data: bytes | str) -> SessionSummary:
    try:
        return msgspec.json.decode(data, type=SessionSummary)
    except msgspec.DecodeError as exc:
        raise ValueError(f"invalid session summary: {exc}") from exc


def write_summary(path: Path, result: SessionResult) -> Path:
    path = Path(path)
    payload = encode_summary(build_summary(result))
    try:
        path.write_bytes(payload)
    except OSError as exc:
        raise ReportWriteError(f"failed to write summary {path}: {exc}") from exc
    return path


__all__ = [
    "REPORT_HEADER",
    "ReportWriteError",
    "SessionSummary",
    "StateSummary",
    "build_summary",
    "decode_summary",
    "encode_summary",
    "format_proportion",
    "format_report",
    "format_report_lines",
    "write_report",
    "write_summary",
]
