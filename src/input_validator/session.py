from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .debug_log import trace_log
from .logs import InputRecord, StateRecord, parse_input_log, parse_state_log, read_log_text
from .sync import check_sync
from .tally import DEFAULT_COMPARE_MODE, CompareMode, Tally, find_start_index, tally_states


@dataclass(frozen=True, slots=True)
class SessionResult:
    mode: CompareMode
    inputs: tuple[InputRecord, ...]
    states: tuple[StateRecord, ...]
    start_index: int
    tally: Tally

    @property
    def walked_count(self) -> int:
        return max(0, len(self.states) - int(self.start_index))


def validate_session(
    input_text: str,
    state_text: str,
    mode: CompareMode = DEFAULT_COMPARE_MODE,
) -> SessionResult:
    """Parse both logs, check they are synchronized, and tally modality agreement per state.

    Raises `LogParseError` (including `MissingCommandError`) for unreadable logs and
    `SyncMismatchError` when timestamps diverge.
    """
    inputs = parse_input_log(input_text)
    trace_log("parse_input", records=len(inputs))
    states = parse_state_log(state_text)
    trace_log("parse_state", records=len(states))

    compared = check_sync(inputs, states)
    trace_log("sync_ok", compared=compared)

    start_index = find_start_index(states)
    tally = tally_states(inputs, states, mode, start_index=start_index)
    trace_log("tally", mode=mode.selector, start_index=start_index, states=len(tally))
    return SessionResult(
        mode=mode,
        inputs=tuple(inputs),
        states=tuple(states),
        start_index=start_index,
        tally=tally,
    )


def validate_session_files(
    input_path: Path,
    state_path: Path,
    mode: CompareMode = DEFAULT_COMPARE_MODE,
) -> SessionResult:
    # Both files are read in full before any parsing starts.
    input_text = read_log_text(Path(input_path))
    state_text = read_log_text(Path(state_path))
    return validate_session(input_text, state_text, mode)


__all__ = [
    "SessionResult",
    "validate_session",
    "validate_session_files",
]
