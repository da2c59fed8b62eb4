from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from .logs import InputRecord, LogParseError, StateRecord

ACTIVE_STATE_INDEX = 2


class CompareMode(IntEnum):
    KEY_AND_XBOX = 0
    KEY_AND_TCP = 1
    XBOX_AND_TCP = 2
    ALL = 3

    @property
    def selector(self) -> str:
        return _MODE_SELECTORS_BY_MODE[self]


MODE_SELECTORS: dict[str, CompareMode] = {
    "kx": CompareMode.KEY_AND_XBOX,
    "kt": CompareMode.KEY_AND_TCP,
    "xt": CompareMode.XBOX_AND_TCP,
    "all": CompareMode.ALL,
}
_MODE_SELECTORS_BY_MODE = {mode: selector for selector, mode in MODE_SELECTORS.items()}
DEFAULT_COMPARE_MODE = CompareMode.KEY_AND_XBOX


def parse_compare_mode(selector: str | None) -> CompareMode:
    """Map a CLI selector to a mode; missing or unknown selectors fall back to keyboard vs controller."""
    if selector is None:
        return DEFAULT_COMPARE_MODE
    return MODE_SELECTORS.get(selector, DEFAULT_COMPARE_MODE)


class MissingCommandError(LogParseError):
    pass


@dataclass(slots=True)
class StateTally:
    match_count: int = 0
    mismatch_count: int = 0

    @property
    def total(self) -> int:
        return self.match_count + self.mismatch_count

    @property
    def match_proportion(self) -> float:
        total = self.total
        if total == 0:
            return float("nan")
        return self.match_count / total


Tally = dict[int, StateTally]


def commands_match(record: InputRecord, mode: CompareMode) -> bool:
    keyboard = record.keyboard_command.strip()
    controller = record.controller_command.strip()
    network = record.network_command.strip()
    if mode == CompareMode.KEY_AND_XBOX:
        return keyboard == controller
    if mode == CompareMode.KEY_AND_TCP:
        return keyboard == network
    if mode == CompareMode.XBOX_AND_TCP:
        return controller == network
    if mode == CompareMode.ALL:
        return keyboard == controller and keyboard == network
    raise ValueError(f"unknown compare mode: {mode!r}")


def find_start_index(states: Sequence[StateRecord], *, active_state: int = ACTIVE_STATE_INDEX) -> int:
    for index, state in enumerate(states):
        if int(state.state_index) == int(active_state):
            return index
    return 0


def tally_states(
    inputs: Sequence[InputRecord],
    states: Sequence[StateRecord],
    mode: CompareMode = DEFAULT_COMPARE_MODE,
    *,
    start_index: int | None = None,
) -> Tally:
    """Count per-state agreement between two input modalities.

    Walks the state records from the first active-state entry (or index 0 when
    there is none) to the end, bucketing each position by its state id. Every
    walked position needs a parsed input record at the same index.
    """
    if start_index is None:
        start_index = find_start_index(states)
    tally: Tally = {}
    for index in range(int(start_index), len(states)):
        if index >= len(inputs):
            raise MissingCommandError(
                f"no input commands for state record {index} ({len(inputs)} input records parsed)"
            )
        state_id = int(states[index].state_index)
        entry = tally.get(state_id)
        if entry is None:
            entry = StateTally()
            tally[state_id] = entry
        if commands_match(inputs[index], mode):
            entry.match_count += 1
        else:
            entry.mismatch_count += 1
    return tally


__all__ = [
    "ACTIVE_STATE_INDEX",
    "DEFAULT_COMPARE_MODE",
    "MODE_SELECTORS",
    "CompareMode",
    "MissingCommandError",
    "StateTally",
    "Tally",
    "commands_match",
    "find_start_index",
    "parse_compare_mode",
    "tally_states",
]
