from __future__ import annotations

from collections.abc import Sequence

from .logs import InputRecord, StateRecord


class SyncMismatchError(ValueError):
    def __init__(self, index: int, *, input_time: float, state_time: float) -> None:
        super().__init__(f"timestamp mismatch at index {int(index)}: input={input_time!r} state={state_time!r}")
        self.index = int(index)
        self.input_time = input_time
        self.state_time = state_time


def first_sync_mismatch(inputs: Sequence[InputRecord], states: Sequence[StateRecord]) -> int | None:
    """Return the first index whose timestamps differ, comparing only the shared prefix."""
    for index, (inp, state) in enumerate(zip(inputs, states)):
        # Exact equality of the single-precision times, no tolerance.
        if inp.time != state.time:
            return index
    return None


def check_sync(inputs: Sequence[InputRecord], states: Sequence[StateRecord]) -> int:
    """Raise `SyncMismatchError` on the first diverging timestamp; return the compared count."""
    index = first_sync_mismatch(inputs, states)
    if index is not None:
        raise SyncMismatchError(index, input_time=inputs[index].time, state_time=states[index].time)
    return min(len(inputs), len(states))


__all__ = [
    "SyncMismatchError",
    "check_sync",
    "first_sync_mismatch",
]
