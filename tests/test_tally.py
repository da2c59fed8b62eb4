from __future__ import annotations

import pytest

from input_validator.logs import InputRecord, StateRecord
from input_validator.tally import (
    CompareMode,
    MissingCommandError,
    StateTally,
    commands_match,
    find_start_index,
    parse_compare_mode,
    tally_states,
)


def _record(keyboard: str, controller: str, network: str, *, time: float = 0.0) -> InputRecord:
    return InputRecord(time=time, keyboard_command=keyboard, controller_command=controller, network_command=network)


def _session() -> tuple[list[InputRecord], list[StateRecord]]:
    rows = [
        (1, ("L", "R", "L")),
        (2, ("A", "A", "A")),
        (2, ("A", "B", "A")),
        (3, ("Up", " Up ", "Down")),
        (2, ("X", "Y", "Y")),
        (3, ("Z", "Z", "Z")),
    ]
    inputs = [_record(*cmds, time=float(idx)) for idx, (_state, cmds) in enumerate(rows)]
    states = [StateRecord(time=float(idx), state_index=state) for idx, (state, _cmds) in enumerate(rows)]
    return inputs, states


def test_parse_compare_mode_selectors() -> None:
    assert parse_compare_mode("kx") is CompareMode.KEY_AND_XBOX
    assert parse_compare_mode("kt") is CompareMode.KEY_AND_TCP
    assert parse_compare_mode("xt") is CompareMode.XBOX_AND_TCP
    assert parse_compare_mode("all") is CompareMode.ALL


@pytest.mark.parametrize("selector", [None, "", "KT", "tcp"])
def test_parse_compare_mode_falls_back_to_default(selector: str | None) -> None:
    assert parse_compare_mode(selector) is CompareMode.KEY_AND_XBOX


def test_compare_mode_selector_roundtrip() -> None:
    for mode in CompareMode:
        assert parse_compare_mode(mode.selector) is mode


def test_commands_match_trims_values() -> None:
    record = _record(" jump", "jump ", "duck")

    assert commands_match(record, CompareMode.KEY_AND_XBOX) is True
    assert commands_match(record, CompareMode.KEY_AND_TCP) is False
    assert commands_match(record, CompareMode.XBOX_AND_TCP) is False
    assert commands_match(record, CompareMode.ALL) is False


def test_commands_match_is_case_sensitive() -> None:
    assert commands_match(_record("a", "A", "a"), CompareMode.KEY_AND_XBOX) is False


def test_find_start_index_uses_first_active_state() -> None:
    _inputs, states = _session()

    assert find_start_index(states) == 1


def test_find_start_index_defaults_to_zero() -> None:
    states = [StateRecord(time=0.0, state_index=1), StateRecord(time=0.1, state_index=3)]

    assert find_start_index(states) == 0


def test_tally_states_key_and_xbox() -> None:
    inputs, states = _session()

    tally = tally_states(inputs, states)

    assert list(tally) == [2, 3]
    assert tally[2] == StateTally(match_count=1, mismatch_count=2)
    assert tally[3] == StateTally(match_count=2, mismatch_count=0)


def test_tally_states_other_modes() -> None:
    inputs, states = _session()

    assert tally_states(inputs, states, CompareMode.KEY_AND_TCP) == {
        2: StateTally(2, 1),
        3: StateTally(1, 1),
    }
    assert tally_states(inputs, states, CompareMode.XBOX_AND_TCP) == {
        2: StateTally(2, 1),
        3: StateTally(1, 1),
    }
    assert tally_states(inputs, states, CompareMode.ALL) == {
        2: StateTally(1, 2),
        3: StateTally(1, 1),
    }


def test_tally_all_mode_never_exceeds_pairwise_modes() -> None:
    inputs, states = _session()
    strict = tally_states(inputs, states, CompareMode.ALL)

    for mode in (CompareMode.KEY_AND_XBOX, CompareMode.KEY_AND_TCP, CompareMode.XBOX_AND_TCP):
        loose = tally_states(inputs, states, mode)
        for state_id, entry in strict.items():
            assert entry.match_count <= loose[state_id].match_count


def test_tally_counts_every_walked_record() -> None:
    inputs, states = _session()
    start = find_start_index(states)

    for mode in CompareMode:
        tally = tally_states(inputs, states, mode)
        assert sum(entry.total for entry in tally.values()) == len(states) - start


def test_tally_without_active_state_covers_whole_sequence() -> None:
    inputs = [_record("A", "A", "A"), _record("A", "B", "A")]
    states = [StateRecord(time=0.0, state_index=5), StateRecord(time=0.0, state_index=1)]

    tally = tally_states(inputs, states)

    assert list(tally) == [5, 1]
    assert sum(entry.total for entry in tally.values()) == 2


def test_tally_empty_states() -> None:
    assert tally_states([_record("A", "A", "A")], []) == {}


def test_tally_ignores_extra_input_records() -> None:
    inputs = [_record("A", "A", "A"), _record("B", "C", "D")]
    states = [StateRecord(time=0.0, state_index=2)]

    assert tally_states(inputs, states) == {2: StateTally(1, 0)}


def test_tally_requires_inputs_for_every_walked_state() -> None:
    inputs = [_record("A", "A", "A")]
    states = [StateRecord(time=0.0, state_index=2), StateRecord(time=0.0, state_index=2)]

    with pytest.raises(MissingCommandError, match="state record 1"):
        tally_states(inputs, states)


def test_state_tally_proportion() -> None:
    assert StateTally(3, 1).match_proportion == 0.75
    assert StateTally(0, 0).total == 0
    assert StateTally(0, 0).match_proportion != StateTally(0, 0).match_proportion
