"""Listener State Machine — tests for the pure transition table.

Tests cover:
    - The happy path Stopped -> Starting -> Listening -> Stopping -> Stopped
    - Failed start returns to Stopped
    - Illegal commands leave the state unchanged
"""

import pytest

from hostbridge.core.domain_types import ListenerCommand as C, ListenerState as S
from hostbridge.core.listener_state import is_legal, transition


def test_happy_path_cycle():
    state = S.STOPPED
    for command, expected in [
        (C.START, S.STARTING),
        (C.BOUND, S.LISTENING),
        (C.STOP, S.STOPPING),
        (C.CLOSED, S.STOPPED),
    ]:
        state = transition(state, command)
        assert state == expected


def test_failed_start_returns_to_stopped():
    assert transition(S.STARTING, C.FAIL) == S.STOPPED


def test_listener_crash_returns_to_stopped():
    assert transition(S.LISTENING, C.CLOSED) == S.STOPPED


@pytest.mark.parametrize("state,command", [
    (S.STOPPED, C.STOP),
    (S.STOPPED, C.BOUND),
    (S.LISTENING, C.START),
    (S.STARTING, C.START),
    (S.STARTING, C.STOP),
    (S.STOPPING, C.START),
    (S.STOPPING, C.STOP),
])
def test_illegal_commands_are_noops(state, command):
    assert not is_legal(state, command)
    assert transition(state, command) == state
