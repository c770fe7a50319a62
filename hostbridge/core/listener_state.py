"""Listener State Machine — pure transition table for the bridge listener.

Invariants:
    - transition() is total: every (state, command) pair has an answer
    - Pairs missing from the table leave the state unchanged (no-op, never an error)
    - STOPPED is reachable from every state
"""

from hostbridge.core.domain_types import ListenerCommand, ListenerState

_S = ListenerState
_C = ListenerCommand

_TRANSITIONS: dict[tuple[ListenerState, ListenerCommand], ListenerState] = {
    (_S.STOPPED, _C.START): _S.STARTING,
    (_S.STARTING, _C.BOUND): _S.LISTENING,
    (_S.STARTING, _C.FAIL): _S.STOPPED,
    (_S.LISTENING, _C.STOP): _S.STOPPING,
    (_S.LISTENING, _C.CLOSED): _S.STOPPED,
    (_S.STOPPING, _C.CLOSED): _S.STOPPED,
}


def transition(state: ListenerState, command: ListenerCommand) -> ListenerState:
    """Next state for command, or the current state when the command does not apply."""
    return _TRANSITIONS.get((state, command), state)


def is_legal(state: ListenerState, command: ListenerCommand) -> bool:
    return (state, command) in _TRANSITIONS
