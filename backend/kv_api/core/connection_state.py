"""Connection Lifecycle: states, events, legal transitions and the reconnect delay.

Invariants:
    - CLOSED is terminal: no transition leaves it
    - ERROR is an event, never a state; it does not move the state machine
    - reconnect_delay_ms(n) == min(n * step_ms, max_ms) for every n >= 0

Design Decisions:
    - Pure module (no IO, no asyncio): the supervisor in
      infrastructure/redis_connection.py owns the clock and the socket
    - Linear-capped delay, not exponential; retries never stop
"""

from enum import Enum

from kv_api.core.errors import InvalidTransitionError

DEFAULT_BACKOFF_STEP_MS = 100
DEFAULT_BACKOFF_MAX_MS = 3000


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class ConnectionEvent(str, Enum):
    """Lifecycle notifications delivered to listeners."""
    CONNECTING = "connecting"
    READY = "ready"
    RECONNECTING = "reconnecting"
    ERROR = "error"
    CLOSED = "closed"


_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.DISCONNECTED: frozenset({
        ConnectionState.CONNECTING, ConnectionState.CLOSED,
    }),
    ConnectionState.CONNECTING: frozenset({
        ConnectionState.READY, ConnectionState.RECONNECTING,
        ConnectionState.CLOSED,
    }),
    ConnectionState.READY: frozenset({
        ConnectionState.RECONNECTING, ConnectionState.CLOSED,
    }),
    ConnectionState.RECONNECTING: frozenset({
        ConnectionState.READY, ConnectionState.RECONNECTING,
        ConnectionState.CLOSED,
    }),
    ConnectionState.CLOSED: frozenset(),
}

# Event announced on entering each state (DISCONNECTED is never re-entered)
STATE_EVENTS: dict[ConnectionState, ConnectionEvent] = {
    ConnectionState.CONNECTING: ConnectionEvent.CONNECTING,
    ConnectionState.READY: ConnectionEvent.READY,
    ConnectionState.RECONNECTING: ConnectionEvent.RECONNECTING,
    ConnectionState.CLOSED: ConnectionEvent.CLOSED,
}


def can_transition(current: ConnectionState, target: ConnectionState) -> bool:
    return target in _TRANSITIONS[current]


def next_state(
    current: ConnectionState, target: ConnectionState,
) -> ConnectionState:
    """Validate a transition. Raises InvalidTransitionError if forbidden."""
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)
    return target


def is_terminal(state: ConnectionState) -> bool:
    return state is ConnectionState.CLOSED


def reconnect_delay_ms(
    retries: int,
    step_ms: int = DEFAULT_BACKOFF_STEP_MS,
    max_ms: int = DEFAULT_BACKOFF_MAX_MS,
) -> int:
    """Delay before reconnect attempt number `retries` (0-based).

    >>> [reconnect_delay_ms(n) for n in (0, 1, 5, 30, 31, 1000)]
    [0, 100, 500, 3000, 3000, 3000]
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")
    return min(retries * step_ms, max_ms)
