"""Connection state machine for the event stream session."""

from liverelay.schemas import ConnectionState


class ConnectionStateMachine:
    """State machine for managing event stream connection state transitions.

    State flow with triggers:
    - IDLE -> CONNECTING (start() called) | STOPPED
    - CONNECTING -> CONNECTED (first broker connect + subscriptions) | STOPPED
    - CONNECTED -> RECONNECTING (transport error, close or reconnect attempt) | STOPPED
    - RECONNECTING -> CONNECTED (broker connect after a drop) | STOPPED
    - STOPPED is terminal

    CONNECTING -> CONNECTED happens exactly once per session, which is what
    separates the first connect (handler registration, start() settlement)
    from every later reconnect.
    """

    TRANSITIONS: dict[ConnectionState, set[ConnectionState]] = {
        ConnectionState.IDLE: {ConnectionState.CONNECTING, ConnectionState.STOPPED},
        ConnectionState.CONNECTING: {ConnectionState.CONNECTED, ConnectionState.STOPPED},
        ConnectionState.CONNECTED: {ConnectionState.RECONNECTING, ConnectionState.STOPPED},
        ConnectionState.RECONNECTING: {ConnectionState.CONNECTED, ConnectionState.STOPPED},
        ConnectionState.STOPPED: set(),
    }

    TERMINAL_STATES: set[ConnectionState] = {ConnectionState.STOPPED}

    @classmethod
    def can_transition(cls, current: ConnectionState, new: ConnectionState) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current connection state
            new: Target state to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: ConnectionState) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def is_first_connect(cls, current: ConnectionState) -> bool:
        """Whether a broker connect observed in ``current`` is the session's first one."""
        return current is ConnectionState.CONNECTING

    @classmethod
    def get_valid_transitions(cls, state: ConnectionState) -> set[ConnectionState]:
        return cls.TRANSITIONS.get(state, set())
