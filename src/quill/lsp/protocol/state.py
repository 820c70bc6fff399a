"""Session state machine for the server lifecycle."""

import logging
from enum import Enum, auto

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """
    Server lifecycle states.

    State transitions:
        AWAITING_INITIALIZE -> AWAITING_INITIALIZED -> INITIALIZED
            -> SHUTTING_DOWN -> TERMINATED

    DISCONNECTED can be reached from any state before TERMINATED when the
    channel closes underneath the server.
    """

    AWAITING_INITIALIZE = auto()
    AWAITING_INITIALIZED = auto()
    INITIALIZED = auto()
    SHUTTING_DOWN = auto()
    TERMINATED = auto()
    DISCONNECTED = auto()

    def __str__(self) -> str:
        return self.name


class InvalidStateTransition(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: SessionState, to_state: SessionState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


class Session:
    """
    Lifecycle state of one client session.

    Owned by the main loop driver and only mutated from its coroutine.
    ``initialized`` and ``shutdown_requested`` are derived from the state.
    """

    VALID_TRANSITIONS: dict[SessionState, list[SessionState]] = {
        SessionState.AWAITING_INITIALIZE: [
            SessionState.AWAITING_INITIALIZED,
            SessionState.DISCONNECTED,
        ],
        SessionState.AWAITING_INITIALIZED: [
            SessionState.INITIALIZED,
            SessionState.DISCONNECTED,
        ],
        SessionState.INITIALIZED: [
            SessionState.SHUTTING_DOWN,
            SessionState.DISCONNECTED,
        ],
        SessionState.SHUTTING_DOWN: [
            SessionState.TERMINATED,
            SessionState.DISCONNECTED,  # no exit before the channel closed
        ],
        SessionState.TERMINATED: [],
        SessionState.DISCONNECTED: [],
    }

    def __init__(self, initial_state: SessionState = SessionState.AWAITING_INITIALIZE):
        self._state = initial_state

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def initialized(self) -> bool:
        """True once the initialize/initialized handshake has completed."""
        return self._state in (
            SessionState.INITIALIZED,
            SessionState.SHUTTING_DOWN,
            SessionState.TERMINATED,
        )

    @property
    def shutdown_requested(self) -> bool:
        """True once a shutdown request has been received."""
        return self._state in (SessionState.SHUTTING_DOWN, SessionState.TERMINATED)

    def can_transition_to(self, new_state: SessionState) -> bool:
        """Check if transition to new_state is valid."""
        return new_state in self.VALID_TRANSITIONS.get(self._state, [])

    def transition(self, new_state: SessionState) -> None:
        """
        Transition to a new state.

        Args:
            new_state: The target state.

        Raises:
            InvalidStateTransition: If the transition is not valid.
        """
        if not self.can_transition_to(new_state):
            raise InvalidStateTransition(self._state, new_state)

        old_state = self._state
        self._state = new_state
        logger.debug(f"session {old_state} -> {new_state}")

    def __repr__(self) -> str:
        return f"Session(state={self._state!r})"
