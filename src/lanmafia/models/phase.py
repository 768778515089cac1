"""Session phases."""

from enum import Enum


class Phase(str, Enum):
    """Phases of a session, in order of progression."""

    LOBBY = "lobby"
    ROLE_REVEAL = "role_reveal"
    NIGHT = "night"
    DISCUSSION = "discussion"
    VOTING = "voting"
    RESULTS = "results"
    GAME_OVER = "game_over"

    @property
    def is_in_game(self) -> bool:
        """True once roles are dealt and until the session returns to the lobby."""
        return self not in (Phase.LOBBY,)


# Allowed transitions of the phase state machine. Returning to the lobby is a
# reset, not a transition, and is handled separately.
PHASE_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.LOBBY: frozenset({Phase.ROLE_REVEAL}),
    Phase.ROLE_REVEAL: frozenset({Phase.NIGHT}),
    Phase.NIGHT: frozenset({Phase.DISCUSSION, Phase.GAME_OVER}),
    Phase.DISCUSSION: frozenset({Phase.VOTING}),
    Phase.VOTING: frozenset({Phase.RESULTS}),
    Phase.RESULTS: frozenset({Phase.NIGHT, Phase.GAME_OVER}),
    Phase.GAME_OVER: frozenset(),
}
