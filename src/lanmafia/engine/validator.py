"""GameValidator - runtime audit hooks for session rules.

This module provides a Protocol for auditing state transitions and rule
compliance at runtime. The PhaseController calls the hooks at key points
of the session; violations are collected, never raised.

Usage:
    # In tests or development
    validator = CollectingValidator()
    controller = PhaseController(transport, validator=validator)
    violations = validator.get_violations()

    # No overhead in production (validator=None)
    controller = PhaseController(transport)
"""

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

from lanmafia.models.actions import NightResult, Vote, VoteResult, WinResult
from lanmafia.models.phase import Phase
from lanmafia.models.player import Faction

if TYPE_CHECKING:
    from .event_collector import EventCollector
    from .session_state import SessionState


class GameValidator(Protocol):
    """Hooks for runtime auditing at key session points.

    All methods are async and return nothing. Violations are collected
    internally and can be retrieved via get_violations().
    """

    async def on_phase_start(
        self,
        phase: Phase,
        round_number: int,
        state: "SessionState",
    ) -> None:
        """Called right after a phase has been entered."""
        ...

    async def on_night_resolved(
        self,
        result: NightResult,
        alive_before: set[str],
        state: "SessionState",
    ) -> None:
        """Called after night deaths have been applied."""
        ...

    async def on_vote_resolved(
        self,
        result: VoteResult,
        votes: Sequence[Vote],
        state: "SessionState",
    ) -> None:
        """Called after a vote elimination has been applied."""
        ...

    async def on_victory_check(
        self,
        result: WinResult,
        state: "SessionState",
    ) -> None:
        """Called after every win check."""
        ...

    async def on_game_over(
        self,
        winner: Faction,
        state: "SessionState",
        collector: Optional["EventCollector"],
    ) -> list:
        """Called when the game ends. Returns all violations found."""
        ...


class NoOpValidator:
    """No-op validator for production use (zero overhead).

    This validator does nothing - all hooks are no-ops.
    Use this or pass None to avoid validation overhead.
    """

    async def on_phase_start(self, phase: Phase, round_number: int, state: "SessionState") -> None:
        pass

    async def on_night_resolved(
        self,
        result: NightResult,
        alive_before: set[str],
        state: "SessionState",
    ) -> None:
        pass

    async def on_vote_resolved(
        self,
        result: VoteResult,
        votes: Sequence[Vote],
        state: "SessionState",
    ) -> None:
        pass

    async def on_victory_check(self, result: WinResult, state: "SessionState") -> None:
        pass

    async def on_game_over(
        self,
        winner: Faction,
        state: "SessionState",
        collector: Optional["EventCollector"],
    ) -> list:
        return []


class CollectingValidator(NoOpValidator):
    """Validator that collects violations for later inspection.

    Use this in tests to verify session rules are being followed.

    All audit functions from lanmafia.validation are composed here.
    Lazy imports are used to avoid circular imports.
    """

    def __init__(self):
        self._violations = []
        self._previous_phase: Optional[Phase] = None
        self._previous_round = 0
        self._games_completed = 0

    @property
    def games_completed(self) -> int:
        return self._games_completed

    def get_violations(self):
        """Get all collected violations."""
        return list(self._violations)

    def clear(self):
        """Clear collected violations."""
        self._violations.clear()
        self._previous_phase = None
        self._previous_round = 0

    async def on_phase_start(self, phase: Phase, round_number: int, state: "SessionState") -> None:
        """Validate phase ordering P.1-P.3 and state consistency S.1-S.9."""
        from lanmafia.validation import validate_phase_order, validate_state_consistency

        self._violations.extend(
            validate_phase_order(phase, self._previous_phase, round_number, self._previous_round)
        )
        self._violations.extend(validate_state_consistency(state))
        self._previous_phase = phase
        self._previous_round = round_number

    async def on_night_resolved(
        self,
        result: NightResult,
        alive_before: set[str],
        state: "SessionState",
    ) -> None:
        """Validate night resolution R.1-R.4."""
        from lanmafia.validation import validate_night_result

        self._violations.extend(validate_night_result(result, state, alive_before))

    async def on_vote_resolved(
        self,
        result: VoteResult,
        votes: Sequence[Vote],
        state: "SessionState",
    ) -> None:
        """Validate vote tally R.5-R.6."""
        from lanmafia.validation import validate_vote_result

        self._violations.extend(validate_vote_result(result, votes))

    async def on_victory_check(self, result: WinResult, state: "SessionState") -> None:
        """Validate victory conditions V.1-V.4."""
        from lanmafia.validation import validate_victory

        self._violations.extend(validate_victory(state, result.is_game_over, result.winner))

    async def on_game_over(
        self,
        winner: Faction,
        state: "SessionState",
        collector: Optional["EventCollector"],
    ) -> list:
        """Validate the final state and the game-over broadcast."""
        from lanmafia.validation import validate_state_consistency, validate_victory
        from lanmafia.validation.types import ValidationViolation, ValidationSeverity

        self._violations.extend(validate_state_consistency(state))
        self._violations.extend(validate_victory(state, True, winner))

        if collector is not None:
            game_over = collector.get_event_log().game_over
            if game_over is None or game_over.winner != winner:
                self._violations.append(ValidationViolation(
                    rule_id="V.5",
                    category="Victory Conditions",
                    message="Game over was not broadcast with the declared winner",
                    severity=ValidationSeverity.ERROR,
                    context={"winner": winner.value},
                ))

        self._games_completed += 1
        return self.get_violations()


def create_validator(enabled: bool = False) -> GameValidator:
    """Factory: CollectingValidator when enabled, NoOpValidator otherwise."""
    if enabled:
        return CollectingValidator()
    return NoOpValidator()
