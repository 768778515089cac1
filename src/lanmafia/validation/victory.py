"""Victory Condition Validators (V.1-V.4).

Rules:
- V.1: Game must end when a victory condition is met
- V.2: Town wins when no killers are alive
- V.3: Killers win when living killers >= other living players
- V.4: No winner may be declared while neither condition holds
"""

from typing import TYPE_CHECKING, Optional

from lanmafia.models.player import Faction
from .types import ValidationViolation, ValidationSeverity

if TYPE_CHECKING:
    from lanmafia.engine.session_state import SessionState

CATEGORY = "Victory Conditions"


def count_factions(state: "SessionState") -> tuple[int, int]:
    """Living (killers, others) in the session."""
    living = [p for p in state.players if p.is_alive]
    killers = sum(1 for p in living if p.is_killer)
    return killers, len(living) - killers


def expected_winner(killers: int, others: int) -> Optional[Faction]:
    """Winner implied by living faction counts, or None to continue."""
    if killers == 0:
        return Faction.TOWN
    if killers >= others:
        return Faction.KILLERS
    return None


def validate_victory(
    state: "SessionState",
    is_over: bool,
    declared_winner: Optional[Faction],
) -> list[ValidationViolation]:
    """Validate victory rules V.1-V.4 after a win check.

    Args:
        state: Session state after the elimination
        is_over: Whether the engine declared the game over
        declared_winner: Winner the engine declared

    Returns:
        List of validation violations
    """
    violations: list[ValidationViolation] = []
    killers, others = count_factions(state)
    winner = expected_winner(killers, others)
    context = {
        "killers_alive": killers,
        "others_alive": others,
        "declared_winner": declared_winner.value if declared_winner else None,
        "is_over": is_over,
    }

    if winner is not None and not is_over:
        violations.append(ValidationViolation(
            rule_id="V.1",
            category=CATEGORY,
            message="Game must end when a victory condition is met",
            severity=ValidationSeverity.ERROR,
            context=context,
        ))
    elif winner == Faction.TOWN and declared_winner != Faction.TOWN:
        violations.append(ValidationViolation(
            rule_id="V.2",
            category=CATEGORY,
            message=f"Town wins when no killers are alive, but declared winner is {context['declared_winner']}",
            severity=ValidationSeverity.ERROR,
            context=context,
        ))
    elif winner == Faction.KILLERS and declared_winner != Faction.KILLERS:
        violations.append(ValidationViolation(
            rule_id="V.3",
            category=CATEGORY,
            message=f"Killers win at parity, but declared winner is {context['declared_winner']}",
            severity=ValidationSeverity.ERROR,
            context=context,
        ))
    elif winner is None and (is_over or declared_winner is not None):
        violations.append(ValidationViolation(
            rule_id="V.4",
            category=CATEGORY,
            message="Game declared over while no victory condition holds",
            severity=ValidationSeverity.ERROR,
            context=context,
        ))

    return violations
