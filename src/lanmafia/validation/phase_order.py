"""Phase Order Validators (P.1-P.3).

Rules:
- P.1: Every phase change follows the transition table (a reset to the
  lobby is always allowed)
- P.2: Round number is 0 before the first night and grows by one per night
- P.3: A session cannot start anywhere but the lobby
"""

from typing import Optional

from lanmafia.models.phase import Phase, PHASE_TRANSITIONS
from .types import ValidationViolation, ValidationSeverity

CATEGORY = "Phase Order"


def validate_phase_order(
    phase: Phase,
    previous: Optional[Phase],
    round_number: int,
    previous_round: int,
) -> list[ValidationViolation]:
    """Validate P.1-P.3 for one phase change.

    Args:
        phase: Phase just entered
        previous: Phase before it (None at session start)
        round_number: Round number after the change
        previous_round: Round number before the change

    Returns:
        List of validation violations
    """
    violations: list[ValidationViolation] = []

    if previous is None:
        if phase != Phase.LOBBY:
            violations.append(ValidationViolation(
                rule_id="P.3",
                category=CATEGORY,
                message=f"Session must start in the lobby, got {phase.value}",
                severity=ValidationSeverity.ERROR,
                context={"phase": phase.value},
            ))
        return violations

    if phase == Phase.LOBBY:
        if round_number != 0:
            violations.append(ValidationViolation(
                rule_id="P.2",
                category=CATEGORY,
                message=f"Lobby must reset the round number, got {round_number}",
                severity=ValidationSeverity.ERROR,
                context={"round_number": round_number},
            ))
        return violations

    if phase not in PHASE_TRANSITIONS[previous]:
        violations.append(ValidationViolation(
            rule_id="P.1",
            category=CATEGORY,
            message=f"Illegal transition {previous.value} -> {phase.value}",
            severity=ValidationSeverity.ERROR,
            context={"from": previous.value, "to": phase.value},
        ))

    expected_round = previous_round + 1 if phase == Phase.NIGHT else previous_round
    if round_number != expected_round:
        violations.append(ValidationViolation(
            rule_id="P.2",
            category=CATEGORY,
            message=f"Round number {round_number} after {previous.value} -> {phase.value}, expected {expected_round}",
            severity=ValidationSeverity.ERROR,
            context={"round_number": round_number, "expected": expected_round},
        ))

    return violations
