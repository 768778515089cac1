"""Resolution Validators (R.1-R.6).

Rules:
- R.1: A healed kill target never dies
- R.2: At most one player dies per night
- R.3: Investigation verdicts match the target's true role
- R.4: Night deaths were alive before the night
- R.5: Vote counts add up to the number of votes cast
- R.6: An elimination requires a unique, positive maximum
"""

from typing import TYPE_CHECKING, Sequence

from lanmafia.models.actions import NightResult, Vote, VoteResult
from lanmafia.models.player import Verdict
from .types import ValidationViolation, ValidationSeverity

if TYPE_CHECKING:
    from lanmafia.engine.session_state import SessionState


def validate_night_result(
    result: NightResult,
    state: "SessionState",
    alive_before: set[str],
) -> list[ValidationViolation]:
    """Validate R.1-R.4 for a resolved night.

    Args:
        result: Night result as produced by the resolver
        state: Session state (roles are read from here)
        alive_before: Ids of players alive when the night was resolved

    Returns:
        List of validation violations
    """
    violations: list[ValidationViolation] = []

    healed_deaths = set(result.deaths) & set(result.heals)
    if healed_deaths:
        violations.append(ValidationViolation(
            rule_id="R.1",
            category="Night Resolution",
            message="Healed players died during the night",
            severity=ValidationSeverity.ERROR,
            context={"players": sorted(healed_deaths)},
        ))

    if len(result.deaths) > 1:
        violations.append(ValidationViolation(
            rule_id="R.2",
            category="Night Resolution",
            message=f"{len(result.deaths)} players died in one night",
            severity=ValidationSeverity.ERROR,
            context={"deaths": result.deaths},
        ))

    for finding in result.investigations:
        target = state.get_player(finding.target_id)
        if target is None:
            continue
        expected = Verdict.SUSPICIOUS if target.is_killer else Verdict.INNOCENT
        if finding.verdict != expected:
            violations.append(ValidationViolation(
                rule_id="R.3",
                category="Night Resolution",
                message=f"Investigation of {target.name} returned {finding.verdict.value}, expected {expected.value}",
                severity=ValidationSeverity.ERROR,
                context={"target_id": target.id, "role": target.role.value if target.role else None},
            ))

    not_alive = [pid for pid in result.deaths if pid not in alive_before]
    if not_alive:
        violations.append(ValidationViolation(
            rule_id="R.4",
            category="Night Resolution",
            message="Night deaths include players who were not alive",
            severity=ValidationSeverity.ERROR,
            context={"players": not_alive},
        ))

    return violations


def validate_vote_result(result: VoteResult, votes: Sequence[Vote]) -> list[ValidationViolation]:
    """Validate R.5-R.6 for a tallied vote.

    Args:
        result: Vote result as produced by the tally
        votes: Votes that were tallied

    Returns:
        List of validation violations
    """
    violations: list[ValidationViolation] = []

    if sum(result.counts.values()) != len(votes):
        violations.append(ValidationViolation(
            rule_id="R.5",
            category="Vote Tally",
            message=f"Counts add up to {sum(result.counts.values())} but {len(votes)} votes were cast",
            severity=ValidationSeverity.ERROR,
            context={"counts": result.counts},
        ))

    if result.eliminated is not None:
        top = max(result.counts.values(), default=0)
        leaders = [t for t, n in result.counts.items() if n == top]
        if top <= 0 or leaders != [result.eliminated]:
            violations.append(ValidationViolation(
                rule_id="R.6",
                category="Vote Tally",
                message="Elimination without a unique majority",
                severity=ValidationSeverity.ERROR,
                context={"eliminated": result.eliminated, "counts": result.counts},
            ))

    return violations
