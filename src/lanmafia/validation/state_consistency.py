"""State Consistency Validators (S.1-S.9).

Rules:
- S.1: Exactly one host while the roster is non-empty
- S.2: host_connection_id matches the host player's connection
- S.3: Player ids and names (case-insensitive) are unique
- S.4: Every player holds a role in game, nobody holds one in the lobby
- S.5: Assigned roles match the role configuration
- S.6: Night actions only exist during night, votes only during voting
- S.7: Pending actions and votes come from and target living players
- S.8: A night action's kind matches its actor's role
- S.9: A winner is recorded exactly when the phase is game_over
"""

from collections import Counter
from typing import TYPE_CHECKING

from lanmafia.models.phase import Phase
from .types import ValidationViolation, ValidationSeverity

if TYPE_CHECKING:
    from lanmafia.engine.session_state import SessionState

CATEGORY = "State Consistency"


def validate_state_consistency(state: "SessionState") -> list[ValidationViolation]:
    """Validate state consistency rules S.1-S.9.

    Args:
        state: Current session state

    Returns:
        List of validation violations (empty if valid)
    """
    violations: list[ValidationViolation] = []
    players = state.players

    # S.1: exactly one host
    hosts = [p for p in players if p.is_host]
    if players and len(hosts) != 1:
        violations.append(ValidationViolation(
            rule_id="S.1",
            category=CATEGORY,
            message=f"Expected exactly one host, found {len(hosts)}",
            context={"hosts": [p.id for p in hosts]},
        ))

    # S.2: host connection
    if len(hosts) == 1 and state.host_connection_id != hosts[0].connection_id:
        violations.append(ValidationViolation(
            rule_id="S.2",
            category=CATEGORY,
            message="host_connection_id does not match the host player",
            context={
                "host_connection_id": state.host_connection_id,
                "host_player_connection": hosts[0].connection_id,
            },
        ))

    # S.3: unique ids and names
    id_counts = Counter(p.id for p in players)
    name_counts = Counter(p.name.lower() for p in players)
    duplicates = [pid for pid, n in id_counts.items() if n > 1]
    duplicate_names = [name for name, n in name_counts.items() if n > 1]
    if duplicates or duplicate_names:
        violations.append(ValidationViolation(
            rule_id="S.3",
            category=CATEGORY,
            message="Duplicate player ids or names in roster",
            context={"ids": duplicates, "names": duplicate_names},
        ))

    # S.4: roles present exactly while in game
    if state.phase.is_in_game:
        missing = [p.id for p in players if p.role is None]
        if missing:
            violations.append(ValidationViolation(
                rule_id="S.4",
                category=CATEGORY,
                message=f"{len(missing)} player(s) have no role during {state.phase.value}",
                context={"players": missing},
            ))
    else:
        holding = [p.id for p in players if p.role is not None]
        if holding:
            violations.append(ValidationViolation(
                rule_id="S.4",
                category=CATEGORY,
                message="Players hold roles in the lobby",
                context={"players": holding},
            ))

    # S.5: assigned roles match the configuration
    if state.phase.is_in_game and state.configuration is not None:
        expected = {role: n for role, n in state.configuration.counts().items() if n > 0}
        actual = dict(Counter(p.role for p in players if p.role is not None))
        if expected != actual:
            violations.append(ValidationViolation(
                rule_id="S.5",
                category=CATEGORY,
                message="Assigned roles do not match the role configuration",
                context={
                    "expected": {r.value: n for r, n in expected.items()},
                    "actual": {r.value: n for r, n in actual.items()},
                },
            ))

    # S.6: collection sets belong to their phase
    if state.night_actions and state.phase != Phase.NIGHT:
        violations.append(ValidationViolation(
            rule_id="S.6",
            category=CATEGORY,
            message=f"Night actions pending during {state.phase.value}",
            context={"actors": list(state.night_actions)},
        ))
    if state.votes and state.phase != Phase.VOTING:
        violations.append(ValidationViolation(
            rule_id="S.6",
            category=CATEGORY,
            message=f"Votes pending during {state.phase.value}",
            context={"voters": list(state.votes)},
        ))

    # S.7 / S.8: pending entries are live and well-formed
    by_id = {p.id: p for p in players}
    for action in state.night_actions.values():
        actor = by_id.get(action.actor_id)
        target = by_id.get(action.target_id)
        if actor is None or not actor.is_alive or target is None or not target.is_alive:
            violations.append(ValidationViolation(
                rule_id="S.7",
                category=CATEGORY,
                message=f"Night action {action.kind.value} by {action.actor_id} involves a missing or dead player",
                context={"actor_id": action.actor_id, "target_id": action.target_id},
            ))
        elif actor.role is None or actor.role.action != action.kind:
            violations.append(ValidationViolation(
                rule_id="S.8",
                category=CATEGORY,
                message=f"Player {actor.id} submitted {action.kind.value} without the role for it",
                context={"actor_id": actor.id, "role": actor.role.value if actor.role else None},
            ))
    for vote in state.votes.values():
        voter = by_id.get(vote.voter_id)
        target = by_id.get(vote.target_id)
        if voter is None or not voter.is_alive or target is None or not target.is_alive:
            violations.append(ValidationViolation(
                rule_id="S.7",
                category=CATEGORY,
                message=f"Vote by {vote.voter_id} involves a missing or dead player",
                context={"voter_id": vote.voter_id, "target_id": vote.target_id},
            ))

    # S.9: winner only at game over
    if (state.winner is not None) != (state.phase == Phase.GAME_OVER):
        violations.append(ValidationViolation(
            rule_id="S.9",
            category=CATEGORY,
            message=f"winner={state.winner} during {state.phase.value}",
            severity=ValidationSeverity.ERROR,
        ))

    return violations
