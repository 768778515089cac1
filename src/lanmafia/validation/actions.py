"""Checks on submitted actions, votes and host commands.

All checks raise before any state is touched. Callers look players up
themselves and pass them in, so these functions never see the session.
"""

from typing import Optional

from lanmafia.config import GameRules
from lanmafia.models.phase import Phase
from lanmafia.models.player import ActionKind, Player
from .exceptions import PermissionDenied, PhaseViolation, ValidationError


def require_player(player: Optional[Player], connection_id: str) -> Player:
    """Resolve the sender of an intent.

    Raises:
        ValidationError: If the connection has not joined.
    """
    if player is None:
        raise ValidationError("Unknown connection, join first", {"connection_id": connection_id})
    return player


def require_phase(current: Phase, *allowed: Phase, claimed: Optional[Phase] = None) -> None:
    """Check that an intent belongs to the active phase.

    Args:
        current: The engine's phase.
        allowed: Phases in which the intent is accepted.
        claimed: Phase tag the client attached, if any. A stale tag is
            rejected even when the intent would otherwise fit.

    Raises:
        PhaseViolation: If the phase does not match.
    """
    if claimed is not None and claimed != current:
        raise PhaseViolation(
            f"Intent was for {claimed.value} but the phase is {current.value}",
            {"claimed": claimed.value, "current": current.value},
        )
    if current not in allowed:
        raise PhaseViolation(
            f"Not allowed during {current.value}",
            {"current": current.value, "allowed": [p.value for p in allowed]},
        )


def require_host(player: Player, action: str) -> None:
    """Raises PermissionDenied if the player is not the host."""
    if not player.is_host:
        raise PermissionDenied(player.id, action)


def require_alive(player: Player) -> None:
    if not player.is_alive:
        raise ValidationError("Dead players cannot act", {"player_id": player.id})


def validate_night_action(
    actor: Player,
    kind: ActionKind,
    target: Optional[Player],
    rules: GameRules,
) -> None:
    """Validate a night action.

    Rules:
    - The actor is alive and their role owns this action kind
    - The target exists and is alive
    - Kill and investigate cannot target yourself
    - Heal may target yourself when allow_self_heal is on

    Raises:
        ValidationError: If any rule is broken.
    """
    require_alive(actor)

    if actor.role is None or actor.role.action != kind:
        raise ValidationError(
            f"Your role cannot {kind.value}",
            {"player_id": actor.id, "role": actor.role.value if actor.role else None, "action": kind.value},
        )

    if target is None:
        raise ValidationError("Unknown target", {"action": kind.value})
    if not target.is_alive:
        raise ValidationError("Target is not alive", {"target_id": target.id})

    if target.id == actor.id:
        if kind != ActionKind.HEAL:
            raise ValidationError(f"You cannot {kind.value} yourself", {"action": kind.value})
        if not rules.allow_self_heal:
            raise ValidationError("Healing yourself is not allowed", {"action": kind.value})


def validate_vote(voter: Player, target: Optional[Player]) -> None:
    """Validate a vote: living voter, living target, no self votes.

    Raises:
        ValidationError: If any rule is broken.
    """
    require_alive(voter)
    if target is None:
        raise ValidationError("Unknown vote target")
    if not target.is_alive:
        raise ValidationError("Target is not alive", {"target_id": target.id})
    if target.id == voter.id:
        raise ValidationError("You cannot vote for yourself")


def validate_ready(player: Player, phase: Phase) -> None:
    """Ready flags: anyone in the lobby, living players during discussion.

    Raises:
        PhaseViolation: Outside the lobby and discussion.
        ValidationError: If a dead player signals ready in discussion.
    """
    require_phase(phase, Phase.LOBBY, Phase.DISCUSSION)
    if phase == Phase.DISCUSSION:
        require_alive(player)
