"""Event visibility rules.

Every outbound event that shows player data is built here, so the rule
about what another device may see lives in one place:

- Roles of living players are never shown to anyone but their owner
- Roles of dead players are shown when reveal_role_on_death is on
- Investigation verdicts only go to the investigator
- The final roster at game over shows every role
"""

from typing import Iterable

from lanmafia.models.actions import NightResult
from lanmafia.models.player import Player, PlayerView
from .game_events import InvestigationResult, NightResolved


def public_roster(players: Iterable[Player], reveal_dead_roles: bool = True) -> list[PlayerView]:
    """Roster as seen by every device.

    Args:
        players: Players in join order.
        reveal_dead_roles: Whether dead players show their role.

    Returns:
        Views with roles hidden except for revealed dead players.
    """
    return [
        player.to_view(reveal_role=reveal_dead_roles and not player.is_alive)
        for player in players
    ]


def final_roster(players: Iterable[Player]) -> list[PlayerView]:
    """Roster with every role revealed, for the game-over broadcast."""
    return [player.to_view(reveal_role=True) for player in players]


def private_view(players: Iterable[Player], viewer_id: str, reveal_dead_roles: bool = True) -> list[PlayerView]:
    """Roster as seen by one player: public roster plus their own role."""
    views = []
    for player in players:
        reveal = player.id == viewer_id or (reveal_dead_roles and not player.is_alive)
        views.append(player.to_view(reveal_role=reveal))
    return views


def night_broadcast(result: NightResult, names: dict[str, str], round_number: int) -> NightResolved:
    """Public part of a night result. Verdicts are never included."""
    return NightResolved(
        round_number=round_number,
        deaths=list(result.deaths),
        death_names=[names.get(pid, pid) for pid in result.deaths],
        narrative=result.narrative,
        investigation_notices=result.public_messages,
    )


def investigation_messages(result: NightResult, round_number: int) -> list[tuple[str, InvestigationResult]]:
    """Private investigation results as (investigator id, event) pairs."""
    return [
        (
            finding.investigator_id,
            InvestigationResult(
                round_number=round_number,
                target_id=finding.target_id,
                target_name=finding.target_name,
                verdict=finding.verdict,
                message=finding.private_message,
            ),
        )
        for finding in result.investigations
    ]
