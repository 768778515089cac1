"""Session state - the single mutable source of truth for one session."""

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from lanmafia.config import GameRules, PhaseDurations
from lanmafia.events.event_visibility import final_roster, private_view, public_roster
from lanmafia.models.actions import NightAction, Vote
from lanmafia.models.phase import Phase, PHASE_TRANSITIONS
from lanmafia.models.player import Faction, Player, PlayerView, Role
from lanmafia.models.role_config import RoleConfiguration
from lanmafia.validation.exceptions import InvariantBreach, PhaseViolation, ValidationError
from lanmafia.validation.state_consistency import validate_state_consistency
from lanmafia.validation.types import ValidationViolation, errors_only


class SessionState(BaseModel):
    """Represents the current state of one session.

    Owned by exactly one PhaseController; all mutation goes through the
    methods below. Collection sets (night actions, votes, ready flags) are
    cleared on every phase entry, so nothing leaks across phases or rounds.
    """

    players: list[Player] = Field(default_factory=list)  # join order
    phase: Phase = Phase.LOBBY
    round_number: int = 0
    generation: int = 0  # bumped on every phase entry
    night_actions: dict[str, NightAction] = Field(default_factory=dict)  # actor id -> action
    votes: dict[str, Vote] = Field(default_factory=dict)  # voter id -> vote
    ready: list[str] = Field(default_factory=list)  # player ids
    host_connection_id: Optional[str] = None
    configuration: Optional[RoleConfiguration] = None
    durations: PhaseDurations = Field(default_factory=PhaseDurations)
    rules: GameRules = Field(default_factory=GameRules)
    winner: Optional[Faction] = None

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    @property
    def host(self) -> Optional[Player]:
        return next((p for p in self.players if p.is_host), None)

    @property
    def is_empty(self) -> bool:
        return not self.players

    def add_player(self, connection_id: str, name: str) -> Player:
        """Add a player to the lobby. The first player becomes host.

        Raises:
            PhaseViolation: Outside the lobby.
            ValidationError: If the connection has already joined.
        """
        if self.phase != Phase.LOBBY:
            raise PhaseViolation("Players can only join in the lobby", {"current": self.phase.value})
        if self.get_by_connection(connection_id) is not None:
            raise ValidationError("Connection has already joined", {"connection_id": connection_id})

        player = Player(connection_id=connection_id, name=name, is_host=self.is_empty)
        self.players.append(player)
        if player.is_host:
            self.host_connection_id = connection_id
        return player

    def remove_player(self, player_id: str) -> Player:
        """Remove a player from the roster. Only allowed in the lobby.

        Raises:
            PhaseViolation: Once a game has started.
            ValidationError: If the player is unknown.
        """
        if self.phase != Phase.LOBBY:
            raise PhaseViolation(
                "Players cannot be removed once a game has started",
                {"current": self.phase.value},
            )
        player = self.require(player_id)
        self.players.remove(player)
        if player.id in self.ready:
            self.ready.remove(player.id)
        if player.is_host:
            self.host_connection_id = None
        return player

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def get_by_connection(self, connection_id: str) -> Optional[Player]:
        return next(
            (p for p in self.players if p.connection_id == connection_id and p.is_connected),
            None,
        )

    def require(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise ValidationError("Unknown player", {"player_id": player_id})
        return player

    def living_players(self) -> list[Player]:
        return [p for p in self.players if p.is_alive]

    def connected_living(self) -> list[Player]:
        """Living players who are still connected; completion checks use these."""
        return [p for p in self.players if p.is_alive and p.is_connected]

    def connected_players(self) -> list[Player]:
        return [p for p in self.players if p.is_connected]

    def name_map(self) -> dict[str, str]:
        return {p.id: p.name for p in self.players}

    def mark_disconnected(self, player_id: str) -> Player:
        """Keep the player (role, votes, status) but stop waiting on them."""
        player = self.require(player_id)
        player.is_connected = False
        player.is_ready = False
        if player.id in self.ready:
            self.ready.remove(player.id)
        return player

    def eliminate(self, player_id: str) -> Player:
        """Mark a player dead.

        Raises:
            InvariantBreach: If the player is unknown or already dead.
        """
        player = self.get_player(player_id)
        if player is None or not player.is_alive:
            raise InvariantBreach([ValidationViolation(
                rule_id="E.1",
                category="Elimination",
                message=f"Cannot eliminate {player_id}: not a living player",
                context={"player_id": player_id},
            )])
        player.is_alive = False
        player.is_ready = False
        return player

    def assign_roles(self, assignments: Sequence[tuple[str, Role]], config: RoleConfiguration) -> None:
        """Bind one role per player and remember the configuration."""
        for player_id, role in assignments:
            self.require(player_id).role = role
        self.configuration = config

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def enter_phase(self, phase: Phase) -> int:
        """Move to the next phase.

        Bumps the generation and clears every collection set. Entering
        night starts a new round.

        Returns:
            The new generation.

        Raises:
            InvariantBreach: If the transition is not allowed.
        """
        if phase not in PHASE_TRANSITIONS[self.phase]:
            raise InvariantBreach([ValidationViolation(
                rule_id="T.1",
                category="Phase Transitions",
                message=f"Illegal transition {self.phase.value} -> {phase.value}",
                context={"from": self.phase.value, "to": phase.value},
            )])

        self.phase = phase
        self.generation += 1
        self.night_actions.clear()
        self.votes.clear()
        self._clear_ready()
        if phase == Phase.NIGHT:
            self.round_number += 1
        return self.generation

    def reset_for_lobby(self, keep_players: bool = True) -> None:
        """Return to the lobby for a new game.

        Args:
            keep_players: Keep every connected player (same group, new
                game). False keeps only the host.
        """
        if keep_players:
            self.players = [p for p in self.players if p.is_connected]
        else:
            self.players = [p for p in self.players if p.is_host]

        for player in self.players:
            player.is_alive = True
            player.is_ready = False
            player.role = None

        self.phase = Phase.LOBBY
        self.round_number = 0
        self.generation += 1
        self.night_actions.clear()
        self.votes.clear()
        self.ready.clear()
        self.configuration = None
        self.winner = None

    def clear(self) -> None:
        """Drop everything (session ended)."""
        self.players.clear()
        self.phase = Phase.LOBBY
        self.round_number = 0
        self.generation += 1
        self.night_actions.clear()
        self.votes.clear()
        self.ready.clear()
        self.host_connection_id = None
        self.configuration = None
        self.winner = None

    # ------------------------------------------------------------------
    # Collection sets
    # ------------------------------------------------------------------

    def record_night_action(self, action: NightAction) -> bool:
        """Store a night action, replacing the actor's previous one.

        A replacement moves to the end, so iteration order is the order of
        the live submissions.

        Returns:
            True if an earlier action was replaced.
        """
        replaced = self.night_actions.pop(action.actor_id, None) is not None
        self.night_actions[action.actor_id] = action
        return replaced

    def record_vote(self, vote: Vote) -> bool:
        """Store a vote, replacing the voter's previous one."""
        replaced = self.votes.pop(vote.voter_id, None) is not None
        self.votes[vote.voter_id] = vote
        return replaced

    def set_ready(self, player_id: str, ready: bool) -> None:
        player = self.require(player_id)
        player.is_ready = ready
        if ready and player_id not in self.ready:
            self.ready.append(player_id)
        elif not ready and player_id in self.ready:
            self.ready.remove(player_id)

    def _clear_ready(self) -> None:
        self.ready.clear()
        for player in self.players:
            player.is_ready = False

    def ready_ids(self) -> list[str]:
        """Ready player ids in roster order."""
        return [p.id for p in self.players if p.id in self.ready]

    def ready_pool(self) -> list[Player]:
        """Players whose ready flag counts in the current phase."""
        if self.phase == Phase.LOBBY:
            return self.connected_players()
        return self.connected_living()

    def pending_night_actors(self) -> list[Player]:
        """Connected living players with a night action who have not acted."""
        return [
            p for p in self.connected_living()
            if p.role is not None and p.role.can_act and p.id not in self.night_actions
        ]

    def night_actions_complete(self) -> bool:
        return not self.pending_night_actors()

    def pending_voters(self) -> list[Player]:
        return [p for p in self.connected_living() if p.id not in self.votes]

    def votes_complete(self) -> bool:
        return not self.pending_voters()

    def all_ready(self) -> bool:
        pool = self.ready_pool()
        return bool(pool) and all(p.id in self.ready for p in pool)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def roster_view(self, reveal_dead_roles: Optional[bool] = None) -> list[PlayerView]:
        """Public roster. Dead players' roles follow reveal_role_on_death by default."""
        if reveal_dead_roles is None:
            reveal_dead_roles = self.rules.reveal_role_on_death
        return public_roster(self.players, reveal_dead_roles)

    def view_for(self, player_id: str) -> list[PlayerView]:
        return private_view(self.players, player_id, self.rules.reveal_role_on_death)

    def final_roster(self) -> list[PlayerView]:
        return final_roster(self.players)

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def assert_consistent(self) -> None:
        """Raise InvariantBreach if any state consistency rule is broken."""
        violations = validate_state_consistency(self)
        errors = errors_only(violations)
        if errors:
            raise InvariantBreach(errors)
