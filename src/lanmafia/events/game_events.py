"""Outbound event types (engine -> clients).

Every event carries a literal `kind` tag so the transport layer can serialize
the closed union and clients can switch on one field.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from lanmafia.models.phase import Phase
from lanmafia.models.player import Faction, PlayerView, Role, Verdict
from lanmafia.validation.exceptions import ErrorKind


class GameEvent(BaseModel):
    """Base class for all outbound events."""

    kind: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    round_number: int = 0

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.__class__.__name__}(round={self.round_number})"


# ============================================================================
# Roster and lobby
# ============================================================================


class RosterUpdated(GameEvent):
    """Current roster, roles hidden unless revealed."""

    kind: Literal["roster_updated"] = "roster_updated"
    players: list[PlayerView] = Field(default_factory=list)

    def __str__(self) -> str:
        return f"RosterUpdated({len(self.players)} players)"


class Joined(GameEvent):
    """Private acknowledgement of a successful join."""

    kind: Literal["joined"] = "joined"
    player_id: str
    name: str
    is_host: bool = False

    def __str__(self) -> str:
        host = ", host" if self.is_host else ""
        return f"Joined({self.name}{host})"


class ReadyStatusUpdated(GameEvent):
    """Ready flags changed."""

    kind: Literal["ready_status_updated"] = "ready_status_updated"
    phase: Phase
    ready_player_ids: list[str] = Field(default_factory=list)
    ready_count: int = 0
    total_count: int = 0

    def __str__(self) -> str:
        return f"ReadyStatusUpdated({self.ready_count}/{self.total_count})"


class SettingsUpdated(GameEvent):
    """Host changed timers or rules."""

    kind: Literal["settings_updated"] = "settings_updated"
    durations: dict[str, float] = Field(default_factory=dict)
    rules: dict[str, bool] = Field(default_factory=dict)


# ============================================================================
# Game flow
# ============================================================================


class RoleAssigned(GameEvent):
    """Private role notification. Sent once per player, never broadcast."""

    kind: Literal["role_assigned"] = "role_assigned"
    role: Role
    description: str = ""

    def __str__(self) -> str:
        return f"RoleAssigned({self.role.value})"


class PhaseChanged(GameEvent):
    """A new phase has started."""

    kind: Literal["phase_changed"] = "phase_changed"
    phase: Phase
    duration: Optional[float] = None  # seconds, None when the phase has no timer

    def __str__(self) -> str:
        return f"PhaseChanged({self.phase.value}, round={self.round_number})"


class TimerUpdated(GameEvent):
    """Seconds left in the active phase."""

    kind: Literal["timer_updated"] = "timer_updated"
    phase: Phase
    remaining: int

    def __str__(self) -> str:
        return f"TimerUpdated({self.phase.value}, {self.remaining}s)"


class NightResolved(GameEvent):
    """Public outcome of the night. Carries no private investigation data."""

    kind: Literal["night_resolved"] = "night_resolved"
    deaths: list[str] = Field(default_factory=list)  # player ids
    death_names: list[str] = Field(default_factory=list)
    narrative: str = ""
    investigation_notices: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        if not self.deaths:
            return "NightResolved(no deaths)"
        return f"NightResolved(deaths={self.death_names})"


class InvestigationResult(GameEvent):
    """Private investigation outcome, sent only to the investigator."""

    kind: Literal["investigation_result"] = "investigation_result"
    target_id: str
    target_name: str
    verdict: Verdict
    message: str = ""

    def __str__(self) -> str:
        return f"InvestigationResult({self.target_name}: {self.verdict.value})"


class VoteResolved(GameEvent):
    """Outcome of the voting phase."""

    kind: Literal["vote_resolved"] = "vote_resolved"
    eliminated: Optional[str] = None
    eliminated_name: Optional[str] = None
    counts: dict[str, int] = Field(default_factory=dict)
    is_tie: bool = False
    narrative: str = ""

    def __str__(self) -> str:
        if self.eliminated is None:
            return f"VoteResolved(no elimination, tie={self.is_tie})"
        return f"VoteResolved(eliminated={self.eliminated_name})"


class GameOver(GameEvent):
    """Game has ended. Final roster reveals every role."""

    kind: Literal["game_over"] = "game_over"
    winner: Faction
    reason: str = ""
    final_roster: list[PlayerView] = Field(default_factory=list)

    def __str__(self) -> str:
        return f"GameOver({self.winner.value} wins, round={self.round_number})"


# ============================================================================
# Replies and session lifecycle
# ============================================================================


class ActionRejected(GameEvent):
    """Private rejection of an intent."""

    kind: Literal["action_rejected"] = "action_rejected"
    error: ErrorKind
    message: str = ""
    context: dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        return f"ActionRejected({self.error.value}: {self.message})"


class StateSnapshot(GameEvent):
    """Private answer to a request for the current state."""

    kind: Literal["state_snapshot"] = "state_snapshot"
    phase: Phase
    players: list[PlayerView] = Field(default_factory=list)
    your_player_id: Optional[str] = None
    your_role: Optional[Role] = None
    remaining: Optional[int] = None

    def __str__(self) -> str:
        return f"StateSnapshot({self.phase.value}, round={self.round_number})"


class SessionEnded(GameEvent):
    """The session is over for every client (host left or fatal error)."""

    kind: Literal["session_ended"] = "session_ended"
    reason: str = ""

    def __str__(self) -> str:
        return f"SessionEnded({self.reason})"


OutboundEvent = Annotated[
    Union[
        RosterUpdated,
        Joined,
        ReadyStatusUpdated,
        SettingsUpdated,
        RoleAssigned,
        PhaseChanged,
        TimerUpdated,
        NightResolved,
        InvestigationResult,
        VoteResolved,
        GameOver,
        ActionRejected,
        StateSnapshot,
        SessionEnded,
    ],
    Field(discriminator="kind"),
]

outbound_event_adapter: TypeAdapter = TypeAdapter(OutboundEvent)
