"""Events package: inbound intents, outbound events and the event log."""

from lanmafia.events.game_events import (
    GameEvent,
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
    OutboundEvent,
    outbound_event_adapter,
)
from lanmafia.events.intents import (
    BaseIntent,
    Join,
    StartGame,
    SubmitNightAction,
    CastVote,
    SetReady,
    RequestCurrentState,
    Leave,
    UpdateSettings,
    SkipPhase,
    ReturnToLobby,
    Intent,
    parse_intent,
)
from lanmafia.events.event_formatter import EventFormatter
from lanmafia.events.event_log import LoggedEvent, PhaseLog, EventLog
from lanmafia.events.event_visibility import (
    public_roster,
    final_roster,
    private_view,
    night_broadcast,
    investigation_messages,
)

__all__ = [
    # Outbound
    "GameEvent",
    "RosterUpdated",
    "Joined",
    "ReadyStatusUpdated",
    "SettingsUpdated",
    "RoleAssigned",
    "PhaseChanged",
    "TimerUpdated",
    "NightResolved",
    "InvestigationResult",
    "VoteResolved",
    "GameOver",
    "ActionRejected",
    "StateSnapshot",
    "SessionEnded",
    "OutboundEvent",
    "outbound_event_adapter",
    # Inbound
    "BaseIntent",
    "Join",
    "StartGame",
    "SubmitNightAction",
    "CastVote",
    "SetReady",
    "RequestCurrentState",
    "Leave",
    "UpdateSettings",
    "SkipPhase",
    "ReturnToLobby",
    "Intent",
    "parse_intent",
    # Log
    "EventFormatter",
    "LoggedEvent",
    "PhaseLog",
    "EventLog",
    # Visibility
    "public_roster",
    "final_roster",
    "private_view",
    "night_broadcast",
    "investigation_messages",
]
