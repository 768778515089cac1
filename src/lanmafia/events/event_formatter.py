"""Event formatter for human-readable session logs.

Formats outbound events as one-line narrative descriptions using player
names instead of ids, e.g.:
- "Night falls (round 2, 30s)"
- "Bob was eliminated by majority vote."
"""

from typing import Optional

from .game_events import (
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
)
from lanmafia.models.phase import Phase
from lanmafia.models.player import PlayerView


PHASE_TITLES: dict[Phase, str] = {
    Phase.LOBBY: "Back in the lobby",
    Phase.ROLE_REVEAL: "Roles are revealed",
    Phase.NIGHT: "Night falls",
    Phase.DISCUSSION: "Day breaks, discussion begins",
    Phase.VOTING: "Voting opens",
    Phase.RESULTS: "Results are in",
    Phase.GAME_OVER: "Game over",
}


class EventFormatter:
    """Format outbound events with player names.

    Takes an id -> name mapping and produces strings like:
    - "Alice joined (host)"
    - "Votes: Bob=3, Carol=1"
    """

    def __init__(self, names: Optional[dict[str, str]] = None):
        """Initialize formatter with name mapping.

        Args:
            names: Dict mapping player id to display name
        """
        self.names = dict(names or {})

    def name(self, player_id: Optional[str]) -> str:
        """Get the display name for a player id (falls back to the id)."""
        if player_id is None:
            return "nobody"
        return self.names.get(player_id, player_id)

    def learn(self, players: list[PlayerView]) -> None:
        """Record names from a roster."""
        for player in players:
            self.names[player.id] = player.name

    def format(self, event: GameEvent) -> str:
        """Format a single event.

        Args:
            event: The outbound event to format

        Returns:
            Human-readable string describing the event
        """
        return self._dispatch(event)

    def _dispatch(self, event: GameEvent) -> str:
        """Route event to appropriate formatter method."""
        if isinstance(event, RosterUpdated):
            return self._format_roster(event)
        elif isinstance(event, Joined):
            return f"{event.name} joined" + (" (host)" if event.is_host else "")
        elif isinstance(event, ReadyStatusUpdated):
            return f"{event.ready_count}/{event.total_count} ready ({event.phase.value})"
        elif isinstance(event, SettingsUpdated):
            return self._format_settings(event)
        elif isinstance(event, RoleAssigned):
            return f"Your role: {event.role.value.upper()} - {event.description}"
        elif isinstance(event, PhaseChanged):
            return self._format_phase_changed(event)
        elif isinstance(event, TimerUpdated):
            return f"{event.remaining}s left in {event.phase.value}"
        elif isinstance(event, NightResolved):
            return self._format_night_resolved(event)
        elif isinstance(event, InvestigationResult):
            return event.message or f"{event.target_name} is {event.verdict.value}"
        elif isinstance(event, VoteResolved):
            return self._format_vote_resolved(event)
        elif isinstance(event, GameOver):
            return self._format_game_over(event)
        elif isinstance(event, ActionRejected):
            return f"Rejected [{event.error.value}]: {event.message}"
        elif isinstance(event, StateSnapshot):
            return f"Snapshot: {event.phase.value}, {len(event.players)} players"
        elif isinstance(event, SessionEnded):
            return f"Session ended: {event.reason}"
        return str(event)

    def _format_roster(self, event: RosterUpdated) -> str:
        self.learn(event.players)
        parts = []
        for player in event.players:
            label = player.name
            if player.is_host:
                label += "*"
            if not player.is_alive:
                label += " (dead" + (f", {player.role.value}" if player.role else "") + ")"
            parts.append(label)
        return f"Roster: {', '.join(parts)}" if parts else "Roster: empty"

    def _format_settings(self, event: SettingsUpdated) -> str:
        durations = ", ".join(f"{k}={v:g}s" for k, v in event.durations.items())
        return f"Settings updated: {durations}"

    def _format_phase_changed(self, event: PhaseChanged) -> str:
        title = PHASE_TITLES.get(event.phase, event.phase.value)
        if event.phase in (Phase.NIGHT, Phase.DISCUSSION, Phase.VOTING, Phase.RESULTS):
            title = f"{title} (round {event.round_number}"
            if event.duration is not None:
                title += f", {event.duration:g}s"
            title += ")"
        return title

    def _format_night_resolved(self, event: NightResolved) -> str:
        lines = [event.narrative]
        lines.extend(event.investigation_notices)
        return " ".join(line for line in lines if line)

    def _format_vote_resolved(self, event: VoteResolved) -> str:
        if not event.counts:
            return event.narrative
        ordered = sorted(event.counts.items(), key=lambda item: -item[1])
        tally = ", ".join(f"{self.name(target)}={count}" for target, count in ordered)
        return f"Votes: {tally}. {event.narrative}"

    def _format_game_over(self, event: GameOver) -> str:
        self.learn(event.final_roster)
        roles = ", ".join(
            f"{player.name}={player.role.value if player.role else '?'}"
            for player in event.final_roster
        )
        return f"{event.winner.value.upper()} WIN: {event.reason} [{roles}]"
