"""EventCollector - accumulates every delivery into the session event log."""

from typing import Callable, Optional

from lanmafia.events import (
    EventLog,
    GameEvent,
    GameOver,
    LoggedEvent,
    PhaseChanged,
    PhaseLog,
    RosterUpdated,
)
from lanmafia.models.phase import Phase


class EventCollector:
    """Collects outbound deliveries into an EventLog.

    The collector manages the hierarchy:
    - EventLog (top-level)
      - PhaseLog (one per phase instance, opened by each phase_changed)
        - LoggedEvent (delivery with its recipient)

    Usage:
        collector = EventCollector()
        collector.record(PhaseChanged(phase=Phase.NIGHT, round_number=1))
        collector.record(role_assigned, recipient=player_id)
        event_log = collector.get_event_log()

    The collector supports an optional callback that fires after each event:
        collector = EventCollector(on_event=my_callback)
    """

    def __init__(
        self,
        on_event: Optional[Callable[[Optional[str], GameEvent], None]] = None,
    ):
        """Initialize the EventCollector.

        Args:
            on_event: Optional callback fired after each event is recorded.
                       Callback receives (recipient, event); recipient is
                       None for broadcasts.
        """
        self._event_log = EventLog()
        self._current_phase_log: Optional[PhaseLog] = None
        self._on_event = on_event

    def create_phase_log(self, phase: Phase, round_number: int = 0) -> PhaseLog:
        """Start a new PhaseLog. Later deliveries land in it."""
        self._current_phase_log = PhaseLog(round_number=round_number, phase=phase)
        self._event_log.phases.append(self._current_phase_log)
        return self._current_phase_log

    def record(self, event: GameEvent, recipient: Optional[str] = None) -> None:
        """Add a delivery to the current phase log.

        A broadcast phase_changed opens a new phase log first. Deliveries
        made before any phase change land in an implicit lobby log.

        Args:
            event: The delivered event.
            recipient: Player id for a private delivery, None for broadcasts.
        """
        if isinstance(event, PhaseChanged) and recipient is None:
            self.create_phase_log(event.phase, event.round_number)
        elif self._current_phase_log is None:
            self.create_phase_log(Phase.LOBBY, event.round_number)

        self._current_phase_log.entries.append(LoggedEvent(recipient=recipient, event=event))

        if isinstance(event, RosterUpdated):
            for player in event.players:
                self._event_log.player_names[player.id] = player.name
        elif isinstance(event, GameOver):
            self._event_log.game_over = event

        if self._on_event is not None:
            self._on_event(recipient, event)

    def get_event_log(self) -> EventLog:
        """Get the complete EventLog."""
        return self._event_log

    def get_events(self, recipient: Optional[str] = None) -> list[GameEvent]:
        """Flat list of events in chronological order.

        Args:
            recipient: If given, only broadcasts plus deliveries to this
                player (what that player saw).
        """
        return [
            entry.event
            for entry in self._event_log.all_entries()
            if recipient is None or entry.recipient in (None, recipient)
        ]

    def set_metadata(self, **metadata) -> None:
        self._event_log.metadata.update(metadata)
