"""Chronological record of every delivery the engine made, by phase."""

from datetime import datetime
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from lanmafia.models.phase import Phase
from .game_events import GameOver, OutboundEvent
from .event_formatter import EventFormatter


# ============================================================================
# Entries
# ============================================================================

class LoggedEvent(BaseModel):
    """One delivery. recipient is a player id, or None for a broadcast."""

    recipient: Optional[str] = None
    event: OutboundEvent

    @property
    def is_broadcast(self) -> bool:
        return self.recipient is None


class PhaseLog(BaseModel):
    """All deliveries made while one phase instance was active."""

    round_number: int = 0
    phase: Phase
    entries: list[LoggedEvent] = Field(default_factory=list)

    def describe(self, names: Optional[dict[str, str]] = None) -> str:
        """Format phase log as string with optional player-name context."""
        formatter = EventFormatter(names or {})
        header = f"{self.phase.value.upper()} (round {self.round_number})"
        lines = [header]
        for entry in self.entries:
            target = "all" if entry.is_broadcast else formatter.name(entry.recipient)
            lines.append(f"  -> {target}: {formatter.format(entry.event)}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()


# ============================================================================
# Full Session Event Log
# ============================================================================

class EventLog(BaseModel):
    """
    Chronological event log with deliveries organized by phase.

    Structure:
    - phases: Chronological sequence of PhaseLog
    - game_over: Final result (if the game finished)
    """

    session_id: str = Field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    player_names: dict[str, str] = Field(default_factory=dict)
    phases: list[PhaseLog] = Field(default_factory=list)
    game_over: Optional[GameOver] = None
    metadata: dict = Field(default_factory=dict)

    def __str__(self) -> str:
        """Human-readable summary of the entire session."""
        formatter = EventFormatter(self.player_names)
        lines = [f"Session {self.session_id} ({len(self.player_names)} players)"]
        for i, phase in enumerate(self.phases):
            if i > 0:
                lines.append("")
            lines.append(phase.describe(self.player_names))

        if self.game_over:
            lines.append("")
            lines.append(f"  {formatter.format(self.game_over)}")

        return "\n".join(lines)

    def all_entries(self) -> list[LoggedEvent]:
        """Flat list of deliveries in chronological order."""
        return [entry for phase in self.phases for entry in phase.entries]

    def events_of(self, kind: str) -> list[LoggedEvent]:
        """All deliveries of one event kind."""
        return [entry for entry in self.all_entries() if entry.event.kind == kind]

    def to_yaml(self) -> str:
        """Serialize the event log to YAML string."""
        data = self.model_dump(mode="json")
        return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def save_to_file(self, filepath: str) -> None:
        """Serialize the event log to a YAML file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_yaml())

    @classmethod
    def load_from_file(cls, filepath: str) -> "EventLog":
        """Load an event log from a YAML file."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)
