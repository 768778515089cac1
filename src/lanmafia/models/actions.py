"""Submitted intents and resolver results."""

from typing import Optional

from pydantic import BaseModel, Field

from lanmafia.models.player import ActionKind, Faction, Verdict


class NightAction(BaseModel):
    """A single live night action. One per acting player per night."""

    actor_id: str
    kind: ActionKind
    target_id: str


class Vote(BaseModel):
    """A single live vote. One per voter per voting phase."""

    voter_id: str
    target_id: str


# ============================================================================
# Resolver results
# ============================================================================


class InvestigationFinding(BaseModel):
    """Outcome of one investigate action.

    Only public_message may be shown to players other than the investigator.
    """

    investigator_id: str
    target_id: str
    target_name: str
    verdict: Verdict
    public_message: str

    @property
    def private_message(self) -> str:
        return (
            f"Your investigation of {self.target_name} revealed they are "
            f"{self.verdict.value}."
        )


class NightResult(BaseModel):
    """Outcome of a resolved night."""

    deaths: list[str] = Field(default_factory=list)  # player ids
    heals: list[str] = Field(default_factory=list)  # every heal target
    saved: list[str] = Field(default_factory=list)  # kill targets blocked by a heal
    investigations: list[InvestigationFinding] = Field(default_factory=list)
    narrative: str = ""

    @property
    def public_messages(self) -> list[str]:
        return [finding.public_message for finding in self.investigations]


class VoteResult(BaseModel):
    """Outcome of a tallied vote."""

    eliminated: Optional[str] = None  # player id
    eliminated_name: Optional[str] = None
    counts: dict[str, int] = Field(default_factory=dict)  # target id -> votes
    top_candidates: list[str] = Field(default_factory=list)
    max_votes: int = 0
    is_tie: bool = False
    narrative: str = ""


class WinResult(BaseModel):
    """Outcome of a win check."""

    is_game_over: bool = False
    winner: Optional[Faction] = None
    reason: Optional[str] = None
    killers_alive: int = 0
    town_alive: int = 0
