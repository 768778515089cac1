"""Vote tallying for the voting phase."""

from typing import Sequence

from lanmafia.models.actions import Vote, VoteResult
from lanmafia.models.player import Player

NO_VOTES_NARRATIVE = "No votes were cast. No one was eliminated."
TIE_NARRATIVE = "The vote was tied. No one was eliminated."


class VoteTally:
    """Counts votes and decides the elimination.

    A single target holding the strict maximum is eliminated. A shared
    maximum is a tie and nobody is eliminated. No votes at all is not a
    tie, just no elimination. The roster is never mutated here.
    """

    def tally(self, votes: Sequence[Vote], roster: Sequence[Player]) -> VoteResult:
        """Tally votes.

        Args:
            votes: Live votes, one per voter.
            roster: All players, used for names.

        Returns:
            VoteResult with counts, top candidates and the decision.
        """
        names = {p.id: p.name for p in roster}

        counts: dict[str, int] = {}
        for vote in votes:
            counts[vote.target_id] = counts.get(vote.target_id, 0) + 1

        if not counts:
            return VoteResult(counts={}, narrative=NO_VOTES_NARRATIVE)

        max_votes = max(counts.values())
        top = [target for target, n in counts.items() if n == max_votes]

        if len(top) > 1:
            return VoteResult(
                counts=counts,
                top_candidates=top,
                max_votes=max_votes,
                is_tie=True,
                narrative=TIE_NARRATIVE,
            )

        eliminated = top[0]
        name = names.get(eliminated, eliminated)
        return VoteResult(
            eliminated=eliminated,
            eliminated_name=name,
            counts=counts,
            top_candidates=top,
            max_votes=max_votes,
            narrative=f"{name} was eliminated by majority vote.",
        )
