"""Tests for VoteTally."""

from lanmafia.engine import VoteTally
from lanmafia.models import Player, Vote


def make_roster(count: int) -> list[Player]:
    return [Player(id=f"p{i}", connection_id=f"c{i}", name=f"Player{i}") for i in range(count)]


def votes_for(*targets: str) -> list[Vote]:
    return [Vote(voter_id=f"v{i}", target_id=target) for i, target in enumerate(targets)]


class TestVoteTally:
    """Tests for VoteTally functionality."""

    def test_three_three_is_tie(self) -> None:
        roster = make_roster(6)
        result = VoteTally().tally(votes_for("p0", "p0", "p0", "p1", "p1", "p1"), roster)

        assert result.eliminated is None
        assert result.is_tie
        assert result.counts == {"p0": 3, "p1": 3}
        assert result.top_candidates == ["p0", "p1"]
        assert result.narrative == "The vote was tied. No one was eliminated."

    def test_four_two_eliminates_leader(self) -> None:
        roster = make_roster(6)
        result = VoteTally().tally(votes_for("p0", "p0", "p0", "p0", "p1", "p1"), roster)

        assert result.eliminated == "p0"
        assert result.eliminated_name == "Player0"
        assert not result.is_tie
        assert result.max_votes == 4
        assert result.narrative == "Player0 was eliminated by majority vote."

    def test_zero_votes(self) -> None:
        result = VoteTally().tally([], make_roster(6))

        assert result.eliminated is None
        assert not result.is_tie
        assert result.counts == {}
        assert result.narrative == "No votes were cast. No one was eliminated."

    def test_plurality_is_enough(self) -> None:
        result = VoteTally().tally(votes_for("p0", "p0", "p1", "p2"), make_roster(6))
        assert result.eliminated == "p0"

    def test_single_vote(self) -> None:
        result = VoteTally().tally(votes_for("p3"), make_roster(6))
        assert result.eliminated == "p3"

    def test_roster_not_mutated(self) -> None:
        roster = make_roster(4)
        VoteTally().tally(votes_for("p0", "p0"), roster)
        assert all(p.is_alive for p in roster)

    def test_deterministic_regardless_of_order(self) -> None:
        roster = make_roster(6)
        a = VoteTally().tally(votes_for("p0", "p1", "p0"), roster)
        b = VoteTally().tally(votes_for("p1", "p0", "p0"), roster)
        assert a.eliminated == b.eliminated == "p0"
