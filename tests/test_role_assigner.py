"""Tests for RoleAssigner."""

from collections import Counter

import pytest

from lanmafia.engine import Randomizer, RoleAssigner
from lanmafia.models import Player, Role, RoleConfiguration
from lanmafia.validation import ConfigurationMismatch


def make_players(count: int) -> list[Player]:
    return [Player(connection_id=f"c{i}", name=f"Player{i}") for i in range(count)]


class TestRoleAssigner:
    """Every player gets exactly one role, matching the configuration."""

    @pytest.mark.parametrize("count", range(3, 21))
    def test_distribution_matches_config(self, count: int) -> None:
        players = make_players(count)
        config = RoleConfiguration.recommended(count)
        assignments = RoleAssigner(Randomizer(seed=count)).assign(players, config)

        assert [pid for pid, _ in assignments] == [p.id for p in players]
        roles = Counter(role for _, role in assignments)
        expected = {role: n for role, n in config.counts().items() if n > 0}
        assert dict(roles) == expected

    def test_minimal_config(self) -> None:
        players = make_players(3)
        config = RoleConfiguration(total_players=3, killers=1, healers=1, investigators=1)
        roles = Counter(role for _, role in RoleAssigner().assign(players, config))
        assert roles == Counter({Role.KILLER: 1, Role.HEALER: 1, Role.INVESTIGATOR: 1})

    def test_roster_size_mismatch(self) -> None:
        with pytest.raises(ConfigurationMismatch):
            RoleAssigner().assign(make_players(4), RoleConfiguration(total_players=5))

    def test_too_many_special_roles(self) -> None:
        config = RoleConfiguration(total_players=3, killers=2, healers=1, investigators=1)
        with pytest.raises(ConfigurationMismatch):
            RoleAssigner().assign(make_players(3), config)

    def test_independent_of_join_order(self) -> None:
        """The first player in the roster is not always dealt the same role."""
        config = RoleConfiguration(total_players=5, killers=1, healers=1, investigators=1)
        assigner = RoleAssigner(Randomizer(seed=2024))
        first_roles = Counter(
            assigner.assign(make_players(5), config)[0][1] for _ in range(500)
        )
        assert set(first_roles) == {Role.KILLER, Role.HEALER, Role.INVESTIGATOR, Role.TOWNSPERSON}
        assert 60 < first_roles[Role.KILLER] < 140

    def test_build_deck(self) -> None:
        config = RoleConfiguration(total_players=6, killers=2, healers=1)
        deck = RoleAssigner.build_deck(config)
        assert deck == [Role.KILLER, Role.KILLER, Role.HEALER] + [Role.TOWNSPERSON] * 3
