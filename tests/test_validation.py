"""Tests for the gatekeeping checks in lanmafia.validation."""

import pytest

from lanmafia.config import DurationBounds, DurationOverrides, EngineSettings, GameRules, NameRules
from lanmafia.models import ActionKind, Phase, Player, Role, RoleConfiguration
from lanmafia.validation import (
    ErrorKind,
    PermissionDenied,
    PhaseViolation,
    ValidationError,
    is_minimal_test_config,
    require_host,
    require_phase,
    require_player,
    validate_duration_overrides,
    validate_night_action,
    validate_player_name,
    validate_ready,
    validate_role_configuration,
    validate_vote,
)


# ============================================================================
# Names
# ============================================================================


class TestNames:
    """Display name rules."""

    def test_valid_name_is_trimmed(self) -> None:
        assert validate_player_name("  Alice  ", [], NameRules()) == "Alice"

    @pytest.mark.parametrize("name", ["A", "x" * 21, "Bob!", "Alice<script>", "   "])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(ValidationError):
            validate_player_name(name, [], NameRules())

    @pytest.mark.parametrize("name", ["Admin", "the_bot", "NULL", "drop table", "Server.1"])
    def test_restricted_words(self, name: str) -> None:
        with pytest.raises(ValidationError, match="restricted"):
            validate_player_name(name, [], NameRules())

    @pytest.mark.parametrize("name", ["Abbott", "Dropkick", "Botany", "Nullah"])
    def test_restricted_words_match_whole_words(self, name: str) -> None:
        assert validate_player_name(name, [], NameRules()) == name

    def test_duplicate_is_case_insensitive(self) -> None:
        with pytest.raises(ValidationError, match="taken"):
            validate_player_name("alice", ["Alice"], NameRules())

    def test_allowed_punctuation(self) -> None:
        assert validate_player_name("Mary-Jane_2.0", [], NameRules()) == "Mary-Jane_2.0"


# ============================================================================
# Role configuration
# ============================================================================


class TestRoleConfiguration:
    """Host-supplied role configurations."""

    def test_recommended_configs_are_valid(self) -> None:
        settings = EngineSettings()
        for count in range(4, 21):
            validate_role_configuration(RoleConfiguration.recommended(count), count, settings)

    def test_minimal_config_allowed(self) -> None:
        config = RoleConfiguration(total_players=3, killers=1, healers=1, investigators=1)
        assert is_minimal_test_config(config)
        validate_role_configuration(config, 3, EngineSettings())

    def test_minimal_config_can_be_disabled(self) -> None:
        settings = EngineSettings(rules=GameRules(allow_minimal_test_config=False))
        config = RoleConfiguration(total_players=3, killers=1, healers=1, investigators=1)
        with pytest.raises(ValidationError, match="townsperson"):
            validate_role_configuration(config, 3, settings)

    def test_zero_townspeople_outside_minimal(self) -> None:
        config = RoleConfiguration(total_players=5, killers=2, healers=2, investigators=1)
        with pytest.raises(ValidationError):
            validate_role_configuration(config, 5, EngineSettings())

    def test_roster_size_must_match(self) -> None:
        config = RoleConfiguration.recommended(6)
        with pytest.raises(ValidationError, match="lobby"):
            validate_role_configuration(config, 5, EngineSettings())

    def test_too_few_players(self) -> None:
        config = RoleConfiguration(total_players=2, killers=1)
        with pytest.raises(ValidationError, match="between"):
            validate_role_configuration(config, 2, EngineSettings())

    def test_no_killers(self) -> None:
        config = RoleConfiguration(total_players=5, killers=0, healers=1)
        with pytest.raises(ValidationError):
            validate_role_configuration(config, 5, EngineSettings())

    def test_killers_cannot_reach_parity(self) -> None:
        config = RoleConfiguration(total_players=6, killers=3)
        with pytest.raises(ValidationError, match="outnumber"):
            validate_role_configuration(config, 6, EngineSettings())

    def test_role_bounds(self) -> None:
        config = RoleConfiguration(total_players=12, killers=2, healers=4)
        with pytest.raises(ValidationError, match="healer"):
            validate_role_configuration(config, 12, EngineSettings())

    def test_too_many_special_roles(self) -> None:
        config = RoleConfiguration(total_players=4, killers=2, healers=2, investigators=1)
        with pytest.raises(ValidationError):
            validate_role_configuration(config, 4, EngineSettings())


class TestDurations:
    """Host-supplied timer overrides."""

    def test_within_bounds(self) -> None:
        validate_duration_overrides(DurationOverrides(night=60, voting=30), DurationBounds())

    def test_out_of_bounds(self) -> None:
        with pytest.raises(ValidationError, match="night"):
            validate_duration_overrides(DurationOverrides(night=5), DurationBounds())

    def test_unset_fields_ignored(self) -> None:
        validate_duration_overrides(DurationOverrides(), DurationBounds())


# ============================================================================
# Actions and commands
# ============================================================================


def make_player(role: Role, alive: bool = True, host: bool = False) -> Player:
    return Player(connection_id=f"c-{role.value}", name=role.value, role=role, is_alive=alive, is_host=host)


class TestNightActions:
    """Night action checks."""

    def test_killer_kills(self) -> None:
        validate_night_action(make_player(Role.KILLER), ActionKind.KILL, make_player(Role.TOWNSPERSON), GameRules())

    def test_wrong_role(self) -> None:
        with pytest.raises(ValidationError, match="cannot kill"):
            validate_night_action(
                make_player(Role.HEALER), ActionKind.KILL, make_player(Role.TOWNSPERSON), GameRules()
            )

    def test_townsperson_has_no_action(self) -> None:
        with pytest.raises(ValidationError):
            validate_night_action(
                make_player(Role.TOWNSPERSON), ActionKind.HEAL, make_player(Role.KILLER), GameRules()
            )

    def test_dead_actor(self) -> None:
        with pytest.raises(ValidationError, match="Dead"):
            validate_night_action(
                make_player(Role.KILLER, alive=False), ActionKind.KILL, make_player(Role.TOWNSPERSON), GameRules()
            )

    def test_dead_target(self) -> None:
        with pytest.raises(ValidationError, match="not alive"):
            validate_night_action(
                make_player(Role.KILLER), ActionKind.KILL, make_player(Role.TOWNSPERSON, alive=False), GameRules()
            )

    def test_unknown_target(self) -> None:
        with pytest.raises(ValidationError):
            validate_night_action(make_player(Role.KILLER), ActionKind.KILL, None, GameRules())

    def test_self_kill_forbidden(self) -> None:
        killer = make_player(Role.KILLER)
        with pytest.raises(ValidationError, match="yourself"):
            validate_night_action(killer, ActionKind.KILL, killer, GameRules())

    def test_self_investigate_forbidden(self) -> None:
        investigator = make_player(Role.INVESTIGATOR)
        with pytest.raises(ValidationError):
            validate_night_action(investigator, ActionKind.INVESTIGATE, investigator, GameRules())

    def test_self_heal_allowed_by_default(self) -> None:
        healer = make_player(Role.HEALER)
        validate_night_action(healer, ActionKind.HEAL, healer, GameRules())

    def test_self_heal_can_be_disabled(self) -> None:
        healer = make_player(Role.HEALER)
        with pytest.raises(ValidationError):
            validate_night_action(healer, ActionKind.HEAL, healer, GameRules(allow_self_heal=False))


class TestVotesAndCommands:
    """Votes, ready flags, phase tags and host checks."""

    def test_valid_vote(self) -> None:
        validate_vote(make_player(Role.TOWNSPERSON), make_player(Role.KILLER))

    def test_self_vote(self) -> None:
        voter = make_player(Role.TOWNSPERSON)
        with pytest.raises(ValidationError):
            validate_vote(voter, voter)

    def test_dead_voter(self) -> None:
        with pytest.raises(ValidationError):
            validate_vote(make_player(Role.TOWNSPERSON, alive=False), make_player(Role.KILLER))

    def test_require_phase(self) -> None:
        require_phase(Phase.VOTING, Phase.VOTING)
        with pytest.raises(PhaseViolation) as exc_info:
            require_phase(Phase.NIGHT, Phase.VOTING)
        assert exc_info.value.kind == ErrorKind.PHASE_VIOLATION

    def test_stale_phase_tag(self) -> None:
        with pytest.raises(PhaseViolation, match="was for night"):
            require_phase(Phase.DISCUSSION, Phase.DISCUSSION, claimed=Phase.NIGHT)

    def test_ready_outside_lobby_and_discussion(self) -> None:
        with pytest.raises(PhaseViolation):
            validate_ready(make_player(Role.TOWNSPERSON), Phase.VOTING)

    def test_dead_player_not_ready_in_discussion(self) -> None:
        dead = make_player(Role.TOWNSPERSON, alive=False)
        with pytest.raises(ValidationError):
            validate_ready(dead, Phase.DISCUSSION)

    def test_require_host(self) -> None:
        require_host(make_player(Role.TOWNSPERSON, host=True), "start the game")
        with pytest.raises(PermissionDenied) as exc_info:
            require_host(make_player(Role.TOWNSPERSON), "start the game")
        assert exc_info.value.kind == ErrorKind.PERMISSION_ERROR
        assert "start the game" in exc_info.value.message

    def test_require_player(self) -> None:
        with pytest.raises(ValidationError, match="join first"):
            require_player(None, "c-unknown")
