"""Tests for SessionState."""

import pytest

from lanmafia.engine import SessionState
from lanmafia.models import ActionKind, NightAction, Phase, Role, RoleConfiguration, Vote
from lanmafia.validation import InvariantBreach, PhaseViolation, ValidationError


def make_lobby(count: int) -> SessionState:
    state = SessionState()
    for i in range(count):
        state.add_player(f"c{i}", f"Player{i}")
    return state


def start_game(state: SessionState, roles: list[Role]) -> None:
    """Bind roles in roster order and enter role reveal."""
    config = RoleConfiguration(
        total_players=len(roles),
        killers=roles.count(Role.KILLER),
        healers=roles.count(Role.HEALER),
        investigators=roles.count(Role.INVESTIGATOR),
    )
    state.assign_roles([(p.id, role) for p, role in zip(state.players, roles)], config)
    state.enter_phase(Phase.ROLE_REVEAL)


ROLES = [Role.KILLER, Role.HEALER, Role.INVESTIGATOR, Role.TOWNSPERSON, Role.TOWNSPERSON]


class TestRoster:
    """Joining, leaving and lookups."""

    def test_first_joiner_is_host(self) -> None:
        state = make_lobby(3)
        assert [p.is_host for p in state.players] == [True, False, False]
        assert state.host_connection_id == "c0"
        assert state.host.name == "Player0"

    def test_join_order_preserved(self) -> None:
        state = make_lobby(4)
        assert [p.name for p in state.players] == ["Player0", "Player1", "Player2", "Player3"]

    def test_duplicate_connection_rejected(self) -> None:
        state = make_lobby(1)
        with pytest.raises(ValidationError):
            state.add_player("c0", "Again")

    def test_join_outside_lobby(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        with pytest.raises(PhaseViolation):
            state.add_player("late", "Latecomer")

    def test_remove_in_lobby(self) -> None:
        state = make_lobby(3)
        removed = state.remove_player(state.players[1].id)
        assert removed.name == "Player1"
        assert len(state.players) == 2

    def test_remove_in_game_forbidden(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        with pytest.raises(PhaseViolation):
            state.remove_player(state.players[1].id)

    def test_disconnect_keeps_player(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        player = state.players[3]
        state.mark_disconnected(player.id)

        assert player in state.players
        assert player.role == Role.TOWNSPERSON
        assert not player.is_connected
        assert state.get_by_connection("c3") is None
        assert player not in state.connected_living()

    def test_eliminate(self) -> None:
        state = make_lobby(3)
        player = state.players[2]
        state.eliminate(player.id)
        assert not player.is_alive
        assert player not in state.living_players()

    def test_eliminate_dead_player_is_breach(self) -> None:
        state = make_lobby(3)
        state.eliminate(state.players[2].id)
        with pytest.raises(InvariantBreach):
            state.eliminate(state.players[2].id)


class TestPhases:
    """Phase entry bumps the generation and clears collection sets."""

    def test_illegal_transition(self) -> None:
        state = make_lobby(3)
        with pytest.raises(InvariantBreach):
            state.enter_phase(Phase.VOTING)

    def test_generation_and_round(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        assert state.generation == 1
        assert state.round_number == 0

        state.enter_phase(Phase.NIGHT)
        assert state.generation == 2
        assert state.round_number == 1

        state.enter_phase(Phase.DISCUSSION)
        state.enter_phase(Phase.VOTING)
        state.enter_phase(Phase.RESULTS)
        state.enter_phase(Phase.NIGHT)
        assert state.round_number == 2
        assert state.generation == 6

    def test_collections_cleared_on_entry(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.enter_phase(Phase.NIGHT)
        killer, healer = state.players[0], state.players[1]
        state.record_night_action(NightAction(actor_id=killer.id, kind=ActionKind.KILL, target_id=healer.id))

        state.enter_phase(Phase.DISCUSSION)
        assert state.night_actions == {}

        state.set_ready(healer.id, True)
        state.enter_phase(Phase.VOTING)
        assert state.ready == []
        assert not healer.is_ready

        state.record_vote(Vote(voter_id=healer.id, target_id=killer.id))
        state.enter_phase(Phase.RESULTS)
        assert state.votes == {}


class TestCollections:
    """Last-write-wins actions and votes, completion checks."""

    def test_action_last_write_wins(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.enter_phase(Phase.NIGHT)
        killer = state.players[0]

        assert not state.record_night_action(
            NightAction(actor_id=killer.id, kind=ActionKind.KILL, target_id=state.players[3].id)
        )
        assert state.record_night_action(
            NightAction(actor_id=killer.id, kind=ActionKind.KILL, target_id=state.players[4].id)
        )
        assert len(state.night_actions) == 1
        assert state.night_actions[killer.id].target_id == state.players[4].id

    def test_replacement_moves_to_end(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.enter_phase(Phase.NIGHT)
        a, b = state.players[0], state.players[1]
        state.record_night_action(NightAction(actor_id=a.id, kind=ActionKind.KILL, target_id=b.id))
        state.record_night_action(NightAction(actor_id=b.id, kind=ActionKind.HEAL, target_id=b.id))
        state.record_night_action(NightAction(actor_id=a.id, kind=ActionKind.KILL, target_id=b.id))
        assert list(state.night_actions) == [b.id, a.id]

    def test_night_completion_counts_acting_roles(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.enter_phase(Phase.NIGHT)
        killer, healer, investigator = state.players[:3]

        assert {p.id for p in state.pending_night_actors()} == {killer.id, healer.id, investigator.id}
        state.record_night_action(NightAction(actor_id=killer.id, kind=ActionKind.KILL, target_id=healer.id))
        state.record_night_action(NightAction(actor_id=healer.id, kind=ActionKind.HEAL, target_id=healer.id))
        assert not state.night_actions_complete()
        state.record_night_action(
            NightAction(actor_id=investigator.id, kind=ActionKind.INVESTIGATE, target_id=killer.id)
        )
        assert state.night_actions_complete()

    def test_disconnected_actor_not_waited_for(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.enter_phase(Phase.NIGHT)
        state.mark_disconnected(state.players[2].id)
        assert state.players[2] not in state.pending_night_actors()

    def test_votes_complete(self) -> None:
        state = make_lobby(3)
        start_game(state, [Role.KILLER, Role.TOWNSPERSON, Role.TOWNSPERSON])
        for phase in (Phase.NIGHT, Phase.DISCUSSION, Phase.VOTING):
            state.enter_phase(phase)
        a, b, c = state.players
        state.record_vote(Vote(voter_id=a.id, target_id=b.id))
        state.record_vote(Vote(voter_id=b.id, target_id=a.id))
        assert not state.votes_complete()
        state.eliminate(c.id)
        assert state.votes_complete()

    def test_all_ready_in_lobby(self) -> None:
        state = make_lobby(2)
        assert not state.all_ready()
        for p in state.players:
            state.set_ready(p.id, True)
        assert state.all_ready()
        state.set_ready(state.players[0].id, False)
        assert not state.all_ready()


class TestResetAndViews:
    """Lobby reset, clearing and roster views."""

    def test_reset_keeps_connected_players(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.mark_disconnected(state.players[4].id)
        state.eliminate(state.players[3].id)

        state.reset_for_lobby(keep_players=True)
        assert state.phase == Phase.LOBBY
        assert len(state.players) == 4
        assert all(p.is_alive and p.role is None for p in state.players)
        assert state.configuration is None
        assert state.round_number == 0

    def test_reset_new_group_keeps_host(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.reset_for_lobby(keep_players=False)
        assert [p.name for p in state.players] == ["Player0"]
        assert state.players[0].is_host

    def test_clear(self) -> None:
        state = make_lobby(3)
        state.clear()
        assert state.is_empty
        assert state.host_connection_id is None

    def test_roster_reveals_dead_roles(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.eliminate(state.players[0].id)
        views = state.roster_view()
        assert views[0].role == Role.KILLER
        assert all(v.role is None for v in views[1:])

    def test_roster_hides_dead_roles_when_disabled(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.rules.reveal_role_on_death = False
        state.eliminate(state.players[0].id)
        assert all(v.role is None for v in state.roster_view())

    def test_private_view_shows_own_role(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        me = state.players[2]
        views = {v.id: v for v in state.view_for(me.id)}
        assert views[me.id].role == Role.INVESTIGATOR
        assert views[state.players[0].id].role is None

    def test_final_roster_reveals_everything(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        assert [v.role for v in state.final_roster()] == ROLES


class TestConsistency:
    """assert_consistent raises on corrupt state."""

    def test_fresh_game_is_consistent(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.assert_consistent()

    def test_two_hosts_is_breach(self) -> None:
        state = make_lobby(3)
        state.players[1].is_host = True
        with pytest.raises(InvariantBreach) as exc_info:
            state.assert_consistent()
        assert "S.1" in [v.rule_id for v in exc_info.value.violations]

    def test_votes_outside_voting_is_breach(self) -> None:
        state = make_lobby(5)
        start_game(state, ROLES)
        state.votes["x"] = Vote(voter_id=state.players[0].id, target_id=state.players[1].id)
        with pytest.raises(InvariantBreach):
            state.assert_consistent()
