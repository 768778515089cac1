"""End-to-end sessions with stub clients."""

import asyncio
from collections import Counter

import pytest

from lanmafia.config import EngineSettings, PhaseDurations
from lanmafia.engine import CollectingValidator
from lanmafia.models import Faction, Phase, RoleConfiguration
from lanmafia.play import build_configuration, run_session


class TestInstantSessions:
    """Sessions with timers fired as soon as nothing else is pending."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(8))
    async def test_session_completes_without_violations(self, seed: int) -> None:
        validator = CollectingValidator()
        report = await run_session(RoleConfiguration.recommended(7), seed, validator=validator)

        assert report.winner in (Faction.TOWN.value, Faction.KILLERS.value)
        assert report.violations == []
        assert validator.games_completed == 1

    @pytest.mark.asyncio
    async def test_final_roster_lists_every_player_once(self) -> None:
        configuration = RoleConfiguration.recommended(8)
        report = await run_session(configuration, seed=11)
        event_log = report.event_log
        game_over = event_log.game_over

        ids = [p.id for p in game_over.final_roster]
        assert len(ids) == len(set(ids)) == 8

        assigned = {
            entry.recipient: entry.event.role for entry in event_log.events_of("role_assigned")
        }
        assert set(assigned) == set(ids)
        for view in game_over.final_roster:
            assert view.role == assigned[view.id]

        roles = Counter(view.role for view in game_over.final_roster)
        expected = {role: n for role, n in configuration.counts().items() if n > 0}
        assert dict(roles) == expected

    @pytest.mark.asyncio
    async def test_alive_flags_match_eliminations(self) -> None:
        report = await run_session(RoleConfiguration.recommended(6), seed=3)
        event_log = report.event_log

        eliminated = set()
        for entry in event_log.events_of("night_resolved"):
            eliminated.update(entry.event.deaths)
        for entry in event_log.events_of("vote_resolved"):
            if entry.event.eliminated:
                eliminated.add(entry.event.eliminated)

        for view in event_log.game_over.final_roster:
            assert view.is_alive == (view.id not in eliminated)

    @pytest.mark.asyncio
    async def test_minimal_session(self) -> None:
        configuration = RoleConfiguration(total_players=3, killers=1, healers=1, investigators=1)
        report = await run_session(configuration, seed=5, validator=CollectingValidator())
        assert report.winner is not None
        assert report.violations == []

    @pytest.mark.asyncio
    async def test_same_seed_same_outcome(self) -> None:
        configuration = build_configuration(7)
        first = await run_session(configuration, seed=99)
        second = await run_session(configuration, seed=99)
        assert (first.winner, first.rounds) == (second.winner, second.rounds)

    @pytest.mark.asyncio
    async def test_phase_logs_follow_the_cycle(self) -> None:
        report = await run_session(RoleConfiguration.recommended(7), seed=21)
        phases = [log.phase for log in report.event_log.phases]

        assert phases[0] == Phase.LOBBY
        assert phases[1] == Phase.ROLE_REVEAL
        assert phases[2] == Phase.NIGHT
        assert phases[-1] == Phase.GAME_OVER
        assert phases.count(Phase.GAME_OVER) == 1


class TestRealtimeSession:
    """A session on real asyncio timers."""

    @pytest.mark.asyncio
    async def test_realtime_session_completes(self) -> None:
        settings = EngineSettings(
            durations=PhaseDurations(
                role_reveal=0.01,
                night=0.05,
                discussion=0.05,
                voting=0.05,
                results=0.01,
                game_over=0.05,
            ),
            tick_interval=0,
        )
        validator = CollectingValidator()
        report = await asyncio.wait_for(
            run_session(RoleConfiguration.recommended(5), 8, settings=settings, realtime=True, validator=validator),
            timeout=30,
        )

        assert report.winner is not None
        assert report.violations == []


class TestBuildConfiguration:
    """CLI role configuration helper."""

    def test_recommended_by_default(self) -> None:
        assert build_configuration(7) == RoleConfiguration.recommended(7)

    def test_overrides(self) -> None:
        config = build_configuration(8, killers=1, investigators=0)
        assert (config.killers, config.healers, config.investigators) == (1, 1, 0)
        assert config.townspeople == 6
