"""Stub clients for testing and simulation.

A StubClient plays like a thin viewer device: it only sees what the engine
sends to its connection, and answers with random but valid intents.
Useful for:
- Integration tests (full sessions without real devices)
- The `lanmafia` CLI simulation and stress runs
"""

import random
from typing import Optional, Protocol

from lanmafia.events import (
    CastVote,
    GameEvent,
    GameOver,
    Join,
    Joined,
    PhaseChanged,
    RoleAssigned,
    RosterUpdated,
    SessionEnded,
    SetReady,
    SubmitNightAction,
    BaseIntent,
)
from lanmafia.models.phase import Phase
from lanmafia.models.player import ActionKind, PlayerView, Role

DEFAULT_NAMES = [
    "Alice", "Bob", "Carol", "Dave", "Erin", "Frank", "Grace", "Heidi",
    "Ivan", "Judy", "Mallory", "Niaj", "Olivia", "Peggy", "Rupert",
    "Sybil", "Trent", "Victor", "Walter", "Yvonne",
]


class IntentSink(Protocol):
    """Where a client sends its intents (the PhaseController)."""

    def submit(self, connection_id: str, intent: BaseIntent) -> None:
        ...


class StubClient:
    """A scripted player device that picks random valid actions.

    Reacts to:
    - joined: remembers its player id
    - role_assigned: remembers its role
    - roster_updated: tracks who is alive
    - phase_changed: acts at night, signals ready in discussion, votes
    """

    def __init__(
        self,
        connection_id: str,
        name: str,
        engine: IntentSink,
        seed: Optional[int] = None,
        allow_self_heal: bool = True,
    ):
        """Initialize stub client.

        Args:
            connection_id: Transport connection this client owns.
            name: Display name to join with.
            engine: Intent sink (usually the PhaseController).
            seed: Seed for this client's choices.
            allow_self_heal: Whether a healer may pick itself.
        """
        self.connection_id = connection_id
        self.name = name
        self.engine = engine
        self.allow_self_heal = allow_self_heal
        self._rng = random.Random(seed)

        self.player_id: Optional[str] = None
        self.is_host = False
        self.role: Optional[Role] = None
        self.roster: list[PlayerView] = []
        self.events: list[GameEvent] = []
        self.game_over: Optional[GameOver] = None
        self.session_ended = False

    @property
    def is_alive(self) -> bool:
        me = self._me()
        return me is not None and me.is_alive

    def join(self) -> None:
        self.send(Join(name=self.name))

    def send(self, intent: BaseIntent) -> None:
        self.engine.submit(self.connection_id, intent)

    def on_event(self, event: GameEvent) -> None:
        """Transport callback."""
        self.events.append(event)

        if isinstance(event, Joined):
            self.player_id = event.player_id
            self.is_host = event.is_host
        elif isinstance(event, RoleAssigned):
            self.role = event.role
        elif isinstance(event, RosterUpdated):
            self.roster = list(event.players)
        elif isinstance(event, PhaseChanged):
            self._on_phase(event.phase)
        elif isinstance(event, GameOver):
            self.game_over = event
        elif isinstance(event, SessionEnded):
            self.session_ended = True

    def _on_phase(self, phase: Phase) -> None:
        if phase == Phase.LOBBY:
            self.role = None
            return
        if not self.is_alive:
            return

        if phase == Phase.NIGHT:
            action = self.choose_night_action()
            if action is not None:
                self.send(action)
        elif phase == Phase.DISCUSSION:
            self.send(SetReady(ready=True, phase=Phase.DISCUSSION))
        elif phase == Phase.VOTING:
            target = self.choose_vote_target()
            if target is not None:
                self.send(CastVote(target_id=target, phase=Phase.VOTING))

    def choose_night_action(self) -> Optional[SubmitNightAction]:
        """Pick a target for this client's role action, if it has one."""
        if self.role is None or not self.role.can_act:
            return None
        kind = self.role.action
        include_self = kind == ActionKind.HEAL and self.allow_self_heal
        targets = self._living_ids(include_self=include_self)
        if not targets:
            return None
        return SubmitNightAction(action=kind, target_id=self._rng.choice(targets), phase=Phase.NIGHT)

    def choose_vote_target(self) -> Optional[str]:
        targets = self._living_ids(include_self=False)
        return self._rng.choice(targets) if targets else None

    def _me(self) -> Optional[PlayerView]:
        return next((p for p in self.roster if p.id == self.player_id), None)

    def _living_ids(self, include_self: bool) -> list[str]:
        return [
            p.id for p in self.roster
            if p.is_alive and (include_self or p.id != self.player_id)
        ]


def create_stub_clients(
    count: int,
    engine: IntentSink,
    seed: Optional[int] = None,
    allow_self_heal: bool = True,
) -> list[StubClient]:
    """Create `count` stub clients with distinct names and seeds."""
    if count > len(DEFAULT_NAMES):
        raise ValueError(f"At most {len(DEFAULT_NAMES)} stub clients are supported")
    base = seed if seed is not None else random.randint(1, 1_000_000)
    return [
        StubClient(
            connection_id=f"conn-{i + 1}",
            name=DEFAULT_NAMES[i],
            engine=engine,
            seed=base + i,
            allow_self_heal=allow_self_heal,
        )
        for i in range(count)
    ]
