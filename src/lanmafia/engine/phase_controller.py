"""PhaseController - the session orchestrator.

The controller is the single writer of SessionState. Everything that can
change the session (client intents, disconnects, timer expiries, timer
ticks) is turned into a message on one asyncio.Queue and handled one at a
time by run(), so no locks are needed around the state.

A phase can end two ways: every required player acted, or its timer
expired. Both paths funnel into _end_phase(), which cancels the active
timer synchronously and enters the next phase, bumping the state
generation. A deadline or tick carrying an older generation is dropped, so
whichever signal arrives second is a silent no-op.

Outbound events are queued on the Outbox while a message is handled and
flushed once the mutation is complete.
"""

import asyncio
import logging
from typing import Any, NamedTuple, Optional, Union

from lanmafia.config import EngineSettings
from lanmafia.events import (
    ActionRejected,
    BaseIntent,
    CastVote,
    GameOver,
    Join,
    Joined,
    Leave,
    PhaseChanged,
    ReadyStatusUpdated,
    RequestCurrentState,
    ReturnToLobby,
    RoleAssigned,
    RosterUpdated,
    SessionEnded,
    SetReady,
    SettingsUpdated,
    SkipPhase,
    StartGame,
    StateSnapshot,
    SubmitNightAction,
    TimerUpdated,
    UpdateSettings,
    VoteResolved,
    investigation_messages,
    night_broadcast,
    parse_intent,
)
from lanmafia.models.actions import NightAction, Vote, WinResult
from lanmafia.models.phase import Phase
from lanmafia.models.player import Player
from lanmafia.validation import (
    ConfigurationMismatch,
    EngineError,
    InvariantBreach,
    require_host,
    require_phase,
    require_player,
    validate_duration_overrides,
    validate_night_action,
    validate_player_name,
    validate_ready,
    validate_role_configuration,
    validate_vote,
    ValidationError,
)
from .event_collector import EventCollector
from .night_resolver import NightResolver
from .outbox import Outbox, Transport
from .phase_timer import AsyncioTimerFactory, PhaseTimer, TimerFactory
from .randomizer import Randomizer
from .role_assigner import RoleAssigner
from .session_state import SessionState
from .validator import GameValidator, NoOpValidator
from .vote_tally import VoteTally
from .win_evaluator import WinEvaluator

logger = logging.getLogger(__name__)

HOST_LEFT = "Host left the game"

# Phases the host can skip or abort out of
IN_GAME_PHASES = (
    Phase.ROLE_REVEAL,
    Phase.NIGHT,
    Phase.DISCUSSION,
    Phase.VOTING,
    Phase.RESULTS,
    Phase.GAME_OVER,
)


# ============================================================================
# Inbox messages
# ============================================================================


class IntentReceived(NamedTuple):
    connection_id: str
    payload: Any  # raw dict or parsed intent


class ConnectionLost(NamedTuple):
    connection_id: str


class PhaseDeadline(NamedTuple):
    generation: int


class TimerTick(NamedTuple):
    generation: int
    remaining: int


class _Stop(NamedTuple):
    pass


InboxMessage = Union[IntentReceived, ConnectionLost, PhaseDeadline, TimerTick, _Stop]


class PhaseController:
    """Runs one session: phases, timers, resolvers and outbound events.

    Usage:
        transport = LocalTransport()
        controller = PhaseController(transport, settings=load_settings())
        task = asyncio.create_task(controller.run())
        controller.submit("conn-1", {"type": "join", "name": "Alice"})
        await controller.wait_idle()
    """

    def __init__(
        self,
        transport: Transport,
        settings: Optional[EngineSettings] = None,
        state: Optional[SessionState] = None,
        randomizer: Optional[Randomizer] = None,
        timer_factory: Optional[TimerFactory] = None,
        validator: Optional[GameValidator] = None,
        collector: Optional[EventCollector] = None,
    ):
        """Initialize the controller.

        Args:
            transport: Where outbound events go.
            settings: Engine settings (defaults when None).
            state: Session state to own. A fresh one is created when None.
            randomizer: Randomness for role assignment.
            timer_factory: Phase timer implementation (asyncio by default).
            validator: Audit hooks (no-op by default).
            collector: Event collector recording every delivery.
        """
        self.settings = settings or EngineSettings()
        self.state = state or SessionState(
            durations=self.settings.durations.model_copy(),
            rules=self.settings.rules.model_copy(),
        )
        self.assigner = RoleAssigner(randomizer)
        self.night_resolver = NightResolver()
        self.vote_tally = VoteTally()
        self.win_evaluator = WinEvaluator()
        self.timers = timer_factory or AsyncioTimerFactory(self.settings.tick_interval)
        self.validator = validator or NoOpValidator()
        self.collector = collector
        self.outbox = Outbox(transport, collector)

        self._inbox: asyncio.Queue = asyncio.Queue()
        self._timer: Optional[PhaseTimer] = None
        self._started = False
        self._halted = False
        self._pending_game_over = None

        # Counters for monitoring and tests
        self.night_resolutions = 0
        self.vote_tallies = 0
        self.games_completed = 0

        self._handlers = {
            Join: self._on_join,
            StartGame: self._on_start_game,
            SubmitNightAction: self._on_night_action,
            CastVote: self._on_vote,
            SetReady: self._on_set_ready,
            RequestCurrentState: self._on_request_state,
            Leave: self._on_leave,
            UpdateSettings: self._on_update_settings,
            SkipPhase: self._on_skip_phase,
            ReturnToLobby: self._on_return_to_lobby,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def halted(self) -> bool:
        return self._halted

    @property
    def active_timer(self) -> Optional[PhaseTimer]:
        return self._timer

    def submit(self, connection_id: str, intent: Union[BaseIntent, dict]) -> None:
        """Queue an intent from a connection."""
        self._inbox.put_nowait(IntentReceived(connection_id, intent))

    def submit_raw(self, connection_id: str, payload: Any) -> None:
        """Queue an unparsed payload; it is validated when handled."""
        self.submit(connection_id, payload)

    def disconnect(self, connection_id: str) -> None:
        """Queue a lost connection."""
        self._inbox.put_nowait(ConnectionLost(connection_id))

    def notify_deadline(self, generation: int) -> None:
        """Timer callback: the phase started at `generation` has expired."""
        self._inbox.put_nowait(PhaseDeadline(generation))

    def notify_tick(self, generation: int, remaining: int) -> None:
        """Timer callback: seconds remaining in the phase at `generation`."""
        self._inbox.put_nowait(TimerTick(generation, remaining))

    async def run(self) -> None:
        """Handle inbox messages until stop() is called or the session halts."""
        await self._ensure_started()
        try:
            while not self._halted:
                message = await self._inbox.get()
                try:
                    if isinstance(message, _Stop):
                        break
                    await self._handle(message)
                finally:
                    self._inbox.task_done()
        finally:
            self._cancel_timer()

    async def drain(self) -> int:
        """Handle every queued message without a running loop task.

        Messages queued while draining (for example by bots reacting to
        events) are handled too.

        Returns:
            Number of messages handled.
        """
        await self._ensure_started()
        handled = 0
        while not self._inbox.empty() and not self._halted:
            message = self._inbox.get_nowait()
            try:
                if not isinstance(message, _Stop):
                    await self._handle(message)
                    handled += 1
            finally:
                self._inbox.task_done()
        return handled

    async def wait_idle(self) -> None:
        """Wait until every queued message has been handled by run()."""
        await self._inbox.join()

    def stop(self) -> None:
        self._inbox.put_nowait(_Stop())

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def _ensure_started(self) -> None:
        if not self._started:
            self._started = True
            await self.validator.on_phase_start(self.state.phase, self.state.round_number, self.state)

    async def _handle(self, message: InboxMessage) -> None:
        try:
            if isinstance(message, IntentReceived):
                await self._handle_intent(message.connection_id, message.payload)
            elif isinstance(message, ConnectionLost):
                await self._handle_disconnect(message.connection_id)
            elif isinstance(message, PhaseDeadline):
                await self._handle_deadline(message.generation)
            elif isinstance(message, TimerTick):
                self._handle_tick(message.generation, message.remaining)
            self.state.assert_consistent()
        except InvariantBreach as exc:
            self._halt(exc)
        finally:
            self.outbox.flush()

        if self._pending_game_over is not None:
            winner, self._pending_game_over = self._pending_game_over, None
            await self.validator.on_game_over(winner, self.state, self.collector)

    async def _handle_intent(self, connection_id: str, payload: Any) -> None:
        try:
            intent = parse_intent(payload)
            handler = self._handlers.get(type(intent))
            if handler is None:
                raise ValidationError("Unsupported intent", {"type": intent.type})
            if isinstance(intent, Join):
                await handler(connection_id, intent)
            else:
                player = require_player(self.state.get_by_connection(connection_id), connection_id)
                await handler(player, intent)
            logger.debug("Accepted %s from %s", intent.type, connection_id)
        except InvariantBreach:
            raise
        except EngineError as exc:
            self._reject(connection_id, exc)

    def _reject(self, connection_id: str, exc: EngineError) -> None:
        if isinstance(exc, ConfigurationMismatch):
            logger.error("Configuration mismatch from %s: %s", connection_id, exc.message)
        else:
            logger.warning("Rejected intent from %s: [%s] %s", connection_id, exc.kind.value, exc.message)

        player = self.state.get_by_connection(connection_id)
        self.outbox.send(
            connection_id,
            ActionRejected(
                error=exc.kind,
                message=exc.message,
                context=exc.context,
                round_number=self.state.round_number,
            ),
            player_id=player.id if player else None,
        )

    async def _handle_deadline(self, generation: int) -> None:
        if generation != self.state.generation or self._timer is None:
            logger.debug("Dropping stale deadline for generation %d", generation)
            return
        logger.debug("%s timer expired", self.state.phase.value)
        await self._end_phase()

    def _handle_tick(self, generation: int, remaining: int) -> None:
        if generation != self.state.generation:
            return
        self.outbox.broadcast(TimerUpdated(
            phase=self.state.phase,
            remaining=remaining,
            round_number=self.state.round_number,
        ))

    async def _handle_disconnect(self, connection_id: str) -> None:
        player = self.state.get_by_connection(connection_id)
        if player is None:
            logger.debug("Disconnect from unknown connection %s", connection_id)
            return
        await self._player_gone(player)

    async def _player_gone(self, player: Player) -> None:
        """A player left or dropped. The host leaving ends the session."""
        if player.is_host:
            self._end_session(HOST_LEFT)
            return

        if self.state.phase == Phase.LOBBY:
            self.state.remove_player(player.id)
            logger.info("%s left the lobby", player.name)
        else:
            self.state.mark_disconnected(player.id)
            logger.info("%s disconnected during %s", player.name, self.state.phase.value)

        self._broadcast_roster()
        await self._check_completion()

    # ------------------------------------------------------------------
    # Intent handlers
    # ------------------------------------------------------------------

    async def _on_join(self, connection_id: str, intent: Join) -> None:
        state = self.state
        require_phase(state.phase, Phase.LOBBY)
        if state.get_by_connection(connection_id) is not None:
            raise ValidationError("Connection has already joined", {"connection_id": connection_id})
        if len(state.players) >= self.settings.players.max:
            raise ValidationError("Session is full", {"max_players": self.settings.players.max})

        name = validate_player_name(intent.name, [p.name for p in state.players], self.settings.names)
        player = state.add_player(connection_id, name)
        logger.info("%s joined%s", player.name, " as host" if player.is_host else "")

        self.outbox.send(
            connection_id,
            Joined(player_id=player.id, name=player.name, is_host=player.is_host),
            player_id=player.id,
        )
        self._broadcast_roster()

    async def _on_start_game(self, player: Player, intent: StartGame) -> None:
        state = self.state
        require_phase(state.phase, Phase.LOBBY)
        require_host(player, "start the game")

        durations = state.durations
        if intent.durations is not None:
            validate_duration_overrides(intent.durations, self.settings.duration_bounds)
            durations = intent.durations.apply_to(durations)

        roster = state.connected_players()
        validate_role_configuration(intent.configuration, len(roster), self.settings)
        assignments = self.assigner.assign(roster, intent.configuration)

        state.durations = durations
        state.assign_roles(assignments, intent.configuration)
        logger.info("Game started: %s", intent.configuration.summary())

        await self._enter_phase(Phase.ROLE_REVEAL)
        for target in roster:
            self.outbox.send(
                target.connection_id,
                RoleAssigned(role=target.role, description=target.role.description),
                player_id=target.id,
            )

    async def _on_night_action(self, player: Player, intent: SubmitNightAction) -> None:
        state = self.state
        require_phase(state.phase, Phase.NIGHT, claimed=intent.phase)
        target = state.get_player(intent.target_id)
        validate_night_action(player, intent.action, target, state.rules)

        state.record_night_action(
            NightAction(actor_id=player.id, kind=intent.action, target_id=target.id)
        )
        if state.night_actions_complete():
            await self._end_phase()

    async def _on_vote(self, player: Player, intent: CastVote) -> None:
        state = self.state
        require_phase(state.phase, Phase.VOTING, claimed=intent.phase)
        target = state.get_player(intent.target_id)
        validate_vote(player, target)

        state.record_vote(Vote(voter_id=player.id, target_id=target.id))
        if state.votes_complete():
            await self._end_phase()

    async def _on_set_ready(self, player: Player, intent: SetReady) -> None:
        state = self.state
        require_phase(state.phase, Phase.LOBBY, Phase.DISCUSSION, claimed=intent.phase)
        validate_ready(player, state.phase)

        state.set_ready(player.id, intent.ready)
        pool = state.ready_pool()
        self.outbox.broadcast(ReadyStatusUpdated(
            phase=state.phase,
            ready_player_ids=state.ready_ids(),
            ready_count=sum(1 for p in pool if p.id in state.ready),
            total_count=len(pool),
            round_number=state.round_number,
        ))
        if state.phase == Phase.DISCUSSION and state.all_ready():
            await self._end_phase()

    async def _on_request_state(self, player: Player, intent: RequestCurrentState) -> None:
        state = self.state
        self.outbox.send(
            player.connection_id,
            StateSnapshot(
                phase=state.phase,
                players=state.view_for(player.id),
                your_player_id=player.id,
                your_role=player.role,
                remaining=self._timer.remaining() if self._timer is not None else None,
                round_number=state.round_number,
            ),
            player_id=player.id,
        )

    async def _on_leave(self, player: Player, intent: Leave) -> None:
        await self._player_gone(player)

    async def _on_update_settings(self, player: Player, intent: UpdateSettings) -> None:
        state = self.state
        require_phase(state.phase, Phase.LOBBY)
        require_host(player, "change settings")

        if intent.durations is not None:
            validate_duration_overrides(intent.durations, self.settings.duration_bounds)
            state.durations = intent.durations.apply_to(state.durations)
        if intent.rules is not None:
            state.rules = intent.rules.apply_to(state.rules)

        self.outbox.broadcast(SettingsUpdated(
            durations=state.durations.model_dump(),
            rules=state.rules.model_dump(),
        ))

    async def _on_skip_phase(self, player: Player, intent: SkipPhase) -> None:
        require_phase(self.state.phase, *IN_GAME_PHASES)
        require_host(player, "skip the phase")
        logger.info("Host skipped %s", self.state.phase.value)
        await self._end_phase()

    async def _on_return_to_lobby(self, player: Player, intent: ReturnToLobby) -> None:
        require_phase(self.state.phase, *IN_GAME_PHASES)
        require_host(player, "return to the lobby")
        await self._return_to_lobby(intent.keep_players)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _check_completion(self) -> None:
        """End the phase if nobody is left to wait for."""
        state = self.state
        if state.phase == Phase.NIGHT and state.night_actions_complete():
            await self._end_phase()
        elif state.phase == Phase.VOTING and state.votes_complete():
            await self._end_phase()
        elif state.phase == Phase.DISCUSSION and state.all_ready():
            await self._end_phase()

    async def _end_phase(self) -> None:
        """Single exit point of every timed phase."""
        phase = self.state.phase
        self._cancel_timer()

        if phase == Phase.ROLE_REVEAL:
            await self._enter_phase(Phase.NIGHT)
        elif phase == Phase.NIGHT:
            await self._resolve_night()
        elif phase == Phase.DISCUSSION:
            await self._enter_phase(Phase.VOTING)
        elif phase == Phase.VOTING:
            await self._resolve_votes()
        elif phase == Phase.RESULTS:
            await self._enter_phase(Phase.NIGHT)
        elif phase == Phase.GAME_OVER:
            await self._return_to_lobby(keep_players=True)

    async def _enter_phase(self, phase: Phase) -> None:
        state = self.state
        generation = state.enter_phase(phase)
        duration = state.durations.for_phase(phase)

        self.outbox.broadcast(PhaseChanged(
            phase=phase,
            duration=duration,
            round_number=state.round_number,
        ))
        if duration is not None:
            self._start_timer(duration, generation)

        logger.info("Phase %s (round %d)", phase.value, state.round_number)
        await self.validator.on_phase_start(phase, state.round_number, state)

    async def _resolve_night(self) -> None:
        state = self.state
        actions = list(state.night_actions.values())
        alive_before = {p.id for p in state.living_players()}

        result = self.night_resolver.resolve(actions, state.players)
        self.night_resolutions += 1
        for player_id in result.deaths:
            state.eliminate(player_id)
        await self.validator.on_night_resolved(result, alive_before, state)

        self.outbox.broadcast(night_broadcast(result, state.name_map(), state.round_number))
        for investigator_id, event in investigation_messages(result, state.round_number):
            investigator = state.get_player(investigator_id)
            if investigator is not None and investigator.is_connected:
                self.outbox.send(investigator.connection_id, event, player_id=investigator_id)

        if result.deaths:
            self._broadcast_roster()
            win = await self._check_win()
            if win.is_game_over:
                await self._game_over(win)
                return

        await self._enter_phase(Phase.DISCUSSION)

    async def _resolve_votes(self) -> None:
        state = self.state
        votes = list(state.votes.values())

        result = self.vote_tally.tally(votes, state.players)
        self.vote_tallies += 1
        if result.eliminated is not None:
            state.eliminate(result.eliminated)
        await self.validator.on_vote_resolved(result, votes, state)

        self.outbox.broadcast(VoteResolved(
            eliminated=result.eliminated,
            eliminated_name=result.eliminated_name,
            counts=result.counts,
            is_tie=result.is_tie,
            narrative=result.narrative,
            round_number=state.round_number,
        ))
        await self._enter_phase(Phase.RESULTS)

        if result.eliminated is not None:
            self._broadcast_roster()
            win = await self._check_win()
            if win.is_game_over:
                self._cancel_timer()
                await self._game_over(win)

    async def _check_win(self) -> WinResult:
        result = self.win_evaluator.evaluate(self.state.players)
        await self.validator.on_victory_check(result, self.state)
        return result

    async def _game_over(self, win: WinResult) -> None:
        state = self.state
        state.winner = win.winner
        await self._enter_phase(Phase.GAME_OVER)
        self.outbox.broadcast(GameOver(
            winner=win.winner,
            reason=win.reason or "",
            final_roster=state.final_roster(),
            round_number=state.round_number,
        ))
        self.games_completed += 1
        self._pending_game_over = win.winner
        logger.info("Game over: %s win (%s)", win.winner.value, win.reason)

    async def _return_to_lobby(self, keep_players: bool) -> None:
        self._cancel_timer()
        self.state.reset_for_lobby(keep_players)
        self.outbox.broadcast(PhaseChanged(phase=Phase.LOBBY, round_number=0))
        self._broadcast_roster()
        logger.info("Returned to lobby (%d players)", len(self.state.players))
        await self.validator.on_phase_start(Phase.LOBBY, 0, self.state)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _end_session(self, reason: str) -> None:
        self._cancel_timer()
        self.state.clear()
        self.outbox.broadcast(SessionEnded(reason=reason))
        logger.info("Session ended: %s", reason)

    def _halt(self, exc: InvariantBreach) -> None:
        """Stop the session after state corruption. Needs a host restart."""
        logger.critical("Halting session: %s", exc)
        self._halted = True
        self._pending_game_over = None
        self._cancel_timer()
        self.outbox.discard()
        self.outbox.broadcast(SessionEnded(reason=f"Internal error: {exc.message}"))
        while not self._inbox.empty():
            self._inbox.get_nowait()
            self._inbox.task_done()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _start_timer(self, duration: float, generation: int) -> None:
        on_tick = self.notify_tick if self.settings.tick_interval > 0 else None
        self._timer = self.timers.start(duration, generation, self.notify_deadline, on_tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _broadcast_roster(self) -> None:
        self.outbox.broadcast(RosterUpdated(
            players=self.state.roster_view(),
            round_number=self.state.round_number,
        ))
