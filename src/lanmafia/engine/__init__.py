"""Engine package - session orchestration components."""

from .randomizer import Randomizer
from .role_assigner import RoleAssigner
from .session_state import SessionState
from .night_resolver import NightResolver
from .vote_tally import VoteTally
from .win_evaluator import WinEvaluator
from .event_collector import EventCollector
from .outbox import Outbox, Transport, LocalTransport
from .phase_timer import (
    PhaseTimer,
    TimerFactory,
    AsyncioTimer,
    AsyncioTimerFactory,
    ManualTimer,
    ManualTimerFactory,
)
from .validator import (
    GameValidator,
    NoOpValidator,
    CollectingValidator,
    create_validator,
)
from .phase_controller import (
    PhaseController,
    IntentReceived,
    ConnectionLost,
    PhaseDeadline,
    TimerTick,
)

__all__ = [
    "Randomizer",
    "RoleAssigner",
    "SessionState",
    "NightResolver",
    "VoteTally",
    "WinEvaluator",
    "EventCollector",
    "Outbox",
    "Transport",
    "LocalTransport",
    "PhaseTimer",
    "TimerFactory",
    "AsyncioTimer",
    "AsyncioTimerFactory",
    "ManualTimer",
    "ManualTimerFactory",
    "GameValidator",
    "NoOpValidator",
    "CollectingValidator",
    "create_validator",
    "PhaseController",
    "IntentReceived",
    "ConnectionLost",
    "PhaseDeadline",
    "TimerTick",
]
