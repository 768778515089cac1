"""Inbound intent types (clients -> engine).

The transport hands the engine raw JSON-like payloads. parse_intent() turns
each one into exactly one member of the closed Intent union, or raises the
engine's ValidationError, so nothing past the boundary handles loose dicts.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from lanmafia.config import DurationOverrides, RuleOverrides
from lanmafia.models.phase import Phase
from lanmafia.models.player import ActionKind
from lanmafia.models.role_config import RoleConfiguration
from lanmafia.validation.exceptions import ValidationError


class BaseIntent(BaseModel):
    """Base class for all intents."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: str


class Join(BaseIntent):
    """Join the lobby. The first player to join hosts the session."""

    type: Literal["join"] = "join"
    name: str


class StartGame(BaseIntent):
    """Host starts the game."""

    type: Literal["start_game"] = "start_game"
    configuration: RoleConfiguration
    durations: Optional[DurationOverrides] = None


class SubmitNightAction(BaseIntent):
    """Submit (or replace) this player's night action.

    phase is the phase the client believes it is in. When given, it must
    match the engine's phase, so late submissions are rejected by tag.
    """

    type: Literal["submit_night_action"] = "submit_night_action"
    action: ActionKind
    target_id: str
    phase: Optional[Phase] = None


class CastVote(BaseIntent):
    """Cast (or replace) this player's vote."""

    type: Literal["cast_vote"] = "cast_vote"
    target_id: str
    phase: Optional[Phase] = None


class SetReady(BaseIntent):
    """Toggle the ready flag (lobby readiness or end-of-discussion)."""

    type: Literal["set_ready"] = "set_ready"
    ready: bool = True
    phase: Optional[Phase] = None


class RequestCurrentState(BaseIntent):
    """Ask for a private snapshot of the session."""

    type: Literal["request_current_state"] = "request_current_state"


class Leave(BaseIntent):
    """Leave the session."""

    type: Literal["leave"] = "leave"


class UpdateSettings(BaseIntent):
    """Host changes timers or rules while in the lobby."""

    type: Literal["update_settings"] = "update_settings"
    durations: Optional[DurationOverrides] = None
    rules: Optional[RuleOverrides] = None


class SkipPhase(BaseIntent):
    """Host ends the current phase as if its timer had fired."""

    type: Literal["skip_phase"] = "skip_phase"


class ReturnToLobby(BaseIntent):
    """Host sends everyone back to the lobby.

    keep_players=True keeps the group for another game; False clears the
    roster down to the host.
    """

    type: Literal["return_to_lobby"] = "return_to_lobby"
    keep_players: bool = True


Intent = Annotated[
    Union[
        Join,
        StartGame,
        SubmitNightAction,
        CastVote,
        SetReady,
        RequestCurrentState,
        Leave,
        UpdateSettings,
        SkipPhase,
        ReturnToLobby,
    ],
    Field(discriminator="type"),
]

_intent_adapter: TypeAdapter = TypeAdapter(Intent)


def parse_intent(payload: Any) -> BaseIntent:
    """Parse a raw payload into an Intent.

    Args:
        payload: Mapping with a "type" key, or an already-built intent.

    Returns:
        The matching intent model.

    Raises:
        ValidationError: If the payload does not match any intent shape.
    """
    if isinstance(payload, BaseIntent):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError("Invalid intent format", {"received": type(payload).__name__})

    try:
        return _intent_adapter.validate_python(payload)
    except PydanticValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ValidationError(
            "Malformed intent",
            {"type": payload.get("type"), "errors": errors},
        ) from exc
