"""Engine configuration.

Settings are plain pydantic models with defaults matching the house rules.
They can be loaded from a YAML file and overridden from environment
variables:

    LANMAFIA_MIN_PLAYERS, LANMAFIA_MAX_PLAYERS, LANMAFIA_LOG_LEVEL,
    LANMAFIA_TICK_INTERVAL

Usage:
    settings = load_settings("lanmafia.yaml")
    controller = PhaseController(settings=settings)
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from lanmafia.models.phase import Phase
from lanmafia.models.player import Role

logger = logging.getLogger(__name__)

ENV_PREFIX = "LANMAFIA_"


class Bounds(BaseModel):
    """Inclusive integer range."""

    min: int
    max: int

    @model_validator(mode="after")
    def _check_order(self) -> "Bounds":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) cannot exceed max ({self.max})")
        return self

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class PlayerLimits(Bounds):
    """Total player bounds. Three players is the minimal testing session."""

    min: int = 3
    max: int = 20


class RoleLimits(BaseModel):
    """Per-role count bounds."""

    killers: Bounds = Field(default_factory=lambda: Bounds(min=1, max=5))
    healers: Bounds = Field(default_factory=lambda: Bounds(min=0, max=3))
    investigators: Bounds = Field(default_factory=lambda: Bounds(min=0, max=2))

    def for_role(self, role: Role) -> Optional[Bounds]:
        return {
            Role.KILLER: self.killers,
            Role.HEALER: self.healers,
            Role.INVESTIGATOR: self.investigators,
        }.get(role)


class PhaseDurations(BaseModel):
    """Phase durations in seconds."""

    role_reveal: float = Field(default=10, gt=0)
    night: float = Field(default=30, gt=0)
    discussion: float = Field(default=120, gt=0)
    voting: float = Field(default=60, gt=0)
    results: float = Field(default=5, gt=0)
    game_over: float = Field(default=30, gt=0)

    def for_phase(self, phase: Phase) -> Optional[float]:
        """Get the timer duration for a phase (None for the lobby)."""
        return {
            Phase.ROLE_REVEAL: self.role_reveal,
            Phase.NIGHT: self.night,
            Phase.DISCUSSION: self.discussion,
            Phase.VOTING: self.voting,
            Phase.RESULTS: self.results,
            Phase.GAME_OVER: self.game_over,
        }.get(phase)


class DurationOverrides(BaseModel):
    """Host-supplied duration changes. Unset fields keep the current value."""

    role_reveal: Optional[float] = None
    night: Optional[float] = None
    discussion: Optional[float] = None
    voting: Optional[float] = None

    def apply_to(self, durations: PhaseDurations) -> PhaseDurations:
        return durations.model_copy(update=self.model_dump(exclude_none=True))


class DurationBounds(BaseModel):
    """Allowed ranges for host-supplied durations."""

    role_reveal: Bounds = Field(default_factory=lambda: Bounds(min=5, max=60))
    night: Bounds = Field(default_factory=lambda: Bounds(min=15, max=300))
    discussion: Bounds = Field(default_factory=lambda: Bounds(min=30, max=600))
    voting: Bounds = Field(default_factory=lambda: Bounds(min=15, max=300))


class GameRules(BaseModel):
    """Rule toggles."""

    allow_self_heal: bool = True
    reveal_role_on_death: bool = True
    allow_minimal_test_config: bool = True  # 3 players / 0 townspeople


class RuleOverrides(BaseModel):
    """Host-supplied rule changes."""

    allow_self_heal: Optional[bool] = None
    reveal_role_on_death: Optional[bool] = None

    def apply_to(self, rules: GameRules) -> GameRules:
        return rules.model_copy(update=self.model_dump(exclude_none=True))


class NameRules(BaseModel):
    """Display name constraints."""

    min_length: int = 2
    max_length: int = 20
    allowed_pattern: str = r"^[a-zA-Z0-9\s\-_.]+$"
    restricted_words: list[str] = Field(
        default_factory=lambda: ["admin", "server", "bot", "null", "undefined", "delete", "drop"]
    )


class EngineSettings(BaseModel):
    """Complete engine configuration."""

    players: PlayerLimits = Field(default_factory=PlayerLimits)
    role_limits: RoleLimits = Field(default_factory=RoleLimits)
    durations: PhaseDurations = Field(default_factory=PhaseDurations)
    duration_bounds: DurationBounds = Field(default_factory=DurationBounds)
    rules: GameRules = Field(default_factory=GameRules)
    names: NameRules = Field(default_factory=NameRules)
    tick_interval: float = Field(default=1.0, ge=0)  # 0 disables timer ticks
    log_level: str = "INFO"

    def to_yaml(self) -> str:
        """Serialize settings to a YAML string."""
        return yaml.dump(self.model_dump(mode="json"), default_flow_style=False, sort_keys=False)


def _env_overrides(environ: dict[str, str]) -> dict:
    """Collect overrides from LANMAFIA_* environment variables."""
    overrides: dict = {}
    if f"{ENV_PREFIX}MIN_PLAYERS" in environ:
        overrides.setdefault("players", {})["min"] = int(environ[f"{ENV_PREFIX}MIN_PLAYERS"])
    if f"{ENV_PREFIX}MAX_PLAYERS" in environ:
        overrides.setdefault("players", {})["max"] = int(environ[f"{ENV_PREFIX}MAX_PLAYERS"])
    if f"{ENV_PREFIX}LOG_LEVEL" in environ:
        overrides["log_level"] = environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()
    if f"{ENV_PREFIX}TICK_INTERVAL" in environ:
        overrides["tick_interval"] = float(environ[f"{ENV_PREFIX}TICK_INTERVAL"])
    return overrides


def _merge(base: dict, overrides: dict) -> dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    path: Union[str, Path, None] = None,
    environ: Optional[dict[str, str]] = None,
) -> EngineSettings:
    """Load engine settings from an optional YAML file plus environment.

    Args:
        path: YAML file to read. None uses the built-in defaults.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated EngineSettings.

    Raises:
        ValueError: If the file or overrides produce invalid settings.
    """
    data: dict = {}
    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        data = loaded

    try:
        data = _merge(data, _env_overrides(os.environ if environ is None else environ))
        settings = EngineSettings.model_validate(data)
    except (PydanticValidationError, TypeError) as exc:
        raise ValueError(f"Invalid engine settings: {exc}") from exc

    logger.debug("Loaded settings from %s", path or "defaults")
    return settings
