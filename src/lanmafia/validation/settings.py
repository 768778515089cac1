"""Role configuration and timer validation (host setup)."""

from lanmafia.config import DurationBounds, DurationOverrides, EngineSettings
from lanmafia.models.player import SPECIAL_ROLES
from lanmafia.models.role_config import RoleConfiguration
from .exceptions import ValidationError

MINIMAL_TEST_PLAYERS = 3


def is_minimal_test_config(config: RoleConfiguration) -> bool:
    """3 players, no townspeople: the smallest playable session."""
    return config.total_players == MINIMAL_TEST_PLAYERS and config.townspeople == 0


def validate_role_configuration(
    config: RoleConfiguration,
    player_count: int,
    settings: EngineSettings,
) -> None:
    """Validate a role configuration against the roster and the limits.

    Args:
        config: Requested role counts.
        player_count: Number of connected players in the lobby.
        settings: Engine settings holding the bounds and rule toggles.

    Raises:
        ValidationError: On the first broken rule.
    """
    limits = settings.players
    if not limits.contains(config.total_players):
        raise ValidationError(
            f"Player count must be between {limits.min} and {limits.max}",
            {"total_players": config.total_players},
        )

    if config.total_players != player_count:
        raise ValidationError(
            f"Configuration is for {config.total_players} players but {player_count} are in the lobby",
            {"total_players": config.total_players, "player_count": player_count},
        )

    counts = config.counts()
    for role in SPECIAL_ROLES:
        bounds = settings.role_limits.for_role(role)
        if bounds is not None and not bounds.contains(counts[role]):
            raise ValidationError(
                f"{role.value} count must be between {bounds.min} and {bounds.max}",
                {"role": role.value, "count": counts[role]},
            )

    if config.killers < 1:
        raise ValidationError("At least one killer is required", {"killers": config.killers})

    if config.townspeople < 0:
        raise ValidationError(
            "Too many special roles for the number of players",
            {"special_roles": config.special_count, "total_players": config.total_players},
        )

    if config.townspeople == 0:
        allowed = settings.rules.allow_minimal_test_config and is_minimal_test_config(config)
        if not allowed:
            raise ValidationError(
                "At least one townsperson is required",
                {"total_players": config.total_players, "special_roles": config.special_count},
            )

    if config.killers >= config.non_killers:
        raise ValidationError(
            "Killers cannot equal or outnumber the other players",
            {"killers": config.killers, "others": config.non_killers},
        )


def validate_duration_overrides(overrides: DurationOverrides, bounds: DurationBounds) -> None:
    """Validate host-supplied phase durations.

    Raises:
        ValidationError: If any given duration is outside its bounds.
    """
    for field, value in overrides.model_dump(exclude_none=True).items():
        limit = getattr(bounds, field)
        if not limit.contains(value):
            raise ValidationError(
                f"{field} duration must be between {limit.min} and {limit.max} seconds",
                {"phase": field, "seconds": value},
            )
