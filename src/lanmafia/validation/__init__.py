"""lanmafia validation module.

Two kinds of checks live here:

- Gatekeeping checks that raise before any mutation (names, settings,
  actions, host commands)
- Audits that return violations for a whole session, used by the
  CollectingValidator hooks and by SessionState.assert_consistent()

Files:
- types.py: Shared ValidationViolation, ValidationSeverity, errors_only
- exceptions.py: ErrorKind and the engine exception hierarchy
- names.py: display name rules
- settings.py: role configuration and duration checks
- actions.py: night action, vote, ready, phase, host and sender checks
- state_consistency.py: S.1-S.9 state invariant checks
- victory.py: V.1-V.4 victory condition checks
- phase_order.py: P.1-P.3 phase ordering checks
- resolution.py: R.1-R.6 night and vote resolution checks
"""

from .types import ValidationViolation, ValidationSeverity, errors_only
from .exceptions import (
    ErrorKind,
    EngineError,
    ValidationError,
    PhaseViolation,
    PermissionDenied,
    ConfigurationMismatch,
    InvariantBreach,
)

# Gatekeeping
from .names import validate_player_name
from .settings import (
    is_minimal_test_config,
    validate_role_configuration,
    validate_duration_overrides,
)
from .actions import (
    require_player,
    require_phase,
    require_host,
    require_alive,
    validate_night_action,
    validate_vote,
    validate_ready,
)

# Audits
from .state_consistency import validate_state_consistency
from .victory import count_factions, expected_winner, validate_victory
from .phase_order import validate_phase_order
from .resolution import validate_night_result, validate_vote_result

__all__ = [
    # Types and exceptions
    "errors_only",
    "ValidationViolation",
    "ValidationSeverity",
    "ErrorKind",
    "EngineError",
    "ValidationError",
    "PhaseViolation",
    "PermissionDenied",
    "ConfigurationMismatch",
    "InvariantBreach",
    # Gatekeeping
    "validate_player_name",
    "is_minimal_test_config",
    "validate_role_configuration",
    "validate_duration_overrides",
    "require_player",
    "require_phase",
    "require_host",
    "require_alive",
    "validate_night_action",
    "validate_vote",
    "validate_ready",
    # Audits
    "validate_state_consistency",
    "count_factions",
    "expected_winner",
    "validate_victory",
    "validate_phase_order",
    "validate_night_result",
    "validate_vote_result",
]
