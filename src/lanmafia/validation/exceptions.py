"""Engine exceptions.

Every rejection the engine can produce maps to one ErrorKind. The first four
kinds are local and recoverable: the offending intent is dropped and only its
sender is told. InvariantBreach is the one fatal kind and halts the session.
"""

from enum import Enum
from typing import Any, List, Optional

from .types import ValidationViolation, errors_only


class ErrorKind(str, Enum):
    """Error kinds reported back to clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PHASE_VIOLATION = "PHASE_VIOLATION"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    CONFIGURATION_MISMATCH = "CONFIGURATION_MISMATCH"
    INVARIANT_BREACH = "INVARIANT_BREACH"


class EngineError(Exception):
    """Base class for all engine errors."""

    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationError(EngineError):
    """Malformed name, out-of-range configuration, or malformed action."""

    kind = ErrorKind.VALIDATION_ERROR


class PhaseViolation(EngineError):
    """Intent submitted for a phase that is not the current one."""

    kind = ErrorKind.PHASE_VIOLATION


class PermissionDenied(EngineError):
    """Non-host issued a host-only command."""

    kind = ErrorKind.PERMISSION_ERROR

    def __init__(self, player_id: Optional[str], action: str):
        super().__init__(
            f"Player {player_id} does not have permission to {action}",
            {"player_id": player_id, "action": action},
        )


class ConfigurationMismatch(EngineError):
    """Role list does not fit the roster (should have been caught earlier)."""

    kind = ErrorKind.CONFIGURATION_MISMATCH


class InvariantBreach(EngineError):
    """Session state is corrupt. Not recoverable.

    Carries the violations that were detected so they can be logged.
    """

    kind = ErrorKind.INVARIANT_BREACH

    def __init__(self, violations: List[ValidationViolation]):
        self.violations = violations
        count = len(violations)
        error_violations = len(errors_only(violations))
        super().__init__(
            f"Invariant breach with {count} violation(s) ({error_violations} errors)",
            {"rules": [v.rule_id for v in violations]},
        )

    def __str__(self) -> str:
        if not self.violations:
            return "InvariantBreach(no violations)"
        lines = [f"InvariantBreach({len(self.violations)} violations):"]
        for v in self.violations:
            lines.append(f"  {v.describe()}")
        return "\n".join(lines)
