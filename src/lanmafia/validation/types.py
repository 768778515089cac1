"""Violation types shared by the session audits."""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel


class ValidationSeverity(str, Enum):
    """How bad a broken rule is. Only errors halt a session."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationViolation(BaseModel):
    """A single broken rule found while auditing a session."""

    rule_id: str  # e.g., "S.1", "V.2"
    category: str  # e.g., "State Consistency", "Victory Conditions"
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR
    context: Optional[dict] = None

    def describe(self) -> str:
        return f"[{self.severity.value.upper()}] {self.rule_id}: {self.message}"


def errors_only(violations: Iterable[ValidationViolation]) -> list[ValidationViolation]:
    """Drop warnings and info entries."""
    return [v for v in violations if v.severity == ValidationSeverity.ERROR]
