"""Models package."""

from lanmafia.models.player import (
    Role,
    RoleTraits,
    ROLE_TRAITS,
    SPECIAL_ROLES,
    Faction,
    ActionKind,
    Verdict,
    Player,
    PlayerView,
)
from lanmafia.models.phase import Phase, PHASE_TRANSITIONS
from lanmafia.models.role_config import RoleConfiguration, RECOMMENDED_ROLES
from lanmafia.models.actions import (
    NightAction,
    Vote,
    InvestigationFinding,
    NightResult,
    VoteResult,
    WinResult,
)

__all__ = [
    "Role",
    "RoleTraits",
    "ROLE_TRAITS",
    "SPECIAL_ROLES",
    "Faction",
    "ActionKind",
    "Verdict",
    "Player",
    "PlayerView",
    "Phase",
    "PHASE_TRANSITIONS",
    "RoleConfiguration",
    "RECOMMENDED_ROLES",
    "NightAction",
    "Vote",
    "InvestigationFinding",
    "NightResult",
    "VoteResult",
    "WinResult",
]
