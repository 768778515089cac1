"""Player and Role models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class Faction(str, Enum):
    """Factions for victory conditions."""

    KILLERS = "killers"
    TOWN = "town"


class ActionKind(str, Enum):
    """Night action kinds."""

    KILL = "kill"
    HEAL = "heal"
    INVESTIGATE = "investigate"


class Verdict(str, Enum):
    """Result of an investigation."""

    SUSPICIOUS = "suspicious"
    INNOCENT = "innocent"


class Role(str, Enum):
    """Player roles in the game.

    Behaviour attached to each role lives in ROLE_TRAITS and is exposed
    through the properties below, so call sites never compare role strings.
    """

    KILLER = "killer"
    HEALER = "healer"
    INVESTIGATOR = "investigator"
    TOWNSPERSON = "townsperson"

    @property
    def traits(self) -> "RoleTraits":
        return ROLE_TRAITS[self]

    @property
    def faction(self) -> Faction:
        return ROLE_TRAITS[self].faction

    @property
    def action(self) -> Optional[ActionKind]:
        return ROLE_TRAITS[self].action

    @property
    def can_act(self) -> bool:
        return ROLE_TRAITS[self].action is not None

    @property
    def description(self) -> str:
        return ROLE_TRAITS[self].description


class RoleTraits(BaseModel):
    """Static data describing what a role does."""

    faction: Faction
    action: Optional[ActionKind] = None
    description: str = ""


ROLE_TRAITS: dict[Role, RoleTraits] = {
    Role.KILLER: RoleTraits(
        faction=Faction.KILLERS,
        action=ActionKind.KILL,
        description="Choose a player to eliminate each night",
    ),
    Role.HEALER: RoleTraits(
        faction=Faction.TOWN,
        action=ActionKind.HEAL,
        description="Protect one player from elimination each night",
    ),
    Role.INVESTIGATOR: RoleTraits(
        faction=Faction.TOWN,
        action=ActionKind.INVESTIGATE,
        description="Learn whether one player is suspicious each night",
    ),
    Role.TOWNSPERSON: RoleTraits(
        faction=Faction.TOWN,
        description="Find the killers through discussion and voting",
    ),
}

# Order in which special roles are listed in configurations and summaries
SPECIAL_ROLES: tuple[Role, ...] = (Role.KILLER, Role.HEALER, Role.INVESTIGATOR)


def _new_player_id() -> str:
    return f"player_{uuid4().hex[:12]}"


class PlayerView(BaseModel):
    """What other devices are allowed to see about a player."""

    id: str
    name: str
    is_host: bool = False
    is_alive: bool = True
    is_connected: bool = True
    is_ready: bool = False
    role: Optional[Role] = None  # only set when revealed


class Player(BaseModel):
    """Represents a player in the session.

    The stable id survives for the whole session; the connection id is the
    transport handle and is only meaningful while the device is connected.
    """

    id: str = Field(default_factory=_new_player_id)
    connection_id: str
    name: str
    is_host: bool = False
    is_alive: bool = True
    is_connected: bool = True
    is_ready: bool = False
    role: Optional[Role] = None
    joined_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_killer(self) -> bool:
        return self.role is not None and self.role.faction == Faction.KILLERS

    def to_view(self, reveal_role: bool = False) -> PlayerView:
        """Convert to a public view, hiding the role unless revealed."""
        return PlayerView(
            id=self.id,
            name=self.name,
            is_host=self.is_host,
            is_alive=self.is_alive,
            is_connected=self.is_connected,
            is_ready=self.is_ready,
            role=self.role if reveal_role else None,
        )
