"""Role configuration for game setup."""

from pydantic import BaseModel, Field

from lanmafia.models.player import Role


# Recommended distributions for common player counts
RECOMMENDED_ROLES: dict[int, tuple[int, int, int]] = {
    # players: (killers, healers, investigators)
    4: (1, 1, 0),
    5: (1, 1, 1),
    6: (2, 1, 1),
    7: (2, 1, 1),
    8: (2, 1, 1),
    9: (2, 1, 1),
    10: (3, 1, 1),
    11: (3, 1, 1),
    12: (3, 2, 1),
    13: (3, 2, 1),
    14: (4, 2, 1),
    15: (4, 2, 1),
    16: (4, 2, 2),
    17: (4, 2, 2),
    18: (5, 2, 2),
    19: (5, 2, 2),
    20: (5, 3, 2),
}


class RoleConfiguration(BaseModel):
    """Counts for each special role plus the total player count.

    Townspeople are never given explicitly; they fill whatever the special
    roles leave over.
    """

    total_players: int = Field(ge=0)
    killers: int = Field(default=1, ge=0)
    healers: int = Field(default=0, ge=0)
    investigators: int = Field(default=0, ge=0)

    @property
    def special_count(self) -> int:
        return self.killers + self.healers + self.investigators

    @property
    def townspeople(self) -> int:
        """Derived townsperson count (may be negative for a broken config)."""
        return self.total_players - self.special_count

    @property
    def non_killers(self) -> int:
        return self.healers + self.investigators + self.townspeople

    def counts(self) -> dict[Role, int]:
        """Get the number of players for every role."""
        return {
            Role.KILLER: self.killers,
            Role.HEALER: self.healers,
            Role.INVESTIGATOR: self.investigators,
            Role.TOWNSPERSON: self.townspeople,
        }

    def summary(self) -> str:
        """Human-readable distribution, e.g. "2 Killers, 1 Healer, 4 Townspeople"."""
        parts = []
        if self.killers > 0:
            parts.append(f"{self.killers} Killer{'s' if self.killers > 1 else ''}")
        if self.healers > 0:
            parts.append(f"{self.healers} Healer{'s' if self.healers > 1 else ''}")
        if self.investigators > 0:
            parts.append(
                f"{self.investigators} Investigator{'s' if self.investigators > 1 else ''}"
            )
        if self.townspeople > 0:
            parts.append(
                f"{self.townspeople} {'Townspeople' if self.townspeople > 1 else 'Townsperson'}"
            )
        return ", ".join(parts)

    @classmethod
    def recommended(cls, player_count: int) -> "RoleConfiguration":
        """Get the recommended distribution for a player count.

        Counts outside the table are derived from fixed ratios
        (about 25% killers, 12% healers, 10% investigators).

        Args:
            player_count: Number of players in the session.

        Returns:
            A RoleConfiguration sized to player_count.
        """
        if player_count in RECOMMENDED_ROLES:
            killers, healers, investigators = RECOMMENDED_ROLES[player_count]
        else:
            killers = max(1, min(5, round(player_count * 0.25)))
            healers = max(1, min(3, round(player_count * 0.12)))
            investigators = max(0, min(2, round(player_count * 0.10)))
            # Small sessions cannot afford every special role
            while killers + healers + investigators >= player_count and investigators > 0:
                investigators -= 1
            while killers + healers + investigators >= player_count and healers > 0:
                healers -= 1

        return cls(
            total_players=player_count,
            killers=killers,
            healers=healers,
            investigators=investigators,
        )
