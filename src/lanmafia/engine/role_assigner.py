"""Role assignment - deals one role per player from a role configuration."""

import logging
from typing import Optional, Sequence

from lanmafia.models.player import Player, Role, SPECIAL_ROLES
from lanmafia.models.role_config import RoleConfiguration
from lanmafia.validation.exceptions import ConfigurationMismatch
from .randomizer import Randomizer

logger = logging.getLogger(__name__)


class RoleAssigner:
    """Expands a RoleConfiguration into a shuffled deck and deals it.

    The deck is shuffled, then zipped with the roster in join order, so the
    role a player gets does not depend on when they joined.
    """

    def __init__(self, randomizer: Optional[Randomizer] = None):
        self.randomizer = randomizer or Randomizer()

    @staticmethod
    def build_deck(config: RoleConfiguration) -> list[Role]:
        """Build the unshuffled multiset of role tags for a configuration.

        Raises:
            ConfigurationMismatch: If the special roles exceed the total.
        """
        if config.townspeople < 0:
            raise ConfigurationMismatch(
                "Role configuration has more special roles than players",
                {"total_players": config.total_players, "special_roles": config.special_count},
            )
        deck: list[Role] = []
        counts = config.counts()
        for role in SPECIAL_ROLES:
            deck.extend([role] * counts[role])
        deck.extend([Role.TOWNSPERSON] * config.townspeople)
        return deck

    def assign(self, players: Sequence[Player], config: RoleConfiguration) -> list[tuple[str, Role]]:
        """Deal one role per player.

        Args:
            players: Players in roster order.
            config: Role counts to deal.

        Returns:
            (player_id, role) pairs in roster order.

        Raises:
            ConfigurationMismatch: If the roster size differs from the
                configured total.
        """
        if len(players) != config.total_players:
            raise ConfigurationMismatch(
                f"Role configuration is for {config.total_players} players, roster has {len(players)}",
                {"total_players": config.total_players, "roster_size": len(players)},
            )

        deck = self.randomizer.shuffle(self.build_deck(config))
        assignments = [(player.id, role) for player, role in zip(players, deck)]
        logger.debug("Dealt roles: %s", config.summary())
        return assignments
