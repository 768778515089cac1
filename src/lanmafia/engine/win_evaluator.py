"""Win evaluation, run after every elimination."""

from typing import Sequence

from lanmafia.models.actions import WinResult
from lanmafia.models.player import Faction, Player

TOWN_WINS = "All killers have been eliminated!"
KILLERS_WIN = "The killers have taken control of the town!"


class WinEvaluator:
    """Decides whether a faction has won.

    Rules, checked in order over living players:
    1. No killers alive: town wins
    2. Killers >= everyone else: killers win
    3. Otherwise the game continues
    """

    def evaluate(self, roster: Sequence[Player]) -> WinResult:
        living = [p for p in roster if p.is_alive]
        killers = sum(1 for p in living if p.is_killer)
        town = len(living) - killers

        if killers == 0:
            return WinResult(
                is_game_over=True,
                winner=Faction.TOWN,
                reason=TOWN_WINS,
                killers_alive=killers,
                town_alive=town,
            )
        if killers >= town:
            return WinResult(
                is_game_over=True,
                winner=Faction.KILLERS,
                reason=KILLERS_WIN,
                killers_alive=killers,
                town_alive=town,
            )
        return WinResult(killers_alive=killers, town_alive=town)
