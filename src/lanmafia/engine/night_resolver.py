"""Night resolution - computes deaths and findings from submitted night actions."""

from typing import Collection, Optional, Sequence

from lanmafia.models.actions import InvestigationFinding, NightAction, NightResult
from lanmafia.models.player import ActionKind, Player, Verdict


class NightResolver:
    """Computes the outcome of a night from its actions.

    Resolution order:
    1. Heal targets form the protected set
    2. Kill actions on unprotected targets merge into one death
    3. Investigations classify their target as suspicious or innocent

    The resolver is a pure function of its inputs and keeps no state.
    """

    def resolve(self, actions: Sequence[NightAction], roster: Sequence[Player]) -> NightResult:
        """Compute the night result.

        Args:
            actions: Live night actions in submission order.
            roster: All players, living and dead.

        Returns:
            NightResult with deaths, heals, saves, findings and narrative.
        """
        by_id = {p.id: p for p in roster}

        # 1. Protected set
        heals: list[str] = []
        for action in actions:
            if action.kind == ActionKind.HEAL and action.target_id not in heals:
                heals.append(action.target_id)

        # 2. Kill
        deaths: list[str] = []
        saved: list[str] = []
        for action in actions:
            if action.kind == ActionKind.KILL and action.target_id in heals and action.target_id not in saved:
                saved.append(action.target_id)
        kill_target = self.merge_kill_targets(actions, by_id, protected=heals)
        if kill_target is not None:
            deaths.append(kill_target)

        # 3. Investigations
        investigations: list[InvestigationFinding] = []
        for action in actions:
            if action.kind != ActionKind.INVESTIGATE:
                continue
            investigator = by_id.get(action.actor_id)
            target = by_id.get(action.target_id)
            if investigator is None or target is None:
                continue
            verdict = Verdict.SUSPICIOUS if target.is_killer else Verdict.INNOCENT
            investigations.append(InvestigationFinding(
                investigator_id=investigator.id,
                target_id=target.id,
                target_name=target.name,
                verdict=verdict,
                public_message=f"{investigator.name} investigated someone during the night.",
            ))

        return NightResult(
            deaths=deaths,
            heals=heals,
            saved=saved,
            investigations=investigations,
            narrative=self.narrate([by_id[pid].name for pid in deaths], bool(saved)),
        )

    @staticmethod
    def merge_kill_targets(
        actions: Sequence[NightAction],
        by_id: dict[str, Player],
        protected: Collection[str] = (),
    ) -> Optional[str]:
        """Merge every kill action into a single target.

        The target with the most kill actions wins; ties go to the target
        that was submitted first. Targets that are protected, missing or
        already dead are ignored.
        """
        tally: dict[str, int] = {}
        for action in actions:
            if action.kind != ActionKind.KILL:
                continue
            target = by_id.get(action.target_id)
            if target is None or not target.is_alive or target.id in protected:
                continue
            tally[action.target_id] = tally.get(action.target_id, 0) + 1

        if not tally:
            return None
        # max() keeps the first maximal key, and dicts keep submission order
        return max(tally, key=lambda target_id: tally[target_id])

    @staticmethod
    def narrate(death_names: list[str], kill_blocked: bool) -> str:
        if death_names:
            verb = "was" if len(death_names) == 1 else "were"
            return f"{', '.join(death_names)} {verb} eliminated during the night."
        if kill_blocked:
            return "No one was eliminated during the night. The healer saved someone!"
        return "No one was eliminated during the night."
