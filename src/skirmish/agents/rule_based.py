"""Fixed-rule decision agent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from skirmish.agents.base import fallback_action, living, weakest
from skirmish.combat.actions import Action, HealAction
from skirmish.core.constants import (
    ALLY_RESCUE_THRESHOLD,
    DEFAULT_HEAL_AMOUNT,
    SELF_PRESERVATION_THRESHOLD,
)
from skirmish.core.exceptions import UnresolvableDecision
from skirmish.core.logging import get_logger


if TYPE_CHECKING:
    from skirmish.engine.state import MatchState
    from skirmish.models.combatant import Combatant

logger = get_logger(__name__)


class RuleBasedAgent:
    """Deterministic agent evaluating three rules in priority order.

    1. Self-preservation: heal self below 30% health.
    2. Ally rescue: heal the weakest other ally below 20% health.
    3. Focus fire: attack the weakest living enemy.

    Thresholds are strict, so a combatant at exactly 30% does not heal.
    Only living combatants are considered.

    Attributes:
        name: Agent name used in logs.
        heal_amount: Health restored by a heal decision.
    """

    def __init__(self, *, name: str = "rule_based", heal_amount: int = DEFAULT_HEAL_AMOUNT) -> None:
        self.name = name
        self.heal_amount = heal_amount

    def decide_action(
        self,
        self_: Combatant,
        allies: Sequence[Combatant],
        enemies: Sequence[Combatant],
        state: MatchState,
    ) -> Action:
        """Apply the rules to pick an action.

        Raises:
            UnresolvableDecision: If no enemy is alive and no heal applies.
        """
        if self_.stats.health_below(SELF_PRESERVATION_THRESHOLD):
            logger.debug("Rule matched", rule="self_preservation", combatant=self_.name)
            return HealAction(self_, self.heal_amount)

        wounded = [
            ally
            for ally in living(allies)
            if ally != self_ and ally.stats.health_below(ALLY_RESCUE_THRESHOLD)
        ]
        ally = weakest(wounded)
        if ally is not None:
            logger.debug("Rule matched", rule="ally_rescue", combatant=self_.name, target=ally.name)
            return HealAction(ally, self.heal_amount)

        try:
            action = fallback_action(self_, enemies)
        except UnresolvableDecision as exc:
            raise UnresolvableDecision(
                f"{self_.name} has no living enemy to attack",
                agent=self.name,
            ) from exc
        logger.debug(
            "Rule matched",
            rule="focus_fire",
            combatant=self_.name,
            target=action.target.name,
        )
        return action


__all__ = ["RuleBasedAgent"]
