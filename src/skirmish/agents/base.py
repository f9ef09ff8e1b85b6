"""Decision agent capability and shared targeting helpers.

A DecisionAgent chooses the Action a combatant takes on its turn. Agents
may be slow or unreliable; the match controller guards every call and
substitutes :func:`fallback_action` when one fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Protocol, Sequence, runtime_checkable

from skirmish.combat.actions import Action, AttackAction
from skirmish.core.exceptions import UnresolvableDecision


if TYPE_CHECKING:
    from skirmish.engine.state import MatchState
    from skirmish.models.combatant import Combatant


@runtime_checkable
class DecisionAgent(Protocol):
    """Chooses an Action for a combatant's turn."""

    def decide_action(
        self,
        self_: Combatant,
        allies: Sequence[Combatant],
        enemies: Sequence[Combatant],
        state: MatchState,
    ) -> Action:
        """Decide what the combatant does this turn.

        Args:
            self_: The acting combatant. Also a member of ``allies``.
            allies: The acting combatant's roster.
            enemies: The opposing roster.
            state: Current match snapshot.

        Returns:
            An unexecuted Action.
        """
        ...


def living(combatants: Iterable[Combatant]) -> list[Combatant]:
    """Return the members with health above zero, in order."""
    return [c for c in combatants if c.is_alive]


def weakest(combatants: Iterable[Combatant]) -> Combatant | None:
    """Return the member with the lowest absolute health.

    Ties go to the earliest member in iteration order.
    """
    # min() keeps the first of equal keys
    return min(combatants, key=lambda c: c.stats.health, default=None)


def fallback_action(actor: Combatant, enemies: Sequence[Combatant]) -> AttackAction:
    """Focus fire: attack the weakest living enemy.

    Raises:
        UnresolvableDecision: If no enemy is alive.
    """
    target = weakest(living(enemies))
    if target is None:
        raise UnresolvableDecision(
            f"{actor.name} has no living enemy to attack",
            agent="fallback",
        )
    return AttackAction(actor, target)


__all__ = [
    "DecisionAgent",
    "living",
    "weakest",
    "fallback_action",
]
