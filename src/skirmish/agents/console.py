"""Human decision agent driven from the console."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Sequence

from skirmish.agents.base import living
from skirmish.combat.actions import Action, AttackAction, HealAction
from skirmish.core.constants import DEFAULT_HEAL_AMOUNT
from skirmish.core.exceptions import UnresolvableDecision


if TYPE_CHECKING:
    from skirmish.engine.state import MatchState
    from skirmish.models.combatant import Combatant


class ConsoleAgent:
    """Asks a person for an action, then for a target, by number.

    Input and output are injectable so the agent can be driven from
    tests or another front-end. An answer that is not a listed number
    raises UnresolvableDecision and the controller falls back.

    Attributes:
        name: Agent name used in logs.
        heal_amount: Health restored by a heal decision.
    """

    ACTIONS = ("attack", "heal")

    def __init__(
        self,
        *,
        name: str = "human",
        heal_amount: int = DEFAULT_HEAL_AMOUNT,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self.name = name
        self.heal_amount = heal_amount
        self._input = input_fn
        self._output = output_fn

    def _choose(self, prompt: str, options: Sequence[str]) -> int:
        for index, option in enumerate(options, start=1):
            self._output(f"  {index}. {option}")
        answer = self._input(prompt).strip()
        if not answer.isdigit() or not 1 <= int(answer) <= len(options):
            raise UnresolvableDecision(
                f"Invalid choice {answer!r}",
                payload=answer,
                agent=self.name,
            )
        return int(answer) - 1

    def decide_action(
        self,
        self_: Combatant,
        allies: Sequence[Combatant],
        enemies: Sequence[Combatant],
        state: MatchState,
    ) -> Action:
        """Prompt for an action and a target.

        Raises:
            UnresolvableDecision: On invalid input or when no target is available.
        """
        self._output("")
        self._output(f"Round {state.round}, turn {state.turn}: {self_.describe_status()}")
        self._output("Choose an action:")
        action = self.ACTIONS[self._choose("Action> ", ["Attack", f"Heal ({self.heal_amount} HP)"])]

        pool = living(enemies) if action == "attack" else living(allies)
        if not pool:
            raise UnresolvableDecision(f"No target available to {action}", agent=self.name)

        self._output("Choose a target:")
        target = pool[self._choose("Target> ", [c.describe_status() for c in pool])]

        if action == "attack":
            return AttackAction(self_, target)
        return HealAction(target, self.heal_amount)


__all__ = ["ConsoleAgent"]
