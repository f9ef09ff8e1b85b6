"""Undoable combat actions.

An Action captures what it needs to reverse itself at execution time and
runs at most once. Undo restores the snapshot exactly, bypassing
mitigation, so an executed-then-undone action leaves no trace.

Example:
    >>> action = AttackAction(warrior, mage)
    >>> action.execute()
    >>> action.amount
    43
    >>> action.undo()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from skirmish.core.exceptions import InvalidGameStateError
from skirmish.core.logging import get_logger


if TYPE_CHECKING:
    from skirmish.combat.strategies import DamageStrategy
    from skirmish.models.combatant import Combatant

logger = get_logger(__name__)


class Action(ABC):
    """Base class for undoable units of combat effect."""

    def __init__(self) -> None:
        self._executed = False
        self._undone = False

    @property
    def executed(self) -> bool:
        """True once execute() has completed successfully."""
        return self._executed

    @property
    def undone(self) -> bool:
        """True once undo() has been applied."""
        return self._undone

    def execute(self) -> None:
        """Apply the action.

        Raises:
            InvalidGameStateError: If the action already ran.
            InsufficientResource: If the actor cannot pay for the action.
                No state is changed in that case.
        """
        if self._executed:
            raise InvalidGameStateError(
                f"Action already executed: {self.describe()}",
                current_state="executed",
                expected_states=["pending"],
            )
        self._apply()
        self._executed = True

    def undo(self) -> None:
        """Reverse the action exactly.

        Raises:
            InvalidGameStateError: If the action never ran or was already undone.
        """
        if not self._executed or self._undone:
            raise InvalidGameStateError(
                f"Action cannot be undone: {self.describe()}",
                current_state="undone" if self._undone else "pending",
                expected_states=["executed"],
            )
        self._revert()
        self._undone = True

    @abstractmethod
    def _apply(self) -> None: ...

    @abstractmethod
    def _revert(self) -> None: ...

    @abstractmethod
    def describe(self) -> str:
        """Human-readable summary for display."""


class AttackAction(Action):
    """Deal damage from an attacker to a target.

    Attributes:
        attacker: The acting combatant.
        target: The combatant being hit.
        amount: Post-mitigation damage applied, set after execution.
    """

    def __init__(
        self,
        attacker: Combatant,
        target: Combatant,
        *,
        damage_strategy: DamageStrategy | None = None,
    ) -> None:
        """Initialize an attack.

        Args:
            attacker: The acting combatant.
            target: The combatant being hit.
            damage_strategy: Optional formula used instead of the
                attacker's own strategy for this attack only.
        """
        super().__init__()
        self.attacker = attacker
        self.target = target
        self.damage_strategy = damage_strategy
        self.amount = 0
        self._target_health_before = 0
        self._attacker_mana_before = 0

    def _apply(self) -> None:
        target_health = self.target.stats.health
        attacker_mana = self.attacker.stats.mana

        if self.damage_strategy is None:
            raw = self.attacker.attack(self.target)
        else:
            raw = self.damage_strategy.compute_raw_damage(self.attacker, self.target)

        self._target_health_before = target_health
        self._attacker_mana_before = attacker_mana
        self.amount = self.target.take_damage(raw)

        logger.debug(
            "Attack executed",
            attacker=self.attacker.name,
            target=self.target.name,
            raw=raw,
            applied=self.amount,
        )

    def _revert(self) -> None:
        self.target.set_health(self._target_health_before)
        self.attacker.set_mana(self._attacker_mana_before)

    def describe(self) -> str:
        if self._executed:
            return f"{self.attacker.name} attacks {self.target.name} for {self.amount} damage"
        return f"{self.attacker.name} attacks {self.target.name}"


class HealAction(Action):
    """Restore health to a target.

    Attributes:
        target: The combatant being healed.
        amount: Health requested.
        healed: Health actually restored, set after execution.
    """

    def __init__(self, target: Combatant, amount: int) -> None:
        super().__init__()
        self.target = target
        self.amount = amount
        self.healed = 0
        self._health_before = 0

    def _apply(self) -> None:
        self._health_before = self.target.stats.health
        self.healed = self.target.heal(self.amount)
        logger.debug(
            "Heal executed",
            target=self.target.name,
            requested=self.amount,
            healed=self.healed,
        )

    def _revert(self) -> None:
        self.target.set_health(self._health_before)

    def describe(self) -> str:
        if self._executed:
            return f"{self.target.name} is healed for {self.healed} HP"
        return f"Heal {self.target.name} for {self.amount} HP"


__all__ = [
    "Action",
    "AttackAction",
    "HealAction",
]
