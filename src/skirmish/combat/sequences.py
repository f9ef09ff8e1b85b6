"""Attack sequences.

An AttackSequence runs one attack through a fixed skeleton:

    begin_turn -> pre_attack_action -> perform_attack -> post_attack_action -> end_turn

Variants customise the hooks and must supply perform_attack. The driver
itself is final; a subclass that defines ``execute`` is rejected when the
class is created.

Example:
    >>> outcome = PowerAttackSequence(warrior, mage).execute()
    >>> outcome.damage_dealt, outcome.attacker_health_lost
    (53, 15)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, final

from skirmish.core.constants import POWER_ATTACK_DIVISOR, POWER_ATTACK_RECOIL
from skirmish.core.logging import get_logger


if TYPE_CHECKING:
    from skirmish.models.combatant import Combatant

logger = get_logger(__name__)


@dataclass(frozen=True)
class SequenceOutcome:
    """Result of one attack sequence.

    Attributes:
        damage_dealt: Post-mitigation damage applied to the defender.
        attacker_health_lost: Health the attacker lost during the sequence.
    """

    damage_dealt: int
    attacker_health_lost: int


class AttackSequence(ABC):
    """Fixed attack skeleton with overridable hooks.

    Attributes:
        attacker: The acting combatant.
        defender: The combatant being attacked.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "execute" in cls.__dict__:
            raise TypeError(f"{cls.__name__} cannot override AttackSequence.execute")

    def __init__(self, attacker: Combatant, defender: Combatant) -> None:
        self.attacker = attacker
        self.defender = defender

    @final
    def execute(self) -> SequenceOutcome:
        """Run the full sequence.

        Returns:
            SequenceOutcome with damage dealt and attacker health lost.

        Raises:
            InsufficientResource: If the attacker cannot pay for the attack.
        """
        attacker_health = self.attacker.stats.health
        self.begin_turn()
        self.pre_attack_action()
        damage = self.perform_attack()
        self.post_attack_action()
        self.end_turn()

        outcome = SequenceOutcome(
            damage_dealt=damage,
            attacker_health_lost=attacker_health - self.attacker.stats.health,
        )
        logger.debug(
            "Attack sequence completed",
            sequence=type(self).__name__,
            attacker=self.attacker.name,
            defender=self.defender.name,
            damage=outcome.damage_dealt,
            recoil=outcome.attacker_health_lost,
        )
        return outcome

    def begin_turn(self) -> None:
        pass

    def pre_attack_action(self) -> None:
        pass

    @abstractmethod
    def perform_attack(self) -> int:
        """Apply the attack to the defender.

        Returns:
            Post-mitigation damage applied.
        """

    def post_attack_action(self) -> None:
        pass

    def end_turn(self) -> None:
        pass


class StandardAttackSequence(AttackSequence):
    """Plain attack with no hooks."""

    def perform_attack(self) -> int:
        return self.defender.take_damage(self.attacker.attack(self.defender))


class PowerAttackSequence(AttackSequence):
    """Heavier blow that costs the attacker a tenth of their max health.

    Adds attack_power // 4 to the raw damage. Recoil is applied with
    set_health, so the attacker's mitigation does not reduce it.
    """

    def __init__(self, attacker: Combatant, defender: Combatant) -> None:
        super().__init__(attacker, defender)
        self.bonus = 0

    def pre_attack_action(self) -> None:
        self.bonus = self.attacker.stats.attack_power // POWER_ATTACK_DIVISOR

    def perform_attack(self) -> int:
        raw = self.attacker.attack(self.defender) + self.bonus
        return self.defender.take_damage(raw)

    def post_attack_action(self) -> None:
        numerator, denominator = POWER_ATTACK_RECOIL
        recoil = self.attacker.stats.max_health * numerator // denominator
        self.attacker.set_health(self.attacker.stats.health - recoil)


__all__ = [
    "SequenceOutcome",
    "AttackSequence",
    "StandardAttackSequence",
    "PowerAttackSequence",
]
