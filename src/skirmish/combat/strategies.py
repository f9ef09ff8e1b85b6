"""Damage and mitigation formulas.

Both families are closed sets of stateless strategy objects. A combatant
holds one of each and may swap them at any time. All floors are computed
with integer arithmetic so results are exact for every input.

Damage:
    MeleeDamage   floor(attack_power * 1.2)
    MagicDamage   attack_power + floor(mana / 10), costs 10 mana
    RangedDamage  floor(attack_power * 0.8), x1.5 against targets below 30%

Mitigation:
    StandardMitigation    incoming - floor(defense / 2), never below zero
    HeavyArmorMitigation  incoming - min(defense, floor(incoming * 0.75))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from skirmish.core.constants import (
    HEAVY_ARMOR_CAP,
    MAGIC_MANA_COST,
    MAGIC_MANA_DIVISOR,
    MELEE_MULTIPLIER,
    RANGED_CRITICAL_MULTIPLIER,
    RANGED_CRITICAL_THRESHOLD,
    RANGED_MULTIPLIER,
    STANDARD_DEFENSE_DIVISOR,
)
from skirmish.core.exceptions import InsufficientResource


if TYPE_CHECKING:
    from skirmish.models.combatant import Combatant


def _scale(value: int, ratio: tuple[int, int]) -> int:
    """Return floor(value * numerator / denominator) for non-negative values."""
    numerator, denominator = ratio
    return value * numerator // denominator


# =============================================================================
# Damage Strategies
# =============================================================================


class DamageStrategy(ABC):
    """Computes raw attack output for an attacker against a target."""

    name: ClassVar[str]

    @abstractmethod
    def compute_raw_damage(self, attacker: Combatant, target: Combatant) -> int:
        """Return raw damage before the target's mitigation.

        Must not mutate the target.
        """

    def estimate(self, attacker: Combatant, target: Combatant) -> int:
        """Return the raw damage an attack would deal, without side effects."""
        return self.compute_raw_damage(attacker, target)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class MeleeDamage(DamageStrategy):
    """Close-quarters strike: attack power x 1.2."""

    name = "melee"

    def compute_raw_damage(self, attacker: Combatant, target: Combatant) -> int:
        return _scale(attacker.stats.attack_power, MELEE_MULTIPLIER)


class MagicDamage(DamageStrategy):
    """Spell that scales with the caster's current mana.

    The mana bonus is read before the flat cost is paid. A caster who
    cannot pay fails with InsufficientResource and keeps their mana.
    """

    name = "magic"

    def compute_raw_damage(self, attacker: Combatant, target: Combatant) -> int:
        mana = attacker.stats.mana
        if mana < MAGIC_MANA_COST:
            raise InsufficientResource(
                f"{attacker.name} needs {MAGIC_MANA_COST} mana to cast",
                resource="mana",
                required=MAGIC_MANA_COST,
                available=mana,
                combatant=attacker.name,
            )
        damage = attacker.stats.attack_power + mana // MAGIC_MANA_DIVISOR
        attacker.use_mana(MAGIC_MANA_COST)
        return damage

    def estimate(self, attacker: Combatant, target: Combatant) -> int:
        mana = attacker.stats.mana
        if mana < MAGIC_MANA_COST:
            return 0
        return attacker.stats.attack_power + mana // MAGIC_MANA_DIVISOR


class RangedDamage(DamageStrategy):
    """Shot from range, with a critical bonus against badly wounded targets."""

    name = "ranged"

    def compute_raw_damage(self, attacker: Combatant, target: Combatant) -> int:
        base = _scale(attacker.stats.attack_power, RANGED_MULTIPLIER)
        if target.stats.health_below(RANGED_CRITICAL_THRESHOLD):
            return _scale(base, RANGED_CRITICAL_MULTIPLIER)
        return base


# =============================================================================
# Mitigation Strategies
# =============================================================================


class MitigationStrategy(ABC):
    """Reduces incoming raw damage for a defender."""

    name: ClassVar[str]

    @abstractmethod
    def compute_reduction(self, defender: Combatant, incoming: int) -> int:
        """Return the non-negative damage left after mitigation."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StandardMitigation(MitigationStrategy):
    """Absorbs half the defender's defense from every hit."""

    name = "standard"

    def compute_reduction(self, defender: Combatant, incoming: int) -> int:
        reduction = defender.stats.defense // STANDARD_DEFENSE_DIVISOR
        return max(0, incoming - reduction)


class HeavyArmorMitigation(MitigationStrategy):
    """Absorbs up to the full defense, but never more than 75% of a hit.

    At least a quarter of incoming damage always gets through, however
    large the defense.
    """

    name = "heavy_armor"

    def compute_reduction(self, defender: Combatant, incoming: int) -> int:
        cap = _scale(incoming, HEAVY_ARMOR_CAP)
        reduction = min(defender.stats.defense, cap)
        return incoming - reduction


DAMAGE_STRATEGIES: dict[str, type[DamageStrategy]] = {
    cls.name: cls for cls in (MeleeDamage, MagicDamage, RangedDamage)
}

MITIGATION_STRATEGIES: dict[str, type[MitigationStrategy]] = {
    cls.name: cls for cls in (StandardMitigation, HeavyArmorMitigation)
}


__all__ = [
    "DamageStrategy",
    "MeleeDamage",
    "MagicDamage",
    "RangedDamage",
    "MitigationStrategy",
    "StandardMitigation",
    "HeavyArmorMitigation",
    "DAMAGE_STRATEGIES",
    "MITIGATION_STRATEGIES",
]
