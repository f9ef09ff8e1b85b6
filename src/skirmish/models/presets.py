"""Archetype presets.

Fixed starting stats and strategy pairs for each archetype. Every call
builds a fresh Combatant with fresh strategy objects.
"""

from __future__ import annotations

from typing import Callable

from skirmish.combat.strategies import (
    HeavyArmorMitigation,
    MagicDamage,
    MeleeDamage,
    RangedDamage,
    StandardMitigation,
)
from skirmish.core.exceptions import ValidationError
from skirmish.models.combatant import Archetype, Combatant
from skirmish.models.stats import Stats


def create_warrior(name: str) -> Combatant:
    """Sturdy melee fighter in heavy armor. 150 HP, 40 ATK, 30 DEF, no mana."""
    return Combatant(
        name,
        Archetype.WARRIOR,
        Stats.create(max_health=150, attack_power=40, defense=30, max_mana=0),
        MeleeDamage(),
        HeavyArmorMitigation(),
    )


def create_mage(name: str) -> Combatant:
    """Fragile spellcaster. 80 HP, 60 ATK, 10 DEF, 100 mana."""
    return Combatant(
        name,
        Archetype.MAGE,
        Stats.create(max_health=80, attack_power=60, defense=10, max_mana=100),
        MagicDamage(),
        StandardMitigation(),
    )


def create_archer(name: str) -> Combatant:
    """Ranged attacker that punishes wounded targets. 100 HP, 50 ATK, 15 DEF, 20 mana."""
    return Combatant(
        name,
        Archetype.ARCHER,
        Stats.create(max_health=100, attack_power=50, defense=15, max_mana=20),
        RangedDamage(),
        StandardMitigation(),
    )


def create_rogue(name: str) -> Combatant:
    """Quick melee striker. 90 HP, 55 ATK, 20 DEF, 30 mana."""
    return Combatant(
        name,
        Archetype.ROGUE,
        Stats.create(max_health=90, attack_power=55, defense=20, max_mana=30),
        MeleeDamage(),
        StandardMitigation(),
    )


PRESETS: dict[Archetype, Callable[[str], Combatant]] = {
    Archetype.WARRIOR: create_warrior,
    Archetype.MAGE: create_mage,
    Archetype.ARCHER: create_archer,
    Archetype.ROGUE: create_rogue,
}


def create_combatant(name: str, archetype: Archetype | str | None) -> Combatant:
    """Create a combatant from its archetype preset.

    Args:
        name: Display name.
        archetype: Archetype tag or its string value.

    Returns:
        A new Combatant at full health and mana.

    Raises:
        ValidationError: If the archetype is missing or unknown.
    """
    if archetype is None:
        raise ValidationError("Archetype cannot be null", field_name="archetype")
    try:
        key = Archetype(archetype)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown archetype: {archetype}",
            field_name="archetype",
            invalid_value=archetype,
        ) from exc
    return PRESETS[key](name)


__all__ = [
    "PRESETS",
    "create_warrior",
    "create_mage",
    "create_archer",
    "create_rogue",
    "create_combatant",
]
