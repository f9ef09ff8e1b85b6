"""Combatant value model.

Exports:
    Stats: Immutable health/mana/attack/defense snapshot.
    Archetype: Character archetype tags.
    Combatant: Mutable match participant.
    create_combatant: Build a combatant from its archetype preset.
"""

from __future__ import annotations

from skirmish.models.combatant import Archetype, Combatant
from skirmish.models.presets import (
    PRESETS,
    create_archer,
    create_combatant,
    create_mage,
    create_rogue,
    create_warrior,
)
from skirmish.models.stats import Stats


__all__ = [
    "Stats",
    "Archetype",
    "Combatant",
    "PRESETS",
    "create_warrior",
    "create_mage",
    "create_archer",
    "create_rogue",
    "create_combatant",
]
