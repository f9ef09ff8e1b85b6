"""Engine-wide constants for the Skirmish combat engine.

Formula constants are expressed as integer ratios so every floor is
computed exactly.
"""

from __future__ import annotations

# =============================================================================
# Damage Formulas
# =============================================================================

MELEE_MULTIPLIER = (6, 5)
"""Melee damage is attack power x 1.2."""

MAGIC_MANA_COST = 10
"""Flat mana cost of a magic attack."""

MAGIC_MANA_DIVISOR = 10
"""Magic bonus is current mana / 10, taken before the cost is paid."""

RANGED_MULTIPLIER = (4, 5)
"""Ranged base damage is attack power x 0.8."""

RANGED_CRITICAL_MULTIPLIER = (3, 2)
"""Ranged damage against a badly wounded target is base x 1.5."""

RANGED_CRITICAL_THRESHOLD = (3, 10)
"""Target health ratio strictly below 30% triggers the ranged bonus."""

# =============================================================================
# Mitigation Formulas
# =============================================================================

STANDARD_DEFENSE_DIVISOR = 2
"""Standard mitigation absorbs half the defender's defense."""

HEAVY_ARMOR_CAP = (3, 4)
"""Heavy armor absorbs at most 75% of incoming damage."""

# =============================================================================
# Attack Sequences
# =============================================================================

POWER_ATTACK_DIVISOR = 4
"""Power attack bonus is attack power / 4."""

POWER_ATTACK_RECOIL = (1, 10)
"""Power attack recoil is 10% of the attacker's max health."""

# =============================================================================
# Decision Rules
# =============================================================================

DEFAULT_HEAL_AMOUNT = 30
"""Health restored by a heal decision."""

SELF_PRESERVATION_THRESHOLD = (3, 10)
"""Heal self when own health ratio is strictly below 30%."""

ALLY_RESCUE_THRESHOLD = (1, 5)
"""Heal an ally whose health ratio is strictly below 20%."""


# =============================================================================
# Match Orchestration
# =============================================================================

DEFAULT_DECISION_TIMEOUT_SECONDS = 120.0
"""Bound on one automated decision; covers an LLM call with its retries."""


__all__ = [
    "MELEE_MULTIPLIER",
    "MAGIC_MANA_COST",
    "MAGIC_MANA_DIVISOR",
    "RANGED_MULTIPLIER",
    "RANGED_CRITICAL_MULTIPLIER",
    "RANGED_CRITICAL_THRESHOLD",
    "STANDARD_DEFENSE_DIVISOR",
    "HEAVY_ARMOR_CAP",
    "POWER_ATTACK_DIVISOR",
    "POWER_ATTACK_RECOIL",
    "DEFAULT_HEAL_AMOUNT",
    "SELF_PRESERVATION_THRESHOLD",
    "ALLY_RESCUE_THRESHOLD",
    "DEFAULT_DECISION_TIMEOUT_SECONDS",
]
