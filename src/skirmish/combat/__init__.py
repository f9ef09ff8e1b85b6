"""Combat resolution: strategies, undoable actions and attack sequences.

Exports:
    Strategies:
        DamageStrategy, MeleeDamage, MagicDamage, RangedDamage
        MitigationStrategy, StandardMitigation, HeavyArmorMitigation

    Actions:
        Action, AttackAction, HealAction, ActionLog

    Sequences:
        AttackSequence, StandardAttackSequence, PowerAttackSequence, SequenceOutcome
"""

from __future__ import annotations

from skirmish.combat.action_log import ActionLog
from skirmish.combat.actions import Action, AttackAction, HealAction
from skirmish.combat.sequences import (
    AttackSequence,
    PowerAttackSequence,
    SequenceOutcome,
    StandardAttackSequence,
)
from skirmish.combat.strategies import (
    DAMAGE_STRATEGIES,
    MITIGATION_STRATEGIES,
    DamageStrategy,
    HeavyArmorMitigation,
    MagicDamage,
    MeleeDamage,
    MitigationStrategy,
    RangedDamage,
    StandardMitigation,
)


__all__ = [
    # Strategies
    "DamageStrategy",
    "MeleeDamage",
    "MagicDamage",
    "RangedDamage",
    "MitigationStrategy",
    "StandardMitigation",
    "HeavyArmorMitigation",
    "DAMAGE_STRATEGIES",
    "MITIGATION_STRATEGIES",
    # Actions
    "Action",
    "AttackAction",
    "HealAction",
    "ActionLog",
    # Sequences
    "AttackSequence",
    "StandardAttackSequence",
    "PowerAttackSequence",
    "SequenceOutcome",
]
