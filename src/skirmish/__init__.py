"""Skirmish: a deterministic turn-based tactical combat engine.

Two rosters of combatants alternate actions until one roster is fully
defeated. Decision agents (fixed rules, a remote reasoning service, or a
person at the console) are pluggable, while combat resolution stays
deterministic and replayable.

Example:
    >>> from skirmish import MatchController, RuleBasedAgent, create_mage, create_warrior
    >>> conan, gandalf = create_warrior("Conan"), create_mage("Gandalf")
    >>> agent = RuleBasedAgent()
    >>> result = MatchController([conan], [gandalf], {conan: agent, gandalf: agent}).play()
"""

from __future__ import annotations

from skirmish.agents import ConsoleAgent, DecisionAgent, LLMAgent, RuleBasedAgent
from skirmish.combat import (
    ActionLog,
    AttackAction,
    HealAction,
    PowerAttackSequence,
    StandardAttackSequence,
)
from skirmish.core import SkirmishError, configure_logging, get_settings
from skirmish.engine import MatchController, MatchOutcome, MatchResult, MatchState
from skirmish.models import (
    Archetype,
    Combatant,
    Stats,
    create_archer,
    create_combatant,
    create_mage,
    create_rogue,
    create_warrior,
)


__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SkirmishError",
    "configure_logging",
    "get_settings",
    "Stats",
    "Archetype",
    "Combatant",
    "create_warrior",
    "create_mage",
    "create_archer",
    "create_rogue",
    "create_combatant",
    "AttackAction",
    "HealAction",
    "ActionLog",
    "StandardAttackSequence",
    "PowerAttackSequence",
    "DecisionAgent",
    "RuleBasedAgent",
    "LLMAgent",
    "ConsoleAgent",
    "MatchState",
    "MatchController",
    "MatchOutcome",
    "MatchResult",
]
