"""Decision agents.

Exports:
    DecisionAgent: Protocol every agent implements.
    RuleBasedAgent: Deterministic priority-rule agent.
    LLMAgent: Remote reasoning agent over an OpenAI-compatible API.
    ConsoleAgent: Human agent reading choices from the console.
    living, weakest, fallback_action: Targeting helpers.
"""

from __future__ import annotations

from skirmish.agents.base import DecisionAgent, fallback_action, living, weakest
from skirmish.agents.console import ConsoleAgent
from skirmish.agents.llm import AgentDecision, LLMAgent, parse_decision, resolve_decision
from skirmish.agents.rule_based import RuleBasedAgent


__all__ = [
    "DecisionAgent",
    "living",
    "weakest",
    "fallback_action",
    "RuleBasedAgent",
    "LLMAgent",
    "AgentDecision",
    "parse_decision",
    "resolve_decision",
    "ConsoleAgent",
]
