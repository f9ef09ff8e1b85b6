"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Skirmish test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import pytest

from skirmish.combat.strategies import (
    DamageStrategy,
    MeleeDamage,
    MitigationStrategy,
    StandardMitigation,
)
from skirmish.core.config import MatchSettings
from skirmish.models import (
    Archetype,
    Combatant,
    Stats,
    create_archer,
    create_mage,
    create_rogue,
    create_warrior,
)


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from skirmish.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def reset_logging() -> Generator[None, None, None]:
    """Detach handlers installed by configure_logging after the test.

    Handlers hold the stream or file they were created with, which pytest
    closes once the test ends.
    """
    import logging

    import structlog

    yield
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)
    structlog.reset_defaults()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "SKIRMISH_AGENT_API_KEY": "test-agent-key",
        "SKIRMISH_DEBUG": "true",
        "SKIRMISH_LOG_LEVEL": "DEBUG",
        "SKIRMISH_MATCH_MAX_ROUNDS": "50",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def match_settings() -> MatchSettings:
    """Match settings with no decision timeout and a small round limit."""
    return MatchSettings(decision_timeout_seconds=None, max_rounds=100, heal_amount=30)


# =============================================================================
# Combatant Fixtures
# =============================================================================


@pytest.fixture
def warrior() -> Combatant:
    """Warrior preset: 150 HP, 40 ATK, 30 DEF, Melee/HeavyArmor."""
    return create_warrior("Conan")


@pytest.fixture
def mage() -> Combatant:
    """Mage preset: 80 HP, 60 ATK, 10 DEF, 100 mana, Magic/Standard."""
    return create_mage("Gandalf")


@pytest.fixture
def archer() -> Combatant:
    """Archer preset: 100 HP, 50 ATK, 15 DEF, Ranged/Standard."""
    return create_archer("Legolas")


@pytest.fixture
def rogue() -> Combatant:
    """Rogue preset: 90 HP, 55 ATK, 20 DEF, Melee/Standard."""
    return create_rogue("Shadow")


@pytest.fixture
def make_combatant() -> Callable[..., Combatant]:
    """Factory for combatants with explicit stats.

    Returns:
        Function building a Combatant from keyword arguments.
    """

    def _make(
        name: str = "Dummy",
        archetype: Archetype = Archetype.WARRIOR,
        *,
        health: int | None = None,
        max_health: int = 100,
        mana: int = 0,
        max_mana: int = 0,
        attack_power: int = 10,
        defense: int = 0,
        damage_strategy: DamageStrategy | None = None,
        mitigation_strategy: MitigationStrategy | None = None,
    ) -> Combatant:
        stats = Stats(
            health=max_health if health is None else health,
            max_health=max_health,
            mana=mana,
            max_mana=max_mana,
            attack_power=attack_power,
            defense=defense,
        )
        return Combatant(
            name,
            archetype,
            stats,
            damage_strategy or MeleeDamage(),
            mitigation_strategy or StandardMitigation(),
        )

    return _make


# =============================================================================
# Agent Fixtures
# =============================================================================


class ScriptedAgent:
    """Agent returning results from a script, one per call.

    Each entry is either a callable ``(self_, allies, enemies, state) -> Any``
    or an exception instance to raise.
    """

    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.calls = 0

    def decide_action(self, self_: Any, allies: Any, enemies: Any, state: Any) -> Any:
        self.calls += 1
        step = self.script.pop(0) if self.script else None
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            return step(self_, allies, enemies, state)
        return step


class FailingAgent:
    """Agent whose every decision raises."""

    def __init__(self) -> None:
        self.calls = 0

    def decide_action(self, self_: Any, allies: Any, enemies: Any, state: Any) -> Any:
        self.calls += 1
        raise RuntimeError("agent unavailable")


@pytest.fixture
def failing_agent() -> FailingAgent:
    """An agent that fails on every call."""
    return FailingAgent()


@pytest.fixture
def scripted_agent() -> type[ScriptedAgent]:
    """The ScriptedAgent class, for building agents with a fixed script."""
    return ScriptedAgent
