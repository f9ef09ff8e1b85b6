"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        SkirmishError: Base exception for all engine errors.
        InvalidStats, InsufficientResource, NoHistory, UnboundCombatant,
        UnresolvableDecision: The combat and agent error kinds.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from skirmish.core.config import (
    AgentSettings,
    MatchSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from skirmish.core.exceptions import (
    AgentConnectionError,
    AgentError,
    AgentTimeoutError,
    ConfigurationError,
    GameEngineError,
    InsufficientResource,
    InvalidGameStateError,
    InvalidStats,
    NoHistory,
    SkirmishError,
    UnboundCombatant,
    UnresolvableDecision,
    ValidationError,
)
from skirmish.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "SkirmishError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidStats",
    "InsufficientResource",
    "NoHistory",
    "UnboundCombatant",
    "InvalidGameStateError",
    # Agent exceptions
    "AgentError",
    "UnresolvableDecision",
    "AgentConnectionError",
    "AgentTimeoutError",
    # Configuration
    "Settings",
    "AgentSettings",
    "MatchSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
