"""Custom exception hierarchy for the Skirmish combat engine.

All exceptions inherit from SkirmishError so a host application can catch
engine failures at a single boundary while still getting the structured
context (combatant, resource, payload) that caused them.

Example:
    >>> from skirmish.core.exceptions import InsufficientResource
    >>> raise InsufficientResource("Not enough mana", resource="mana", required=10, available=4)
"""

from __future__ import annotations

from typing import Any


class SkirmishError(Exception):
    """Base exception for all Skirmish errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(SkirmishError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(SkirmishError):
    """Raised when an argument or roster fails validation.

    Covers null strategies, unknown archetypes, and rosters that contain
    two combatants with the same identity.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(SkirmishError):
    """Base exception for combat resolution and match orchestration errors."""


class InvalidStats(GameEngineError):
    """Raised when a Stats value violates its numeric invariants.

    Only ever raised at construction time; clamping mutators never fail.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid stats error.

        Args:
            message: Human-readable error description.
            field_name: The stat that broke the invariant.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        super().__init__(message, details=combined_details)


class InsufficientResource(GameEngineError):
    """Raised when an attack or explicit resource use needs more than is available."""

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        required: int | None = None,
        available: int | None = None,
        combatant: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize insufficient resource error.

        Args:
            message: Human-readable error description.
            resource: Name of the missing resource (e.g. 'mana').
            required: Amount needed.
            available: Amount the combatant had.
            combatant: Name of the combatant.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if resource:
            combined_details["resource"] = resource
        if required is not None:
            combined_details["required"] = required
        if available is not None:
            combined_details["available"] = available
        if combatant:
            combined_details["combatant"] = combatant
        super().__init__(message, details=combined_details)


class NoHistory(GameEngineError):
    """Raised when an undo is requested with an empty action log."""


class UnboundCombatant(GameEngineError):
    """Raised when no decision agent is bound to an active combatant.

    This is a configuration error and is fatal to the match.
    """

    def __init__(
        self,
        message: str,
        *,
        combatant: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize unbound combatant error.

        Args:
            message: Human-readable error description.
            combatant: Name of the combatant without an agent.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant:
            combined_details["combatant"] = combatant
        super().__init__(message, details=combined_details)


class InvalidGameStateError(GameEngineError):
    """Raised when an operation is attempted in the wrong state.

    Examples are executing an action twice or undoing one that never ran.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current invalid state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


# =============================================================================
# Decision Agent Exceptions
# =============================================================================


class AgentError(SkirmishError):
    """Base exception for decision agent failures.

    The match controller catches these at the agent boundary and
    substitutes the deterministic fallback action.
    """

    def __init__(
        self,
        message: str,
        *,
        agent: str | None = None,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize agent error with agent context.

        Args:
            message: Human-readable error description.
            agent: Name of the agent that failed.
            model: Remote model identifier, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if agent:
            combined_details["agent"] = agent
        if model:
            combined_details["model"] = model
        super().__init__(message, details=combined_details)


class UnresolvableDecision(AgentError):
    """Raised when an agent's decision cannot be turned into a valid action.

    Covers malformed payloads, unknown action kinds, and targets that do
    not name a living ally or enemy.
    """

    def __init__(
        self,
        message: str,
        *,
        payload: Any | None = None,
        agent: str | None = None,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize unresolvable decision error.

        Args:
            message: Human-readable error description.
            payload: The raw decision that could not be resolved.
            agent: Name of the agent that produced it.
            model: Remote model identifier, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if payload is not None:
            combined_details["payload"] = payload
        super().__init__(message, agent=agent, model=model, details=combined_details)


class AgentConnectionError(AgentError):
    """Raised when a remote reasoning service cannot be reached or errors out."""


class AgentTimeoutError(AgentError):
    """Raised when an agent does not answer within the configured bound."""

    def __init__(
        self,
        message: str,
        *,
        timeout_seconds: float | None = None,
        agent: str | None = None,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize agent timeout error.

        Args:
            message: Human-readable error description.
            timeout_seconds: The bound that was exceeded.
            agent: Name of the agent that timed out.
            model: Remote model identifier, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if timeout_seconds is not None:
            combined_details["timeout_seconds"] = timeout_seconds
        super().__init__(message, agent=agent, model=model, details=combined_details)


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
]
