"""Configuration management for the Skirmish combat engine.

Centralized settings built on pydantic-settings, read from environment
variables and an optional .env file. API keys are held as SecretStr.

Example:
    >>> from skirmish.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.match.max_rounds
    500

Environment Variables:
    SKIRMISH_AGENT_API_KEY: API key for the remote reasoning service
    SKIRMISH_AGENT_MODEL: Model identifier used by LLM agents
    SKIRMISH_MATCH_DECISION_TIMEOUT_SECONDS: Bound on each agent decision
    SKIRMISH_MATCH_MAX_ROUNDS: Rounds before a stalled match is drawn
    SKIRMISH_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    SKIRMISH_LOG_FILE: Optional file that also receives JSON log lines
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skirmish.core.constants import DEFAULT_DECISION_TIMEOUT_SECONDS, DEFAULT_HEAL_AMOUNT
from skirmish.core.exceptions import ConfigurationError


class AgentSettings(BaseSettings):
    """Configuration for remote reasoning agents.

    Attributes:
        api_key: API key for the OpenAI-compatible endpoint.
        base_url: Endpoint base URL (OpenRouter by default).
        model: Default model identifier.
        temperature: Sampling temperature.
        max_retries: Retry attempts on transient API failures.
        timeout_seconds: Per-request timeout enforced by the HTTP client.
        max_tokens: Completion size limit.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIRMISH_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr | None = Field(
        default=None,
        description="API key for the reasoning service",
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible endpoint",
    )
    model: str = Field(
        default="google/gemini-2.0-flash-001",
        description="Default model identifier",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Maximum API retry attempts",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="API request timeout",
    )
    max_tokens: int = Field(
        default=512,
        ge=16,
        le=8192,
        description="Maximum completion tokens",
    )


class MatchSettings(BaseSettings):
    """Configuration for match orchestration.

    Attributes:
        decision_timeout_seconds: Upper bound on a single agent decision.
            Bounded by default; an agent that misses it is abandoned and its
            late answer discarded. None waits indefinitely and is meant only
            for a human at the console.
        max_rounds: Rounds after which a stalled match ends in a draw.
        heal_amount: Health restored by a heal decision.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIRMISH_MATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    decision_timeout_seconds: float | None = Field(
        default=DEFAULT_DECISION_TIMEOUT_SECONDS,
        description="Bound on each agent decision",
    )
    max_rounds: int = Field(
        default=500,
        ge=1,
        description="Round limit before a draw is declared",
    )
    heal_amount: int = Field(
        default=DEFAULT_HEAL_AMOUNT,
        ge=0,
        description="Health restored by a heal action",
    )

    @model_validator(mode="after")
    def validate_decision_timeout(self) -> "MatchSettings":
        """Ensure a configured decision timeout is positive.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the timeout is zero or negative.
        """
        if self.decision_timeout_seconds is not None and self.decision_timeout_seconds <= 0:
            raise ConfigurationError(
                f"decision_timeout_seconds must be positive, got {self.decision_timeout_seconds}",
                config_key="decision_timeout_seconds",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit JSON log lines instead of console output.
        log_file: Optional file that also receives every log line as JSON.
        agent: Remote agent settings.
        match: Match orchestration settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="SKIRMISH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Skirmish",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )
    log_file: str | None = Field(
        default=None,
        description="File that also receives JSON log lines",
    )

    agent: AgentSettings = Field(default_factory=AgentSettings)
    match: MatchSettings = Field(default_factory=MatchSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "AgentSettings",
    "MatchSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
