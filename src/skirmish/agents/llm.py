"""Remote reasoning agent.

LLMAgent describes the battlefield to an OpenAI-compatible chat model
(OpenRouter by default), asks for a JSON decision, and resolves it to an
Action. It never substitutes a fallback itself: every failure surfaces
as an AgentError subclass and the match controller recovers.

Expected reply:

    {"action": "attack" | "heal", "target": "<name>", "reasoning": "..."}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Literal, Sequence

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
    RateLimitError,
)
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from skirmish.agents.base import living, weakest
from skirmish.combat.actions import Action, AttackAction, HealAction
from skirmish.core.config import AgentSettings, get_settings
from skirmish.core.constants import DEFAULT_HEAL_AMOUNT
from skirmish.core.exceptions import (
    AgentConnectionError,
    AgentError,
    AgentTimeoutError,
    UnresolvableDecision,
)
from skirmish.core.logging import get_logger
from skirmish.models.combatant import Archetype


if TYPE_CHECKING:
    from skirmish.engine.state import MatchState
    from skirmish.models.combatant import Combatant

logger = get_logger(__name__)


# =============================================================================
# Decision Payload
# =============================================================================


class AgentDecision(BaseModel):
    """Structured decision returned by the model.

    Attributes:
        action: Either "attack" or "heal" (case-insensitive on input).
        target: Name of the target, matched case-insensitively.
        reasoning: Optional short explanation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    action: Literal["attack", "heal"]
    target: str = Field(min_length=1)
    reasoning: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("target")
    @classmethod
    def strip_target(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("target cannot be blank")
        return value


def parse_decision(content: str) -> AgentDecision:
    """Parse a model reply into an AgentDecision.

    Markdown code fences around the JSON are removed.

    Args:
        content: Raw reply text.

    Returns:
        The validated decision.

    Raises:
        UnresolvableDecision: If the reply is not valid JSON or misses fields.
    """
    text = content.strip()
    if text.startswith("```"):
        lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
        text = "\n".join(lines).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UnresolvableDecision(
            f"Reply is not valid JSON: {exc}",
            payload=content[:200],
        ) from exc

    try:
        return AgentDecision.model_validate(data)
    except PydanticValidationError as exc:
        raise UnresolvableDecision(
            "Reply does not match the decision format",
            payload=data,
            details={"errors": exc.error_count()},
        ) from exc


def resolve_decision(
    decision: AgentDecision,
    self_: Combatant,
    allies: Sequence[Combatant],
    enemies: Sequence[Combatant],
    *,
    heal_amount: int = DEFAULT_HEAL_AMOUNT,
) -> Action:
    """Turn a decision into an Action against a living combatant.

    Attacks resolve against living enemies, heals against living allies.

    Raises:
        UnresolvableDecision: If the target names no eligible combatant.
    """
    pool = living(enemies) if decision.action == "attack" else living(allies)
    wanted = decision.target.casefold()
    target = next((c for c in pool if c.name.casefold() == wanted), None)
    if target is None:
        raise UnresolvableDecision(
            f"No living {'enemy' if decision.action == 'attack' else 'ally'} "
            f"named {decision.target!r}",
            payload=decision.model_dump(),
        )
    if decision.action == "attack":
        return AttackAction(self_, target)
    return HealAction(target, heal_amount)


# =============================================================================
# Prompt
# =============================================================================


ROLE_GUIDANCE: dict[Archetype, str] = {
    Archetype.WARRIOR: "Tank damage and protect weaker allies",
    Archetype.MAGE: "Deal high damage but protect yourself",
    Archetype.ARCHER: "Pick off wounded enemies from range",
    Archetype.ROGUE: "Target high-value enemies quickly",
}


def format_roster(combatants: Sequence[Combatant]) -> str:
    """One line per combatant with health and combat numbers."""
    lines = []
    for c in combatants:
        s = c.stats
        lines.append(
            f"  - {c.name} ({c.archetype.value}): {s.health}/{s.max_health} HP "
            f"({s.health_ratio:.0%}), {s.attack_power} ATK, {s.defense} DEF"
        )
    return "\n".join(lines) if lines else "  (none)"


def estimate_damage(attacker: Combatant, target: Combatant) -> int:
    """Post-mitigation damage an attack would deal now, without side effects."""
    raw = attacker.damage_strategy.estimate(attacker, target)
    return target.defend(raw)


def build_battle_prompt(
    self_: Combatant,
    allies: Sequence[Combatant],
    enemies: Sequence[Combatant],
    state: MatchState,
    *,
    heal_amount: int = DEFAULT_HEAL_AMOUNT,
) -> str:
    """Describe the battlefield and the expected reply format.

    Args:
        self_: The acting combatant.
        allies: The acting combatant's roster.
        enemies: The opposing roster.
        state: Current match snapshot.
        heal_amount: Health a heal restores.

    Returns:
        Prompt text.
    """
    s = self_.stats
    living_enemies = living(enemies)
    living_allies = living(allies)

    lines = [
        f"You are {self_.name}, a {self_.archetype.value} in a tactical RPG battle.",
        "",
        "YOUR STATUS:",
        f"- HP: {s.health}/{s.max_health} ({s.health_ratio:.0%})",
        f"- Mana: {s.mana}/{s.max_mana}",
        f"- Attack Power: {s.attack_power}",
        f"- Defense: {s.defense}",
        f"- Attack Strategy: {self_.damage_strategy.name}",
        f"- Defense Strategy: {self_.mitigation_strategy.name}",
        "",
        "YOUR TEAM (Allies):",
        format_roster(allies),
        "",
        "ENEMIES:",
        format_roster(enemies),
        "",
        "AVAILABLE ACTIONS:",
    ]

    target = weakest(living_enemies)
    if target is not None:
        lines.append(
            f"1. attack <enemy_name> - Estimated damage to {target.name}: "
            f"~{estimate_damage(self_, target)} HP"
        )
    else:
        lines.append("1. attack <enemy_name>")
    lines += [
        f"2. heal <ally_name> - Restores {heal_amount} HP",
        "",
        "TACTICAL GUIDANCE:",
        "- Focus fire: Attack wounded enemies to eliminate threats quickly",
        "- Protect allies: Heal teammates below 30% HP to prevent deaths",
        f"- Consider your role: {ROLE_GUIDANCE[self_.archetype]}",
        f"- Current turn: {state.turn}, Round: {state.round}",
        "",
        "Respond ONLY with valid JSON in this exact format:",
        "{",
        '  "action": "attack" | "heal",',
        '  "target": "exact_character_name",',
        '  "reasoning": "brief tactical explanation"',
        "}",
        "",
        "Valid enemy names: " + (", ".join(c.name for c in living_enemies) or "none"),
        "Valid ally names: " + (", ".join(c.name for c in living_allies) or "none"),
    ]
    return "\n".join(lines)


SYSTEM_PROMPT = (
    "You control one character in a turn-based tactical battle. "
    "Choose a single action each turn and reply with JSON only."
)


# =============================================================================
# Agent
# =============================================================================


class LLMAgent:
    """Decision agent backed by an OpenAI-compatible chat model.

    Attributes:
        name: Agent name used in logs and errors.
        model: Model identifier.
        temperature: Sampling temperature.
        max_retries: Retries on connection and rate-limit failures.
        heal_amount: Health restored by a heal decision.
    """

    def __init__(
        self,
        *,
        name: str = "llm",
        model: str | None = None,
        temperature: float | None = None,
        settings: AgentSettings | None = None,
        client: Any = None,
        heal_amount: int = DEFAULT_HEAL_AMOUNT,
    ) -> None:
        """Initialize the agent.

        Args:
            name: Agent name.
            model: Model identifier. Defaults to the configured model.
            temperature: Sampling temperature. Defaults to the configured value.
            settings: Agent settings. Defaults to the application settings.
            client: Pre-built chat client. Created lazily when omitted.
            heal_amount: Health restored by a heal decision.
        """
        self._settings = settings or get_settings().agent
        self.name = name
        self.model = model or self._settings.model
        self.temperature = self._settings.temperature if temperature is None else temperature
        self.max_retries = self._settings.max_retries
        self.heal_amount = heal_amount
        self._client = client

        logger.info("LLMAgent initialized", agent=name, model=self.model)

    def _get_client(self) -> Any:
        """Get or create the OpenAI client."""
        if self._client is None:
            api_key = self._settings.api_key
            if api_key is None:
                raise AgentConnectionError(
                    "No API key configured for the reasoning service",
                    agent=self.name,
                    model=self.model,
                )
            self._client = OpenAI(
                api_key=api_key.get_secret_value(),
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def _request_completion(self, prompt: str) -> str:
        """Send the prompt and return the reply text.

        Raises:
            AgentTimeoutError: If the request times out after retries.
            AgentConnectionError: If the service is unreachable or errors.
        """
        client = self._get_client()

        @retry(
            retry=retry_if_exception_type((APIConnectionError, RateLimitError)),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True,
        )
        def _call() -> str:
            try:
                response = client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self.temperature,
                    max_tokens=self._settings.max_tokens,
                )
            except RateLimitError:
                logger.warning("Rate limited, retrying", agent=self.name)
                raise
            return response.choices[0].message.content or ""

        try:
            return _call()
        except APITimeoutError as exc:
            raise AgentTimeoutError(
                "Reasoning service timed out",
                timeout_seconds=self._settings.timeout_seconds,
                agent=self.name,
                model=self.model,
            ) from exc
        except APIConnectionError as exc:
            raise AgentConnectionError(
                f"Failed to connect to reasoning service: {exc}",
                agent=self.name,
                model=self.model,
            ) from exc
        except RateLimitError as exc:
            raise AgentConnectionError(
                f"Rate limit exceeded after {self.max_retries} retries",
                agent=self.name,
                model=self.model,
            ) from exc
        except APIStatusError as exc:
            raise AgentConnectionError(
                f"Reasoning service error: {exc}",
                agent=self.name,
                model=self.model,
                details={"status_code": exc.status_code},
            ) from exc

    def decide_action(
        self,
        self_: Combatant,
        allies: Sequence[Combatant],
        enemies: Sequence[Combatant],
        state: MatchState,
    ) -> Action:
        """Ask the model for a decision and resolve it.

        Raises:
            UnresolvableDecision: If the reply cannot become a valid action.
            AgentError: If the model cannot be reached.
        """
        prompt = build_battle_prompt(
            self_, allies, enemies, state, heal_amount=self.heal_amount
        )
        logger.debug("Requesting decision", agent=self.name, combatant=self_.name, model=self.model)

        try:
            content = self._request_completion(prompt)
        except AgentError:
            raise
        except Exception as exc:
            raise AgentConnectionError(
                f"Decision request failed: {exc}",
                agent=self.name,
                model=self.model,
            ) from exc

        try:
            decision = parse_decision(content)
            action = resolve_decision(
                decision, self_, allies, enemies, heal_amount=self.heal_amount
            )
        except UnresolvableDecision as exc:
            raise UnresolvableDecision(
                exc.message,
                payload=exc.details.get("payload"),
                agent=self.name,
                model=self.model,
            ) from exc

        logger.info(
            "Decision made",
            agent=self.name,
            combatant=self_.name,
            action=decision.action,
            target=decision.target,
            reasoning=(decision.reasoning or "")[:100],
        )
        return action


__all__ = [
    "AgentDecision",
    "parse_decision",
    "resolve_decision",
    "format_roster",
    "estimate_damage",
    "build_battle_prompt",
    "SYSTEM_PROMPT",
    "ROLE_GUIDANCE",
    "LLMAgent",
]
