"""Combatant entity.

A Combatant owns exactly one current Stats snapshot and a swappable pair
of strategies. Every mutation goes through one of its operations, and
every health or mana change replaces the Stats instance wholesale.

Identity is ``(name, archetype)``: two combatants sharing both compare
equal and hash the same, so roster names must be unique per archetype.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from skirmish.core.exceptions import InsufficientResource, ValidationError
from skirmish.core.logging import get_logger
from skirmish.models.stats import Stats


if TYPE_CHECKING:
    from skirmish.combat.strategies import DamageStrategy, MitigationStrategy

logger = get_logger(__name__)


class Archetype(StrEnum):
    """Character archetypes."""

    WARRIOR = "warrior"
    MAGE = "mage"
    ARCHER = "archer"
    ROGUE = "rogue"


class Combatant:
    """A participant in a match.

    Attributes:
        name: Display name, unique within its archetype on a roster.
        archetype: Character archetype tag.
        stats: Current immutable Stats snapshot.
        damage_strategy: Formula used to compute raw attack output.
        mitigation_strategy: Formula used to reduce incoming damage.
    """

    def __init__(
        self,
        name: str,
        archetype: Archetype,
        stats: Stats,
        damage_strategy: DamageStrategy,
        mitigation_strategy: MitigationStrategy,
    ) -> None:
        """Initialize a combatant.

        Args:
            name: Display name.
            archetype: Character archetype tag.
            stats: Starting stats.
            damage_strategy: Initial damage strategy.
            mitigation_strategy: Initial mitigation strategy.

        Raises:
            ValidationError: If any argument is missing.
        """
        if not name:
            raise ValidationError("Name cannot be empty", field_name="name")
        if archetype is None:
            raise ValidationError("Archetype cannot be null", field_name="archetype")
        if stats is None:
            raise ValidationError("Stats cannot be null", field_name="stats")
        self._name = name
        self._archetype = Archetype(archetype)
        self._stats = stats
        self.damage_strategy = damage_strategy
        self.mitigation_strategy = mitigation_strategy

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Display name."""
        return self._name

    @property
    def archetype(self) -> Archetype:
        """Archetype tag."""
        return self._archetype

    @property
    def key(self) -> tuple[str, Archetype]:
        """Identity used for equality and hashing."""
        return (self._name, self._archetype)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Combatant):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return (
            f"Combatant(name={self._name!r}, archetype={self._archetype.value!r}, "
            f"health={self._stats.health}/{self._stats.max_health})"
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def stats(self) -> Stats:
        """Current stats snapshot."""
        return self._stats

    @property
    def is_alive(self) -> bool:
        """True while health is above zero."""
        return self._stats.is_alive

    @property
    def damage_strategy(self) -> DamageStrategy:
        return self._damage_strategy

    @damage_strategy.setter
    def damage_strategy(self, strategy: DamageStrategy) -> None:
        if strategy is None:
            raise ValidationError("Damage strategy cannot be null", field_name="damage_strategy")
        self._damage_strategy = strategy

    @property
    def mitigation_strategy(self) -> MitigationStrategy:
        return self._mitigation_strategy

    @mitigation_strategy.setter
    def mitigation_strategy(self, strategy: MitigationStrategy) -> None:
        if strategy is None:
            raise ValidationError(
                "Mitigation strategy cannot be null", field_name="mitigation_strategy"
            )
        self._mitigation_strategy = strategy

    # -------------------------------------------------------------------------
    # Combat Operations
    # -------------------------------------------------------------------------

    def attack(self, target: Combatant) -> int:
        """Compute raw damage against a target.

        Does not touch the target and applies no mitigation. Strategies
        that cost a resource deduct it from this combatant.

        Args:
            target: The combatant being attacked.

        Returns:
            Raw damage before the target's mitigation.

        Raises:
            InsufficientResource: If the strategy's cost cannot be paid.
        """
        return self._damage_strategy.compute_raw_damage(self, target)

    def defend(self, incoming: int) -> int:
        """Compute post-mitigation damage for an incoming raw amount.

        Args:
            incoming: Raw damage.

        Returns:
            Non-negative damage that would actually be applied.
        """
        return self._mitigation_strategy.compute_reduction(self, incoming)

    def take_damage(self, raw_amount: int) -> int:
        """Apply incoming damage through mitigation.

        Args:
            raw_amount: Raw damage before mitigation.

        Returns:
            Damage actually applied after mitigation.
        """
        actual = self.defend(raw_amount)
        self._stats = self._stats.with_health(self._stats.health - actual)
        logger.debug(
            "Damage taken",
            combatant=self._name,
            raw=raw_amount,
            actual=actual,
            health=self._stats.health,
        )
        return actual

    def heal(self, amount: int) -> int:
        """Restore health, capped at max health.

        Returns:
            Health actually restored.
        """
        before = self._stats.health
        self._stats = self._stats.with_health(before + amount)
        return self._stats.health - before

    def use_mana(self, amount: int) -> None:
        """Spend mana.

        Raises:
            InsufficientResource: If current mana is below ``amount``.
        """
        if self._stats.mana < amount:
            raise InsufficientResource(
                f"{self._name} does not have enough mana",
                resource="mana",
                required=amount,
                available=self._stats.mana,
                combatant=self._name,
            )
        self._stats = self._stats.with_mana(self._stats.mana - amount)

    def restore_mana(self, amount: int) -> None:
        """Restore mana, capped at max mana."""
        self._stats = self._stats.with_mana(self._stats.mana + amount)

    def set_health(self, value: int) -> None:
        """Set health directly, clamped, bypassing mitigation."""
        self._stats = self._stats.with_health(value)

    def set_mana(self, value: int) -> None:
        """Set mana directly, clamped."""
        self._stats = self._stats.with_mana(value)

    def describe_status(self) -> str:
        """One-line status summary."""
        s = self._stats
        status = "Alive" if s.is_alive else "Defeated"
        return (
            f"{self._name} ({self._archetype.value}): {s.health}/{s.max_health} HP "
            f"({s.health_ratio:.0%}), {s.mana}/{s.max_mana} MP - {status}"
        )


__all__ = [
    "Archetype",
    "Combatant",
]
