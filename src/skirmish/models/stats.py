"""Immutable combat statistics.

Stats is a frozen Pydantic V2 value object. A combatant never edits its
Stats in place; every health or mana change produces a new instance via
the clamping ``with_*`` helpers.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from skirmish.core.exceptions import InvalidStats


class Stats(BaseModel):
    """Health/mana bounds and derived combat numbers.

    Invariants (checked at construction, raising InvalidStats):
        - 0 <= health <= max_health, with max_health > 0
        - 0 <= mana <= max_mana
        - attack_power >= 0 and defense >= 0

    Attributes:
        health: Current health.
        max_health: Maximum health.
        mana: Current mana.
        max_mana: Maximum mana.
        attack_power: Base offensive number fed to damage strategies.
        defense: Base defensive number fed to mitigation strategies.
    """

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
    )

    health: int = Field(description="Current health")
    max_health: int = Field(description="Maximum health")
    mana: int = Field(default=0, description="Current mana")
    max_mana: int = Field(default=0, description="Maximum mana")
    attack_power: int = Field(default=0, description="Attack power")
    defense: int = Field(default=0, description="Defense")

    @model_validator(mode="after")
    def validate_invariants(self) -> Self:
        """Enforce the numeric invariants.

        Returns:
            Self if validation passes.

        Raises:
            InvalidStats: If any invariant is violated.
        """
        if self.health < 0 or self.max_health <= 0:
            raise InvalidStats(
                "Health values must be positive",
                field_name="health" if self.health < 0 else "max_health",
                details={"health": self.health, "max_health": self.max_health},
            )
        if self.health > self.max_health:
            raise InvalidStats(
                "Health cannot exceed max health",
                field_name="health",
                details={"health": self.health, "max_health": self.max_health},
            )
        if self.attack_power < 0 or self.defense < 0:
            raise InvalidStats(
                "Stats cannot be negative",
                field_name="attack_power" if self.attack_power < 0 else "defense",
                details={"attack_power": self.attack_power, "defense": self.defense},
            )
        if self.mana < 0 or self.max_mana < 0:
            raise InvalidStats(
                "Mana values cannot be negative",
                field_name="mana" if self.mana < 0 else "max_mana",
                details={"mana": self.mana, "max_mana": self.max_mana},
            )
        if self.mana > self.max_mana:
            raise InvalidStats(
                "Mana cannot exceed max mana",
                field_name="mana",
                details={"mana": self.mana, "max_mana": self.max_mana},
            )
        return self

    @classmethod
    def create(
        cls,
        max_health: int,
        attack_power: int,
        defense: int,
        max_mana: int = 0,
    ) -> Stats:
        """Create stats at full health and full mana.

        Args:
            max_health: Maximum (and starting) health.
            attack_power: Attack power.
            defense: Defense.
            max_mana: Maximum (and starting) mana.

        Returns:
            A new Stats instance.
        """
        return cls(
            health=max_health,
            max_health=max_health,
            mana=max_mana,
            max_mana=max_mana,
            attack_power=attack_power,
            defense=defense,
        )

    def with_health(self, health: int) -> Stats:
        """Return a copy with health clamped to [0, max_health]."""
        return self.model_copy(update={"health": max(0, min(health, self.max_health))})

    def with_mana(self, mana: int) -> Stats:
        """Return a copy with mana clamped to [0, max_mana]."""
        return self.model_copy(update={"mana": max(0, min(mana, self.max_mana))})

    @property
    def is_alive(self) -> bool:
        """True while health is above zero."""
        return self.health > 0

    @property
    def health_ratio(self) -> float:
        """Current health as a fraction of max health (display only)."""
        return self.health / self.max_health

    def health_below(self, ratio: tuple[int, int]) -> bool:
        """Strictly compare the health ratio against ``numerator/denominator``.

        Uses integer cross-multiplication so that boundary values compare
        exactly: 30/100 is not below (3, 10).

        Args:
            ratio: Threshold as a (numerator, denominator) pair.

        Returns:
            True if health / max_health < numerator / denominator.
        """
        numerator, denominator = ratio
        return self.health * denominator < self.max_health * numerator


__all__ = ["Stats"]
