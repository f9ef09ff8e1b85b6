"""Immutable match progress snapshot and controller phases."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class MatchPhase(StrEnum):
    """Controller state machine phases.

    One full team1 -> team2 -> round_advance cycle is one round.
    """

    TEAM1_ACTING = "team1_acting"
    TEAM2_ACTING = "team2_acting"
    ROUND_ADVANCE = "round_advance"
    GAME_OVER = "game_over"


class MatchState(BaseModel):
    """Turn/round counters and undo availability.

    A new instance replaces the old one after every action.

    Attributes:
        turn: Turn counter within the current round, starting at 1.
        round: Round counter, starting at 1.
        can_undo: Whether the action log has an entry to undo.
        history_size: Number of actions in the log.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    turn: int = Field(default=1, ge=1, description="Turn within the round")
    round: int = Field(default=1, ge=1, description="Round number")
    can_undo: bool = Field(default=False, description="Undo available")
    history_size: int = Field(default=0, ge=0, description="Actions executed")

    @classmethod
    def initial(cls) -> MatchState:
        """State at the start of a match: turn 1, round 1, empty history."""
        return cls()

    def next_turn(self) -> MatchState:
        """Advance the turn counter only."""
        return self.model_copy(update={"turn": self.turn + 1})

    def next_round(self) -> MatchState:
        """Reset the turn counter and advance the round."""
        return self.model_copy(update={"turn": 1, "round": self.round + 1})

    def with_undo(self, can_undo: bool, history_size: int) -> MatchState:
        """Update undo availability and history size."""
        return self.model_copy(update={"can_undo": can_undo, "history_size": history_size})


__all__ = [
    "MatchPhase",
    "MatchState",
]
