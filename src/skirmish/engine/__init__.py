"""Match orchestration.

Exports:
    MatchState: Immutable turn/round snapshot.
    MatchPhase: Controller state machine phases.
    MatchController: Drives a match between two rosters.
    MatchResult, MatchOutcome: Final result of a match.
    TurnResult, TurnStatus: Per-turn result passed to callbacks.
"""

from __future__ import annotations

from skirmish.engine.controller import (
    MatchController,
    MatchOutcome,
    MatchResult,
    TurnResult,
    TurnStatus,
)
from skirmish.engine.state import MatchPhase, MatchState


__all__ = [
    "MatchState",
    "MatchPhase",
    "MatchController",
    "MatchOutcome",
    "MatchResult",
    "TurnResult",
    "TurnStatus",
]
