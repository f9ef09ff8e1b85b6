"""Ordered history of executed actions with single-step undo."""

from __future__ import annotations

from typing import TYPE_CHECKING

from skirmish.core.exceptions import NoHistory
from skirmish.core.logging import get_logger


if TYPE_CHECKING:
    from skirmish.combat.actions import Action

logger = get_logger(__name__)


class ActionLog:
    """Append-only stack of executed actions.

    Its size is the authoritative count of commands executed. An action
    is recorded only after it executes successfully.
    """

    def __init__(self) -> None:
        self._history: list[Action] = []

    def execute(self, action: Action) -> None:
        """Execute an action and record it on success.

        Args:
            action: The action to run.

        Raises:
            InsufficientResource: Propagated from the action; nothing is recorded.
            InvalidGameStateError: If the action was already executed.
        """
        action.execute()
        self._history.append(action)
        logger.debug("Action logged", action=action.describe(), size=len(self._history))

    def undo_last(self) -> Action:
        """Pop and undo the most recent action.

        Returns:
            The action that was undone.

        Raises:
            NoHistory: If no action has been recorded.
        """
        if not self._history:
            raise NoHistory("No actions to undo")
        action = self._history.pop()
        action.undo()
        logger.info("Action undone", action=action.describe(), size=len(self._history))
        return action

    @property
    def size(self) -> int:
        """Number of recorded actions."""
        return len(self._history)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def history(self) -> tuple[Action, ...]:
        """Snapshot of recorded actions, oldest first."""
        return tuple(self._history)

    @property
    def last(self) -> Action | None:
        return self._history[-1] if self._history else None

    def __len__(self) -> int:
        return len(self._history)


__all__ = ["ActionLog"]
