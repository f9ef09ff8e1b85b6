"""Match controller.

The MatchController drives a full match between two rosters:

    team1_acting -> team2_acting -> round_advance -> team1_acting ...

until one roster is defeated. Each living combatant asks its bound
DecisionAgent for an Action, which is executed through the ActionLog.
The game-over check runs after every single turn, so a match ends as
soon as the last member of a roster falls.

Agents are the only unreliable collaborator. Any failure, timeout, invalid
target or unexpected error during execution is replaced by the deterministic
focus-fire fallback, so every turn executes exactly one action and the
match always progresses.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Mapping, Sequence
from uuid import uuid4

from skirmish.agents.base import fallback_action, living
from skirmish.combat.action_log import ActionLog
from skirmish.combat.actions import Action, AttackAction, HealAction
from skirmish.combat.strategies import MeleeDamage
from skirmish.core.config import MatchSettings, get_settings
from skirmish.core.exceptions import (
    AgentTimeoutError,
    InsufficientResource,
    InvalidGameStateError,
    NoHistory,
    UnboundCombatant,
    UnresolvableDecision,
    ValidationError,
)
from skirmish.core.logging import bind_context, clear_context, get_logger
from skirmish.engine.state import MatchPhase, MatchState


if TYPE_CHECKING:
    from skirmish.agents.base import DecisionAgent
    from skirmish.models.combatant import Combatant

logger = get_logger(__name__)


# =============================================================================
# Results
# =============================================================================


class MatchOutcome(StrEnum):
    """Final result of a match."""

    TEAM1 = "team1"
    TEAM2 = "team2"
    DRAW = "draw"


class TurnStatus(StrEnum):
    """How a turn was resolved."""

    COMPLETED = "completed"
    """The agent's own action was executed."""

    FALLBACK = "fallback"
    """The agent failed and the focus-fire fallback was executed."""

    SKIPPED = "skipped"
    """The combatant was defeated and did not act."""


@dataclass
class TurnResult:
    """Result of processing one combatant's turn.

    Attributes:
        status: How the turn was resolved.
        combatant_name: Name of the acting combatant.
        action: The executed action, or None if skipped.
        message: Human-readable summary.
        error: Agent or resource error that caused a fallback.
        round_number: Round in which the turn happened.
        turn_number: Turn counter before the turn advanced.
    """

    status: TurnStatus
    combatant_name: str
    action: Action | None = None
    message: str = ""
    error: str = ""
    round_number: int = 0
    turn_number: int = 0


@dataclass(frozen=True)
class MatchResult:
    """Summary of a finished match.

    Attributes:
        outcome: Winning team or draw.
        state: Final match state.
        rounds: Round in which the match ended.
        turns: Turns in which a combatant acted.
        commands: Actions in the log at the end.
        reason: Why the match ended.
    """

    outcome: MatchOutcome
    state: MatchState
    rounds: int
    turns: int
    commands: int
    reason: str


# =============================================================================
# Controller
# =============================================================================


class MatchController:
    """Runs a match between two rosters.

    The controller owns both rosters, the agent mapping, the ActionLog
    and the MatchState. Agents receive read-only tuple views of the
    rosters holding the same Combatant objects.

    Attributes:
        match_id: Short identifier bound into the log context during play().
    """

    def __init__(
        self,
        team1: Sequence[Combatant],
        team2: Sequence[Combatant],
        agents: Mapping[Combatant, DecisionAgent],
        *,
        settings: MatchSettings | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            team1: First roster, in turn order.
            team2: Second roster, in turn order.
            agents: Decision agent bound to each combatant.
            settings: Match settings. Defaults to the application settings.

        Raises:
            ValidationError: If a roster is empty or two combatants share
                a name and archetype.
        """
        if not team1 or not team2:
            raise ValidationError(
                "Each team needs at least one combatant",
                field_name="team1" if not team1 else "team2",
            )

        seen: set[Combatant] = set()
        for combatant in [*team1, *team2]:
            if combatant in seen:
                raise ValidationError(
                    f"Duplicate combatant {combatant.name} ({combatant.archetype.value}); "
                    "names must be unique per archetype",
                    field_name="roster",
                    invalid_value=combatant.name,
                )
            seen.add(combatant)

        self._team1: tuple[Combatant, ...] = tuple(team1)
        self._team2: tuple[Combatant, ...] = tuple(team2)
        self._agents: dict[Combatant, DecisionAgent] = dict(agents)
        self._settings = settings or get_settings().match
        self._log = ActionLog()
        self._state = MatchState.initial()
        self._phase = MatchPhase.TEAM1_ACTING
        self._turns_taken = 0
        self._result: MatchResult | None = None
        self._turn_callbacks: list[Callable[[TurnResult], None]] = []
        self.match_id = uuid4().hex[:8]

        logger.info(
            "MatchController initialized",
            match_id=self.match_id,
            team1=[c.name for c in self._team1],
            team2=[c.name for c in self._team2],
        )

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def team1(self) -> tuple[Combatant, ...]:
        return self._team1

    @property
    def team2(self) -> tuple[Combatant, ...]:
        return self._team2

    @property
    def state(self) -> MatchState:
        """Current match state snapshot."""
        return self._state

    @property
    def phase(self) -> MatchPhase:
        return self._phase

    @property
    def history(self) -> tuple[Action, ...]:
        """Executed actions, oldest first."""
        return self._log.history

    @property
    def is_game_over(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> MatchResult | None:
        return self._result

    @property
    def winner(self) -> MatchOutcome | None:
        """Outcome once the match is over, else None."""
        return self._result.outcome if self._result else None

    def add_turn_callback(self, callback: Callable[[TurnResult], None]) -> None:
        """Add a callback to be invoked after each turn.

        Args:
            callback: Function to call with TurnResult.
        """
        self._turn_callbacks.append(callback)

    def _invoke_callbacks(self, result: TurnResult) -> None:
        for callback in self._turn_callbacks:
            try:
                callback(result)
            except Exception:
                logger.exception("Turn callback failed")

    # -------------------------------------------------------------------------
    # Agent boundary
    # -------------------------------------------------------------------------

    def _call_agent(
        self,
        agent: DecisionAgent,
        combatant: Combatant,
        allies: tuple[Combatant, ...],
        enemies: tuple[Combatant, ...],
    ) -> Action:
        """Invoke an agent, bounded by the configured decision timeout.

        A thread cannot be interrupted, so an agent that misses the deadline
        is abandoned rather than stopped: its worker runs on in the
        background and whatever it eventually returns is discarded. The
        late Action is never executed and never reaches the history.
        """
        timeout = self._settings.decision_timeout_seconds
        if timeout is None:
            return agent.decide_action(combatant, allies, enemies, self._state)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="skirmish-agent")
        try:
            future = executor.submit(agent.decide_action, combatant, allies, enemies, self._state)
            try:
                return future.result(timeout=timeout)
            except FutureTimeoutError as exc:
                raise AgentTimeoutError(
                    f"No decision for {combatant.name} within {timeout}s",
                    timeout_seconds=timeout,
                    agent=type(agent).__name__,
                ) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _decide(
        self,
        combatant: Combatant,
        agent: DecisionAgent,
        allies: tuple[Combatant, ...],
        enemies: tuple[Combatant, ...],
    ) -> tuple[Action, str]:
        """Get the agent's action, or the fallback with the failure reason."""
        try:
            action = self._call_agent(agent, combatant, allies, enemies)
        except Exception as exc:
            logger.warning(
                "Decision failed, using fallback",
                combatant=combatant.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return fallback_action(combatant, enemies), str(exc)

        if not isinstance(action, Action):
            logger.warning(
                "Agent returned no action, using fallback",
                combatant=combatant.name,
                returned=type(action).__name__,
            )
            return fallback_action(combatant, enemies), f"Agent returned {type(action).__name__}"

        try:
            self._validate_action(action, combatant, allies, enemies)
        except UnresolvableDecision as exc:
            logger.warning(
                "Agent chose an invalid action, using fallback",
                combatant=combatant.name,
                error=exc.message,
            )
            return fallback_action(combatant, enemies), exc.message
        return action, ""

    @staticmethod
    def _validate_action(
        action: Action,
        combatant: Combatant,
        allies: tuple[Combatant, ...],
        enemies: tuple[Combatant, ...],
    ) -> None:
        """Check an agent's action is one the acting combatant may take.

        Attacks must come from the acting combatant and land on a living
        enemy. Heals must land on a living ally. Membership is by identity.

        Raises:
            UnresolvableDecision: If the action breaks either rule.
        """
        agent = "validation"
        if isinstance(action, AttackAction):
            if action.attacker is not combatant:
                raise UnresolvableDecision(
                    f"{combatant.name} cannot act as another combatant",
                    agent=agent,
                )
            if not any(action.target is e for e in living(enemies)):
                raise UnresolvableDecision(
                    f"{combatant.name} can only attack a living enemy",
                    agent=agent,
                )
        elif isinstance(action, HealAction):
            if not any(action.target is a for a in living(allies)):
                raise UnresolvableDecision(
                    f"{combatant.name} can only heal a living ally",
                    agent=agent,
                )
        else:
            raise UnresolvableDecision(
                f"Unsupported action type {type(action).__name__}",
                agent=agent,
            )

    def _execute_fallback(self, combatant: Combatant, enemies: tuple[Combatant, ...]) -> Action:
        """Execute focus fire, dropping to the melee formula if it cannot be paid."""
        action = fallback_action(combatant, enemies)
        try:
            self._log.execute(action)
        except InsufficientResource:
            action = AttackAction(combatant, action.target, damage_strategy=MeleeDamage())
            self._log.execute(action)
            logger.info("Fallback resolved with melee", combatant=combatant.name)
        return action

    # -------------------------------------------------------------------------
    # Turn processing
    # -------------------------------------------------------------------------

    def process_turn(
        self,
        combatant: Combatant,
        allies: Sequence[Combatant],
        enemies: Sequence[Combatant],
    ) -> TurnResult:
        """Process one combatant's turn.

        Args:
            combatant: The acting combatant.
            allies: The combatant's roster (including itself).
            enemies: The opposing roster.

        Returns:
            TurnResult describing what happened.

        Raises:
            UnboundCombatant: If no agent is bound to a living combatant.
            InvalidGameStateError: If the match is already over.
        """
        if self.is_game_over:
            raise InvalidGameStateError(
                "Match is over",
                current_state=MatchPhase.GAME_OVER.value,
                expected_states=[MatchPhase.TEAM1_ACTING.value, MatchPhase.TEAM2_ACTING.value],
            )

        round_number, turn_number = self._state.round, self._state.turn

        if not combatant.is_alive:
            logger.debug("Combatant defeated, skipping turn", combatant=combatant.name)
            result = TurnResult(
                status=TurnStatus.SKIPPED,
                combatant_name=combatant.name,
                message=f"{combatant.name} is defeated and cannot act.",
                round_number=round_number,
                turn_number=turn_number,
            )
            self._invoke_callbacks(result)
            return result

        agent = self._agents.get(combatant)
        if agent is None:
            raise UnboundCombatant(
                f"No decision agent bound to {combatant.name}",
                combatant=combatant.name,
            )

        allies_view, enemies_view = tuple(allies), tuple(enemies)
        logger.info(
            "Turn started",
            combatant=combatant.name,
            round=round_number,
            turn=turn_number,
        )

        action, error = self._decide(combatant, agent, allies_view, enemies_view)
        before = [(c, c.stats) for c in (*self._team1, *self._team2)]
        try:
            self._log.execute(action)
        except (InsufficientResource, InvalidGameStateError) as exc:
            logger.warning(
                "Action could not be executed, using fallback",
                combatant=combatant.name,
                action=action.describe(),
                error=str(exc),
            )
            error = str(exc)
            action = self._execute_fallback(combatant, enemies_view)
        except Exception as exc:
            # A half-applied action may already have spent mana or dealt damage
            for member, stats in before:
                member.set_health(stats.health)
                member.set_mana(stats.mana)
            logger.warning(
                "Action failed during execution, using fallback",
                combatant=combatant.name,
                action_type=type(action).__name__,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            error = str(exc) or type(exc).__name__
            action = self._execute_fallback(combatant, enemies_view)

        self._state = self._state.next_turn().with_undo(True, len(self._log))
        self._turns_taken += 1

        logger.info(
            "Action executed",
            combatant=combatant.name,
            action=action.describe(),
            fallback=bool(error),
            history_size=self._state.history_size,
        )

        result = TurnResult(
            status=TurnStatus.FALLBACK if error else TurnStatus.COMPLETED,
            combatant_name=combatant.name,
            action=action,
            message=action.describe(),
            error=error,
            round_number=round_number,
            turn_number=turn_number,
        )
        self._invoke_callbacks(result)
        return result

    # -------------------------------------------------------------------------
    # Match flow
    # -------------------------------------------------------------------------

    def _check_game_over(self) -> bool:
        """End the match if either roster is fully defeated."""
        team1_down = all(not c.is_alive for c in self._team1)
        team2_down = all(not c.is_alive for c in self._team2)
        if not (team1_down or team2_down):
            return False

        if team1_down and team2_down:
            self._finish(MatchOutcome.DRAW, "mutual_defeat")
        elif team2_down:
            self._finish(MatchOutcome.TEAM1, "team2_defeated")
        else:
            self._finish(MatchOutcome.TEAM2, "team1_defeated")
        return True

    def _finish(self, outcome: MatchOutcome, reason: str) -> None:
        self._phase = MatchPhase.GAME_OVER
        self._result = MatchResult(
            outcome=outcome,
            state=self._state,
            rounds=self._state.round,
            turns=self._turns_taken,
            commands=len(self._log),
            reason=reason,
        )
        logger.info(
            "Game over",
            outcome=outcome.value,
            reason=reason,
            rounds=self._result.rounds,
            turns=self._result.turns,
        )

    def _team_pass(
        self,
        phase: MatchPhase,
        roster: tuple[Combatant, ...],
        opponents: tuple[Combatant, ...],
    ) -> bool:
        """Give each roster member a turn. Returns True if the match ended."""
        self._phase = phase
        for combatant in roster:
            self.process_turn(combatant, roster, opponents)
            if self._check_game_over():
                return True
        return False

    def play_round(self) -> MatchResult | None:
        """Play one full round, or what remains of it before game over.

        Returns:
            The MatchResult if the match ended during this round, else None.
        """
        if self.is_game_over or self._check_game_over():
            return self._result

        if self._team_pass(MatchPhase.TEAM1_ACTING, self._team1, self._team2):
            return self._result
        if self._team_pass(MatchPhase.TEAM2_ACTING, self._team2, self._team1):
            return self._result

        self._phase = MatchPhase.ROUND_ADVANCE
        if self._state.round >= self._settings.max_rounds:
            logger.warning("Round limit reached", max_rounds=self._settings.max_rounds)
            self._finish(MatchOutcome.DRAW, "round_limit")
            return self._result

        self._state = self._state.next_round()
        logger.debug("Round advanced", round=self._state.round)
        self._phase = MatchPhase.TEAM1_ACTING
        return None

    def play(self) -> MatchResult:
        """Play the match to completion.

        Returns:
            The final MatchResult.

        Raises:
            UnboundCombatant: If a living combatant has no agent.
        """
        bind_context(match_id=self.match_id)
        try:
            logger.info("Match started", max_rounds=self._settings.max_rounds)
            result = self._result
            while result is None:
                result = self.play_round()
            return result
        finally:
            clear_context()

    def undo_last(self) -> Action | None:
        """Undo the most recent action.

        Returns:
            The undone action, or None if there was nothing to undo.

        Raises:
            InvalidGameStateError: If the match is already over.
        """
        if self.is_game_over:
            raise InvalidGameStateError(
                "Cannot undo after the match is over",
                current_state=MatchPhase.GAME_OVER.value,
            )
        try:
            action = self._log.undo_last()
        except NoHistory:
            logger.warning("Nothing to undo")
            return None
        self._state = self._state.with_undo(self._log.can_undo, len(self._log))
        return action


__all__ = [
    "MatchOutcome",
    "TurnStatus",
    "TurnResult",
    "MatchResult",
    "MatchController",
]
