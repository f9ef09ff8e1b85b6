"""Tests for the MatchController."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

import pytest

from skirmish.agents import RuleBasedAgent
from skirmish.combat.actions import AttackAction, HealAction
from skirmish.combat.strategies import DamageStrategy, MeleeDamage
from skirmish.core.config import MatchSettings
from skirmish.core.exceptions import (
    InvalidGameStateError,
    UnboundCombatant,
    ValidationError,
)
from skirmish.engine import (
    MatchController,
    MatchOutcome,
    MatchPhase,
    MatchResult,
    TurnResult,
    TurnStatus,
)
from skirmish.models import Combatant, create_mage, create_warrior


@pytest.fixture
def rules() -> RuleBasedAgent:
    return RuleBasedAgent()


def duel(
    warrior: Combatant,
    mage: Combatant,
    agent: Any,
    settings: MatchSettings,
) -> MatchController:
    return MatchController([warrior], [mage], {warrior: agent, mage: agent}, settings=settings)


class TestConstruction:
    """Tests for roster validation."""

    def test_duplicate_identity_rejected(
        self, rules: RuleBasedAgent, match_settings: MatchSettings
    ) -> None:
        """Test two combatants with the same name and archetype are rejected."""
        a, b = create_warrior("Conan"), create_warrior("Conan")

        with pytest.raises(ValidationError) as exc_info:
            MatchController([a], [b], {a: rules}, settings=match_settings)

        assert exc_info.value.details["invalid_value"] == "Conan"

    def test_same_name_other_archetype_allowed(
        self, rules: RuleBasedAgent, match_settings: MatchSettings
    ) -> None:
        """Test a shared name across archetypes is a different combatant."""
        a, b = create_warrior("Conan"), create_mage("Conan")

        controller = MatchController([a], [b], {a: rules, b: rules}, settings=match_settings)

        assert controller.team1 == (a,)
        assert controller.team2 == (b,)

    @pytest.mark.parametrize("empty", ["team1", "team2"])
    def test_empty_roster_rejected(
        self,
        empty: str,
        warrior: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test each team needs at least one member."""
        teams = {"team1": [warrior], "team2": [warrior]}
        teams[empty] = []

        with pytest.raises(ValidationError):
            MatchController(teams["team1"], teams["team2"], {warrior: rules}, settings=match_settings)

    def test_initial_state(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a new controller is waiting on team 1."""
        controller = duel(warrior, mage, rules, match_settings)

        assert controller.phase == MatchPhase.TEAM1_ACTING
        assert controller.state.turn == 1
        assert controller.state.round == 1
        assert controller.is_game_over is False
        assert controller.winner is None
        assert controller.history == ()
        assert len(controller.match_id) == 8


class TestProcessTurn:
    """Tests for single-turn processing."""

    def test_completed_turn(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a turn executes the agent's action and advances the turn."""
        controller = duel(warrior, mage, rules, match_settings)

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.COMPLETED
        assert result.combatant_name == "Conan"
        assert result.error == ""
        assert mage.stats.health == 37
        assert controller.state.turn == 2
        assert controller.state.can_undo is True
        assert controller.state.history_size == 1

    def test_dead_combatant_skipped(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        failing_agent: Any,
    ) -> None:
        """Test a defeated combatant neither asks its agent nor advances the turn."""
        controller = duel(warrior, mage, failing_agent, match_settings)
        mage.set_health(0)

        result = controller.process_turn(mage, controller.team2, controller.team1)

        assert result.status == TurnStatus.SKIPPED
        assert result.action is None
        assert failing_agent.calls == 0
        assert controller.state.turn == 1
        assert controller.history == ()

    def test_unbound_combatant(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a living combatant without an agent is a fatal error."""
        controller = MatchController([warrior], [mage], {warrior: rules}, settings=match_settings)

        with pytest.raises(UnboundCombatant) as exc_info:
            controller.process_turn(mage, controller.team2, controller.team1)

        assert exc_info.value.details["combatant"] == "Gandalf"

    def test_agent_failure_uses_fallback(
        self,
        warrior: Combatant,
        mage: Combatant,
        archer: Combatant,
        match_settings: MatchSettings,
        failing_agent: Any,
    ) -> None:
        """Test a raising agent is replaced by focus fire on the weakest enemy."""
        controller = MatchController(
            [warrior], [mage, archer], {warrior: failing_agent}, settings=match_settings
        )

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert "agent unavailable" in result.error
        assert isinstance(result.action, AttackAction)
        assert result.action.target is mage
        assert len(controller.history) == 1

    def test_non_action_return_uses_fallback(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test an agent returning something other than an Action falls back."""
        agent = scripted_agent("attack Gandalf")
        controller = duel(warrior, mage, agent, match_settings)

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert "str" in result.error
        assert mage.stats.health == 37

    def test_unpayable_action_falls_back_to_melee(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test a mage without mana still acts, using the melee formula."""
        mage.set_mana(0)
        agent = scripted_agent(lambda self_, allies, enemies, state: AttackAction(self_, enemies[0]))
        controller = duel(warrior, mage, agent, match_settings)

        result = controller.process_turn(mage, controller.team2, controller.team1)

        assert result.status == TurnStatus.FALLBACK
        assert isinstance(result.action, AttackAction)
        assert result.action.damage_strategy == MeleeDamage()
        # 72 raw against heavy armor 30
        assert warrior.stats.health == 108
        assert len(controller.history) == 1

    def test_already_executed_action_falls_back(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test returning a spent action is treated as a failure."""
        spent = HealAction(warrior, 10)
        spent.execute()
        controller = duel(warrior, mage, scripted_agent(spent), match_settings)

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert mage.stats.health == 37

    def test_decision_timeout(
        self,
        warrior: Combatant,
        mage: Combatant,
        scripted_agent: Any,
    ) -> None:
        """Test a slow agent is abandoned and the fallback executes."""

        def slow(self_: Combatant, allies: Any, enemies: Any, state: Any) -> HealAction:
            time.sleep(0.5)
            return HealAction(self_, 30)

        settings = MatchSettings(decision_timeout_seconds=0.05, max_rounds=10)
        controller = duel(warrior, mage, scripted_agent(slow), settings)

        started = time.monotonic()
        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert time.monotonic() - started < 0.4
        assert result.status == TurnStatus.FALLBACK
        assert isinstance(result.action, AttackAction)
        assert mage.stats.health == 37

    def test_late_answer_is_discarded(
        self,
        warrior: Combatant,
        mage: Combatant,
        scripted_agent: Any,
    ) -> None:
        """Test an abandoned agent's eventual action never executes."""
        late: list[AttackAction] = []
        finished = threading.Event()

        def slow(self_: Combatant, allies: Any, enemies: Any, state: Any) -> AttackAction:
            time.sleep(0.2)
            late.append(AttackAction(self_, enemies[0]))
            finished.set()
            return late[0]

        settings = MatchSettings(decision_timeout_seconds=0.05, max_rounds=10)
        controller = duel(warrior, mage, scripted_agent(slow), settings)

        controller.process_turn(warrior, controller.team1, controller.team2)
        assert finished.wait(timeout=2.0)

        assert late[0].executed is False
        assert len(controller.history) == 1
        assert controller.history[0] is not late[0]
        assert mage.stats.health == 37

    def test_default_settings_bound_the_decision(
        self,
        warrior: Combatant,
        mage: Combatant,
        scripted_agent: Any,
        tmp_path: Any,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test default settings run agents on a bounded worker thread."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SKIRMISH_MATCH_DECISION_TIMEOUT_SECONDS", raising=False)
        threads: list[str] = []

        def record(self_: Combatant, allies: Any, enemies: Any, state: Any) -> AttackAction:
            threads.append(threading.current_thread().name)
            return AttackAction(self_, enemies[0])

        controller = duel(warrior, mage, scripted_agent(record), MatchSettings())

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.COMPLETED
        assert threads[0].startswith("skirmish-agent")
        assert threads[0] != threading.current_thread().name

    def test_malformed_action_falls_back(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test an attack without a target is replaced by the fallback."""
        agent = scripted_agent(lambda self_, allies, enemies, state: AttackAction(self_, None))
        controller = duel(warrior, mage, agent, match_settings)

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert result.action.target is mage
        assert mage.stats.health == 37

    def test_error_during_execution_restores_stats(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test an action failing half way is rolled back before the fallback."""

        class Backfire(DamageStrategy):
            name = "backfire"

            def compute_raw_damage(self, attacker: Combatant, target: Combatant) -> int:
                attacker.use_mana(10)
                target.set_health(1)
                raise RuntimeError("spell backfired")

        agent = scripted_agent(
            lambda self_, allies, enemies, state: AttackAction(
                self_, enemies[0], damage_strategy=Backfire()
            )
        )
        controller = duel(warrior, mage, agent, match_settings)

        result = controller.process_turn(mage, controller.team2, controller.team1)

        assert result.status == TurnStatus.FALLBACK
        assert "spell backfired" in result.error
        assert result.action.damage_strategy is None
        # only the fallback's magic attack is paid for: 70 raw less 30 armor
        assert mage.stats.mana == 90
        assert warrior.stats.health == 110
        assert len(controller.history) == 1

    def test_turn_after_game_over_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test no turn can be processed once the match is decided."""
        controller = duel(warrior, mage, rules, match_settings)
        controller.play()

        with pytest.raises(InvalidGameStateError):
            controller.process_turn(warrior, controller.team1, controller.team2)


class TestActionValidation:
    """Tests for rejecting actions the acting combatant may not take."""

    def test_heal_on_dead_ally_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        archer: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test a defeated ally cannot be healed back to life."""
        mage.set_health(0)
        agent = scripted_agent(HealAction(mage, 30))
        controller = MatchController(
            [warrior, mage], [archer], {warrior: agent}, settings=match_settings
        )

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert "living ally" in result.error
        assert mage.stats.health == 0
        assert mage.is_alive is False
        # fallback melee: 48 raw less 7 mitigation
        assert archer.stats.health == 59

    def test_heal_on_enemy_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test heals only land on the acting combatant's roster."""
        mage.set_health(40)
        controller = duel(warrior, mage, scripted_agent(HealAction(mage, 30)), match_settings)

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert isinstance(result.action, AttackAction)
        # 40 less the 43 point melee hit
        assert mage.stats.health == 0

    def test_attack_on_own_ally_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        archer: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test an attack on a teammate is replaced by the fallback."""
        agent = scripted_agent(AttackAction(warrior, mage))
        controller = MatchController(
            [warrior, mage], [archer], {warrior: agent}, settings=match_settings
        )

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert "living enemy" in result.error
        assert result.action.target is archer
        assert mage.stats.health == 80
        assert archer.stats.health == 59

    def test_attack_on_dead_enemy_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        archer: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test a defeated enemy cannot be targeted."""
        mage.set_health(0)
        agent = scripted_agent(AttackAction(warrior, mage))
        controller = MatchController(
            [warrior], [mage, archer], {warrior: agent}, settings=match_settings
        )

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert result.action.target is archer
        assert archer.stats.health == 59
        assert len(controller.history) == 1

    def test_acting_as_another_combatant_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        archer: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test an agent cannot spend a teammate's turn or mana."""
        agent = scripted_agent(AttackAction(mage, archer))
        controller = MatchController(
            [warrior, mage], [archer], {warrior: agent}, settings=match_settings
        )

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.FALLBACK
        assert "another combatant" in result.error
        assert result.action.attacker is warrior
        assert mage.stats.mana == 100

    def test_valid_heal_on_wounded_ally(
        self,
        warrior: Combatant,
        mage: Combatant,
        archer: Combatant,
        match_settings: MatchSettings,
        scripted_agent: Any,
    ) -> None:
        """Test a heal on a living ally is executed as chosen."""
        mage.set_health(20)
        agent = scripted_agent(HealAction(mage, 30))
        controller = MatchController(
            [warrior, mage], [archer], {warrior: agent}, settings=match_settings
        )

        result = controller.process_turn(warrior, controller.team1, controller.team2)

        assert result.status == TurnStatus.COMPLETED
        assert mage.stats.health == 50


class TestMatchFlow:
    """Tests for rounds and game over."""

    def test_malformed_actions_do_not_abort_play(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a match with an agent returning broken actions still finishes."""

        class Broken:
            def decide_action(
                self, self_: Combatant, allies: Any, enemies: Any, state: Any
            ) -> AttackAction:
                return AttackAction(self_, None)  # type: ignore[arg-type]

        controller = MatchController(
            [warrior], [mage], {warrior: Broken(), mage: rules}, settings=match_settings
        )

        result = controller.play()

        assert isinstance(result, MatchResult)
        assert result.outcome == MatchOutcome.TEAM1
        assert result.turns == 3

    def test_duel_to_completion(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test the warrior wins in round 2 before the mage acts again."""
        controller = duel(warrior, mage, rules, match_settings)

        result = controller.play()

        assert result.outcome == MatchOutcome.TEAM1
        assert result.reason == "team2_defeated"
        assert result.rounds == 2
        assert result.turns == 3
        assert result.commands == 3
        assert warrior.stats.health == 110
        assert mage.stats.mana == 90
        assert controller.phase == MatchPhase.GAME_OVER
        assert controller.winner == MatchOutcome.TEAM1

    def test_game_over_mid_pass(
        self,
        warrior: Combatant,
        rogue: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
        make_combatant: Callable[..., Combatant],
    ) -> None:
        """Test the match ends as soon as the last enemy falls."""
        dummy = make_combatant("Dummy", health=1)
        controller = MatchController(
            [warrior, rogue],
            [dummy],
            {warrior: rules, rogue: rules, dummy: rules},
            settings=match_settings,
        )

        result = controller.play_round()

        assert result is not None
        assert result.outcome == MatchOutcome.TEAM1
        assert result.turns == 1
        assert [a.attacker for a in controller.history] == [warrior]  # type: ignore[attr-defined]

    def test_round_advances(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a full round returns None and starts round 2 on turn 1."""
        controller = duel(warrior, mage, rules, match_settings)

        assert controller.play_round() is None
        assert controller.state.round == 2
        assert controller.state.turn == 1
        assert controller.phase == MatchPhase.TEAM1_ACTING

    def test_failing_agents_still_finish(
        self,
        warrior: Combatant,
        mage: Combatant,
        match_settings: MatchSettings,
        failing_agent: Any,
    ) -> None:
        """Test a match where every decision fails still reaches game over."""
        controller = duel(warrior, mage, failing_agent, match_settings)

        result = controller.play()

        assert result.outcome == MatchOutcome.TEAM1
        assert failing_agent.calls == result.turns

    def test_round_limit_draw(
        self,
        rules: RuleBasedAgent,
        make_combatant: Callable[..., Combatant],
    ) -> None:
        """Test harmless combatants draw at the round limit."""
        a = make_combatant("A", attack_power=0)
        b = make_combatant("B", attack_power=0)
        settings = MatchSettings(max_rounds=3)
        controller = MatchController([a], [b], {a: rules, b: rules}, settings=settings)

        result = controller.play()

        assert result.outcome == MatchOutcome.DRAW
        assert result.reason == "round_limit"
        assert result.rounds == 3
        assert result.turns == 6

    def test_mutual_defeat_draw(
        self,
        rules: RuleBasedAgent,
        scripted_agent: Any,
        make_combatant: Callable[..., Combatant],
    ) -> None:
        """Test both rosters falling on the same turn is a draw."""

        def reckless(self_: Combatant, allies: Any, enemies: Any, state: Any) -> AttackAction:
            self_.set_health(0)
            return AttackAction(self_, enemies[0])

        a = make_combatant("A", attack_power=50)
        b = make_combatant("B", health=1)
        controller = MatchController(
            [a], [b], {a: scripted_agent(reckless), b: rules}, settings=MatchSettings()
        )

        result = controller.play()

        assert result.outcome == MatchOutcome.DRAW
        assert result.reason == "mutual_defeat"

    def test_play_is_idempotent_after_game_over(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test play and play_round return the stored result once decided."""
        controller = duel(warrior, mage, rules, match_settings)
        result = controller.play()

        assert controller.play() is result
        assert controller.play_round() is result

    def test_unbound_combatant_aborts_play(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test play propagates UnboundCombatant."""
        controller = MatchController([warrior], [mage], {warrior: rules}, settings=match_settings)

        with pytest.raises(UnboundCombatant):
            controller.play()


class TestUndo:
    """Tests for controller-level undo."""

    def test_undo_without_history(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test undo on a fresh match returns None."""
        controller = duel(warrior, mage, rules, match_settings)
        assert controller.undo_last() is None

    def test_undo_restores_state(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test undo reverts the last action and updates undo availability."""
        controller = duel(warrior, mage, rules, match_settings)
        controller.process_turn(warrior, controller.team1, controller.team2)

        undone = controller.undo_last()

        assert isinstance(undone, AttackAction)
        assert mage.stats.health == 80
        assert controller.state.can_undo is False
        assert controller.state.history_size == 0

    def test_undo_after_game_over_rejected(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a decided match cannot be rewound."""
        controller = duel(warrior, mage, rules, match_settings)
        controller.play()

        with pytest.raises(InvalidGameStateError):
            controller.undo_last()


class TestCallbacks:
    """Tests for turn callbacks."""

    def test_callbacks_receive_every_turn(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test each processed turn is reported in order."""
        controller = duel(warrior, mage, rules, match_settings)
        seen: list[TurnResult] = []
        controller.add_turn_callback(seen.append)

        controller.play()

        assert [r.combatant_name for r in seen] == ["Conan", "Gandalf", "Conan"]
        assert [(r.round_number, r.turn_number) for r in seen] == [(1, 1), (1, 2), (2, 1)]

    def test_failing_callback_does_not_stop_match(
        self,
        warrior: Combatant,
        mage: Combatant,
        rules: RuleBasedAgent,
        match_settings: MatchSettings,
    ) -> None:
        """Test a raising callback is logged and ignored."""
        controller = duel(warrior, mage, rules, match_settings)
        seen: list[TurnResult] = []

        def broken(result: TurnResult) -> None:
            raise RuntimeError("display failed")

        controller.add_turn_callback(broken)
        controller.add_turn_callback(seen.append)

        result = controller.play()

        assert result.outcome == MatchOutcome.TEAM1
        assert len(seen) == 3
