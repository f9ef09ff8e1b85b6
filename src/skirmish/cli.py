"""Command-line front-end.

Builds one of the stock match-ups, runs it to completion, and prints a
turn-by-turn log plus the final team status.

Modes:
    rules  All four combatants use the fixed-rule agent.
    demo   You play the warrior beside a rule-based mage against two LLM agents.
    ai     All four combatants are LLM agents.
    human  You play both team 1 combatants against rule-based opponents.

LLM agents without an API key fail every call, and the controller's
focus-fire fallback plays for them. Modes with a human at the console
wait for them without a decision timeout; automated agents keep the
configured bound.
"""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Sequence

from pydantic import ValidationError as PydanticValidationError

from skirmish.agents import ConsoleAgent, DecisionAgent, LLMAgent, RuleBasedAgent
from skirmish.core.config import MatchSettings, Settings, get_settings
from skirmish.core.exceptions import SkirmishError
from skirmish.core.logging import configure_logging, get_logger
from skirmish.engine import MatchController, MatchOutcome, MatchResult, TurnResult, TurnStatus
from skirmish.models import Combatant, create_archer, create_mage, create_rogue, create_warrior


logger = get_logger(__name__)

MODES = ("rules", "demo", "ai", "human")
HUMAN_MODES = frozenset({"demo", "human"})


def build_match(
    mode: str,
    settings: Settings,
    *,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> MatchController:
    """Build rosters and agents for a stock match-up.

    Args:
        mode: One of MODES.
        settings: Application settings.
        input_fn: Input callable for console agents.
        output_fn: Output callable for console agents.

    Returns:
        A ready-to-play MatchController.
    """
    heal_amount = settings.match.heal_amount
    warrior = create_warrior("Conan")
    mage = create_mage("Gandalf")
    archer = create_archer("Legolas")
    rogue = create_rogue("Shadow")

    def rules() -> RuleBasedAgent:
        return RuleBasedAgent(heal_amount=heal_amount)

    def llm(name: str) -> LLMAgent:
        return LLMAgent(name=name, settings=settings.agent, heal_amount=heal_amount)

    def human() -> ConsoleAgent:
        return ConsoleAgent(heal_amount=heal_amount, input_fn=input_fn, output_fn=output_fn)

    match_settings = settings.match
    agents: dict[Combatant, DecisionAgent]
    if mode == "rules":
        agents = {warrior: rules(), mage: rules(), archer: rules(), rogue: rules()}
    elif mode == "demo":
        agents = {warrior: human(), mage: rules(), archer: llm("llm-1"), rogue: llm("llm-2")}
    elif mode == "ai":
        agents = {warrior: llm("llm-1"), mage: llm("llm-2"), archer: llm("llm-3"), rogue: llm("llm-4")}
    elif mode == "human":
        agent = human()
        agents = {warrior: agent, mage: agent, archer: rules(), rogue: rules()}
    else:
        raise ValueError(f"Unknown mode: {mode}")

    if mode in HUMAN_MODES:
        match_settings = match_settings.model_copy(update={"decision_timeout_seconds": None})

    return MatchController([warrior, mage], [archer, rogue], agents, settings=match_settings)


def format_team(title: str, team: Sequence[Combatant]) -> str:
    lines = [f"=== {title} ==="]
    lines += [f"  {c.describe_status()}" for c in team]
    return "\n".join(lines)


def format_turn(result: TurnResult) -> str:
    suffix = " (fallback)" if result.status == TurnStatus.FALLBACK else ""
    return f"[R{result.round_number} T{result.turn_number}] {result.message}{suffix}"


def format_result(result: MatchResult) -> str:
    if result.outcome == MatchOutcome.DRAW:
        headline = f"Draw ({result.reason})"
    else:
        headline = f"{result.outcome.value.replace('team', 'Team ')} wins"
    return (
        f"{headline} after {result.rounds} round(s), "
        f"{result.turns} turn(s), {result.commands} command(s)"
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="skirmish",
        description="Deterministic turn-based tactical combat",
    )
    parser.add_argument("--mode", "-m", choices=MODES, default="rules", help="Match-up to play")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (defaults to settings)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--log-file", help="Also write JSON log lines to this file")
    parser.add_argument("--max-rounds", type=int, help="Round limit before a draw")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for each decision")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = get_settings()
    except SkirmishError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(
        level=args.log_level or settings.log_level,
        json_format=args.json_logs or settings.json_logs,
        log_file=args.log_file or settings.log_file,
    )

    overrides: dict[str, object] = {}
    if args.max_rounds is not None:
        overrides["max_rounds"] = args.max_rounds
    if args.timeout is not None:
        overrides["decision_timeout_seconds"] = args.timeout
    if overrides:
        try:
            match = MatchSettings(**{**settings.match.model_dump(), **overrides})
        except (SkirmishError, PydanticValidationError) as exc:
            print(f"Configuration error: {exc}", file=sys.stderr)
            return 2
        settings = settings.model_copy(update={"match": match})

    try:
        controller = build_match(args.mode, settings)
        controller.add_turn_callback(lambda result: print(format_turn(result)))

        print(format_team("Team 1", controller.team1))
        print(format_team("Team 2", controller.team2))
        print()

        result = controller.play()
    except SkirmishError as exc:
        logger.error("Match aborted", error=str(exc))
        print(f"Match aborted: {exc}", file=sys.stderr)
        return 1

    print()
    print(format_team("Team 1", controller.team1))
    print(format_team("Team 2", controller.team2))
    print()
    print(format_result(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
