#!/usr/bin/env python3
"""
Covid AI - Command Line Interface

Play demo matches with the bot and inspect its decisions.

Usage:
    python cli.py play --opponent nearest-city --rounds 100
    python cli.py evaluate board.txt --player 0
    python cli.py config --output weights.json
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from game.ai_opponents import NearestCityAI, RandomAI
from game.board import Board
from game.engine import GameEngine
from game.game_state import GameState, PlayerView
from game.renderer import GameRenderer
from game.settings import Settings
from covid_ai.errors import ConfigError
from covid_ai.orchestrator import EvaluationMode, RufusPlayer, chosen_direction
from covid_ai.weights import BotConfig

logger = logging.getLogger(__name__)

OPPONENTS = {
    'random': RandomAI,
    'nearest-city': NearestCityAI,
    'rufus': RufusPlayer,
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='covid-ai',
        description='Decision engine for the Covid grid game'
    )
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose (debug) logging')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='Bot configuration JSON (default: $COVID_AI_CONFIG or built-in)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Play command
    play_parser = subparsers.add_parser('play', help='Play a demo match')
    play_parser.add_argument('--opponent', '-o', choices=sorted(OPPONENTS),
                             default='nearest-city', help='Opponent bot')
    play_parser.add_argument('--rounds', '-r', type=int, default=200,
                             help='Number of rounds')
    play_parser.add_argument('--size', type=int, default=20,
                             help='Board size')
    play_parser.add_argument('--units', type=int, default=4,
                             help='Units per player')
    play_parser.add_argument('--cpu-budget', type=float, default=30.0,
                             help='CPU seconds per player for the whole match')
    play_parser.add_argument('--seed', type=int, default=0,
                             help='Random seed')
    play_parser.add_argument('--show-every', type=int, default=50,
                             help='Print the board every N rounds (0 = never)')

    # Evaluate command
    eval_parser = subparsers.add_parser('evaluate',
                                        help='Show direction scores for a board file')
    eval_parser.add_argument('board', type=str,
                             help='ASCII board file')
    eval_parser.add_argument('--player', '-p', type=int, default=0,
                             help='Player to evaluate for')
    eval_parser.add_argument('--mode', '-m', choices=[m.value for m in EvaluationMode],
                             default=EvaluationMode.FULL.value, help='Evaluation mode')

    # Config command
    config_parser = subparsers.add_parser('config', help='Print the bot configuration')
    config_parser.add_argument('--output', type=str, default=None,
                               help='Write to a file instead of stdout')

    return parser


def load_config(args) -> BotConfig:
    if args.config:
        return BotConfig.load(args.config)
    return BotConfig.from_env()


def cmd_play(args) -> int:
    """Play the bot (player 0) against a scripted opponent (player 1)"""
    config = load_config(args)
    settings = Settings(nb_players=2, rows=args.size, cols=args.size,
                        nb_rounds=args.rounds, nb_units=args.units)
    engine = GameEngine(settings, cpu_budget=args.cpu_budget, seed=args.seed)
    state = engine.reset()

    bot = RufusPlayer(config)
    opponent_cls = OPPONENTS[args.opponent]
    opponent = opponent_cls(config) if opponent_cls is RufusPlayer else opponent_cls()
    players = [bot, opponent]

    print("=" * 60)
    print(f"MATCH: rufus vs {opponent.name}")
    print("=" * 60)
    print(GameRenderer.render(state))

    while not state.done:
        engine.step(players)
        logger.info(GameRenderer.render_compact(state))
        if args.show_every and state.round % args.show_every == 0 and not state.done:
            print(f"\n--- Round {state.round} ---")
            print(GameRenderer.render(state, show_info=False))

    print(f"\n{'=' * 60}")
    print(f"GAME OVER at round {state.round}")
    print(GameRenderer.render(state))
    modes = ", ".join(f"{mode.value}={n}" for mode, n in bot.mode_counts.items())
    print(f"Rufus evaluation modes: {modes}")
    return 0


def cmd_evaluate(args) -> int:
    """Print the per-direction scores and the chosen direction of every unit"""
    config = load_config(args)
    with open(args.board, 'r') as f:
        board = Board.from_ascii(f.readlines())
    settings = Settings(nb_players=max(args.player + 1, 2), rows=board.rows, cols=board.cols)
    state = GameState(board, settings)
    view = PlayerView(state, args.player)
    bot = RufusPlayer(config)
    mode = EvaluationMode(args.mode)

    unit_ids = view.my_units(args.player)
    if not unit_ids:
        print(f"Player {args.player} has no units on this board")
        return 1

    print("\n".join(GameRenderer.render_board(board)))
    print()
    for unit_id in unit_ids:
        unit = view.unit(unit_id)
        evaluation = bot.evaluate_unit(view, unit, mode)
        print(f"unit {unit_id} at ({unit.pos.i},{unit.pos.j}): {evaluation} "
              f"-> {chosen_direction(evaluation).name}")
    return 0


def cmd_config(args) -> int:
    """Dump the effective configuration as JSON"""
    config = load_config(args)
    if args.output:
        config.save(args.output)
        print(f"Configuration written to {args.output}")
    else:
        print(json.dumps(config.to_dict(), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s %(message)s',
    )

    if not args.command:
        parser.print_help()
        return 0

    # Map commands to functions
    commands = {
        'play': cmd_play,
        'evaluate': cmd_evaluate,
        'config': cmd_config,
    }

    try:
        return commands[args.command](args)
    except (ConfigError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main() or 0)
