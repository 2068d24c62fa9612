"""
Command line for cribsharp.

``cribsharp play`` plays a game against the computer in the terminal, and
``cribsharp analyze`` runs the statistical checks and prints them as JSON.
"""

import argparse
import asyncio
import json
import logging
import random
import sys
from typing import List, Optional

from cribsharp.adapters import CLIAdapter
from cribsharp.analysis import StatisticalValidator
from cribsharp.common.io_interface import LoggingIOInterface
from cribsharp.cribbage.strategy import Difficulty
from cribsharp.engine import CribbageEngine

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cribsharp", description="Play cribbage against the computer."
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="random seed for reproducible games"
    )
    subparsers = parser.add_subparsers(dest="command")

    play = subparsers.add_parser("play", help="play an interactive game")
    play.add_argument(
        "-d",
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=None,
        help="computer difficulty (default: saved setting, else easy)",
    )
    play.add_argument(
        "--db", default=None, help="SQLite file for saved games (default: in memory)"
    )
    play.add_argument(
        "--ai-delay",
        type=float,
        default=1.0,
        help="seconds the computer waits before each move (default: 1.0)",
    )
    play.add_argument(
        "--transcript", default=None, help="also write all output to this file"
    )
    play.add_argument(
        "--resume", action="store_true", help="resume the saved game, if any"
    )

    analyze = subparsers.add_parser("analyze", help="run the statistical checks")
    analyze.add_argument(
        "-t",
        "--trials",
        type=int,
        default=5200,
        help="shuffles for the uniformity test (default: 5200)",
    )
    analyze.add_argument(
        "-n",
        "--deals",
        type=int,
        default=1000,
        help="hands sampled per difficulty (default: 1000)",
    )

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "play"
        args.difficulty = None
        args.db = None
        args.ai_delay = 1.0
        args.transcript = None
        args.resume = False
    return args


async def play(args: argparse.Namespace) -> int:
    transcript = LoggingIOInterface(args.transcript) if args.transcript else None
    adapter = CLIAdapter(transcript=transcript)

    config = {"ai_delay": args.ai_delay, "db_path": args.db, "seed": args.seed}
    engine = CribbageEngine(adapter, config)
    await engine.initialize()

    try:
        if args.resume:
            await engine.load_saved_game()
        else:
            await engine.start_new_game()
        if args.difficulty:
            await engine.set_difficulty(args.difficulty)
        await engine.run()
    except (EOFError, KeyboardInterrupt, TimeoutError):
        logger.info("Game interrupted")
        print("\nGoodbye.")
    finally:
        await engine.shutdown()

    stats = engine.stats
    print(
        f"Games won: {stats.games_won}/{stats.games_played}, "
        f"best hand: {stats.highest_score}"
    )
    return 0


def analyze(args: argparse.Namespace) -> int:
    rng = random.Random(args.seed)
    validator = StatisticalValidator(rng)
    results = validator.run_all_analyses(trials=args.trials, deals=args.deals)
    print(json.dumps(results, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "analyze":
        return analyze(args)
    return asyncio.run(play(args))


if __name__ == "__main__":
    sys.exit(main())
