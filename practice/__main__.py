import argparse
import asyncio
import logging
from typing import List, Optional

from holdem.models import TableConfig

from .console import run_console
from .server import run_server


def main(argv: Optional[List[str]] = None) -> None:
    # CLI doubles as documentation for common table toggles.
    parser = argparse.ArgumentParser(description="Hold'em practice table")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--starting-stack", type=int, default=1_000)
    common.add_argument("--sb", type=int, default=10)
    common.add_argument("--bb", type=int, default=20)
    common.add_argument("--seed", type=int, default=None, help="Seed for decks and the house AI")
    common.add_argument("--log-level", default=None, help="Logging level (default: INFO for serve, WARNING for play)")

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", parents=[common], help="Host a heads-up table for remote players")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=9876)
    serve.add_argument(
        "--move-time",
        type=int,
        default=15_000,
        help="Move time in milliseconds; a timeout folds the hand (0 disables the clock)",
    )

    play = commands.add_parser("play", parents=[common], help="Play against the house AI in this terminal")
    play.add_argument("--name", default="You")
    play.add_argument("--seats", type=int, default=2, help="Players at the table, including you")
    play.add_argument("--max-hands", type=int, default=None)

    args = parser.parse_args(argv)
    default_level = "INFO" if args.command == "serve" else "WARNING"
    level = (args.log_level or default_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(message)s")

    if args.command == "serve":
        config = TableConfig(
            seats=2,
            starting_stack=args.starting_stack,
            sb=args.sb,
            bb=args.bb,
            move_time_ms=args.move_time,
        )
        asyncio.run(run_server(args.host, args.port, config, seed=args.seed))
        return

    config = TableConfig(seats=args.seats, starting_stack=args.starting_stack, sb=args.sb, bb=args.bb)
    try:
        run_console(config, name=args.name, seed=args.seed, max_hands=args.max_hands)
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye.")


if __name__ == "__main__":
    main()
