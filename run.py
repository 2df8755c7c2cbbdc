"""Dragon Maze CLI entry point.

Provides subcommands for running the maze HTTP server, printing a generated
maze, and checking a random sample of mazes against every invariant.
Accepts configuration via flags and environment variables, with optional
.env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import random
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()

# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()

__version__ = "0.1.0"


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Dragon Maze

    Generate hero/dragon/sword mazes, serve them over HTTP, or sweep a sample
    of seeds through the invariant checks. Configuration can be provided via
    CLI flags or environment variables. If both are present, CLI flags take
    precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                          Bind address for the web server (default: 0.0.0.0)
          PORT                          Port for the web server (default: 5000)
          MAZE_DEFAULT_SIZE             Size served when a request names none (default: 11)
          DRAGONMAZE_MAX_ATTEMPTS       Whole-maze retries before giving up
          DRAGONMAZE_PLACEMENT_RETRIES  Dragon re-rolls when the hero has no room
          DRAGONMAZE_LOG_LEVEL          debug | info | warn | error

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Print a 15x15 maze for seed 42
          python run.py generate --size 15 --seed 42

          # Check 200 random mazes between sizes 5 and 51
          python run.py check --count 200 --max-size 51
        """
    )

    parser = argparse.ArgumentParser(
        prog="dragonmaze",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Dragon Maze {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the maze HTTP server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask maze API server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Print one generated maze",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a maze and print its text dump (X wall, S exit, H hero, D dragon, E sword).",
    )
    gen_parser.add_argument("--size", type=int, default=11, help="Odd side length >= 5 (default: 11)")
    gen_parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: random)")
    gen_parser.add_argument("--json", action="store_true", help="Print the JSON form instead of text")
    gen_parser.set_defaults(command="generate")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Generate a random sample of mazes and validate each one",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    check_parser.add_argument("--count", type=int, default=100, help="Number of mazes (default: 100)")
    check_parser.add_argument("--min-size", type=int, default=5, help="Smallest odd size (default: 5)")
    check_parser.add_argument("--max-size", type=int, default=101, help="Largest odd size (default: 101)")
    check_parser.add_argument("--seed", type=int, default=None, help="Seed for picking sizes and maze seeds")
    check_parser.set_defaults(command="check")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def _color(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def cmd_generate(args) -> int:
    from dragonmaze.maze import InvalidSizeError, GenerationError, Maze

    try:
        maze = Maze(seed=args.seed, size=args.size)
    except InvalidSizeError as exc:
        print(_color(f"[ERROR] {exc}", Fore.RED))
        return 2
    except GenerationError as exc:
        print(_color(f"[ERROR] {exc}", Fore.RED))
        return 1
    if args.json:
        print(json.dumps(maze.to_dict()))
    else:
        print(_color(f"seed={maze.seed} size={maze.size}", Fore.CYAN))
        print(maze.text())
    return 0


def cmd_check(args) -> int:
    from dragonmaze.maze import InvalidSizeError, GenerationError, Maze
    from dragonmaze.maze.validation import violations

    rng = random.Random(args.seed)
    low = args.min_size if args.min_size % 2 else args.min_size + 1
    high = args.max_size if args.max_size % 2 else args.max_size - 1
    if low > high:
        print(_color(f"[ERROR] no odd size between {args.min_size} and {args.max_size}", Fore.RED))
        return 2
    failures = 0
    for _ in range(args.count):
        size = low + 2 * rng.randint(0, (high - low) // 2)
        seed = rng.randint(1, 1_000_000)
        try:
            maze = Maze(seed=seed, size=size)
        except InvalidSizeError as exc:
            print(_color(f"[ERROR] {exc}", Fore.RED))
            return 2
        except GenerationError as exc:
            failures += 1
            print(_color(f"[FAIL] size={size} seed={seed}: {exc}", Fore.RED))
            continue
        problems = violations(maze.grid)
        if problems:
            failures += 1
            rules = ",".join(p.rule for p in problems)
            print(_color(f"[FAIL] size={size} seed={seed} rules={rules}", Fore.RED))
            print(maze.text())
    summary = f"{args.count - failures}/{args.count} mazes valid"
    print(_color(summary, Fore.GREEN if not failures else Fore.YELLOW))
    return 1 if failures else 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return cmd_generate(args)
    if mode == "check":
        return cmd_check(args)

    env_host = os.getenv("HOST", "0.0.0.0")
    env_port = int(os.getenv("PORT", "5000"))
    host = getattr(args, "host", None) or env_host
    port = int(getattr(args, "port", None) or env_port)
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    from dragonmaze.server import start_server

    divider = _color("=" * 40, Fore.MAGENTA)
    lines = [
        divider,
        f"  {_color('Dragon Maze Server', Fore.CYAN + Style.BRIGHT)}",
        divider,
        f"  {_color('Host:', Fore.YELLOW):12} {_color(host, Fore.GREEN)}",
        f"  {_color('Port:', Fore.YELLOW):12} {_color(str(port), Fore.GREEN)}",
        f"  {_color('Debug:', Fore.YELLOW):12} {_color('YES' if debug else 'NO', Fore.GREEN)}",
        divider,
        "",
    ]
    print("\n".join(lines))
    start_server(host=host, port=port, debug=debug)
    return 0


def cli() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(cli())
