"""cavegen CLI entry point.

Provides subcommands for generating a cave from the command line and for
running the HTTP generation service. Accepts configuration via flags and
environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()

EXIT_OK = 0
EXIT_PLACEMENT_FAILED = 2

SUBCOMMANDS = ("generate", "server")


def _load_version() -> str:
    try:
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        from cavegen import __version__ as pkg_version

        return pkg_version


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Cave Generator

    Generate cellular-automaton cave maps from the command line or run the
    HTTP generation service. Configuration can be provided via CLI flags or
    environment variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                 Bind address for the web server (default: 0.0.0.0)
          PORT                 Port for the web server (default: 5000)
          CAVEGEN_LOG_LEVEL    debug | info | warn | error (default: info)
          CAVEGEN_LOG_JSON     Emit JSON log lines when set to 1
          CAVEGEN_MAP_DIR      Directory for maps saved through the API

        Examples:
          # Generate a default 128x128 cave and print it
          python run.py generate --print

          # Reproducible cave with rooms, saved to ./maps
          python run.py generate --seed 1234 --rooms 4 --out maps

          # Run the HTTP service on a custom port
          python run.py server --port 8080
        """
    )

    parser = argparse.ArgumentParser(
        prog="cavegen",
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
        version=f"cavegen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one cave map",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a cave and optionally print or save the ASCII map.",
    )
    gen_parser.add_argument("--width", type=int, default=None, help="Map width (default: 128)")
    gen_parser.add_argument("--height", type=int, default=None, help="Map height (default: 128)")
    gen_parser.add_argument("--fill", type=float, default=None, help="Initial wall probability (default: 0.45)")
    gen_parser.add_argument("--iterations", type=int, default=None, help="Smoothing passes (default: 5)")
    gen_parser.add_argument("--birth", type=int, default=None, help="Birth limit (default: 4)")
    gen_parser.add_argument("--death", type=int, default=None, help="Death limit (default: 4)")
    gen_parser.add_argument(
        "--unweighted",
        action="store_true",
        help="Plain neighbour counts instead of cardinal/diagonal weights",
    )
    gen_parser.add_argument("--min-room", type=int, default=None, help="Minimum region size kept (default: 20)")
    gen_parser.add_argument("--min-floor", type=float, default=None, help="Minimum floor fraction (default: 0.2)")
    gen_parser.add_argument("--seed", default=None, help="Integer or text seed (default: time based)")
    gen_parser.add_argument("--rooms", type=int, default=None, metavar="N", help="Carve N rectangular rooms")
    gen_parser.add_argument("--chambers", type=int, default=None, metavar="N", help="Carve N circular chambers")
    gen_parser.add_argument("--out", default=None, metavar="DIR", help="Save cave_map_seed<seed>.txt into DIR")
    gen_parser.add_argument("--print", dest="print_map", action="store_true", help="Echo the map to stdout")
    gen_parser.set_defaults(command="generate")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the HTTP generation service",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask cave generation API",
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

    # If no subcommand provided (global flags only), default to generate
    if not any(token in SUBCOMMANDS for token in argv):
        argv = list(argv) + ["generate"]

    return parser.parse_args(argv)


def _label(text: str) -> str:
    return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def _value(val) -> str:
    return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)


def _banner(title: str, rows) -> str:
    title = f"{Fore.CYAN}{Style.BRIGHT}{title}{Style.RESET_ALL}" if _COLOR_ENABLED else title
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [divider, f"  {title}", divider]
    lines.extend(f"  {_label(k + ':'):12} {_value(v)}" for k, v in rows)
    lines.extend([divider, ""])
    return "\n".join(lines)


def params_from_args(args: argparse.Namespace):
    from cavegen.cave import CaveParameters

    overrides = {
        "width": args.width,
        "height": args.height,
        "fill_probability": args.fill,
        "smooth_iterations": args.iterations,
        "birth_limit": args.birth,
        "death_limit": args.death,
        "min_room_size": args.min_room,
        "min_floor_percentage": args.min_floor,
        "seed": args.seed,
    }
    if args.unweighted:
        overrides["use_weighted_smoothing"] = False
    if args.rooms is not None:
        overrides["generate_rooms"] = args.rooms > 0
        overrides["number_of_rooms"] = args.rooms
    if args.chambers is not None:
        overrides["generate_chambers"] = args.chambers > 0
        overrides["number_of_chambers"] = args.chambers
    return CaveParameters.from_mapping({}, **overrides)


def run_generate(args: argparse.Namespace) -> int:
    from cavegen.cave import generate_cave
    from cavegen.cave.serialization import save_map

    result = generate_cave(params_from_args(args))
    saved = str(save_map(result.grid, args.out, result.seed)) if args.out else "no"
    print(
        _banner(
            "Cave Generated",
            [
                ("Seed", result.seed),
                ("Size", f"{result.width}x{result.height}"),
                ("Status", result.status),
                ("Attempts", result.attempts),
                ("Floor", f"{result.floor_percentage:.1%}"),
                ("Start", result.start or "-"),
                ("End", result.end or "-"),
                ("Saved", saved),
            ],
        )
    )
    if args.print_map:
        sys.stdout.write(result.to_ascii())
    if result.placement_error:
        print(f"[ERROR] Start/end placement failed: {result.placement_error}", file=sys.stderr)
        return EXIT_PLACEMENT_FAILED
    return EXIT_OK


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "generate").lower()

    from cavegen.logging_utils import log

    if mode == "generate":
        log.info(event="startup", mode=mode)
        return run_generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))

    # Import server entrypoint only after environment is ready
    from cavegen.server import start_server

    print(_banner("Cave Generator Server", [("Mode", mode.upper()), ("Host", host), ("Port", port)]))
    log.info(event="startup", mode=mode, host=host, port=port)
    start_server(host=host, port=port, debug=bool(getattr(args, "debug", False)))
    return EXIT_OK


def cli() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(cli())
