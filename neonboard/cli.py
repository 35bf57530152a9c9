"""
Neon Board CLI - Command-line interface for the engine.

Usage:
    neonboard validate <game>      Validate a built-in game config
    neonboard phases <game>        Print the derived phase order
    neonboard serve                Run the HTTP API
"""

import argparse
import sys

from .settings import configure_logging


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Neon Board - Game-state transition engine",
        prog="neonboard",
    )
    parser.add_argument("--log-level", help="Override NEONBOARD_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a game config")
    validate_parser.add_argument("game", help="Built-in game name")

    # Phases command
    phases_parser = subparsers.add_parser("phases", help="Show the derived phase order")
    phases_parser.add_argument("game", help="Built-in game name")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on changes")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "phases":
        cmd_phases(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_game(name):
    from .games import get_game_config

    try:
        return get_game_config(name)
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        sys.exit(1)


def cmd_validate(args):
    """Validate a game config."""
    from .config_schema import validate_config

    config = _load_game(args.game)
    result = validate_config(config)

    print(f"Validating: {args.game}")
    print(f"Valid: {result.valid}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)


def cmd_phases(args):
    """Print the phase order and the moves each phase allows."""
    from .engine_core.moves import MoveResolver
    from .engine_core.phase_graph import derive_initial_phase, derive_ordered_phases

    config = _load_game(args.game)
    resolver = MoveResolver(config)
    order = derive_ordered_phases(config)

    print(f"Game: {config.name or args.game}")
    print(f"Initial phase: {derive_initial_phase(config) or '(none)'}")
    if not order:
        print("No phases")
        return

    for index, phase in enumerate(order):
        moves = ", ".join(sorted(resolver.allowed_moves(phase))) or "-"
        print(f"  {index + 1}. {phase}  [{moves}]")
    print(f"  -> wraps to {order[0]} (round + 1)")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "neonboard.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
