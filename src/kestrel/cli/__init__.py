"""Kestrel CLI — serve an app or list its endpoints.

Entry point registered as ``kestrel`` in ``pyproject.toml``::

    [project.scripts]
    kestrel = "kestrel.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``kestrel`` command."""
    parser = argparse.ArgumentParser(
        prog="kestrel",
        description="Kestrel — a small JSON API server.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- kestrel run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect)",
    )

    # -- kestrel routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered endpoints")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from kestrel.cli._run import run_app

        run_app(args)
    elif args.command == "routes":
        from kestrel.cli._routes import run_routes

        run_routes(args)
