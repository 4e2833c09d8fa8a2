"""``kestrel run`` — resolve an app and serve it with pounce."""

import argparse
import sys

from kestrel.cli._resolve import resolve_app
from kestrel.errors import ConfigurationError


def run_app(args: argparse.Namespace) -> None:
    """Start serving ``args.app``.

    ``--host``, ``--port`` and ``--workers`` override the app's config.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run(host=args.host, port=args.port, workers=args.workers)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
