"""``kestrel routes`` — list registered endpoints.

Resolves an import string to a kestrel App and prints every endpoint
with its calling convention and auth mode.
"""

import argparse
import sys

from kestrel.cli._resolve import resolve_app
from kestrel.routing.route import Route


def _auth_label(route: Route) -> str:
    auth = route.endpoint.auth
    if auth is None:
        return "global"
    if auth is False:
        return "none"
    return getattr(auth, "__name__", "custom")


def run_routes(args: argparse.Namespace) -> None:
    """Freeze ``args.app`` and print a PATH / KIND / AUTH / HANDLER table."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app._ensure_frozen()
    router = app._router
    if router is None or not len(router):
        print("No endpoints registered.")
        return

    rows = [
        (route.path, route.endpoint.kind.value, _auth_label(route), route.endpoint.name)
        for route in router.routes
    ]

    max_path = max(4, *(len(r[0]) for r in rows))
    max_auth = max(4, *(len(r[2]) for r in rows))

    fmt = f"{{:<{max_path}}}  {{:<5}}  {{:<{max_auth}}}  {{}}"
    print(fmt.format("PATH", "KIND", "AUTH", "HANDLER"))
    sep_len = max_path + max_auth + 11 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
