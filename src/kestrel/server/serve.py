"""Serve a kestrel App with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``), but
kestrel has a live ``App`` object. We use ``pounce.Server`` directly
with the ASGI callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kestrel.errors import ConfigurationError

if TYPE_CHECKING:
    from kestrel.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    workers: int = 1,
    ssl_certfile: str | None = None,
    ssl_keyfile: str | None = None,
    log_level: str = "info",
) -> None:
    """Start a pounce server for *app* and block until it stops.

    Args:
        app: ASGI callable (kestrel App instance).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count (0 = auto-detect from CPU count).
        ssl_certfile: Path to TLS certificate file (enables HTTPS).
        ssl_keyfile: Path to TLS private key file.
        log_level: pounce's own log level.
    """
    if (ssl_certfile is None) != (ssl_keyfile is None):
        msg = "TLS needs both ssl_certfile and ssl_keyfile."
        raise ConfigurationError(msg)

    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = (
            "Serving requires the 'pounce' server. "
            "Install it with: pip install kestrel[server]"
        )
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
    )
    server = Server(config, app)
    server.run()
