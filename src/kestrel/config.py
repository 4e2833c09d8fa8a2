"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Per-client request quota.

    A client may make ``requests`` requests in each window of
    ``window_seconds``. The window starts at the client's first request.
    """

    requests: int = 100
    window_seconds: float = 60.0


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, max_depth=2, pretty_json=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    workers: int = 1

    # TLS (handed to the server by path)
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None

    # Routing
    max_depth: int = 1  # Trailing segments that may become positional args

    # Responses
    pretty_json: bool = False
    compress: bool = False
    debug: bool = False  # Attach exception detail to 500 envelopes

    # Handlers
    full_request: bool = False  # Pass the whole Request instead of RequestData
    handler_timeout: float | None = None

    # Limits
    rate_limit: RateLimitConfig | None = None
    max_content_length: int = 1024 * 1024  # 1 MB

    # Logging: "error", "warn", "info", True (everything) or False (silent)
    console_log: str | bool = "info"
