"""Kestrel application class.

Mutable during setup (endpoint registration, middleware, auth, listeners).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import threading
import warnings
from collections.abc import Callable, Mapping
from typing import Any

from kestrel._internal.asgi import Receive, Scope, Send
from kestrel._internal.types import AuthFunc, HandlerFunc, LogListener
from kestrel.config import AppConfig
from kestrel.logs import EventLog, configure_logging, shutdown_logging
from kestrel.middleware.body import BodyParserMiddleware
from kestrel.middleware.builtin import StripHeadersMiddleware
from kestrel.middleware.chain import MiddlewareChain
from kestrel.middleware.compression import CompressionMiddleware
from kestrel.middleware.protocol import Middleware
from kestrel.middleware.rate_limit import RateLimiter, RateLimitMiddleware
from kestrel.routing.route import AuthOverride, Endpoint, HandlerKind, Route
from kestrel.routing.router import Router, flatten_endpoints
from kestrel.security.auth import AuthEngine, credentials_auth
from kestrel.server.envelope import ResponseWriter
from kestrel.server.handler import Dispatcher

_POUNCE_LOG_LEVELS: dict[str | bool, str] = {
    "error": "error",
    "warn": "warning",
    "info": "info",
    True: "debug",
    False: "error",
}


class App:
    """The kestrel application.

    Mutable during setup (endpoints, middleware, auth, listeners).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    Usage::

        app = App(AppConfig(port=8080, max_depth=1))

        @app.route("users/get")
        def get_user(data):
            return {"ok": True, "name": data.body.get("name")}

        app.add_endpoints({"admin": {"stats": Endpoint.sync(stats)}})
        app.auth_by_credentials({"admin": "s3cret"})
        app.run()

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the app, even when several pounce workers
        call ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_dispatcher",
        "_events",
        "_freeze_lock",
        "_frozen",
        "_global_auth",
        "_middleware_list",
        "_pending_routes",
        "_rate_limiter",
        "_router",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[Route] = []
        self._middleware_list: list[Middleware] = []
        self._global_auth: AuthFunc | None = None
        self._events: EventLog = EventLog()
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Created eagerly so the limiter can be inspected or reconfigured
        # before the first request.
        self._rate_limiter: RateLimiter | None = (
            RateLimiter(self.config.rate_limit) if self.config.rate_limit is not None else None
        )

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._dispatcher: Dispatcher | None = None

    # -- Endpoint registration --

    def route(
        self,
        path: str,
        *,
        asynchronous: bool = False,
        auth: AuthOverride = None,
    ) -> Callable[[HandlerFunc], HandlerFunc]:
        """Register an endpoint via decorator.

        Args:
            path: Endpoint path, with or without the leading slash
                (``"users/get"`` and ``"/users/get"`` are the same route).
            asynchronous: ``True`` for ``async def`` endpoints.
            auth: ``None`` to use the global auth function, ``False`` to
                disable auth, or an auth function for this endpoint only.
        """
        kind = HandlerKind.ASYNC if asynchronous else HandlerKind.SYNC

        def decorator(func: HandlerFunc) -> HandlerFunc:
            self._check_not_frozen()
            normalized = "/" + path.strip("/")
            self._pending_routes.append(Route(normalized, Endpoint(func, kind, auth)))
            return func

        return decorator

    def add_endpoints(self, tree: Mapping[str, Any], *, auth: AuthOverride = None) -> None:
        """Register every ``Endpoint`` in a nested mapping.

        Keys are path segments::

            app.add_endpoints({
                "users": {
                    "get": Endpoint.sync(get_user),
                    "save": Endpoint.asynchronous(save_user),
                },
            })

        Passing *auth* (including ``False``) applies it to every endpoint
        in the tree, replacing their own overrides.
        """
        self._check_not_frozen()
        # Materialize first so a bad leaf rejects the whole tree
        routes = list(flatten_endpoints(tree, auth=auth, override_auth=auth is not None))
        self._pending_routes.extend(routes)

    def add_package(self, name: str, package: Mapping[str, Any], *, auth: AuthOverride = None) -> None:
        """Register *package* under the single path segment *name*.

        Deprecated: use ``add_endpoints({name: package})``.
        """
        warnings.warn(
            "App.add_package() is deprecated; use App.add_endpoints({name: package})",
            DeprecationWarning,
            stacklevel=2,
        )
        self.add_endpoints({name: package}, auth=auth)

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline.

        User middleware runs after the built-in steps (compression, rate
        limiting, body parsing, header stripping), in registration order.
        """
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Auth --

    def auth(self, func: AuthFunc) -> AuthFunc:
        """Set the global auth function. Usable as a decorator.

        Endpoints without their own override are checked with it::

            @app.auth
            async def check(user, password):
                return await directory.verify(user, password)
        """
        self._check_not_frozen()
        self._global_auth = func
        return func

    def auth_by_credentials(self, credentials: Mapping[str, str | list[str]]) -> None:
        """Authenticate globally against ``username -> password(s)``."""
        self.auth(credentials_auth(credentials))

    # -- Log events --

    def on(self, level: str, listener: LogListener) -> None:
        """Listen for ``"error"``, ``"warn"`` or ``"info"`` events."""
        self._events.on(level, listener)

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def rate_limiter(self) -> RateLimiter | None:
        return self._rate_limiter

    # -- Serving --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        workers: int | None = None,
    ) -> None:
        """Start serving with pounce.

        Args:
            host: Override bind host.
            port: Override bind port.
            workers: Override worker count.
        """
        from kestrel.server.serve import run_server

        self._ensure_frozen()
        _host = host or self.config.host
        _port = port or self.config.port
        self._events.info(f"Listening to port {_port}", host=_host)
        run_server(
            self,
            _host,
            _port,
            workers=workers if workers is not None else self.config.workers,
            ssl_certfile=self.config.ssl_certfile,
            ssl_keyfile=self.config.ssl_keyfile,
            log_level=_POUNCE_LOG_LEVELS.get(self.config.console_log, "info"),
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the dispatcher.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._dispatcher is not None

        await self._dispatcher.handle(scope, receive, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request) and flushes
        the console log at shutdown.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                shutdown_logging()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        configure_logging(self.config.console_log)

        # 1. Compile route table (last registration for a path wins)
        router = Router(max_depth=self.config.max_depth)
        for route in self._pending_routes:
            router.add(route)
        router.compile()
        self._router = router

        # 2. Assemble the middleware chain, built-ins first
        chain = MiddlewareChain()
        if self.config.compress:
            chain.add(CompressionMiddleware())
        if self._rate_limiter is not None:
            chain.add(RateLimitMiddleware(self._rate_limiter))
        chain.add(BodyParserMiddleware(self.config.max_content_length))
        chain.add(StripHeadersMiddleware())
        for middleware in self._middleware_list:
            chain.add(middleware)
        chain.freeze()

        # 3. Wire the dispatcher
        self._dispatcher = Dispatcher(
            router=router,
            chain=chain,
            auth=AuthEngine(self._global_auth),
            writer=ResponseWriter(
                self._events,
                pretty=self.config.pretty_json,
                debug=self.config.debug,
            ),
            events=self._events,
            config=self.config,
        )

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register endpoints, middleware, and auth before calling app.run()."
            )
            raise RuntimeError(msg)
