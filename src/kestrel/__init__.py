"""Kestrel — a small JSON API server for tree-shaped endpoint registries.

Endpoints are plain functions registered under slash-separated paths.
Every request gets a JSON envelope back, whatever happens.

Basic usage::

    from kestrel import App, AppConfig, Endpoint

    app = App(AppConfig(port=8080))

    @app.route("users/get")
    def get_user(data):
        return {"ok": True, "name": data.body.get("name")}

    app.add_endpoints({"users": {"save": Endpoint.asynchronous(save_user)}})
    app.run()

Serving needs the pounce server (``pip install kestrel[server]``); the
ASGI app itself and ``kestrel.testing.TestClient`` do not.
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "AuthenticationFailed",
    "BadRequest",
    "ConfigurationError",
    "Endpoint",
    "HTTPError",
    "HandlerKind",
    "KestrelError",
    "Middleware",
    "Next",
    "NotFound",
    "PayloadTooLarge",
    "RateLimitConfig",
    "RateLimitExceeded",
    "Reply",
    "Request",
    "RequestData",
    "Response",
    "credentials_auth",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import kestrel`` fast while providing a clean top-level API.
    """
    if name == "App":
        from kestrel.app import App

        return App

    if name in ("AppConfig", "RateLimitConfig"):
        from kestrel import config as _config

        return getattr(_config, name)

    if name in ("Endpoint", "HandlerKind"):
        from kestrel.routing import route as _route

        return getattr(_route, name)

    if name == "Reply":
        from kestrel.server.envelope import Reply

        return Reply

    if name in ("Request", "RequestData"):
        from kestrel.http import request as _req

        return getattr(_req, name)

    if name == "Response":
        from kestrel.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from kestrel.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "credentials_auth":
        from kestrel.security.auth import credentials_auth

        return credentials_auth

    if name in (
        "AuthenticationFailed",
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "KestrelError",
        "NotFound",
        "PayloadTooLarge",
        "RateLimitExceeded",
    ):
        from kestrel import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
