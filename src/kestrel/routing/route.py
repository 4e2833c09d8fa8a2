"""Endpoint, Route and RouteMatch frozen dataclasses."""

import enum
import inspect
from dataclasses import dataclass, replace
from typing import Literal, TypeAlias

from kestrel._internal.types import AuthFunc, HandlerFunc
from kestrel.errors import ConfigurationError

# Per-endpoint auth: None defers to the global auth function, False disables
# auth for the endpoint, a callable decides on its own.
AuthOverride: TypeAlias = AuthFunc | Literal[False] | None


class HandlerKind(enum.Enum):
    """How the dispatcher calls an endpoint function."""

    SYNC = "sync"
    ASYNC = "async"


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A handler function tagged with its calling convention.

    The calling convention is stated at registration, never guessed::

        Endpoint.sync(get_user)
        Endpoint.asynchronous(save_user, auth=False)
    """

    func: HandlerFunc
    kind: HandlerKind
    auth: AuthOverride = None

    def __post_init__(self) -> None:
        if self.auth is not None and self.auth is not False and not callable(self.auth):
            msg = f"auth must be None, False or a callable, got {self.auth!r}"
            raise ConfigurationError(msg)
        if self.kind is HandlerKind.SYNC and inspect.iscoroutinefunction(self.func):
            name = getattr(self.func, "__name__", repr(self.func))
            msg = (
                f"{name} is a coroutine function but was registered as sync. "
                "Use Endpoint.asynchronous() for async def handlers."
            )
            raise ConfigurationError(msg)

    @classmethod
    def sync(cls, func: HandlerFunc, *, auth: AuthOverride = None) -> "Endpoint":
        """An endpoint whose function returns its result directly."""
        return cls(func, HandlerKind.SYNC, auth)

    @classmethod
    def asynchronous(cls, func: HandlerFunc, *, auth: AuthOverride = None) -> "Endpoint":
        """An endpoint whose function returns an awaitable result."""
        return cls(func, HandlerKind.ASYNC, auth)

    def with_auth(self, auth: AuthOverride) -> "Endpoint":
        return replace(self, auth=auth)

    @property
    def name(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))


@dataclass(frozen=True, slots=True)
class Route:
    """A normalized path bound to an endpoint.

    Created during app setup, compiled into the router at freeze time.
    """

    path: str
    endpoint: Endpoint


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful resolution.

    ``args`` holds the trailing path segments that were stripped to reach
    ``route``, in path order.
    """

    route: Route
    args: tuple[str, ...] = ()

    @property
    def endpoint(self) -> Endpoint:
        return self.route.endpoint
