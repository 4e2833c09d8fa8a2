"""Compiled route table with bounded-depth fallback resolution.

Routes are registered during setup and compiled into an immutable lookup
structure when the app freezes. A request path that has no exact match
may still resolve to an ancestor route: up to ``max_depth`` trailing
segments are stripped and handed to the endpoint as positional args.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from kestrel.errors import ConfigurationError, NotFound
from kestrel.routing.route import AuthOverride, Endpoint, Route, RouteMatch


def flatten_endpoints(
    tree: Mapping[str, Any],
    *,
    auth: AuthOverride = None,
    override_auth: bool = False,
) -> Iterator[Route]:
    """Walk a nested registration mapping and yield one Route per endpoint.

    Keys are path segments; ``Endpoint`` leaves become routes keyed by the
    ``/``-joined segments leading to them::

        {"users": {"get": Endpoint.sync(get_user)}}  ->  Route("/users/get", ...)

    When *override_auth* is true every endpoint in the tree is given
    *auth*, replacing its own override.
    """
    stack: list[str] = []

    def walk(node: Mapping[str, Any]) -> Iterator[Route]:
        for key, value in node.items():
            stack.append(str(key))
            if isinstance(value, Endpoint):
                endpoint = value.with_auth(auth) if override_auth else value
                yield Route(path="/" + "/".join(stack), endpoint=endpoint)
            elif isinstance(value, Mapping):
                yield from walk(value)
            elif callable(value):
                path = "/" + "/".join(stack)
                msg = (
                    f"Endpoint {path!r} is a bare callable. Wrap it with "
                    "Endpoint.sync() or Endpoint.asynchronous()."
                )
                raise ConfigurationError(msg)
            else:
                path = "/" + "/".join(stack)
                msg = f"Endpoint {path!r} must be an Endpoint or a mapping, got {type(value).__name__}"
                raise ConfigurationError(msg)
            stack.pop()

    return walk(tree)


def normalize_path(path: str) -> str:
    """Strip a single trailing slash (``/users/`` -> ``/users``)."""
    if path.endswith("/"):
        return path[:-1]
    return path


class Router:
    """Flat route table with bounded-depth fallback.

    Usage::

        router = Router(max_depth=1)
        router.add(Route("/users/get", Endpoint.sync(get_user)))
        router.compile()
        match = router.resolve("/users/get/42")   # args == ("42",)

    A miss costs up to ``max_depth + 1`` dict lookups, so keep
    ``max_depth`` small.
    """

    __slots__ = ("_compiled", "_max_depth", "_routes")

    def __init__(self, max_depth: int = 1) -> None:
        if max_depth < 0:
            msg = f"max_depth must be >= 0, got {max_depth}"
            raise ConfigurationError(msg)
        self._routes: dict[str, Route] | MappingProxyType[str, Route] = {}
        self._max_depth = max_depth
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. The last route added for a path wins."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._routes[normalize_path(route.path)] = route  # type: ignore[index]

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._routes = MappingProxyType(dict(self._routes))
        self._compiled = True

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def routes(self) -> list[Route]:
        """All registered routes, sorted by path."""
        return sorted(self._routes.values(), key=lambda route: route.path)

    def __len__(self) -> int:
        return len(self._routes)

    def resolve(self, path: str) -> RouteMatch:
        """Find the endpoint for *path*, most specific first.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if neither the path nor any ancestor within
        ``max_depth`` segments is registered.
        """
        endpoint_path = normalize_path(path)
        candidate = endpoint_path
        args: list[str] = []
        depth = 0

        while True:
            route = self._routes.get(candidate)
            if route is not None:
                return RouteMatch(route=route, args=tuple(args))

            depth += 1
            if depth > self._max_depth:
                break
            cut = candidate.rfind("/")
            if cut <= 0:
                # Only one segment left; the root never holds an endpoint
                break
            args.insert(0, candidate[cut + 1 :])
            candidate = candidate[:cut]

        raise NotFound(f"No endpoint {endpoint_path}")
