"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.

Calling ``next`` hands the request to the rest of the chain (and finally
to routing). Returning a response without calling ``next`` — or raising
an ``HTTPError`` — ends the request there.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from kestrel.http.request import Request
from kestrel.http.response import Response

# The next step in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for kestrel middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class Maintenance:
            async def __call__(self, request: Request, next: Next) -> Response:
                raise HTTPError(503, "Down for maintenance")
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
