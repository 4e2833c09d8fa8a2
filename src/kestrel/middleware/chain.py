"""Ordered middleware chain.

Steps run in registration order, each wrapping everything registered
after it. Within one request the steps run strictly one after another;
separate requests run their own chains concurrently.
"""

from collections.abc import Awaitable, Callable

from kestrel.http.request import Request
from kestrel.http.response import Response
from kestrel.middleware.protocol import Middleware, Next


class MiddlewareChain:
    """Mutable during setup, frozen once the app starts serving.

    Usage::

        chain = MiddlewareChain()
        chain.add(rate_limit_gate)
        chain.add(parse_body)
        chain.freeze()
        response = await chain.run(request, dispatch)
    """

    __slots__ = ("_frozen", "_steps")

    def __init__(self, steps: tuple[Middleware, ...] = ()) -> None:
        self._steps: tuple[Middleware, ...] = steps
        self._frozen = False

    def add(self, step: Middleware) -> None:
        """Append *step*; it runs after every step added before it."""
        if self._frozen:
            msg = "Cannot add middleware after the chain is frozen."
            raise RuntimeError(msg)
        self._steps = (*self._steps, step)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def steps(self) -> tuple[Middleware, ...]:
        return self._steps

    def __len__(self) -> int:
        return len(self._steps)

    async def run(
        self,
        request: Request,
        endpoint: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Run *request* through every step, then through *endpoint*.

        A step that returns without calling ``next`` stops the chain:
        later steps and *endpoint* never see the request.
        """
        handler: Next = endpoint
        for step in reversed(self._steps):
            outer = handler

            async def make_next(req: Request, _step: Middleware = step, _next: Next = outer) -> Response:
                return await _step(req, _next)

            handler = make_next

        return await handler(request)
