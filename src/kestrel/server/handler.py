"""ASGI dispatcher — one request through the full pipeline.

The only component that touches raw ASGI directly. Per request, in order:

1. build a ``Request`` from the scope
2. run the middleware chain (rate limit, body parsing, user middleware)
3. resolve the path to an endpoint (404 on miss)
4. decide auth (401 on refusal)
5. yield once to the event loop, then call the endpoint
6. write the result as a JSON envelope

Every failure becomes a response for this request only. Exceptions from
the endpoint are caught around the endpoint call; anything else is
caught around the whole pipeline.
"""

import inspect
from typing import Any

import anyio

from kestrel._internal.asgi import Receive, Scope, Send
from kestrel.config import AppConfig
from kestrel.errors import AuthenticationFailed, HTTPError
from kestrel.http.request import Request, RequestData
from kestrel.http.response import Response
from kestrel.logs import EventLog
from kestrel.middleware.chain import MiddlewareChain
from kestrel.routing.route import Endpoint, HandlerKind
from kestrel.routing.router import Router
from kestrel.security.auth import AuthEngine, decode_auth_details
from kestrel.server.envelope import Envelope, Overrides, Reply, ResponseWriter
from kestrel.server.errors import handle_dispatch_fault, handle_handler_fault, render_http_error
from kestrel.server.sender import send_response


class Dispatcher:
    """Immutable request pipeline assembled by ``App`` at freeze time."""

    __slots__ = ("auth", "chain", "config", "events", "router", "writer")

    def __init__(
        self,
        *,
        router: Router,
        chain: MiddlewareChain,
        auth: AuthEngine,
        writer: ResponseWriter,
        events: EventLog,
        config: AppConfig,
    ) -> None:
        self.router = router
        self.chain = chain
        self.auth = auth
        self.writer = writer
        self.events = events
        self.config = config

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process a single HTTP request and send the response."""
        if scope["type"] != "http":
            return
        request = Request.from_asgi(scope, receive)
        response = await self.dispatch(request)
        await send_response(response, send)

    async def dispatch(self, request: Request) -> Response:
        """Run *request* through middleware and routing; never raises."""
        try:
            return await self.chain.run(request, self._route)
        except HTTPError as exc:
            return render_http_error(exc, self.writer)
        except Exception as exc:
            return handle_dispatch_fault(exc, request, self.writer, self.events)

    async def _route(self, request: Request) -> Response:
        """Innermost step of the chain: resolve, authorize, invoke."""
        if request.method == "GET":
            request = request.with_payload(request.query.to_dict())

        try:
            match = self.router.resolve(request.path)
            request = request.with_args(match.args)

            details = decode_auth_details(request.headers.get("authorization"))
            if not await self.auth.decide(match.endpoint.auth, details):
                raise AuthenticationFailed()
        except HTTPError as exc:
            return render_http_error(exc, self.writer)

        # Let other requests' pending work run before a sync endpoint
        # holds the loop.
        await anyio.sleep(0)
        return await self._invoke(match.endpoint, request)

    async def _invoke(self, endpoint: Endpoint, request: Request) -> Response:
        data: Any = request if self.config.full_request else RequestData.from_request(request)
        try:
            with anyio.move_on_after(self.config.handler_timeout) as timeout_scope:
                result = await _call(endpoint, data)
            if timeout_scope.cancelled_caught:
                self.events.warn(
                    "Handler timed out",
                    endpoint=endpoint.name,
                    path=request.path,
                    timeout=self.config.handler_timeout,
                )
                return self.writer.write(Envelope.failure(504, "Handler timed out"))

            if isinstance(result, Reply):
                return self.writer.write(result.data, Overrides(code=result.code, status=result.status))
            return self.writer.write(result)
        except Exception as exc:
            return handle_handler_fault(exc, request, self.writer, self.events)


async def _call(endpoint: Endpoint, data: Any) -> Any:
    """Call *endpoint* by its declared kind."""
    if endpoint.kind is HandlerKind.SYNC:
        return endpoint.func(data)

    result = endpoint.func(data)
    if not inspect.isawaitable(result):
        msg = (
            f"Async endpoint {endpoint.name} returned {type(result).__name__}, "
            "expected an awaitable"
        )
        raise TypeError(msg)
    return await result
