"""Built-in middleware: response header stripping."""

from kestrel.http.request import Request
from kestrel.http.response import Response
from kestrel.middleware.protocol import Next

# Headers that advertise the software stack behind the API
FRAMEWORK_HEADERS: tuple[str, ...] = ("X-Powered-By", "Server")


class StripHeadersMiddleware:
    """Remove headers from every response passing through.

    Usage::

        app.add_middleware(StripHeadersMiddleware(("X-Powered-By", "X-Debug-Token")))
    """

    __slots__ = ("names",)

    def __init__(self, names: tuple[str, ...] = FRAMEWORK_HEADERS) -> None:
        self.names = names

    async def __call__(self, request: Request, next: Next) -> Response:
        response = await next(request)
        return response.without_headers(self.names)
