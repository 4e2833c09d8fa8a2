"""Error handling pipeline for kestrel requests.

Maps HTTPError exceptions and unexpected failures to JSON envelopes.
Handler bugs and framework bugs are logged at different severities so
they can be told apart: ``warn`` for an exception raised by an endpoint,
``error`` for one raised by middleware, routing or the auth gate.
"""

from kestrel.errors import HTTPError
from kestrel.http.request import Request
from kestrel.http.response import Response
from kestrel.logs import EventLog
from kestrel.server.envelope import Envelope, Overrides, ResponseWriter


def describe(exc: BaseException) -> str:
    """``ValueError: bad id`` — the error string clients see for a 500."""
    message = str(exc)
    if message:
        return f"{type(exc).__name__}: {message}"
    return type(exc).__name__


def render_http_error(exc: HTTPError, writer: ResponseWriter) -> Response:
    """Render an HTTPError as ``{"ok": false, "code": ..., "error": ...}``."""
    detail = exc.detail or f"Error {exc.status}"
    response = writer.write(Envelope.failure(exc.status, detail))
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_handler_fault(
    exc: Exception,
    request: Request,
    writer: ResponseWriter,
    events: EventLog,
) -> Response:
    """An endpoint raised: log at warn level, answer 500."""
    events.warn("Uncaught exception in handler", e=exc, method=request.method, path=request.path)
    return writer.write(Envelope.failure(500, describe(exc)), Overrides(e=exc))


def handle_dispatch_fault(
    exc: Exception,
    request: Request,
    writer: ResponseWriter,
    events: EventLog,
) -> Response:
    """Middleware, routing or auth raised: log at error level, answer 500."""
    events.error("Uncaught exception", e=exc, method=request.method, path=request.path)
    return writer.write(Envelope.failure(500, describe(exc)), Overrides(e=exc))
