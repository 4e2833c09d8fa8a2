"""ASGI response sending — translates kestrel Responses to ASGI messages."""

from kestrel._internal.asgi import Send
from kestrel.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a kestrel Response into ASGI send() calls.

    The status text travels under the ``reason`` key of the start message.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    start: dict[str, object] = {
        "type": "http.response.start",
        "status": response.status,
        "headers": raw_headers,
    }
    if response.reason:
        start["reason"] = response.reason
    await send(start)
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
