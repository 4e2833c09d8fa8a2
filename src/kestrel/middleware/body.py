"""Request body parsing.

Reads JSON and url-encoded bodies into ``Request.payload`` before routing.
Every other request gets an empty dict; endpoints that want the
raw bytes can enable ``full_request`` and call ``await request.body()``.
"""

import json

from kestrel.errors import BadRequest, PayloadTooLarge
from kestrel.http.query import parse_urlencoded
from kestrel.http.request import Request
from kestrel.http.response import Response
from kestrel.middleware.protocol import Next

_NO_BODY_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _media_type(content_type: str | None) -> str:
    """``application/json; charset=utf-8`` -> ``application/json``"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class BodyParserMiddleware:
    """Parse the request body into ``request.payload``.

    - ``application/json`` (and ``+json`` suffixes) -> decoded JSON value
    - ``application/x-www-form-urlencoded`` -> dict, repeated keys as lists

    Bodies over ``max_content_length`` are refused with 413, undecodable
    ones with 400.
    """

    __slots__ = ("max_content_length",)

    def __init__(self, max_content_length: int = 1024 * 1024) -> None:
        self.max_content_length = max_content_length

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.method in _NO_BODY_METHODS:
            return await next(request.with_payload({}))

        media_type = _media_type(request.content_type)
        is_json = media_type == "application/json" or media_type.endswith("+json")
        is_form = media_type == "application/x-www-form-urlencoded"
        if not (is_json or is_form):
            return await next(request.with_payload({}))

        declared = request.content_length
        if declared is not None and declared > self.max_content_length:
            raise PayloadTooLarge(self.max_content_length)

        raw = await request.body(limit=self.max_content_length)
        if not raw:
            return await next(request.with_payload({}))

        if is_json:
            try:
                payload = json.loads(raw)
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise BadRequest(f"Invalid JSON body: {exc}") from exc
            if payload is None:
                payload = {}
        else:
            payload = parse_urlencoded(raw)

        return await next(request.with_payload(payload))
