"""Immutable HTTP request.

Frozen metadata with async body access. Middleware that needs to attach
data (the parsed payload, positional args) returns a new request via
``with_payload()`` / ``with_args()`` instead of mutating this one.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from kestrel._internal.asgi import Receive
from kestrel.errors import PayloadTooLarge
from kestrel.http.headers import Headers
from kestrel.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    The raw body is read asynchronously via ``.body()`` / ``.json()``;
    ``payload`` holds whatever the body parser (or the query string, for
    GET) produced.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Positional args stripped from the path by the resolver
    args: tuple[str, ...] = ()

    # Parsed body (dict for JSON objects and url-encoded forms)
    payload: Any = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for the raw body
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def ip(self) -> str | None:
        """The client address, or ``None`` when the server did not report one."""
        if self.client:
            return self.client[0]
        return None

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    # -- Derived requests --

    def with_payload(self, payload: Any) -> Request:
        """Return a copy of this request carrying *payload*."""
        return replace(self, payload=payload)

    def with_args(self, args: tuple[str, ...]) -> Request:
        """Return a copy of this request carrying positional *args*."""
        return replace(self, args=args)

    # -- Async body access --

    async def body(self, limit: int | None = None) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then the
        same bytes are returned on subsequent calls. Raises
        ``PayloadTooLarge`` as soon as more than *limit* bytes arrive.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if limit is not None and size > limit:
                raise PayloadTooLarge(limit)
            chunks.append(chunk)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        raw = await self.body()
        return json_module.loads(raw)

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )


@dataclass(frozen=True, slots=True)
class RequestData:
    """The reduced view of a request that endpoints receive by default.

    Set ``AppConfig(full_request=True)`` to receive the whole ``Request``
    instead.
    """

    method: str
    args: tuple[str, ...]
    body: Any
    ip: str | None

    @classmethod
    def from_request(cls, request: Request) -> RequestData:
        return cls(
            method=request.method,
            args=request.args,
            body=request.payload if request.payload is not None else {},
            ip=request.ip,
        )
