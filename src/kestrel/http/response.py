"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    ``reason`` is the status line text. ASGI servers derive their own
    reason phrase from the status code; kestrel passes ``reason`` along in
    the ``http.response.start`` message for servers that honour it.
    """

    body: str | bytes = b""
    status: int = 200
    content_type: str = "application/json"
    headers: tuple[tuple[str, str], ...] = ()
    reason: str | None = None

    # -- Chainable transformations --

    def with_status(self, status: int, reason: str | None = None) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status, reason=reason if reason is not None else self.reason)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def without_headers(self, names: Iterable[str]) -> Response:
        """Return a new Response with every header in *names* removed."""
        drop = {name.lower() for name in names}
        kept = tuple((n, v) for n, v in self.headers if n.lower() not in drop)
        if len(kept) == len(self.headers):
            return self
        return replace(self, headers=kept)

    def with_body(self, body: str | bytes) -> Response:
        return replace(self, body=body)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        name_lower = name.lower()
        if name_lower == "content-type":
            return self.content_type
        for header_name, value in self.headers:
            if header_name.lower() == name_lower:
                return value
        return default

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json_module.loads(self.body_bytes)
