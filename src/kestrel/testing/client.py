"""Async test client for kestrel applications.

Uses the same Request and Response types as production.
No wrapper translation layer.
"""

import json as json_module
from typing import Any
from urllib.parse import urlencode

from kestrel.app import App
from kestrel.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for kestrel applications.

    Returns the same ``Response`` type used in production. Sends requests
    through the ASGI interface directly — no HTTP involved. The status
    text the app sent is available as ``response.reason``.

    Usage::

        async with TestClient(app) as client:
            response = await client.post("/users/get", json={"name": "a"})
            assert response.json() == {"ok": True, "name": "a"}
    """

    __slots__ = ("app", "client")

    def __init__(self, app: App, *, client: tuple[str, int] | None = ("127.0.0.1", 0)) -> None:
        self.app = app
        self.client = client

    async def __aenter__(self) -> "TestClient":
        self.app._ensure_frozen()
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        if query:
            sep = "&" if "?" in path else "?"
            path = f"{path}{sep}{urlencode(query)}"
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a POST request."""
        return await self.request("POST", path, headers=headers, body=body, json=json)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body, json=json)

    async def delete(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers, body=body, json=json)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
        client: tuple[str, int] | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        *client* overrides the client address for this request only.
        """
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part = path
            query_string = ""

        request_headers: dict[str, str] = {}
        request_body = body or b""
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            request_headers["content-type"] = "application/json"
        request_headers.update(headers or {})
        if request_body:
            request_headers.setdefault("content-length", str(len(request_body)))

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in request_headers.items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": client or self.client,
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        start: dict[str, Any] = {}
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                start.update(message)
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        content_type = "application/json"
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in start.get("headers", []):
            name_str = name_b.decode("latin-1")
            value_str = value_b.decode("latin-1")
            if name_str == "content-type":
                content_type = value_str
            elif name_str != "content-length":
                extra_headers.append((name_str, value_str))

        return Response(
            body=b"".join(body_parts),
            status=start.get("status", 200),
            content_type=content_type,
            headers=tuple(extra_headers),
            reason=start.get("reason"),
        )
