"""JSON response envelopes.

Endpoints return plain JSON-able data, conventionally a dict carrying
``ok`` and ``code``::

    {"ok": True, "name": "alice"}
    {"ok": False, "code": 409, "error": "Name taken"}

The HTTP status and status text are read from that dict, and a ``Reply``
can override both::

    return Reply({"ok": True, "id": 7}, code=201, status="Created")

Precedence: status code = override, then ``data["code"]``, then 200.
Status text = override, then ``data["error"]``, then ``data["msg"]``,
then ``"success"``.
"""

import json
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kestrel.http.response import Response
from kestrel.logs import EventLog

SECURITY_HEADERS: tuple[tuple[str, str], ...] = (
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "DENY"),
)

AUTH_HINT = ("WWW-Authenticate", "Basic user:pass")


@dataclass(frozen=True, slots=True)
class Reply:
    """Endpoint result with explicit status overrides."""

    data: Any
    code: int | None = None
    status: str | None = None


@dataclass(frozen=True, slots=True)
class Overrides:
    """What the dispatcher knows about a response beyond its data."""

    code: int | None = None
    status: str | None = None
    e: BaseException | None = None


_NO_OVERRIDES = Overrides()


@dataclass(frozen=True, slots=True)
class Envelope:
    """Typed view over an endpoint's payload.

    Non-mapping payloads (lists, strings, ``None``) are valid envelopes
    with no ``code``, ``error`` or ``msg``.
    """

    payload: Any

    @classmethod
    def failure(cls, code: int, error: str) -> "Envelope":
        return cls({"ok": False, "code": code, "error": error})

    def _field(self, name: str) -> Any:
        if isinstance(self.payload, Mapping):
            return self.payload.get(name)
        return None

    @property
    def code(self) -> int | None:
        value = self._field("code")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return None

    @property
    def error(self) -> str | None:
        value = self._field("error")
        return str(value) if value else None

    @property
    def msg(self) -> str | None:
        value = self._field("msg")
        return str(value) if value else None

    @property
    def has_detail(self) -> bool:
        return isinstance(self.payload, Mapping) and "e" in self.payload

    def status_code(self, overrides: Overrides = _NO_OVERRIDES) -> int:
        return overrides.code or self.code or 200

    def status_text(self, overrides: Overrides = _NO_OVERRIDES) -> str:
        return overrides.status or self.error or self.msg or "success"


def exception_detail(exc: BaseException) -> str:
    """Formatted traceback for *exc*, or its string form without one."""
    if exc.__traceback__ is None:
        return f"{type(exc).__name__}: {exc}"
    return "".join(traceback.format_exception(exc))


class ResponseWriter:
    """Serialize envelopes into JSON responses with the standard headers."""

    __slots__ = ("debug", "events", "pretty")

    def __init__(self, events: EventLog, *, pretty: bool = False, debug: bool = False) -> None:
        self.events = events
        self.pretty = pretty
        self.debug = debug

    def write(self, data: Any, overrides: Overrides | None = None) -> Response:
        """Build the response for *data*.

        In debug mode an exception passed as ``overrides.e`` is attached
        to the payload as ``e`` unless the payload already has one.
        """
        overrides = overrides or _NO_OVERRIDES
        envelope = data if isinstance(data, Envelope) else Envelope(data)
        code = envelope.status_code(overrides)
        reason = envelope.status_text(overrides)

        payload = envelope.payload
        if self.debug and overrides.e is not None and isinstance(payload, Mapping) and not envelope.has_detail:
            payload = {**payload, "e": exception_detail(overrides.e)}

        if self.pretty:
            body = json.dumps(payload, indent=2, ensure_ascii=False)
        else:
            body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

        headers = SECURITY_HEADERS
        if code == 401:
            headers = (*headers, AUTH_HINT)

        self.events.info(f"Making {code} response", payload=payload)

        return Response(
            body=body.encode("utf-8"),
            status=code,
            content_type="application/json",
            headers=headers,
            reason=reason,
        )
