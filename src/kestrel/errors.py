"""Kestrel exception hierarchy.

Shared across Router, App, dispatcher, and middleware so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class KestrelError(Exception):
    """Base for all kestrel-specific errors."""


class ConfigurationError(KestrelError):
    """Raised when app setup is invalid.

    Typically raised while endpoints are registered, or caught during
    ``App._freeze()`` at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(KestrelError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or the auth gate. The dispatcher
    catches these and renders them as a JSON envelope whose ``error``
    field is ``detail``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request body could not be parsed."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status=400, detail=detail)


class AuthenticationFailed(HTTPError):  # noqa: N818
    """401 — the auth function refused the supplied credentials."""

    def __init__(self, detail: str = "Auth failed") -> None:
        super().__init__(status=401, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404 — no endpoint matched within the resolution depth."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413 — the request body exceeds ``max_content_length``."""

    def __init__(self, limit: int) -> None:
        super().__init__(status=413, detail=f"Request body exceeds {limit} bytes")


class RateLimitExceeded(HTTPError):  # noqa: N818
    """429 — the client used up its quota for the current window."""

    def __init__(self, detail: str = "Rate limit reached") -> None:
        super().__init__(status=429, detail=detail)
