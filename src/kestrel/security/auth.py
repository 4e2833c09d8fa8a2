"""HTTP Basic authentication — credential decoding and the auth decision.

The decision combines a per-endpoint override with an optional global
auth function::

    engine = AuthEngine(global_auth=credentials_auth({"admin": "s3cret"}))
    allowed = await engine.decide(endpoint.auth, decode_auth_details(header))

Auth functions take ``(user, password)`` and return a bool, either
directly or as an awaitable, so they can verify credentials over the
network without blocking the event loop.
"""

import base64
import binascii
import logging
import secrets
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from kestrel._internal.invoke import invoke
from kestrel._internal.types import AuthFunc
from kestrel.routing.route import AuthOverride

_log = logging.getLogger("kestrel.security")


@dataclass(frozen=True, slots=True)
class AuthDetails:
    """Credentials supplied with a request. Both fields are absent without a header."""

    user: str | None = None
    password: str | None = None


_NO_CREDENTIALS = AuthDetails()


def decode_auth_details(header: str | None) -> AuthDetails:
    """Decode an ``Authorization: Basic base64(user:pass)`` header.

    Missing, non-Basic, or malformed headers yield empty credentials
    rather than an error; the auth function decides what that means.
    """
    if not header:
        return _NO_CREDENTIALS
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "basic" or not token:
        return _NO_CREDENTIALS
    try:
        decoded = base64.b64decode(token.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        _log.debug("Ignoring malformed Basic credentials")
        return _NO_CREDENTIALS
    user, sep, password = decoded.partition(":")
    if not sep:
        return AuthDetails(user=user)
    return AuthDetails(user=user, password=password)


class AuthEngine:
    """Decides whether a request may reach its endpoint.

    Precedence:

    1. The endpoint's own auth function.
    2. ``False`` on the endpoint — always allowed.
    3. The global auth function.
    4. Allowed (nothing configured anywhere).
    """

    __slots__ = ("global_auth",)

    def __init__(self, global_auth: AuthFunc | None = None) -> None:
        self.global_auth = global_auth

    async def decide(self, override: AuthOverride, details: AuthDetails) -> bool:
        if override is False:
            return True
        if override is not None:
            return bool(await invoke(override, details.user, details.password))
        if self.global_auth is not None:
            return bool(await invoke(self.global_auth, details.user, details.password))
        return True


def _matches(supplied: str, candidates: str | Sequence[str]) -> bool:
    if isinstance(candidates, str):
        candidates = (candidates,)
    supplied_bytes = supplied.encode("utf-8")
    # Compare against every candidate so timing doesn't reveal which matched
    matched = False
    for candidate in candidates:
        if secrets.compare_digest(supplied_bytes, candidate.encode("utf-8")):
            matched = True
    return matched


def credentials_auth(credentials: Mapping[str, str | Sequence[str]]) -> AuthFunc:
    """Build an auth function from ``username -> password(s)``.

    A user may have several valid passwords (e.g. during rotation)::

        app.auth(credentials_auth({"alice": "pw1", "ci": ["old", "new"]}))
    """
    table = dict(credentials)

    def check(user: str | None, password: str | None) -> bool:
        if user is None or password is None:
            return False
        candidates = table.get(user)
        if candidates is None:
            return False
        return _matches(password, candidates)

    return check
