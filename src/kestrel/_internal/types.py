"""Shared type aliases used across kestrel modules."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

# Endpoint function: receives RequestData (or the full Request)
HandlerFunc: TypeAlias = Callable[[Any], Any]

# Auth function: (user, password) -> bool, optionally awaitable
AuthFunc: TypeAlias = Callable[[str | None, str | None], bool | Awaitable[bool]]

# Log listener: (message, data) -> None
LogListener: TypeAlias = Callable[[str, dict[str, Any]], None]
