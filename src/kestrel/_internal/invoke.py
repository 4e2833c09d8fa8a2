"""Invoke helpers — call sync or async callables uniformly.

Auth functions can be ``def`` or ``async def``. Any code that calls a
user-provided auth function must handle both cases. This module keeps
the awaitable check in exactly one place.

Usage::

    from kestrel._internal.invoke import invoke

    allowed = await invoke(check, user, password)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable.

    Works with both sync and async callables::

        def check(user, password):
            return user == "admin"

        async def check(user, password):
            return await directory.verify(user, password)
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
