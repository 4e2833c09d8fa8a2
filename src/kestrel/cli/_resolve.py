"""Target lookup for ``kestrel run`` and ``kestrel routes``.

A target names something importable as ``package.module:path.to.obj``.
What it names may be an ``App``, a zero-argument factory returning one,
or a bare endpoint tree (a mapping of path segments to ``Endpoint``
objects), which is served by a default ``App``.
"""

import importlib
from collections.abc import Mapping
from typing import Any

from kestrel.app import App

DEFAULT_ATTRIBUTE = "app"


def _walk(obj: Any, dotted: str, target: str) -> Any:
    """Follow ``a.b.c`` from *obj*, naming the missing step on failure."""
    for depth, name in enumerate(dotted.split(".")):
        try:
            obj = getattr(obj, name)
        except AttributeError:
            seen = ".".join(dotted.split(".")[:depth]) or "<module>"
            msg = f"{target!r}: {seen} has no attribute {name!r}"
            raise AttributeError(msg) from None
    return obj


def _as_app(obj: Any, target: str) -> App:
    if isinstance(obj, App):
        return obj
    if isinstance(obj, Mapping):
        app = App()
        app.add_endpoints(obj)
        return app
    msg = f"{target!r} names a {type(obj).__name__}, not a kestrel.App or endpoint tree"
    raise TypeError(msg)


def resolve_app(target: str) -> App:
    """Import *target* and return the App it names.

    ``"svc.api"`` is short for ``"svc.api:app"``. Callables other than an
    App are called once with no arguments and must return an App or an
    endpoint tree.

    Raises:
        ModuleNotFoundError: The module part cannot be imported.
        AttributeError: A step of the attribute path is missing.
        TypeError: The target (or what its factory returned) is not
            servable, or the factory itself raised.
    """
    module_name, _, dotted = target.partition(":")
    obj = _walk(importlib.import_module(module_name), dotted or DEFAULT_ATTRIBUTE, target)

    if isinstance(obj, App) or isinstance(obj, Mapping) or not callable(obj):
        return _as_app(obj, target)

    try:
        built = obj()
    except Exception as exc:
        msg = f"App factory {target!r} failed: {type(exc).__name__}: {exc}"
        raise TypeError(msg) from exc
    if not (isinstance(built, App) or isinstance(built, Mapping)):
        msg = f"App factory {target!r} returned {type(built).__name__}, not a kestrel.App"
        raise TypeError(msg)
    return _as_app(built, target)
