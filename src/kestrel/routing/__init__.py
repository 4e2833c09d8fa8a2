"""Routing — flat route table with bounded-depth fallback.

Endpoints are registered during setup as a nested mapping, flattened into
``/``-joined paths, and compiled into an immutable table when the app
freezes.
"""
