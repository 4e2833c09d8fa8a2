"""Test utilities for kestrel applications::

    from kestrel.testing import TestClient
"""

from kestrel.testing.client import TestClient

__all__ = ["TestClient"]
