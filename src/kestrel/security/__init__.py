"""Security primitives.

- ``AuthEngine`` — per-endpoint / global auth decision
- ``credentials_auth`` — auth function backed by a username -> password map
- ``decode_auth_details`` — HTTP Basic credential decoding
"""

from kestrel.security.auth import (
    AuthDetails,
    AuthEngine,
    credentials_auth,
    decode_auth_details,
)

__all__ = [
    "AuthDetails",
    "AuthEngine",
    "credentials_auth",
    "decode_auth_details",
]
