"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    BodyParserMiddleware -- JSON / url-encoded bodies into request.payload
    CompressionMiddleware -- gzip for clients that accept it
    RateLimitMiddleware -- per-client quota, 429 when exceeded
    StripHeadersMiddleware -- drop framework-identifying response headers
"""

from kestrel.middleware.body import BodyParserMiddleware
from kestrel.middleware.builtin import StripHeadersMiddleware
from kestrel.middleware.chain import MiddlewareChain
from kestrel.middleware.compression import CompressionMiddleware
from kestrel.middleware.protocol import Middleware, Next
from kestrel.middleware.rate_limit import RateLimiter, RateLimitMiddleware

__all__ = [
    "BodyParserMiddleware",
    "CompressionMiddleware",
    "Middleware",
    "MiddlewareChain",
    "Next",
    "RateLimitMiddleware",
    "RateLimiter",
    "StripHeadersMiddleware",
]
