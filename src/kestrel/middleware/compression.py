"""Response compression.

Gzips response bodies for clients that send ``Accept-Encoding: gzip``.
Small bodies and bodies that don't shrink are sent as-is.
"""

import gzip

from kestrel.http.request import Request
from kestrel.http.response import Response
from kestrel.middleware.protocol import Next

COMPRESSIBLE_TYPES = frozenset(
    {
        "application/json",
        "application/javascript",
        "application/xml",
        "text/html",
        "text/plain",
        "text/css",
        "text/xml",
    }
)


def _accepts_gzip(accept_encoding: str) -> bool:
    for part in accept_encoding.split(","):
        coding, _, params = part.partition(";")
        if coding.strip().lower() not in ("gzip", "*"):
            continue
        name, _, value = params.strip().partition("=")
        if name.strip().lower() == "q":
            # "gzip;q=0" means the client refuses gzip
            try:
                return float(value) > 0
            except ValueError:
                return False
        return True
    return False


class CompressionMiddleware:
    """Gzip compressible responses of at least ``min_size`` bytes.

    Sets ``Content-Encoding: gzip`` and adds ``Accept-Encoding`` to
    ``Vary`` so shared caches keep the two variants apart.
    """

    __slots__ = ("level", "min_size")

    def __init__(self, min_size: int = 1024, level: int = 6) -> None:
        self.min_size = min_size
        self.level = level

    async def __call__(self, request: Request, next: Next) -> Response:
        response = await next(request)

        if not _accepts_gzip(request.headers.get("accept-encoding", "")):
            return response
        if not self._should_compress(response):
            return response

        body = response.body_bytes
        compressed = gzip.compress(body, compresslevel=self.level)
        if len(compressed) >= len(body):
            return response

        vary = response.header("vary")
        response = response.without_headers(("vary",)).with_body(compressed)
        if vary and "accept-encoding" not in vary.lower():
            vary = f"{vary}, Accept-Encoding"
        return response.with_header("Content-Encoding", "gzip").with_header(
            "Vary", vary or "Accept-Encoding"
        )

    def _should_compress(self, response: Response) -> bool:
        if response.header("content-encoding") is not None:
            return False
        if len(response.body_bytes) < self.min_size:
            return False
        media_type = response.content_type.split(";", 1)[0].strip().lower()
        return media_type in COMPRESSIBLE_TYPES
