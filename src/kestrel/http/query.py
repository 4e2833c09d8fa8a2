"""Query string and url-encoded form parsing.

GET requests hand their query string to endpoints as the request payload;
url-encoded POST bodies go through the same flattening so endpoints see
one shape for both.
"""

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qs


def flatten_params(parsed: dict[str, list[str]]) -> dict[str, Any]:
    """Collapse ``parse_qs`` output: single values become plain strings.

    Repeated keys (``?tag=a&tag=b``) keep their list of values.
    """
    return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}


def parse_urlencoded(raw: bytes | str) -> dict[str, Any]:
    """Parse an ``application/x-www-form-urlencoded`` payload into a dict."""
    text = raw.decode("latin-1") if isinstance(raw, bytes) else raw
    return flatten_params(parse_qs(text, keep_blank_values=True))


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _data: dict[str, list[str]]
    _raw: bytes

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        object.__setattr__(self, "_raw", query_string)
        parsed = parse_qs(query_string.decode("latin-1"), keep_blank_values=True)
        object.__setattr__(self, "_data", parsed)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))

    def to_dict(self) -> dict[str, Any]:
        """The parameters as a plain dict, the way endpoints receive them."""
        return flatten_params(self._data)

    @property
    def raw(self) -> bytes:
        return self._raw
