"""Tests for kestrel.http.headers and kestrel.http.query."""

from kestrel.http.headers import Headers
from kestrel.http.query import QueryParams, flatten_params, parse_urlencoded


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = Headers(((b"content-type", b"application/json"),))
        assert h["Content-Type"] == "application/json"
        assert "CONTENT-TYPE" in h

    def test_multiple_values(self) -> None:
        h = Headers(((b"accept", b"a"), (b"accept", b"b")))
        assert h["accept"] == "a"
        assert h.get_list("accept") == ["a", "b"]
        assert len(h) == 1

    def test_get_default(self) -> None:
        assert Headers().get("x", "d") == "d"

    def test_from_mapping(self) -> None:
        h = Headers.from_mapping({"Authorization": "Basic abc"})
        assert h.raw == ((b"authorization", b"Basic abc"),)


class TestQuery:
    def test_flatten_single_values(self) -> None:
        assert flatten_params({"a": ["1"], "b": ["2", "3"]}) == {"a": "1", "b": ["2", "3"]}

    def test_parse_urlencoded_keeps_blanks(self) -> None:
        assert parse_urlencoded(b"a=&b=x%20y") == {"a": "", "b": "x y"}

    def test_query_params(self) -> None:
        q = QueryParams(b"name=a&tag=x&tag=y")
        assert q["tag"] == "x"
        assert q.get_list("tag") == ["x", "y"]
        assert q.get("missing") is None
        assert q.to_dict() == {"name": "a", "tag": ["x", "y"]}
        assert q.raw == b"name=a&tag=x&tag=y"

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.to_dict() == {}
