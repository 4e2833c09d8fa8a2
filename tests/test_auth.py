"""Tests for kestrel.security.auth — Basic credentials and the auth decision."""

import base64

import pytest

from kestrel.security.auth import AuthDetails, AuthEngine, credentials_auth, decode_auth_details


def _basic(user: str, password: str) -> str:
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return f"Basic {token}"


class TestDecodeAuthDetails:
    def test_valid_header(self) -> None:
        assert decode_auth_details(_basic("alice", "pw")) == AuthDetails("alice", "pw")

    def test_password_may_contain_colon(self) -> None:
        details = decode_auth_details(_basic("alice", "a:b"))
        assert details.password == "a:b"

    def test_missing_header(self) -> None:
        assert decode_auth_details(None) == AuthDetails()

    def test_other_scheme(self) -> None:
        assert decode_auth_details("Bearer abc") == AuthDetails()

    def test_malformed_base64(self) -> None:
        assert decode_auth_details("Basic !!!not-base64") == AuthDetails()

    def test_no_colon(self) -> None:
        token = base64.b64encode(b"alice").decode()
        assert decode_auth_details(f"Basic {token}") == AuthDetails(user="alice")

    def test_scheme_case_insensitive(self) -> None:
        token = base64.b64encode(b"a:b").decode()
        assert decode_auth_details(f"basic {token}") == AuthDetails("a", "b")


class TestAuthEngine:
    @pytest.mark.anyio
    async def test_no_auth_anywhere_allows(self) -> None:
        assert await AuthEngine().decide(None, AuthDetails()) is True

    @pytest.mark.anyio
    async def test_disabled_endpoint_skips_global(self) -> None:
        def deny(user, password):
            return False

        assert await AuthEngine(deny).decide(False, AuthDetails()) is True

    @pytest.mark.anyio
    async def test_global_auth_applies(self) -> None:
        def only_alice(user, password):
            return user == "alice"

        engine = AuthEngine(only_alice)
        assert await engine.decide(None, AuthDetails("alice", "x")) is True
        assert await engine.decide(None, AuthDetails("bob", "x")) is False

    @pytest.mark.anyio
    async def test_endpoint_auth_beats_global(self) -> None:
        calls: list[str] = []

        def global_auth(user, password):
            calls.append("global")
            return False

        def endpoint_auth(user, password):
            calls.append("endpoint")
            return True

        engine = AuthEngine(global_auth)
        assert await engine.decide(endpoint_auth, AuthDetails()) is True
        assert calls == ["endpoint"]

    @pytest.mark.anyio
    async def test_async_auth_function(self) -> None:
        async def check(user, password):
            return password == "secret"

        engine = AuthEngine(check)
        assert await engine.decide(None, AuthDetails("a", "secret")) is True
        assert await engine.decide(None, AuthDetails("a", "wrong")) is False

    @pytest.mark.anyio
    async def test_result_coerced_to_bool(self) -> None:
        engine = AuthEngine(lambda user, password: user)
        assert await engine.decide(None, AuthDetails("alice", None)) is True
        assert await engine.decide(None, AuthDetails()) is False


class TestCredentialsAuth:
    def test_matching_password(self) -> None:
        check = credentials_auth({"alice": "pw"})
        assert check("alice", "pw") is True

    def test_wrong_password(self) -> None:
        check = credentials_auth({"alice": "pw"})
        assert check("alice", "nope") is False

    def test_unknown_user(self) -> None:
        check = credentials_auth({"alice": "pw"})
        assert check("bob", "pw") is False

    def test_missing_credentials(self) -> None:
        check = credentials_auth({"alice": "pw"})
        assert check(None, None) is False
        assert check("alice", None) is False

    def test_multiple_passwords(self) -> None:
        check = credentials_auth({"ci": ["old", "new"]})
        assert check("ci", "old") is True
        assert check("ci", "new") is True
        assert check("ci", "other") is False

    def test_table_is_copied(self) -> None:
        table = {"alice": "pw"}
        check = credentials_auth(table)
        table["bob"] = "pw"
        assert check("bob", "pw") is False
