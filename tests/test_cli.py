"""Tests for kestrel.cli — ``kestrel run`` and ``kestrel routes``."""

import sys
import types
from unittest.mock import MagicMock, patch

import pytest

from kestrel.app import App
from kestrel.cli import main
from kestrel.cli._resolve import resolve_app
from kestrel.config import AppConfig
from kestrel.routing.route import Endpoint


def _get_user(data):
    return {"ok": True}


async def _save_user(data):
    return {"ok": True}


def _check(user, password):
    return True


@pytest.fixture
def fake_app(monkeypatch: pytest.MonkeyPatch) -> App:
    """Register a fake module with a kestrel App instance."""
    app = App(config=AppConfig(host="127.0.0.1", port=8000, workers=2, console_log=False))
    app.add_endpoints(
        {
            "users": {
                "get": Endpoint.sync(_get_user),
                "save": Endpoint.asynchronous(_save_user, auth=_check),
            },
            "health": Endpoint.sync(_get_user, auth=False),
        }
    )
    mod = types.ModuleType("_kestrel_cli_app")
    mod.app = app  # type: ignore[attr-defined]
    mod.factory = lambda: app  # type: ignore[attr-defined]
    mod.not_an_app = 42  # type: ignore[attr-defined]
    mod.service = types.SimpleNamespace(app=app)  # type: ignore[attr-defined]
    mod.tree = {"ping": Endpoint.sync(_get_user)}  # type: ignore[attr-defined]
    mod.bad_factory = lambda: 42  # type: ignore[attr-defined]
    mod.broken_factory = lambda: 1 / 0  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_kestrel_cli_app", mod)
    return app


class TestResolveApp:
    def test_module_and_attribute(self, fake_app: App) -> None:
        assert resolve_app("_kestrel_cli_app:app") is fake_app

    def test_default_attribute(self, fake_app: App) -> None:
        assert resolve_app("_kestrel_cli_app") is fake_app

    def test_factory(self, fake_app: App) -> None:
        assert resolve_app("_kestrel_cli_app:factory") is fake_app

    def test_not_an_app(self, fake_app: App) -> None:
        with pytest.raises(TypeError, match="not a kestrel.App"):
            resolve_app("_kestrel_cli_app:not_an_app")

    def test_dotted_attribute_path(self, fake_app: App) -> None:
        assert resolve_app("_kestrel_cli_app:service.app") is fake_app

    def test_missing_step_named(self, fake_app: App) -> None:
        with pytest.raises(AttributeError, match="service has no attribute 'nope'"):
            resolve_app("_kestrel_cli_app:service.nope")

    def test_endpoint_tree_served_by_default_app(self, fake_app: App) -> None:
        app = resolve_app("_kestrel_cli_app:tree")
        assert isinstance(app, App)
        assert app is not fake_app
        (route,) = app._pending_routes
        assert route.path == "/ping"
        assert route.endpoint.func is _get_user

    def test_factory_returning_non_app(self, fake_app: App) -> None:
        with pytest.raises(TypeError, match="App factory .* returned int"):
            resolve_app("_kestrel_cli_app:bad_factory")

    def test_factory_failure(self, fake_app: App) -> None:
        with pytest.raises(TypeError, match="ZeroDivisionError") as exc_info:
            resolve_app("_kestrel_cli_app:broken_factory")
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)


class TestKestrelRun:
    @patch("kestrel.server.serve.run_server")
    def test_default_host_and_port(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_kestrel_cli_app:app"])
        mock_server.assert_called_once()
        args, kwargs = mock_server.call_args
        assert args == (fake_app, "127.0.0.1", 8000)
        assert kwargs["workers"] == 2
        assert kwargs["log_level"] == "error"

    @patch("kestrel.server.serve.run_server")
    def test_overrides(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_kestrel_cli_app:app", "--host", "0.0.0.0", "--port", "3000", "--workers", "0"])
        args, kwargs = mock_server.call_args
        assert args[1:] == ("0.0.0.0", 3000)
        assert kwargs["workers"] == 0

    @patch("kestrel.server.serve.run_server")
    def test_app_frozen_before_serving(self, mock_server: MagicMock, fake_app: App) -> None:
        main(["run", "_kestrel_cli_app:app"])
        assert fake_app._frozen is True

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "_kestrel_no_such_module:app"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_half_tls_config(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        app = App(config=AppConfig(ssl_certfile="cert.pem", console_log=False))
        mod = types.ModuleType("_kestrel_tls_app")
        mod.app = app  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, "_kestrel_tls_app", mod)
        with pytest.raises(SystemExit):
            main(["run", "_kestrel_tls_app:app"])
        assert "ssl_keyfile" in capsys.readouterr().err


class TestKestrelRoutes:
    def test_lists_endpoints(self, fake_app: App, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_kestrel_cli_app:app"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["PATH", "KIND", "AUTH", "HANDLER"]
        rows = [line.split() for line in lines[2:]]
        assert rows == [
            ["/health", "sync", "none", "_get_user"],
            ["/users/get", "sync", "global", "_get_user"],
            ["/users/save", "async", "_check", "_save_user"],
        ]

    def test_no_endpoints(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        mod = types.ModuleType("_kestrel_empty_app")
        mod.app = App(config=AppConfig(console_log=False))  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, "_kestrel_empty_app", mod)
        main(["routes", "_kestrel_empty_app:app"])
        assert "No endpoints registered." in capsys.readouterr().out


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 0
    assert "kestrel" in capsys.readouterr().out
