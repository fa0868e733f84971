"""Tests for the command-line entry point."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from fareway import cli
from fareway.app import Gateway
from fareway.foundation.config import clear_settings_cache
from fareway.foundation.errors import StoreError
from fareway.io.cache import MemoryCache

from conftest import make_store


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[pytest.MonkeyPatch]:
    monkeypatch.chdir(tmp_path)
    for key in [k for k in os.environ if k.startswith("FAREWAY_")]:
        monkeypatch.delenv(key)
    clear_settings_cache()
    yield monkeypatch
    clear_settings_cache()


def configure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAREWAY_STORE_URL", "https://xyz.supabase.co")
    monkeypatch.setenv("FAREWAY_STORE_SERVICE_KEY", "service-key")


def test_invalid_configuration_exits_nonzero() -> None:
    assert cli.main([]) == 1


def test_http_transport_uses_overrides(isolated_env: pytest.MonkeyPatch) -> None:
    configure(isolated_env)
    calls: list[dict] = []
    isolated_env.setattr(cli.uvicorn, "run", lambda app, **kw: calls.append(kw))

    assert cli.main(["--host", "127.0.0.1", "--port", "9999"]) == 0
    assert calls[0]["host"] == "127.0.0.1"
    assert calls[0]["port"] == 9999


def test_stdio_startup_failure_exits_nonzero(isolated_env: pytest.MonkeyPatch) -> None:
    configure(isolated_env)
    store = make_store(fail_with=StoreError("down"))

    def build(settings, **_: object) -> Gateway:
        return Gateway(settings=settings, store=store, cache=MemoryCache())

    isolated_env.setattr(cli.Gateway, "from_settings", staticmethod(build))
    assert cli.main(["--transport", "stdio"]) == 1
    assert store.closed


def test_rejects_unknown_transport() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--transport", "websocket"])
