"""Shared pytest fixtures."""

from pathlib import Path

import pytest

from tests.fakes import HOST_URL, FakeTTRSS
from ttrss_tool.api.client import TTRSSClient
from ttrss_tool.api.models import ConnInfo


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep the user's environment, .env and dotfiles out of every test."""
    for name in ("TTRSS_ADDR", "TTRSS_USER", "TTRSS_PASSWORD", "TTRSS_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("XDG_CONFIG_DIRS", raising=False)
    config_home = tmp_path / "xdg"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.chdir(tmp_path)
    return config_home


@pytest.fixture
def server() -> FakeTTRSS:
    return FakeTTRSS()


@pytest.fixture
def conn() -> ConnInfo:
    return ConnInfo(host_url=HOST_URL, user="admin", password="hunter2")


@pytest.fixture
def anon_client(server: FakeTTRSS):
    """Client wired to the fake server, not logged in."""
    with TTRSSClient(transport=server.transport()) as client:
        yield client


@pytest.fixture
def client(anon_client: TTRSSClient, conn: ConnInfo) -> TTRSSClient:
    """Client logged into the fake server."""
    anon_client.login(conn)
    return anon_client
