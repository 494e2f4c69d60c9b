"""End-to-end tests of the ttrss-tool command line against the fake server."""

import io
import json
from pathlib import Path
from typing import Any

import pytest

from tests.fakes import API_URL, HOST_URL, FakeTTRSS, error, ok
from ttrss_tool import main as main_module
from ttrss_tool.api.client import TTRSSClient
from ttrss_tool.config import DOTFILE_SUBPATH
from ttrss_tool.exitcodes import EX_CONFIG, EX_DATAERR, EX_NOINPUT, EX_NOPERM, EX_SUCCESS, EX_USAGE
from ttrss_tool.main import build_parser, main


@pytest.fixture(autouse=True)
def fake_client(monkeypatch: pytest.MonkeyPatch, server: FakeTTRSS) -> None:
    """Make main() talk to the fake server."""

    def make_client(**kwargs: Any) -> TTRSSClient:
        return TTRSSClient(transport=server.transport(), **kwargs)

    monkeypatch.setattr(main_module, "TTRSSClient", make_client)


def _login(server: FakeTTRSS) -> dict[str, Any]:
    return server.calls("login")[0]


class TestParser:
    def test_ls_defaults_to_root(self) -> None:
        args = build_parser().parse_args(["ls"])
        assert args.catpaths == ["/"]
        assert args.recurse is False

    def test_ln_catpath_is_optional(self) -> None:
        args = build_parser().parse_args(["-a", HOST_URL, "ln", "https://example.com/rss"])
        assert args.feed == "https://example.com/rss"
        assert args.catpath == ""

    def test_subcommand_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_ls(self, server: FakeTTRSS, capsys: pytest.CaptureFixture[str]) -> None:
        status = main(["-a", HOST_URL, "-p", "hunter2", "ls", "News"])

        assert status == EX_SUCCESS
        assert capsys.readouterr().out.splitlines() == ["Local/", "Wire"]
        assert server.urls[0] == API_URL
        assert _login(server) == {"op": "login", "user": "admin", "password": "hunter2"}

    def test_ln(self, server: FakeTTRSS) -> None:
        server.replies["subscribeToFeed"] = ok({"status": {"code": 1}})

        status = main(["-a", HOST_URL, "-u", "jeremy", "-p", "pw", "ln", "https://example.com/rss", "News/"])

        assert status == EX_SUCCESS
        assert _login(server)["user"] == "jeremy"
        assert server.calls("subscribeToFeed")[0]["category_id"] == 1

    def test_ln_failure_outcome(self, server: FakeTTRSS, capsys: pytest.CaptureFixture[str]) -> None:
        server.replies["subscribeToFeed"] = ok({"status": {"code": 2}})

        status = main(["-a", HOST_URL, "-p", "pw", "ln", "nonsense"])

        assert status == EX_DATAERR
        assert "not valid" in capsys.readouterr().err

    @pytest.mark.parametrize("addr", [None, "rss.example.com", "ftp://rss.example.com"])
    def test_address_must_be_http(
        self, addr: str | None, server: FakeTTRSS, capsys: pytest.CaptureFixture[str]
    ) -> None:
        argv = ["-p", "pw", "ls"] if addr is None else ["-a", addr, "-p", "pw", "ls"]

        assert main(argv) == EX_USAGE
        assert 'must start with "http"' in capsys.readouterr().err
        assert server.requests == []

    def test_login_rejected(self, server: FakeTTRSS) -> None:
        server.replies["login"] = error("LOGIN_ERROR")

        assert main(["-a", HOST_URL, "-p", "wrong", "ls"]) == EX_NOPERM
        assert server.calls("getFeedTree") == []

    def test_dotfile(self, server: FakeTTRSS, tmp_path: Path) -> None:
        dotfile = tmp_path / "ttrss.json"
        dotfile.write_text(json.dumps({"Addr": HOST_URL, "User": "dot", "Pass": "pw"}), encoding="utf-8")

        assert main(["--dotfile", str(dotfile), "ls"]) == EX_SUCCESS
        assert _login(server) == {"op": "login", "user": "dot", "password": "pw"}

    def test_xdg_dotfile_and_flag_override(self, server: FakeTTRSS, isolated_env: Path) -> None:
        dotfile = isolated_env / DOTFILE_SUBPATH
        dotfile.parent.mkdir(parents=True)
        dotfile.write_text(json.dumps({"addr": HOST_URL, "user": "dot", "pass": "pw"}), encoding="utf-8")

        assert main(["-u", "flag", "ls"]) == EX_SUCCESS
        assert _login(server) == {"op": "login", "user": "flag", "password": "pw"}

    def test_environment(self, server: FakeTTRSS, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TTRSS_ADDR", HOST_URL)
        monkeypatch.setenv("TTRSS_PASSWORD", "from-env")

        assert main(["ls"]) == EX_SUCCESS
        assert _login(server)["password"] == "from-env"

    def test_bad_dotfile(self, tmp_path: Path) -> None:
        dotfile = tmp_path / "broken"
        dotfile.write_text("not json", encoding="utf-8")

        assert main(["--dotfile", str(dotfile), "-a", HOST_URL, "ls"]) == EX_CONFIG

    def test_prompts_for_password(
        self, server: FakeTTRSS, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("typed\n"))

        assert main(["-a", HOST_URL, "ls", "Empty/"]) == EX_SUCCESS
        assert _login(server)["password"] == "typed"
        assert "password (will be echoed): " in capsys.readouterr().out

    def test_no_password_available(self, server: FakeTTRSS, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        assert main(["-a", HOST_URL, "ls"]) == EX_NOINPUT
        assert server.requests == []
