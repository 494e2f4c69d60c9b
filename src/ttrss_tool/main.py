"""ttrss-tool - Main entry point.

Manages Tiny Tiny RSS subscriptions the way a shell manages files: the
category hierarchy acts as directories and feeds act as files.
"""

import argparse
import logging
import sys
from pathlib import Path

from ttrss_tool import __version__
from ttrss_tool.api.client import TTRSSClient
from ttrss_tool.api.models import ConnInfo
from ttrss_tool.commands import link_feed, list_catpaths
from ttrss_tool.config import DOTFILE_SUBPATH, load_settings, read_password, xdg_config_search
from ttrss_tool.exceptions import ConfigurationError, TTRSSError
from ttrss_tool.exitcodes import EX_NOINPUT, EX_USAGE, exit_code_for

logger = logging.getLogger("ttrss-tool")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Connection flags left unset fall back to the environment, then the dotfile.
    """
    parser = argparse.ArgumentParser(
        prog="ttrss-tool",
        description="Manage Tiny Tiny RSS subscriptions: categories are directories, feeds are files.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ttrss-tool {__version__}",
    )
    parser.add_argument(
        "-a",
        "--addr",
        help="address (example: https://example.com/tt-rss/, env: TTRSS_ADDR)",
    )
    parser.add_argument(
        "-u",
        "--user",
        help="user to connect as (default: admin, env: TTRSS_USER)",
    )
    parser.add_argument(
        "-p",
        "--pass",
        dest="password",
        help="password to use (env: TTRSS_PASSWORD; prompted for if unset)",
    )
    parser.add_argument(
        "--dotfile",
        type=Path,
        help=f"dotfile path (default: $XDG_CONFIG_HOME/{DOTFILE_SUBPATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log API calls and path resolution",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="subcommand")

    ln = subparsers.add_parser("ln", help="subscribe to a new feed")
    ln.add_argument("feed", help="feed URL")
    ln.add_argument("catpath", nargs="?", default="", help="destination category (default: root)")
    ln.add_argument("--login", help="user name for the feed itself")
    ln.add_argument("--feed-pass", help="password for the feed itself")

    ls = subparsers.add_parser("ls", help="list categories and feeds")
    ls.add_argument("-R", "--recurse", action="store_true", help="recurse into categories")
    ls.add_argument("catpaths", nargs="*", default=["/"], help="categories or feeds to list")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run ttrss-tool and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    dotfile = args.dotfile or xdg_config_search(DOTFILE_SUBPATH)
    try:
        settings = load_settings(dotfile)
    except ConfigurationError as e:
        logger.error("%s", e)
        return exit_code_for(e)

    overrides = {
        field: value
        for field, value in (("addr", args.addr), ("user", args.user), ("password", args.password))
        if value is not None
    }
    settings = settings.model_copy(update=overrides)

    if not settings.addr.startswith("http"):
        print(
            f'{parser.prog}: error: address {settings.addr!r} must start with "http"',
            file=sys.stderr,
        )
        return EX_USAGE

    password = settings.password
    if not password:
        try:
            password = read_password(sys.stdin, sys.stdout)
        except ConfigurationError as e:
            logger.error("%s", e)
            return EX_NOINPUT

    conn = ConnInfo(host_url=settings.addr, user=settings.user, password=password)
    with TTRSSClient(timeout=settings.request_timeout) as client:
        try:
            client.login(conn)
        except TTRSSError as e:
            logger.error("%s", e)
            return exit_code_for(e)

        if args.command == "ln":
            return link_feed(
                client,
                args.feed,
                args.catpath,
                login=args.login,
                password=args.feed_pass,
            )
        return list_catpaths(client, args.catpaths, recurse=args.recurse)


if __name__ == "__main__":
    sys.exit(main())
