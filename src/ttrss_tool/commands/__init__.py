"""Subcommands of ttrss-tool."""

from ttrss_tool.commands.link import link_feed
from ttrss_tool.commands.listing import list_catpaths

__all__ = [
    "link_feed",
    "list_catpaths",
]
