"""`ls`: list categories and feeds."""

import logging
import sys
from collections.abc import Iterator, Sequence
from typing import TextIO

from ttrss_tool.api.client import TTRSSClient
from ttrss_tool.api.models import FeedTreeItem
from ttrss_tool.catpath import iter_tree, join_catpath, resolve_catpath
from ttrss_tool.exceptions import TTRSSError
from ttrss_tool.exitcodes import EX_SUCCESS, exit_code_for

logger = logging.getLogger(__name__)


def _entries(item: FeedTreeItem, recurse: bool) -> Iterator[str]:
    """Catpaths to print for ``item``, relative to it.

    Categories carry a trailing slash, so each line can be passed back as
    a catpath.
    """
    if item.is_feed:
        yield join_catpath([item.name])
        return
    if recurse:
        for components, child in iter_tree(item):
            yield join_catpath(components, category=child.is_category)
        return
    for child in item.items:
        yield join_catpath([child.name], category=child.is_category)


def list_catpaths(
    client: TTRSSClient,
    catpaths: Sequence[str] = ("/",),
    recurse: bool = False,
    out: TextIO | None = None,
) -> int:
    """Print the contents of each catpath.

    Args:
        client: Logged-in API client
        catpaths: Categories or feeds to list
        recurse: List every descendant by its full catpath
        out: Output stream (default: stdout)

    Returns:
        EX_SUCCESS, or the exit code of the last path that failed.
    """
    out = out or sys.stdout
    status = EX_SUCCESS
    show_headers = len(catpaths) > 1

    for catpath in catpaths:
        try:
            item = resolve_catpath(client, catpath)
        except TTRSSError as e:
            logger.error("Unable to list %r: %s", catpath, e)
            status = exit_code_for(e)
            continue

        if show_headers:
            print(f"{catpath}:", file=out)
        for entry in _entries(item, recurse):
            print(entry, file=out)

    return status
