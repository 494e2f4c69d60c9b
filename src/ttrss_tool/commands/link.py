"""`ln`: subscribe to a feed inside a category."""

import logging
import sys
from typing import TextIO

from ttrss_tool.api.client import TTRSSClient
from ttrss_tool.api.models import SubscribeStatus
from ttrss_tool.catpath import resolve_catpath
from ttrss_tool.exceptions import TTRSSError
from ttrss_tool.exitcodes import EX_DATAERR, EX_SUCCESS, exit_code_for

logger = logging.getLogger(__name__)


def link_feed(
    client: TTRSSClient,
    feed_url: str,
    catpath: str = "",
    login: str | None = None,
    password: str | None = None,
    err: TextIO | None = None,
) -> int:
    """Subscribe to ``feed_url`` in the category named by ``catpath``.

    Args:
        client: Logged-in API client
        feed_url: Feed URL, or the URL of a page that links to one
        catpath: Destination category; the root means Uncategorized
        login: Optional user name for the feed itself
        password: Optional password for the feed itself
        err: Stream for outcome messages (default: stderr)

    Returns:
        EX_SUCCESS if the feed is subscribed (newly or already), else an
        error exit code.
    """
    err = err or sys.stderr

    try:
        item = resolve_catpath(client, catpath)
    except TTRSSError as e:
        logger.error("Unable to resolve %r: %s", catpath, e)
        return exit_code_for(e)

    if not item.is_category:
        logger.error("Not a category: %r", catpath)
        return EX_DATAERR
    if item.is_special:
        logger.error("Cannot add feeds to special category %r", item.name)
        return EX_DATAERR

    try:
        subscribed, outcome = client.subscribe(feed_url, item.bare_id, login, password)
    except TTRSSError as e:
        logger.error("Failed to subscribe to %s: %s", feed_url, e)
        return exit_code_for(e)

    message = outcome.message
    if outcome.code == SubscribeStatus.ALREADY_SUBSCRIBED and not message:
        message = f"already subscribed to {feed_url}"
    if outcome.code != SubscribeStatus.ADDED and message:
        print(message, file=err)
    for url, title in outcome.feeds.items():
        print(f"  {url}  {title}".rstrip(), file=err)

    if subscribed:
        return EX_SUCCESS
    return EX_DATAERR
