"""Catpaths: slash-separated paths through the category tree.

Categories play the part of directories and feeds the part of files, so
``News/Local/City Paper`` names the feed "City Paper" in category "Local"
inside category "News". A slash that belongs to a name is written ``\\/``.
A trailing slash says the path must name a category, which is how a
category and a feed sharing a name are told apart.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from ttrss_tool.api.client import TTRSSClient
from ttrss_tool.api.models import FeedTreeItem
from ttrss_tool.exceptions import AmbiguousPathError, NotFoundError

logger = logging.getLogger(__name__)

SEPARATOR = "/"
ESCAPE = "\\"


@dataclass(frozen=True)
class CatPath:
    """A parsed catpath. No components means the tree root."""

    components: tuple[str, ...]
    category_only: bool = False


def parse_catpath(path: str) -> CatPath:
    """Split a catpath into unescaped name components.

    A leading slash is optional; empty components from doubled or trailing
    slashes are dropped.
    """
    if path.startswith(SEPARATOR):
        path = path[1:]
    raw_parts = path.split(SEPARATOR)

    components: list[str] = []
    partial = ""
    for part in raw_parts:
        if part.endswith(ESCAPE):
            partial += part[: -len(ESCAPE)] + SEPARATOR
            continue
        partial += part
        if partial:
            components.append(partial)
        partial = ""
    # A lone escape at the very end still stands for a slash.
    if partial:
        components.append(partial)

    category_only = (
        bool(components)
        and len(raw_parts) > 1
        and raw_parts[-1] == ""
        and not raw_parts[-2].endswith(ESCAPE)
    )
    logger.debug("%r => %s (category only: %s)", path, components, category_only)
    return CatPath(tuple(components), category_only)


def path_components(path: str) -> list[str]:
    """Shorthand for ``parse_catpath(path).components`` as a list."""
    return list(parse_catpath(path).components)


def join_catpath(components: Sequence[str], category: bool = False) -> str:
    """Build a catpath from names, escaping any slashes inside them.

    With ``category`` set, a trailing slash marks the path as a category.
    """
    path = SEPARATOR.join(name.replace(SEPARATOR, ESCAPE + SEPARATOR) for name in components)
    if category and path:
        path += SEPARATOR
    return path


# =============================================================================
# Resolution
# =============================================================================


@dataclass(frozen=True)
class Found:
    item: FeedTreeItem


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Ambiguous:
    matches: tuple[FeedTreeItem, ...]


Resolution = Found | NotFound | Ambiguous


def walk_catpath(root: FeedTreeItem, catpath: CatPath) -> Resolution:
    """Locate the item a catpath names, starting from ``root``.

    Siblings are tried in server order and the first match wins, except
    that a final name matching both a category and a feed is Ambiguous
    unless the catpath is category-only.
    """
    return _walk(root, catpath.components, catpath.category_only)


def _walk(node: FeedTreeItem, remaining: tuple[str, ...], category_only: bool) -> Resolution:
    logger.debug("walk: %r %s %s - %s", node.name, node.kind, node.id, remaining)
    if not remaining:
        return Found(node)

    name, rest = remaining[0], remaining[1:]
    matches = [child for child in node.items if child.name == name]

    if rest:
        for child in matches:
            if not child.is_category:
                continue
            result = _walk(child, rest, category_only)
            if not isinstance(result, NotFound):
                return result
        return NotFound()

    if category_only:
        matches = [child for child in matches if child.is_category]
    if not matches:
        return NotFound()
    if len({child.kind for child in matches}) > 1:
        return Ambiguous(tuple(matches))
    return Found(matches[0])


def resolve_catpath(client: TTRSSClient, path: str) -> FeedTreeItem:
    """Resolve a catpath against the server's current feed tree.

    The tree is fetched fresh, empty categories included.

    Args:
        client: Logged-in API client
        path: Catpath to resolve; "" and "/" name the root

    Returns:
        The category or feed the path names.

    Raises:
        NotFoundError: If nothing matches the whole path.
        AmbiguousPathError: If the path names both a category and a feed.
    """
    logger.debug("Resolving %r", path)
    catpath = parse_catpath(path)
    tree = client.get_feed_tree(include_empty=True)

    result = walk_catpath(tree.root(), catpath)
    if isinstance(result, Found):
        return result.item
    if isinstance(result, Ambiguous):
        raise AmbiguousPathError(path, list(result.matches))
    raise NotFoundError(path)


def iter_tree(
    item: FeedTreeItem,
    prefix: tuple[str, ...] = (),
) -> Iterator[tuple[tuple[str, ...], FeedTreeItem]]:
    """Yield ``(components, item)`` for every descendant, depth first."""
    for child in item.items:
        components = prefix + (child.name,)
        yield components, child
        if child.is_category:
            yield from iter_tree(child, components)
