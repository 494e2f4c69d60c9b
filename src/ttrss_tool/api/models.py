"""Pydantic models for the Tiny Tiny RSS JSON API."""

from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ttrss_tool.exceptions import ProtocolError

# =============================================================================
# Session Models
# =============================================================================


class ConnInfo(BaseModel):
    """Where and as whom to log in."""

    model_config = ConfigDict(frozen=True)

    host_url: str
    user: str
    password: str = Field(repr=False)


class Session(BaseModel):
    """An authenticated API session."""

    model_config = ConfigDict(frozen=True)

    api_url: str
    session_id: str = Field(repr=False)


# =============================================================================
# Envelope Models
# =============================================================================


class APIStatus(IntEnum):
    """Envelope status values. Anything other than OK counts as an error."""

    OK = 0
    ERR = 1


class ResponseEnvelope(BaseModel):
    """Wrapper around every API response.

    ``error`` is not part of the wire format; the envelope codec fills it in
    from ``content["error"]`` after decoding.
    """

    # Echoes the request "seq" if one was sent; otherwise 0, or sometimes null.
    seq: int | None = None
    status: int
    content: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _empty_array_as_mapping(cls, value: Any) -> Any:
        # PHP encodes an empty associative array as [].
        if value is None or value == []:
            return {}
        return value

    @property
    def ok(self) -> bool:
        """True when the status is OK and no error text came back."""
        return self.status == APIStatus.OK and self.error is None


# =============================================================================
# Feed Tree Models
# =============================================================================


class ItemKind(StrEnum):
    """Kind of a feed tree node."""

    CATEGORY = "category"
    FEED = "feed"


# Composite id prefixes, e.g. "CAT:3" or "FEED:12".
_KIND_PREFIXES = {"CAT": ItemKind.CATEGORY, "FEED": ItemKind.FEED}
_PREFIX_FOR_KIND = {kind: prefix for prefix, kind in _KIND_PREFIXES.items()}

ROOT_ID = "ROOT"


class FeedTreeItem(BaseModel):
    """A category or feed in the tree returned by ``getFeedTree``.

    Children keep the server's order. Feeds never have children.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    bare_id: int
    name: str
    kind: ItemKind = Field(alias="type")
    items: list["FeedTreeItem"] = Field(default_factory=list)
    param: str = ""
    error: str = ""
    unread: int = 0

    @model_validator(mode="before")
    @classmethod
    def _fill_identifiers(cls, data: Any) -> Any:
        """Infer whichever of kind, bare id and composite id the server left out."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        prefix, _, bare = str(data.get("id", "")).partition(":")
        if "type" not in data and "kind" not in data and prefix in _KIND_PREFIXES:
            data["type"] = _KIND_PREFIXES[prefix]
        if "bare_id" not in data and bare:
            data["bare_id"] = bare
        if "id" not in data and "bare_id" in data:
            kind = ItemKind(data.get("type", data.get("kind")))
            data["id"] = f"{_PREFIX_FOR_KIND[kind]}:{data['bare_id']}"
        return data

    @field_validator("param", "error", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("unread", mode="before")
    @classmethod
    def _count_or_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def is_category(self) -> bool:
        return self.kind == ItemKind.CATEGORY

    @property
    def is_feed(self) -> bool:
        return self.kind == ItemKind.FEED

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_ID

    @property
    def is_special(self) -> bool:
        """Virtual feeds and pseudo-categories ("Special", "Labels", ...)."""
        return self.bare_id < 0


class FeedTree(BaseModel):
    """The ``categories`` object of a ``getFeedTree`` response."""

    identifier: str = "id"
    label: str = "name"
    items: list[FeedTreeItem] = Field(default_factory=list)

    @classmethod
    def from_content(cls, content: dict[str, Any]) -> "FeedTree":
        """Decode the tree from a response's content mapping.

        Raises:
            ProtocolError: If the tree is missing or malformed.
        """
        categories = content.get("categories")
        if not isinstance(categories, dict):
            raise ProtocolError("unexpected result from API: response has no feed tree")
        try:
            return cls.model_validate(categories)
        except ValidationError as e:
            raise ProtocolError(f"unexpected result from API: malformed feed tree: {e}") from e

    def root(self) -> FeedTreeItem:
        """Synthetic category holding the top-level items.

        Adding a feed at the root files it under category 0 (Uncategorized).
        """
        return FeedTreeItem(
            id=ROOT_ID,
            bare_id=0,
            name="",
            kind=ItemKind.CATEGORY,
            items=self.items,
        )


# =============================================================================
# Subscription Models
# =============================================================================


class SubscribeStatus(IntEnum):
    """Result codes of ``subscribeToFeed``."""

    ALREADY_SUBSCRIBED = 0
    ADDED = 1
    INVALID_URL = 2
    HTML_NO_FEED = 3
    HTML_MULTIPLE_FEEDS = 4
    DOWNLOAD_FAILED = 5
    INVALID_FEED = 6


_SUBSCRIBED_CODES = frozenset({SubscribeStatus.ALREADY_SUBSCRIBED, SubscribeStatus.ADDED})

_FAILURE_MESSAGES = {
    SubscribeStatus.INVALID_URL: "the feed URL is not valid",
    SubscribeStatus.HTML_NO_FEED: "the URL points to an HTML page without a feed link",
    SubscribeStatus.HTML_MULTIPLE_FEEDS: (
        "the URL points to an HTML page with several feed links; subscribe to one directly"
    ),
    SubscribeStatus.DOWNLOAD_FAILED: "the feed could not be downloaded",
    SubscribeStatus.INVALID_FEED: "the downloaded document is not a valid feed",
}


class SubscribeOutcome(BaseModel):
    """Typed result of a ``subscribeToFeed`` call."""

    model_config = ConfigDict(frozen=True)

    code: SubscribeStatus
    message: str = ""
    feed_id: int | None = None
    # Candidate feed URL -> title, sent with HTML_MULTIPLE_FEEDS.
    feeds: dict[str, str] = Field(default_factory=dict)

    @property
    def subscribed(self) -> bool:
        """True if the feed is now subscribed, whether new or not."""
        return self.code in _SUBSCRIBED_CODES

    @classmethod
    def from_content(cls, content: dict[str, Any]) -> "SubscribeOutcome":
        """Decode the ``status`` object of a subscribe response.

        Failure codes without server text get a fixed description.

        Raises:
            ProtocolError: If the status object or its code is missing or unknown.
        """
        status = content.get("status")
        if not isinstance(status, dict):
            raise ProtocolError(f"unexpected result from API: no subscription status in {content!r}")

        raw_code = status.get("code")
        if isinstance(raw_code, bool) or not isinstance(raw_code, int):
            raise ProtocolError(f"unexpected result from API: subscription code {raw_code!r}")
        try:
            code = SubscribeStatus(raw_code)
        except ValueError as e:
            raise ProtocolError(f"unexpected result from API: subscription code {raw_code}") from e

        message = status.get("message")
        if not isinstance(message, str):
            message = ""
        if not message and code not in _SUBSCRIBED_CODES:
            message = _FAILURE_MESSAGES[code]

        feed_id = status.get("feed_id")
        if isinstance(feed_id, bool) or not isinstance(feed_id, int):
            feed_id = None

        feeds = status.get("feeds")
        if isinstance(feeds, dict):
            feeds = {str(url): "" if title is None else str(title) for url, title in feeds.items()}
        else:
            feeds = {}

        return cls(code=code, message=message, feed_id=feed_id, feeds=feeds)
