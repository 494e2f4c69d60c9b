"""Tiny Tiny RSS API client and data models."""

from ttrss_tool.api.client import TTRSSClient, normalize_api_url
from ttrss_tool.api.models import (
    APIStatus,
    ConnInfo,
    FeedTree,
    FeedTreeItem,
    ItemKind,
    ResponseEnvelope,
    Session,
    SubscribeOutcome,
    SubscribeStatus,
)

__all__ = [
    "APIStatus",
    "ConnInfo",
    "FeedTree",
    "FeedTreeItem",
    "ItemKind",
    "ResponseEnvelope",
    "Session",
    "SubscribeOutcome",
    "SubscribeStatus",
    "TTRSSClient",
    "normalize_api_url",
]
