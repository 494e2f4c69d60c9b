"""Custom exceptions for ttrss-tool."""

from typing import Any


class TTRSSError(Exception):
    """Base exception for ttrss-tool."""


class TransportError(TTRSSError):
    """The HTTP round-trip to the API endpoint failed."""


class ProtocolError(TTRSSError):
    """The server's response did not match the expected API contract."""


class AuthError(TTRSSError):
    """Failed to log in, or an authenticated call was made without a session."""


class APIError(TTRSSError):
    """The API reported an error status inside a well-formed response.

    Attributes:
        status: Envelope status value returned by the API.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(TTRSSError):
    """No category or feed matched the requested catpath.

    Attributes:
        catpath: The catpath that could not be resolved.
    """

    def __init__(self, catpath: str) -> None:
        super().__init__(f"not found: {catpath!r}")
        self.catpath = catpath


class AmbiguousPathError(TTRSSError):
    """A catpath named both a category and a feed.

    Attributes:
        catpath: The ambiguous catpath.
        matches: The competing tree items, in server order.
    """

    def __init__(self, catpath: str, matches: list[Any]) -> None:
        hint = catpath if catpath.endswith("/") else catpath + "/"
        super().__init__(
            f"ambiguous: {catpath!r} names both a category and a feed "
            f"(use {hint!r} for the category)"
        )
        self.catpath = catpath
        self.matches = matches


class ConfigurationError(TTRSSError):
    """Invalid or unreadable configuration."""
