"""Tiny Tiny RSS JSON API client."""

import logging
from types import TracebackType

import httpx

from ttrss_tool.api.envelope import decode_response, encode_request, redact
from ttrss_tool.api.models import (
    ConnInfo,
    FeedTree,
    ResponseEnvelope,
    Session,
    SubscribeOutcome,
)
from ttrss_tool.exceptions import APIError, AuthError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

API_PATH = "api/"
LOGIN_NO_ERROR_TEXT = "no error text returned"


def normalize_api_url(host_url: str) -> str:
    """Turn a TT-RSS base URL into its API endpoint.

    ``https://example.com/tt-rss`` becomes ``https://example.com/tt-rss/api/``;
    a URL already ending in ``/api/`` is left alone.
    """
    api_url = host_url
    if not api_url.endswith("/"):
        api_url += "/"
    if not api_url.endswith("/" + API_PATH):
        api_url += API_PATH
    return api_url


class TTRSSClient:
    """Synchronous client for the TT-RSS JSON API.

    Holds at most one session. Every call blocks until the HTTP round-trip
    completes; nothing is retried.
    """

    def __init__(
        self,
        timeout: float = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests to fake the server
        """
        self.timeout = timeout
        self._transport = transport
        self._api_url: str | None = None
        self._session: Session | None = None
        self._client: httpx.Client | None = None

    def __enter__(self) -> "TTRSSClient":
        """Context manager entry."""
        self._get_client()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def _get_client(self) -> httpx.Client:
        """Get HTTP client, creating if needed."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, transport=self._transport)
        return self._client

    @property
    def session(self) -> Session | None:
        """The current session, or None before a successful login."""
        return self._session

    # =========================================================================
    # Session
    # =========================================================================

    def login(self, conn: ConnInfo) -> str:
        """Log into the host as the given user.

        Any previous session is discarded first, so a failed login leaves
        the client logged out.

        Args:
            conn: Host URL and credentials

        Returns:
            The new session id.

        Raises:
            AuthError: If the server rejects the login.
            TransportError: If the server cannot be reached.
            ProtocolError: If the response is not a JSON envelope.
        """
        api_url = normalize_api_url(conn.host_url)
        self._api_url = api_url
        self._session = None
        logger.debug("Logging in at %s as %s", api_url, conn.user)

        envelope = self.call("login", {"user": conn.user, "password": conn.password})

        session_id = envelope.content.get("session_id")
        if not envelope.ok or not isinstance(session_id, str):
            raise AuthError(
                f"failed to log in at {api_url} as {conn.user}: "
                f"{envelope.error or LOGIN_NO_ERROR_TEXT}"
            )

        self._session = Session(api_url=api_url, session_id=session_id)
        logger.info("Logged in at %s as %s", api_url, conn.user)
        return session_id

    def call(self, op: str, params: dict | None = None) -> ResponseEnvelope:
        """Issue an API request.

        An error status from the API does not raise; it is reported through
        the returned envelope's ``status`` and ``error``.

        Args:
            op: API operation name
            params: Operation-specific request fields

        Returns:
            The decoded response envelope.

        Raises:
            AuthError: If no login has been attempted yet.
            TransportError: If the HTTP request fails.
            ProtocolError: If the response is not a JSON envelope.
        """
        if self._api_url is None:
            raise AuthError("not logged in")

        session_id = self._session.session_id if self._session else None
        body = encode_request(op, params, session_id)
        logger.debug("Issuing call: %s", redact(body))

        client = self._get_client()
        try:
            response = client.post(
                self._api_url,
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            raise TransportError(f"connection error: {e}") from e

        try:
            return decode_response(response.content)
        except ProtocolError as e:
            raise ProtocolError(
                f"{e} (HTTP {response.status_code} from {self._api_url}) - "
                "are you sure you supplied the correct URL?"
            ) from e

    def _call_ok(self, op: str, params: dict | None = None) -> ResponseEnvelope:
        """Issue an API request, raising APIError on an error status."""
        envelope = self.call(op, params)
        if not envelope.ok:
            raise APIError(f"{op} failed: {envelope.error}", envelope.status)
        return envelope

    # =========================================================================
    # Feeds
    # =========================================================================

    def get_feed_tree(self, include_empty: bool = True) -> FeedTree:
        """Fetch the category and feed hierarchy.

        Args:
            include_empty: Also return categories without feeds

        Returns:
            The feed tree, in server order.

        Raises:
            APIError: If the API reports an error.
            ProtocolError: If the tree is missing or malformed.
        """
        envelope = self._call_ok("getFeedTree", {"include_empty": include_empty})
        return FeedTree.from_content(envelope.content)

    def subscribe(
        self,
        feed_url: str,
        category_id: int = 0,
        login: str | None = None,
        password: str | None = None,
    ) -> tuple[bool, SubscribeOutcome]:
        """Subscribe to a feed.

        Args:
            feed_url: URL of the feed, or of a page linking to it
            category_id: Bare id of the destination category (0 = Uncategorized)
            login: Optional user name for the feed itself
            password: Optional password for the feed itself

        Returns:
            Whether the feed is now subscribed, and the server's outcome.
            Failure outcomes (bad URL, no feed found, ...) are returned,
            not raised.

        Raises:
            APIError: If the API reports an error.
            ProtocolError: If the outcome code is not one the API defines.
        """
        params: dict[str, str | int] = {"feed_url": feed_url, "category_id": category_id}
        if login:
            params["login"] = login
        if password:
            params["password"] = password

        envelope = self._call_ok("subscribeToFeed", params)
        outcome = SubscribeOutcome.from_content(envelope.content)
        logger.debug("Subscribe %s -> %s %r", feed_url, outcome.code.name, outcome.message)
        return outcome.subscribed, outcome
