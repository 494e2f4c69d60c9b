"""Encoding of API requests and decoding of response envelopes."""

import json
from typing import Any

from pydantic import ValidationError

from ttrss_tool.api.models import APIStatus, ResponseEnvelope
from ttrss_tool.exceptions import ProtocolError

NO_ERROR_TEXT = "(response contained no error text)"

# Request fields kept out of log output.
_SECRET_FIELDS = frozenset({"password", "sid"})


def encode_request(
    op: str,
    params: dict[str, Any] | None = None,
    session_id: str | None = None,
) -> bytes:
    """Serialize an API call to its JSON request body.

    Args:
        op: API operation name, e.g. "login" or "getFeedTree"
        params: Operation-specific fields
        session_id: Session token to attach, if logged in

    Returns:
        UTF-8 encoded JSON object.

    Raises:
        TypeError: If a parameter value is not JSON serializable.
    """
    body = dict(params or {})
    body["op"] = op
    if session_id:
        body["sid"] = session_id
    return json.dumps(body).encode("utf-8")


def redact(body: bytes) -> dict[str, Any]:
    """Decode a request body for logging, masking secrets."""
    fields = json.loads(body)
    return {key: "***" if key in _SECRET_FIELDS else value for key, value in fields.items()}


def extract_error_text(content: dict[str, Any]) -> str | None:
    """Return ``content["error"]`` if it is a string."""
    error = content.get("error")
    if isinstance(error, str):
        return error
    return None


def decode_response(body: bytes | str) -> ResponseEnvelope:
    """Parse a response body into a ResponseEnvelope.

    The envelope's ``error`` is taken from the content whatever the status;
    an error status without text gets a placeholder so it is never empty.

    Raises:
        ProtocolError: If the body is not a JSON envelope.
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ProtocolError(f"API JSON response was malformed: {e}") from e

    if not isinstance(data, dict):
        raise ProtocolError(
            f"API JSON response was malformed: expected an object, got {type(data).__name__}"
        )

    wire_fields = {key: data[key] for key in ("seq", "status", "content") if key in data}
    try:
        envelope = ResponseEnvelope.model_validate(wire_fields)
    except ValidationError as e:
        raise ProtocolError(f"API JSON response was malformed: {e}") from e

    error = extract_error_text(envelope.content)
    if error is None and envelope.status != APIStatus.OK:
        error = NO_ERROR_TEXT
    return envelope.model_copy(update={"error": error})
